# SPDX-FileCopyrightText: Copyright (c) 2023 - 2026 NVIDIA CORPORATION & AFFILIATES.
# SPDX-FileCopyrightText: All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Circumcentric dual areas of surface vertices.

The dual area of a vertex approximates its Voronoi cell on the surface: the
circumcenters of the triangles around the vertex are collected in one-ring
order and the area of the polygon they form is taken with the 3D shoelace
formula

.. math::

    A_i = \\tfrac{1}{2} \\left\\| \\sum_k c_k \\times c_{k+1} \\right\\|,

with the circumcenters :math:`c_k` expressed relative to vertex :math:`i`.

A vertex whose one-ring cannot be walked closed (boundary or non-manifold
vertex) or whose polygon is not finite (degenerate triangle) receives a fixed
fallback area instead; the rest of the mesh is processed normally. Isolated
vertices, which touch no triangle, have zero dual area.
"""

import logging

import torch

from flowguide.mesh.neighbors import Adjacency

logger = logging.getLogger(__name__)

NON_MANIFOLD_DUAL_AREA = 1.0


def compute_circumcenters(points: torch.Tensor, triangles: torch.Tensor) -> torch.Tensor:
    """Compute triangle circumcenters without solving a linear system.

    With edge vectors :math:`a = p_0 - p_2` and :math:`b = p_1 - p_2`, the
    circumcenter relative to :math:`p_2` is

    .. math::

        \\frac{(\\|a\\|^2 b - \\|b\\|^2 a) \\times (a \\times b)}{2 \\|a \\times b\\|^2}.

    Degenerate (zero-area) triangles produce non-finite rows.

    Parameters
    ----------
    points : torch.Tensor
        Vertex positions, shape (n_points, 3).
    triangles : torch.Tensor
        Triangle indices, shape (n_triangles, 3).

    Returns
    -------
    torch.Tensor
        Circumcenters in world coordinates, shape (n_triangles, 3).

    Examples
    --------
    >>> points = torch.tensor([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0], [0.0, 2.0, 0.0]])
    >>> compute_circumcenters(points, torch.tensor([[0, 1, 2]])).tolist()
    [[1.0, 1.0, 0.0]]
    """
    p0, p1, p2 = points[triangles].unbind(dim=1)
    a = p0 - p2
    b = p1 - p2
    axb = torch.linalg.cross(a, b, dim=-1)

    a_sq = (a * a).sum(dim=-1, keepdim=True)
    b_sq = (b * b).sum(dim=-1, keepdim=True)
    axb_sq = (axb * axb).sum(dim=-1, keepdim=True)

    offset = torch.linalg.cross(a_sq * b - b_sq * a, axb, dim=-1) / (2.0 * axb_sq)
    return p2 + offset


def compute_triangle_areas(points: torch.Tensor, triangles: torch.Tensor) -> torch.Tensor:
    """Areas of all triangles, shape (n_triangles,)."""
    p0, p1, p2 = points[triangles].unbind(dim=1)
    return 0.5 * torch.linalg.cross(p1 - p0, p2 - p0, dim=-1).norm(dim=-1)


def _walk_one_ring(
    ring: list[tuple[int, int]], triangles: list[list[int]]
) -> list[int] | None:
    """Return the triangles around a vertex in walk order, or None if open.

    The walk starts at the first ``(destination, face)`` entry and repeatedly
    moves the destination to the vertex following it in the current triangle,
    then continues with the first entry whose neighbor is that vertex.
    """
    first_face_of = {}
    for neighbor, face in ring:
        first_face_of.setdefault(neighbor, face)

    start, face = ring[0]
    dest = start
    visited = []
    while len(visited) < len(ring):
        visited.append(face)
        tri = triangles[face]
        dest = tri[(tri.index(dest) + 1) % 3]
        if dest == start:
            return visited
        face = first_face_of.get(dest)
        if face is None:
            return None

    # More steps than incident triangles: the fan never returns to its start
    return None


def compute_dual_areas(
    points: torch.Tensor,
    triangles: torch.Tensor,
    adjacency: Adjacency,
    non_manifold_area: float = NON_MANIFOLD_DUAL_AREA,
) -> torch.Tensor:
    """Compute the circumcentric dual area of every vertex.

    Parameters
    ----------
    points : torch.Tensor
        Vertex positions, shape (n_points, 3).
    triangles : torch.Tensor
        Triangle indices, shape (n_triangles, 3).
    adjacency : Adjacency
        Face-tagged outgoing-edge adjacency of ``triangles``
        (see :func:`~flowguide.mesh.neighbors.build_face_adjacency`).
    non_manifold_area : float, optional
        Area assigned to vertices whose one-ring does not close or whose
        polygon area is not finite. Default: 1.0

    Returns
    -------
    torch.Tensor
        Non-negative dual areas, shape (n_points,), dtype of ``points``.

    Examples
    --------
    >>> from flowguide.mesh.neighbors import build_face_adjacency
    >>> from flowguide.mesh.primitives.surfaces import triangle
    >>> mesh = triangle.load()
    >>> adjacency = build_face_adjacency(mesh.triangles, mesh.n_points)
    >>> compute_dual_areas(mesh.points, mesh.triangles, adjacency).tolist()
    [1.0, 1.0, 1.0]
    """
    n_points = points.shape[0]
    dual_areas = torch.zeros(n_points, dtype=points.dtype, device=points.device)
    if n_points == 0:
        return dual_areas

    circumcenters = compute_circumcenters(points, triangles)
    triangle_list = triangles.tolist()

    n_fallback = 0
    for i, ring in enumerate(adjacency.to_pairs_list()):
        if not ring:
            logger.debug("Vertex %d is isolated; dual area is 0", i)
            continue

        ring_faces = _walk_one_ring(ring, triangle_list)
        if ring_faces is None:
            logger.debug("Non-manifold vertex %d", i)
            dual_areas[i] = non_manifold_area
            n_fallback += 1
            continue

        ### Shoelace over the circumcenter loop, local to vertex i
        local = circumcenters[ring_faces] - points[i]
        vector_area = torch.linalg.cross(
            local, torch.roll(local, shifts=-1, dims=0), dim=-1
        ).sum(dim=0)
        area = 0.5 * vector_area.norm()

        if not torch.isfinite(area):
            logger.debug("Degenerate one-ring at vertex %d", i)
            dual_areas[i] = non_manifold_area
            n_fallback += 1
            continue

        dual_areas[i] = area

    if n_fallback:
        logger.warning(
            "%d of %d vertices are non-manifold or degenerate; "
            "assigned fallback dual area %s",
            n_fallback,
            n_points,
            non_manifold_area,
        )

    return dual_areas
