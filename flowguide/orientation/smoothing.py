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

"""Hierarchical relaxation of 4-RoSy orientation fields.

The field is initialized with random tangent directions on the coarsest
level of a :func:`~flowguide.mesh.hierarchy.build_hierarchy` result, relaxed
there, then copied down one level at a time (every vertex inherits the
direction of the coarse vertex it was merged into) and relaxed again.

A relaxation sweep is an asynchronous Gauss-Seidel pass: vertices are
visited in a fresh random order and each update already sees the values
written earlier in the same sweep. For vertex :math:`i` the running value
:math:`o` starts at its current direction; for the :math:`k`-th neighbor
:math:`j` (0-based) the best-aligned representatives :math:`(r_i, r_j)` of
:math:`o` and :math:`o_j` replace it with

.. math::

    o \\leftarrow \\operatorname{normalize}\\big(P_{n_i}(k\\, r_i + r_j)\\big),

where :math:`P_{n_i}` removes the component along the vertex normal.
"""

import logging
import math
import warnings

import torch

from flowguide.mesh.hierarchy import HierarchyLevel
from flowguide.mesh.surface_mesh import SurfaceMesh
from flowguide.mesh.utilities._tolerances import safe_eps
from flowguide.orientation._basis import random_tangent_field
from flowguide.orientation._compat import (
    Vec3,
    symmetric_compat,
    symmetric_compat_scalar,
)

logger = logging.getLogger(__name__)


def _sweep(
    neighbors: list[list[int]],
    normals: list[Vec3],
    field: list[Vec3],
    order: list[int],
    eps: float,
) -> None:
    for i in order:
        o_i = field[i]
        nx, ny, nz = normals[i]

        for weight, j in enumerate(neighbors[i]):
            (ax, ay, az), (bx, by, bz) = symmetric_compat_scalar(
                o_i, normals[i], field[j], normals[j]
            )

            cx = weight * ax + bx
            cy = weight * ay + by
            cz = weight * az + bz
            along = cx * nx + cy * ny + cz * nz
            cx -= along * nx
            cy -= along * ny
            cz -= along * nz
            length = math.sqrt(cx * cx + cy * cy + cz * cz)
            if length > eps:
                o_i = (cx / length, cy / length, cz / length)

        field[i] = o_i


def relax_orientation_field(
    mesh: SurfaceMesh,
    field: torch.Tensor,
    generator: torch.Generator,
    iterations: int = 1,
) -> torch.Tensor:
    """Run ``iterations`` randomized Gauss-Seidel sweeps over ``field`` in place.

    Parameters
    ----------
    mesh : SurfaceMesh
        Mesh whose adjacency and normals drive the relaxation.
    field : torch.Tensor
        Current directions, shape (mesh.n_points, 3). Modified in place.
    generator : torch.Generator
        Source of the sweep orders; one permutation is drawn per sweep.
    iterations : int, optional
        Number of sweeps. Default: 1

    Returns
    -------
    torch.Tensor
        ``field``, for chaining.

    Raises
    ------
    ValueError
        If ``field`` does not match the mesh or ``iterations`` is negative.
    """
    if field.shape != mesh.points.shape:
        raise ValueError(
            f"`field` must have shape (n_points, 3), but got "
            f"{field.shape=} with {mesh.n_points=}."
        )
    if iterations < 0:
        raise ValueError(f"iterations must be non-negative, got {iterations=}")

    if iterations == 0:
        return field

    ### Sweeps run on plain floats; per-edge tensor ops are launch-bound
    neighbors = mesh.adjacency.to_list()
    normals = [tuple(n) for n in mesh.normals.tolist()]
    values = [tuple(o) for o in field.tolist()]
    eps = safe_eps(field.dtype)

    for _ in range(iterations):
        order = torch.randperm(len(values), generator=generator, device=field.device)
        _sweep(neighbors, normals, values, order.tolist(), eps)

    field.copy_(
        torch.tensor(values, dtype=field.dtype, device=field.device).reshape(field.shape)
    )
    return field


def _make_generator(seed: int | None, device: torch.device) -> torch.Generator:
    generator = torch.Generator(device=device)
    if seed is None:
        generator.seed()
    else:
        generator.manual_seed(seed)
    return generator


def hierarchical_smoothing(
    hierarchy: list[HierarchyLevel],
    iterations: int = 10,
    seed: int | None = 0,
    generator: torch.Generator | None = None,
) -> torch.Tensor:
    """Compute a 4-RoSy orientation field on the finest level of ``hierarchy``.

    Parameters
    ----------
    hierarchy : list[HierarchyLevel]
        Levels ordered coarsest first, as returned by
        :func:`~flowguide.mesh.hierarchy.build_hierarchy`.
    iterations : int, optional
        Relaxation sweeps per level. Default: 10
    seed : int or None, optional
        Seed for the random initial field and sweep orders. ``None`` draws a
        fresh seed. Ignored when ``generator`` is given. Default: 0
    generator : torch.Generator, optional
        Generator to draw from instead of a freshly seeded one.

    Returns
    -------
    torch.Tensor
        Unit tangent directions, shape (n_points, 3), aligned with
        ``hierarchy[-1].mesh``.

    Raises
    ------
    ValueError
        If ``hierarchy`` is empty, a level's mapping does not match its mesh,
        or ``iterations`` is negative.

    Examples
    --------
    >>> from flowguide.mesh.hierarchy import build_hierarchy
    >>> from flowguide.mesh.primitives.surfaces import octahedron_surface
    >>> mesh = octahedron_surface.load()
    >>> field = hierarchical_smoothing(build_hierarchy(mesh), iterations=5)
    >>> field.shape
    torch.Size([6, 3])
    >>> bool(torch.allclose((field * mesh.normals).sum(-1), torch.zeros(6), atol=1e-6))
    True
    """
    if len(hierarchy) == 0:
        raise ValueError("hierarchy must contain at least one level")
    if iterations < 0:
        raise ValueError(f"iterations must be non-negative, got {iterations=}")
    if iterations == 0:
        warnings.warn(
            "iterations=0 skips relaxation; the field is the random coarse "
            "initialization copied down the hierarchy.",
            stacklevel=2,
        )
    for k, level in enumerate(hierarchy[1:], start=1):
        if level.up_mapping.shape != (level.mesh.n_points,):
            raise ValueError(
                f"Level {k} mapping must have one entry per vertex, but got "
                f"{level.up_mapping.shape=} with {level.mesh.n_points=}."
            )

    coarsest = hierarchy[0].mesh
    if generator is None:
        generator = _make_generator(seed, coarsest.points.device)

    field = random_tangent_field(coarsest.normals, generator)
    relax_orientation_field(coarsest, field, generator, iterations)

    for k, level in enumerate(hierarchy[1:], start=1):
        field = field[level.up_mapping]
        relax_orientation_field(level.mesh, field, generator, iterations)
        logger.debug("Relaxed level %d (%d vertices)", k, level.mesh.n_points)

    return field


def field_smoothness_energy(mesh: SurfaceMesh, field: torch.Tensor) -> float:
    """Mean symmetric misalignment of ``field`` over the mesh's directed edges.

    For every adjacency edge the best-aligned representatives are compared:
    ``1 - r_i . r_j``. Zero means a perfectly consistent cross field; a
    field of independent random directions scores around 0.1 on a flat
    mesh. Returns 0.0 for meshes without edges.
    """
    sources, targets = mesh.adjacency.expand_to_pairs()
    if len(sources) == 0:
        return 0.0

    r_i, r_j = symmetric_compat(
        field[sources], mesh.normals[sources], field[targets], mesh.normals[targets]
    )
    return (1.0 - (r_i * r_j).sum(dim=-1)).mean().item()
