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

"""Multigrid hierarchy of a surface by greedy vertex-pair agglomeration.

Each coarsening step scores every directed adjacency edge ``(i, j)`` by

.. math::

    s_{ij} = \\frac{\\max(A_i, A_j)}{\\min(A_i, A_j)} \\, (n_i \\cdot n_j),

visits the edges in descending score order and merges both endpoints into one
coarse vertex whenever neither has been claimed yet. Vertices left over
become coarse vertices on their own. The coarse mesh keeps adjacency and dual
area only (no triangles), and coarsening repeats until a mesh without edges
remains.

The result is a list of :class:`HierarchyLevel` ordered coarsest first; every
level except the first maps its vertices into the previous one.
"""

import logging
from dataclasses import dataclass

import torch
import torch.nn.functional as F

from flowguide.mesh.neighbors import build_adjacency_from_pairs
from flowguide.mesh.surface_mesh import SurfaceMesh
from flowguide.mesh.utilities._tolerances import safe_eps

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HierarchyLevel:
    """One mesh of the hierarchy and its map into the next coarser mesh.

    Attributes:
        mesh: The mesh at this level.
        up_mapping: For each vertex of ``mesh``, the index of the vertex of
            the next coarser level it was merged into. Shape (n_points,),
            int64. Empty for the coarsest level.
    """

    mesh: SurfaceMesh
    up_mapping: torch.Tensor

    @property
    def is_coarsest(self) -> bool:
        return self.up_mapping.numel() == 0


def compute_merge_scores(
    mesh: SurfaceMesh,
) -> tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
    """Score every directed edge of ``mesh`` for merging.

    Self loops are excluded. Non-finite scores (from non-finite normals)
    are mapped to ``-inf`` so they sort last.

    Returns
    -------
    tuple[torch.Tensor, torch.Tensor, torch.Tensor]
        ``(sources, targets, scores)``, each of shape (n_candidate_edges,),
        in adjacency order.

    Examples
    --------
    >>> from flowguide.mesh.primitives.surfaces import triangle
    >>> sources, targets, scores = compute_merge_scores(triangle.load())
    >>> sources.tolist(), targets.tolist(), scores.tolist()
    ([0, 1, 2], [1, 2, 0], [1.0, 1.0, 1.0])
    """
    sources, targets = mesh.adjacency.expand_to_pairs()
    keep = sources != targets
    sources = sources[keep]
    targets = targets[keep]

    area_i = mesh.dual_areas[sources]
    area_j = mesh.dual_areas[targets]
    ratio = torch.maximum(area_i, area_j) / torch.minimum(area_i, area_j).clamp(
        min=safe_eps(mesh.dual_areas.dtype)
    )
    alignment = (mesh.normals[sources] * mesh.normals[targets]).sum(dim=-1)

    scores = torch.nan_to_num(ratio * alignment, nan=float("-inf"))
    return sources, targets, scores


def coarsen(mesh: SurfaceMesh) -> tuple[SurfaceMesh, torch.Tensor]:
    """Perform one greedy agglomeration step.

    Merged vertices get coarse indices in merge order, followed by the
    unmerged vertices in their original order.

    Parameters
    ----------
    mesh : SurfaceMesh
        Mesh to coarsen. It is not modified.

    Returns
    -------
    coarse_mesh : SurfaceMesh
        The agglomerated mesh. Its positions and normals are dual-area
        weighted averages of the merged pairs (normals renormalized), its
        dual areas are pair sums, and its adjacency is the fine adjacency
        mapped through the merge with self loops and duplicates removed.
    up_mapping : torch.Tensor
        Coarse vertex of every fine vertex, shape (mesh.n_points,), int64.
    """
    device = mesh.points.device
    sources, targets, scores = compute_merge_scores(mesh)
    order = torch.argsort(scores, descending=True, stable=True)

    ### Greedy scan over edges, best score first
    up = [-1] * mesh.n_points
    merged = []
    for i, j in zip(sources[order].tolist(), targets[order].tolist()):
        if up[i] != -1 or up[j] != -1:
            continue
        up[i] = up[j] = len(merged)
        merged.append((i, j))

    singletons = [v for v in range(mesh.n_points) if up[v] == -1]
    for k, v in enumerate(singletons):
        up[v] = len(merged) + k

    up_mapping = torch.tensor(up, dtype=torch.int64, device=device)
    pairs = torch.tensor(merged, dtype=torch.int64, device=device).reshape(-1, 2)
    single = torch.tensor(singletons, dtype=torch.int64, device=device)

    ### Dual-area weighted agglomeration of each merged pair
    i, j = pairs.unbind(dim=1)
    area_i = mesh.dual_areas[i]
    area_j = mesh.dual_areas[j]
    area_total = area_i + area_j
    weight_i = torch.where(
        area_total > 0,
        area_i / area_total.clamp(min=safe_eps(area_total.dtype)),
        torch.full_like(area_i, 0.5),
    ).unsqueeze(-1)
    weight_j = 1.0 - weight_i

    merged_points = weight_i * mesh.points[i] + weight_j * mesh.points[j]
    merged_normals = F.normalize(
        weight_i * mesh.normals[i] + weight_j * mesh.normals[j], dim=-1
    )

    n_coarse = len(merged) + len(singletons)
    fine_sources, fine_targets = mesh.adjacency.expand_to_pairs()

    coarse_mesh = SurfaceMesh(
        points=torch.cat([merged_points, mesh.points[single]]),
        normals=torch.cat([merged_normals, mesh.normals[single]]),
        triangles=torch.zeros((0, 3), dtype=torch.int64, device=device),
        adjacency=build_adjacency_from_pairs(
            up_mapping[fine_sources], up_mapping[fine_targets], n_coarse
        ),
        dual_areas=torch.cat([area_total, mesh.dual_areas[single]]),
    )
    return coarse_mesh, up_mapping


def _has_edges(mesh: SurfaceMesh) -> bool:
    sources, targets = mesh.adjacency.expand_to_pairs()
    return bool((sources != targets).any())


def build_hierarchy(mesh: SurfaceMesh) -> list[HierarchyLevel]:
    """Coarsen ``mesh`` repeatedly until no edges remain.

    Each step strictly reduces the vertex count, so the loop terminates. A
    mesh without edges yields a single level holding that mesh with an empty
    mapping.

    Parameters
    ----------
    mesh : SurfaceMesh
        Finest mesh.

    Returns
    -------
    list[HierarchyLevel]
        Levels ordered coarsest first; ``levels[-1].mesh is mesh`` and
        ``levels[k].up_mapping`` indexes ``levels[k - 1].mesh`` for k > 0.

    Examples
    --------
    >>> from flowguide.mesh.primitives.surfaces import octahedron_surface
    >>> levels = build_hierarchy(octahedron_surface.load())
    >>> levels[-1].mesh.n_points, levels[0].mesh.n_edges
    (6, 0)
    """
    levels = []
    current = mesh
    while _has_edges(current):
        coarse, up_mapping = coarsen(current)
        logger.debug(
            "Coarsened level: %d -> %d vertices", current.n_points, coarse.n_points
        )
        levels.append(HierarchyLevel(mesh=current, up_mapping=up_mapping))
        current = coarse

    levels.append(
        HierarchyLevel(
            mesh=current,
            up_mapping=torch.zeros(0, dtype=torch.int64, device=current.points.device),
        )
    )
    levels.reverse()
    return levels


def compose_up_mappings(levels: list[HierarchyLevel], level: int = -1) -> torch.Tensor:
    """Map every vertex of ``levels[level]`` to its vertex on the coarsest level.

    Examples
    --------
    >>> from flowguide.mesh.primitives.surfaces import triangle
    >>> compose_up_mappings(build_hierarchy(triangle.load())).tolist()
    [0, 0, 0]
    """
    index = level % len(levels)
    mapping = torch.arange(
        levels[index].mesh.n_points,
        dtype=torch.int64,
        device=levels[index].mesh.points.device,
    )
    for k in range(index, 0, -1):
        mapping = levels[k].up_mapping[mapping]
    return mapping
