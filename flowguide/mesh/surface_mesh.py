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

from typing import Any, Sequence

import numpy as np
import torch
import torch.nn.functional as F
from tensordict import tensorclass

from flowguide.mesh.geometry.dual_areas import (
    NON_MANIFOLD_DUAL_AREA,
    compute_dual_areas,
    compute_triangle_areas,
)
from flowguide.mesh.neighbors import Adjacency, build_face_adjacency

ArrayLike = torch.Tensor | np.ndarray | Sequence[Any]


@tensorclass
class SurfaceMesh:
    r"""A triangulated surface in 3D with per-vertex adjacency and dual areas.

    A ``SurfaceMesh`` holds everything the orientation-field solver needs
    about one level of detail of a surface:

    - ``points``: vertex positions, shape :math:`(N, 3)`.
    - ``normals``: unit vertex normals, shape :math:`(N, 3)`.
    - ``triangles``: vertex indices of each triangle, shape :math:`(M, 3)`,
      int64, every index in :math:`[0, N)`. Coarsened meshes have
      :math:`M = 0`.
    - ``adjacency``: for each vertex, its ordered ``(neighbor, triangle)``
      list (see :class:`~flowguide.mesh.neighbors.Adjacency`).
    - ``dual_areas``: non-negative Voronoi-like area of each vertex,
      shape :math:`(N,)`.

    Meshes are built once and treated as read-only afterwards. Use
    :meth:`from_arrays` to build one from raw loader output; the direct
    constructor is for callers that already have every derived field (such
    as the hierarchy builder).

    Raises
    ------
    ValueError
        If shapes disagree or a triangle references a missing vertex.
    TypeError
        If ``points`` is not floating-point or ``triangles`` is.

    Examples
    --------
    >>> import torch
    >>> mesh = SurfaceMesh.from_arrays(
    ...     points=[[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]],
    ...     triangles=[[0, 1, 2]],
    ... )
    >>> mesh.n_points, mesh.n_triangles
    (3, 1)
    >>> mesh.normals[0].tolist()
    [0.0, 0.0, 1.0]
    """

    points: torch.Tensor  # shape: (n_points, 3)
    normals: torch.Tensor  # shape: (n_points, 3)
    triangles: torch.Tensor  # shape: (n_triangles, 3), dtype: int64
    adjacency: Adjacency
    dual_areas: torch.Tensor  # shape: (n_points,)

    def __post_init__(self):
        if not torch.compiler.is_compiling():
            if self.points.ndim != 2 or self.points.shape[-1] != 3:
                raise ValueError(
                    f"`points` must have shape (n_points, 3), but got {self.points.shape=}."
                )
            if not torch.is_floating_point(self.points):
                raise TypeError(
                    f"`points` must have a floating-point dtype, but got {self.points.dtype=}."
                )
            if self.normals.shape != self.points.shape:
                raise ValueError(
                    f"`normals` must match `points`, but got "
                    f"{self.normals.shape=} != {self.points.shape=}."
                )
            if self.triangles.ndim != 2 or self.triangles.shape[-1] != 3:
                raise ValueError(
                    f"`triangles` must have shape (n_triangles, 3), but got {self.triangles.shape=}."
                )
            if torch.is_floating_point(self.triangles):
                raise TypeError(
                    f"`triangles` must have an int-like dtype, but got {self.triangles.dtype=}."
                )
            if self.dual_areas.shape != (self.n_points,):
                raise ValueError(
                    f"`dual_areas` must have shape (n_points,), but got "
                    f"{self.dual_areas.shape=} with {self.n_points=}."
                )
            if self.adjacency.n_sources != self.n_points:
                raise ValueError(
                    f"`adjacency` must cover every vertex, but got "
                    f"{self.adjacency.n_sources=} != {self.n_points=}."
                )
            _check_indices(self.triangles, self.n_points)

    @classmethod
    def from_arrays(
        cls,
        points: ArrayLike,
        triangles: ArrayLike,
        normals: ArrayLike | None = None,
        non_manifold_area: float = NON_MANIFOLD_DUAL_AREA,
    ) -> "SurfaceMesh":
        """Build a mesh from loader output, deriving adjacency and dual areas.

        Parameters
        ----------
        points : array-like
            Vertex positions, shape (n_points, 3).
        triangles : array-like
            Triangle vertex indices, shape (n_triangles, 3). Consistent
            winding is assumed.
        normals : array-like, optional
            Unit vertex normals, shape (n_points, 3). Not renormalized. If
            omitted, area-weighted triangle normals are averaged per vertex.
        non_manifold_area : float, optional
            Dual area given to vertices whose one-ring does not close.
            Default: 1.0

        Returns
        -------
        SurfaceMesh
            The mesh with ``adjacency`` and ``dual_areas`` filled in.

        Raises
        ------
        ValueError
            If the arrays are malformed. Nothing geometric is computed first.
        """
        points = torch.as_tensor(points)
        if not torch.is_floating_point(points):
            raise TypeError(
                f"`points` must have a floating-point dtype, but got {points.dtype=}."
            )
        if points.ndim != 2 or points.shape[-1] != 3:
            raise ValueError(
                f"`points` must have shape (n_points, 3), but got {points.shape=}."
            )

        triangles = torch.as_tensor(triangles, device=points.device)
        if triangles.numel() == 0:
            triangles = torch.zeros((0, 3), dtype=torch.int64, device=points.device)
        if torch.is_floating_point(triangles):
            raise TypeError(
                f"`triangles` must have an int-like dtype, but got {triangles.dtype=}."
            )
        if triangles.ndim != 2 or triangles.shape[-1] != 3:
            raise ValueError(
                f"`triangles` must have shape (n_triangles, 3), but got {triangles.shape=}."
            )
        triangles = triangles.to(torch.int64)
        n_points = points.shape[0]
        _check_indices(triangles, n_points)

        if normals is None:
            normals = compute_point_normals(points, triangles)
        else:
            normals = torch.as_tensor(normals, dtype=points.dtype, device=points.device)
            if normals.shape != points.shape:
                raise ValueError(
                    f"`normals` must match `points`, but got "
                    f"{normals.shape=} != {points.shape=}."
                )

        adjacency = build_face_adjacency(triangles, n_points)
        dual_areas = compute_dual_areas(
            points, triangles, adjacency, non_manifold_area=non_manifold_area
        )

        return cls(
            points=points,
            normals=normals,
            triangles=triangles,
            adjacency=adjacency,
            dual_areas=dual_areas,
        )

    @property
    def n_points(self) -> int:
        return self.points.shape[0]

    @property
    def n_triangles(self) -> int:
        return self.triangles.shape[0]

    @property
    def n_edges(self) -> int:
        """Number of directed adjacency edges."""
        return self.adjacency.n_total_neighbors

    @property
    def triangle_areas(self) -> torch.Tensor:
        """Area of every triangle, shape (n_triangles,)."""
        return compute_triangle_areas(self.points, self.triangles)

    @property
    def total_area(self) -> float:
        """Sum of triangle areas. Zero for coarsened meshes."""
        return self.triangle_areas.sum().item()


def _check_indices(triangles: torch.Tensor, n_points: int) -> None:
    if triangles.numel() == 0:
        return
    lo = triangles.min().item()
    hi = triangles.max().item()
    if lo < 0 or hi >= n_points:
        raise ValueError(
            f"Triangle indices must lie in [0, {n_points}), but got {lo=} and {hi=}."
        )


def compute_point_normals(points: torch.Tensor, triangles: torch.Tensor) -> torch.Tensor:
    """Area-weighted unit vertex normals.

    Each triangle adds its unnormalized cross product (twice its vector area)
    to its three vertices; the sums are then normalized. Vertices that touch
    no triangle get a zero normal.

    Parameters
    ----------
    points : torch.Tensor
        Vertex positions, shape (n_points, 3).
    triangles : torch.Tensor
        Triangle indices, shape (n_triangles, 3), consistently wound.

    Returns
    -------
    torch.Tensor
        Shape (n_points, 3).
    """
    accumulated = torch.zeros_like(points)
    if triangles.shape[0] == 0:
        return accumulated

    p0, p1, p2 = points[triangles].unbind(dim=1)
    face_normals = torch.linalg.cross(p1 - p0, p2 - p0, dim=-1)  # (n_triangles, 3)

    index = triangles.reshape(-1).unsqueeze(-1).expand(-1, 3)
    accumulated.scatter_add_(
        dim=0,
        index=index,
        src=face_normals.repeat_interleave(3, dim=0),
    )
    return F.normalize(accumulated, dim=-1)
