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

"""Icosahedral sphere surface in 3D space.

A sphere created by subdividing an icosahedron and projecting vertices
onto the sphere surface. This produces a more uniform triangulation than
UV-parameterized spheres.

Dimensional: 2D manifold in 3D space (closed, no boundary).
"""

import torch
import torch.nn.functional as F

from flowguide.mesh.primitives.surfaces.icosahedron_surface import FACES, VERTICES
from flowguide.mesh.surface_mesh import SurfaceMesh


def _subdivide(
    vertices: list[list[float]], faces: list[list[int]]
) -> tuple[list[list[float]], list[list[int]]]:
    """Split every triangle into four at its edge midpoints."""
    vertices = list(vertices)
    midpoint_of = {}

    def midpoint(a: int, b: int) -> int:
        key = (min(a, b), max(a, b))
        if key not in midpoint_of:
            midpoint_of[key] = len(vertices)
            vertices.append([(pa + pb) / 2 for pa, pb in zip(vertices[a], vertices[b])])
        return midpoint_of[key]

    new_faces = []
    for a, b, c in faces:
        ab, bc, ca = midpoint(a, b), midpoint(b, c), midpoint(c, a)
        new_faces.extend([[a, ab, ca], [b, bc, ab], [c, ca, bc], [ab, bc, ca]])
    return vertices, new_faces


def load(
    radius: float = 1.0,
    subdivisions: int = 2,
    device: torch.device | str = "cpu",
) -> SurfaceMesh:
    """Create a sphere by subdividing an icosahedron and projecting to sphere.

    Parameters
    ----------
    radius : float
        Radius of the sphere.
    subdivisions : int
        Number of subdivision levels to apply. Each level quadruples the
        triangle count:
        - 0: 20 triangles, 12 vertices
        - 1: 80 triangles, 42 vertices
        - 2: 320 triangles, 162 vertices
        - 3: 1280 triangles, 642 vertices
    device : torch.device or str
        Compute device ('cpu' or 'cuda').

    Returns
    -------
    SurfaceMesh
        Mesh with radial unit normals.

    Examples
    --------
    >>> mesh = load(radius=1.0, subdivisions=2)
    >>> mesh.n_points, mesh.n_triangles
    (162, 320)
    """
    if radius <= 0:
        raise ValueError(f"radius must be positive, got {radius=}")
    if subdivisions < 0:
        raise ValueError(f"subdivisions must be non-negative, got {subdivisions=}")

    vertices, faces = VERTICES, FACES
    for _ in range(subdivisions):
        vertices, faces = _subdivide(vertices, faces)

    directions = F.normalize(
        torch.tensor(vertices, dtype=torch.float32, device=device), dim=-1
    )
    triangles = torch.tensor(faces, dtype=torch.int64, device=device)
    return SurfaceMesh.from_arrays(
        points=directions * radius, triangles=triangles, normals=directions
    )
