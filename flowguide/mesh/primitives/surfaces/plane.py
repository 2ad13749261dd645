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

"""Flat square grid in the xy-plane of 3D space.

Dimensional: 2D manifold in 3D space (has boundary).
"""

import torch

from flowguide.mesh.surface_mesh import SurfaceMesh


def load(
    size: float = 2.0,
    subdivisions: int = 10,
    device: torch.device | str = "cpu",
) -> SurfaceMesh:
    """Create a flat triangulated square facing +z.

    Parameters
    ----------
    size : float
        Length of each side.
    subdivisions : int
        Number of subdivisions per edge. Creates (subdivisions+1)^2 vertices
        and 2*subdivisions^2 triangles.
    device : str
        Compute device ('cpu' or 'cuda').

    Returns
    -------
    SurfaceMesh
        Mesh whose interior vertices have closed one-rings.
    """
    if subdivisions < 1:
        raise ValueError(f"subdivisions must be at least 1, got {subdivisions=}")

    n = subdivisions + 1

    x = torch.linspace(-size / 2, size / 2, n, device=device)
    y = torch.linspace(-size / 2, size / 2, n, device=device)
    xx, yy = torch.meshgrid(x, y, indexing="ij")
    points = torch.stack(
        [xx.flatten(), yy.flatten(), torch.zeros_like(xx.flatten())], dim=1
    )

    # idx + n steps along x, idx + 1 along y; both triangles wind counter-clockwise
    triangles = []
    for i in range(subdivisions):
        for j in range(subdivisions):
            idx = i * n + j
            triangles.append([idx, idx + n, idx + 1])
            triangles.append([idx + 1, idx + n, idx + n + 1])

    triangles = torch.tensor(triangles, dtype=torch.int64, device=device)
    return SurfaceMesh.from_arrays(points=points, triangles=triangles)
