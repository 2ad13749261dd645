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

"""Regular icosahedron surface in 3D space.

Dimensional: 2D manifold in 3D space (closed, no boundary).
"""

import torch
import torch.nn.functional as F

from flowguide.mesh.surface_mesh import SurfaceMesh

_PHI = (1.0 + 5.0**0.5) / 2.0

VERTICES = [
    [-1.0, _PHI, 0.0],
    [1.0, _PHI, 0.0],
    [-1.0, -_PHI, 0.0],
    [1.0, -_PHI, 0.0],
    [0.0, -1.0, _PHI],
    [0.0, 1.0, _PHI],
    [0.0, -1.0, -_PHI],
    [0.0, 1.0, -_PHI],
    [_PHI, 0.0, -1.0],
    [_PHI, 0.0, 1.0],
    [-_PHI, 0.0, -1.0],
    [-_PHI, 0.0, 1.0],
]

FACES = [
    [0, 11, 5],
    [0, 5, 1],
    [0, 1, 7],
    [0, 7, 10],
    [0, 10, 11],
    [1, 5, 9],
    [5, 11, 4],
    [11, 10, 2],
    [10, 7, 6],
    [7, 1, 8],
    [3, 9, 4],
    [3, 4, 2],
    [3, 2, 6],
    [3, 6, 8],
    [3, 8, 9],
    [4, 9, 5],
    [2, 4, 11],
    [6, 2, 10],
    [8, 6, 7],
    [9, 8, 1],
]


def load(
    radius: float = 1.0,
    device: torch.device | str = "cpu",
) -> SurfaceMesh:
    """Create an icosahedron inscribed in a sphere of the given radius.

    Parameters
    ----------
    radius : float
        Circumradius.
    device : str
        Compute device ('cpu' or 'cuda').

    Returns
    -------
    SurfaceMesh
        Mesh with 12 vertices and 20 triangles, radial normals.
    """
    if radius <= 0:
        raise ValueError(f"radius must be positive, got {radius=}")

    directions = F.normalize(
        torch.tensor(VERTICES, dtype=torch.float32, device=device), dim=-1
    )
    triangles = torch.tensor(FACES, dtype=torch.int64, device=device)
    return SurfaceMesh.from_arrays(
        points=directions * radius, triangles=triangles, normals=directions
    )
