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

"""Regular octahedron surface in 3D space.

Dimensional: 2D manifold in 3D space (closed, no boundary). Every vertex has
degree 4.
"""

import torch

from flowguide.mesh.surface_mesh import SurfaceMesh


def load(
    radius: float = 1.0,
    device: torch.device | str = "cpu",
) -> SurfaceMesh:
    """Create an octahedron with vertices on the coordinate axes.

    Vertex order is +x, -x, +y, -y, +z, -z. Triangles wind counter-clockwise
    seen from outside, and normals point radially outward.

    Parameters
    ----------
    radius : float
        Distance of each vertex from the origin.
    device : str
        Compute device ('cpu' or 'cuda').

    Returns
    -------
    SurfaceMesh
        Mesh with 6 vertices and 8 triangles.
    """
    if radius <= 0:
        raise ValueError(f"radius must be positive, got {radius=}")

    directions = torch.tensor(
        [
            [1.0, 0.0, 0.0],
            [-1.0, 0.0, 0.0],
            [0.0, 1.0, 0.0],
            [0.0, -1.0, 0.0],
            [0.0, 0.0, 1.0],
            [0.0, 0.0, -1.0],
        ],
        dtype=torch.float32,
        device=device,
    )
    triangles = torch.tensor(
        [
            [0, 2, 4],
            [2, 1, 4],
            [1, 3, 4],
            [3, 0, 4],
            [2, 0, 5],
            [1, 2, 5],
            [3, 1, 5],
            [0, 3, 5],
        ],
        dtype=torch.int64,
        device=device,
    )
    return SurfaceMesh.from_arrays(
        points=directions * radius, triangles=triangles, normals=directions
    )
