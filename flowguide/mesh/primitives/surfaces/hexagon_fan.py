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

"""Flat hexagonal fan of six equilateral triangles around a center vertex.

Dimensional: 2D manifold in 3D space (has boundary). The center vertex has a
closed one-ring; the six rim vertices lie on the boundary.
"""

import math

import torch

from flowguide.mesh.surface_mesh import SurfaceMesh


def load(
    side_length: float = 1.0,
    device: torch.device | str = "cpu",
) -> SurfaceMesh:
    """Create a regular hexagon split into six triangles, facing +z.

    Vertex 0 is the center; vertices 1-6 run counter-clockwise around it.

    Parameters
    ----------
    side_length : float
        Edge length of every triangle.
    device : str
        Compute device ('cpu' or 'cuda').

    Returns
    -------
    SurfaceMesh
        Mesh with 7 vertices and 6 triangles.
    """
    if side_length <= 0:
        raise ValueError(f"side_length must be positive, got {side_length=}")

    rim = [
        [side_length * math.cos(k * math.pi / 3), side_length * math.sin(k * math.pi / 3), 0.0]
        for k in range(6)
    ]
    points = torch.tensor([[0.0, 0.0, 0.0]] + rim, dtype=torch.float32, device=device)
    triangles = torch.tensor(
        [[0, k + 1, (k + 1) % 6 + 1] for k in range(6)],
        dtype=torch.int64,
        device=device,
    )
    return SurfaceMesh.from_arrays(points=points, triangles=triangles)
