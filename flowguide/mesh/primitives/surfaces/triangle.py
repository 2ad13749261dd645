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

"""Single equilateral triangle in the xy-plane of 3D space.

Dimensional: 2D manifold in 3D space (has boundary). Every vertex is a
boundary vertex, so its one-ring never closes.
"""

import torch

from flowguide.mesh.surface_mesh import SurfaceMesh


def load(
    side_length: float = 1.0,
    device: torch.device | str = "cpu",
) -> SurfaceMesh:
    """Create a single equilateral triangle facing +z.

    Parameters
    ----------
    side_length : float
        Length of each side.
    device : str
        Compute device ('cpu' or 'cuda').

    Returns
    -------
    SurfaceMesh
        Mesh with 3 vertices and 1 triangle.
    """
    if side_length <= 0:
        raise ValueError(f"side_length must be positive, got {side_length=}")

    height = side_length * (3**0.5) / 2
    points = torch.tensor(
        [[0.0, 0.0, 0.0], [side_length, 0.0, 0.0], [side_length / 2, height, 0.0]],
        dtype=torch.float32,
        device=device,
    )
    triangles = torch.tensor([[0, 1, 2]], dtype=torch.int64, device=device)
    return SurfaceMesh.from_arrays(points=points, triangles=triangles)
