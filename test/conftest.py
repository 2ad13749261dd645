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

"""Pytest configuration and shared fixtures for flowguide tests.

Fixtures defined here are available to every test module without imports.
"""

import pytest
import torch

from flowguide.mesh.primitives.surfaces import (
    hexagon_fan,
    icosahedron_surface,
    octahedron_surface,
    plane,
    sphere_icosahedral,
    triangle,
)
from flowguide.mesh.surface_mesh import SurfaceMesh


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: mark test as slow-running (for optional exclusion)"
    )


### Mesh Fixtures ###


@pytest.fixture
def triangle_mesh() -> SurfaceMesh:
    return triangle.load()


@pytest.fixture
def hexagon_mesh() -> SurfaceMesh:
    return hexagon_fan.load()


@pytest.fixture
def octahedron_mesh() -> SurfaceMesh:
    return octahedron_surface.load()


@pytest.fixture
def icosahedron_mesh() -> SurfaceMesh:
    return icosahedron_surface.load()


@pytest.fixture
def sphere_mesh() -> SurfaceMesh:
    """Icosahedral sphere with 42 vertices."""
    return sphere_icosahedral.load(subdivisions=1)


@pytest.fixture
def plane_mesh() -> SurfaceMesh:
    """Flat 5x5 vertex grid with spacing 0.5."""
    return plane.load(size=2.0, subdivisions=4)


@pytest.fixture
def point_cloud_mesh() -> SurfaceMesh:
    """Four vertices and no triangles."""
    return SurfaceMesh.from_arrays(
        points=torch.tensor(
            [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]]
        ),
        triangles=torch.zeros((0, 3), dtype=torch.int64),
        normals=torch.tensor([[0.0, 0.0, 1.0]] * 4),
    )
