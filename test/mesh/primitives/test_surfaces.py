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

"""Tests for the surface primitives."""

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


@pytest.mark.parametrize(
    "module, kwargs, n_points, n_triangles",
    [
        (triangle, {}, 3, 1),
        (hexagon_fan, {}, 7, 6),
        (octahedron_surface, {}, 6, 8),
        (icosahedron_surface, {}, 12, 20),
        (plane, {"subdivisions": 3}, 16, 18),
        (sphere_icosahedral, {"subdivisions": 0}, 12, 20),
        (sphere_icosahedral, {"subdivisions": 1}, 42, 80),
        (sphere_icosahedral, {"subdivisions": 2}, 162, 320),
    ],
)
def test_counts(module, kwargs, n_points, n_triangles):
    mesh = module.load(**kwargs)
    assert mesh.n_points == n_points
    assert mesh.n_triangles == n_triangles


@pytest.mark.parametrize("module", [octahedron_surface, icosahedron_surface, sphere_icosahedral])
def test_closed_surfaces_have_radial_normals(module):
    mesh = module.load(radius=2.0)
    assert torch.allclose(mesh.points.norm(dim=-1), torch.full((mesh.n_points,), 2.0))
    assert torch.allclose(mesh.normals, mesh.points / 2.0, atol=1e-6)


@pytest.mark.parametrize("module", [octahedron_surface, icosahedron_surface, sphere_icosahedral])
def test_closed_surfaces_wind_outward(module):
    """Triangle normals agree with the vertex normals."""
    mesh = module.load()
    p0, p1, p2 = mesh.points[mesh.triangles].unbind(dim=1)
    face_normals = torch.linalg.cross(p1 - p0, p2 - p0, dim=-1)
    assert ((face_normals * p0).sum(dim=-1) > 0).all()


@pytest.mark.parametrize("module", [octahedron_surface, icosahedron_surface, sphere_icosahedral])
def test_closed_surfaces_have_no_fallback_areas(module, caplog):
    mesh = module.load()
    assert "non-manifold" not in caplog.text
    assert (mesh.dual_areas > 0).all()


def test_flat_primitives_face_up():
    for mesh in (triangle.load(), hexagon_fan.load(), plane.load()):
        assert torch.allclose(mesh.normals[:, 2], torch.ones(mesh.n_points))


def test_plane_spans_size():
    mesh = plane.load(size=3.0, subdivisions=2)
    assert mesh.points[:, 0].min() == -1.5
    assert mesh.points[:, 0].max() == 1.5
    assert mesh.total_area == pytest.approx(9.0)


def test_device_argument():
    mesh = octahedron_surface.load(device="cpu")
    assert mesh.points.device.type == "cpu"


@pytest.mark.parametrize(
    "module, kwargs",
    [
        (triangle, {"side_length": 0.0}),
        (hexagon_fan, {"side_length": -1.0}),
        (octahedron_surface, {"radius": 0.0}),
        (icosahedron_surface, {"radius": -2.0}),
        (plane, {"subdivisions": 0}),
        (sphere_icosahedral, {"subdivisions": -1}),
    ],
)
def test_invalid_parameters(module, kwargs):
    with pytest.raises(ValueError):
        module.load(**kwargs)
