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

"""Tests for PyVista conversion."""

import numpy as np
import pytest
import torch

from flowguide.mesh.hierarchy import build_hierarchy
from flowguide.mesh.io import from_pyvista, to_pyvista
from flowguide.orientation import hierarchical_smoothing

pv = pytest.importorskip("pyvista")


class TestFromPyvista:
    def test_sphere(self):
        pv_mesh = pv.Sphere(theta_resolution=12, phi_resolution=12)
        mesh = from_pyvista(pv_mesh)

        assert mesh.n_points == pv_mesh.n_points
        assert mesh.n_triangles == pv_mesh.n_cells
        assert mesh.points.dtype == torch.float32
        assert mesh.triangles.dtype == torch.int64

    def test_uses_point_normals(self):
        pv_mesh = pv.Sphere(theta_resolution=8, phi_resolution=8)
        assert "Normals" in pv_mesh.point_data

        mesh = from_pyvista(pv_mesh)
        expected = torch.from_numpy(np.asarray(pv_mesh.point_data["Normals"])).float()
        assert torch.equal(mesh.normals, expected)

    def test_derives_normals_when_asked(self):
        pv_mesh = pv.Plane(i_resolution=3, j_resolution=3)
        mesh = from_pyvista(pv_mesh, use_point_normals=False)
        lengths = mesh.normals.norm(dim=-1)
        assert torch.allclose(lengths, torch.ones_like(lengths))

    def test_quads_are_triangulated(self):
        pv_mesh = pv.Plane(i_resolution=2, j_resolution=2)
        assert not pv_mesh.is_all_triangles

        mesh = from_pyvista(pv_mesh)
        assert mesh.n_triangles == 8

    def test_point_cloud(self):
        pv_mesh = pv.PolyData(np.random.default_rng(0).random((5, 3)))
        mesh = from_pyvista(pv_mesh)
        assert mesh.n_points == 5
        assert mesh.n_triangles == 0
        assert mesh.dual_areas.tolist() == [0.0] * 5

    def test_rejects_volume_grid(self):
        grid = pv.ImageData(dimensions=(3, 3, 3))
        with pytest.raises(TypeError, match="PolyData"):
            from_pyvista(grid)


class TestToPyvista:
    def test_point_arrays(self, octahedron_mesh):
        pv_mesh = to_pyvista(octahedron_mesh)

        assert pv_mesh.n_points == 6
        assert pv_mesh.n_cells == 8
        np.testing.assert_allclose(
            pv_mesh.point_data["dual_area"], octahedron_mesh.dual_areas.numpy()
        )
        assert "orientation" not in pv_mesh.point_data

    def test_field_and_cross(self, octahedron_mesh):
        field = hierarchical_smoothing(build_hierarchy(octahedron_mesh), iterations=2)
        pv_mesh = to_pyvista(octahedron_mesh, field)

        orientation = pv_mesh.point_data["orientation"]
        cross = pv_mesh.point_data["orientation_cross"]
        np.testing.assert_allclose((orientation * cross).sum(axis=-1), 0.0, atol=1e-6)
        np.testing.assert_allclose(np.linalg.norm(cross, axis=-1), 1.0, atol=1e-5)

    def test_field_shape_mismatch(self, octahedron_mesh):
        with pytest.raises(ValueError, match="field"):
            to_pyvista(octahedron_mesh, torch.zeros(5, 3))

    def test_coarse_mesh_exports_points(self, sphere_mesh):
        coarse = build_hierarchy(sphere_mesh)[1].mesh
        pv_mesh = to_pyvista(coarse)
        assert pv_mesh.n_points == coarse.n_points

    def test_round_trip_geometry(self, icosahedron_mesh):
        mesh = from_pyvista(to_pyvista(icosahedron_mesh))
        assert torch.equal(mesh.triangles, icosahedron_mesh.triangles)
        assert torch.allclose(mesh.normals, icosahedron_mesh.normals)
        assert torch.allclose(mesh.dual_areas, icosahedron_mesh.dual_areas)
