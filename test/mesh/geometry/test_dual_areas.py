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

"""Tests for circumcenters and circumcentric dual areas."""

import logging
import math

import pytest
import torch

from flowguide.mesh.geometry import (
    NON_MANIFOLD_DUAL_AREA,
    compute_circumcenters,
    compute_dual_areas,
    compute_triangle_areas,
)
from flowguide.mesh.neighbors import build_face_adjacency
from flowguide.mesh.primitives.surfaces import sphere_icosahedral
from flowguide.mesh.surface_mesh import SurfaceMesh


class TestCircumcenters:
    def test_right_triangle_hypotenuse_midpoint(self):
        points = torch.tensor([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0], [0.0, 2.0, 0.0]])
        centers = compute_circumcenters(points, torch.tensor([[0, 1, 2]]))
        assert torch.allclose(centers, torch.tensor([[1.0, 1.0, 0.0]]))

    def test_equidistant_from_vertices(self):
        generator = torch.Generator().manual_seed(7)
        points = torch.rand(30, 3, generator=generator, dtype=torch.float64)
        triangles = torch.arange(30).reshape(10, 3)
        centers = compute_circumcenters(points, triangles)

        distances = (points[triangles] - centers.unsqueeze(1)).norm(dim=-1)
        assert torch.allclose(distances, distances[:, :1].expand(-1, 3), rtol=1e-6)

    def test_degenerate_triangle_is_not_finite(self):
        points = torch.tensor([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 0.0, 0.0]])
        centers = compute_circumcenters(points, torch.tensor([[0, 1, 2]]))
        assert not torch.isfinite(centers).all()


class TestDualAreas:
    def test_single_triangle_uses_fallback(self, triangle_mesh):
        """A lone triangle never closes a one-ring."""
        assert triangle_mesh.dual_areas.tolist() == [NON_MANIFOLD_DUAL_AREA] * 3

    def test_hexagon_center_is_third_of_fan(self, hexagon_mesh):
        """Each equilateral triangle gives a third of its area to each vertex."""
        expected = 6 * (math.sqrt(3) / 4) / 3
        assert hexagon_mesh.dual_areas[0].item() == pytest.approx(expected, rel=1e-5)

    def test_boundary_vertices_use_fallback(self, hexagon_mesh):
        assert hexagon_mesh.dual_areas[1:].tolist() == [NON_MANIFOLD_DUAL_AREA] * 6

    def test_square_grid_interior_cells(self, plane_mesh):
        """Interior vertices of a right-triangle grid own a spacing^2 square."""
        n = 5
        interior = [i * n + j for i in range(1, n - 1) for j in range(1, n - 1)]
        assert torch.allclose(
            plane_mesh.dual_areas[interior], torch.full((len(interior),), 0.25)
        )

    def test_octahedron_positive_and_finite(self, octahedron_mesh):
        areas = octahedron_mesh.dual_areas
        assert torch.isfinite(areas).all()
        assert (areas > 0).all()
        # Circumcenters of the four faces around a vertex form a square of side 2/3
        assert torch.allclose(areas, torch.full((6,), 4.0 / 9.0))

    def test_coarse_convex_mesh_sums_below_surface_area(self, octahedron_mesh):
        """The circumcenter polygon only matches surface area on refined meshes."""
        total = octahedron_mesh.dual_areas.sum().item()
        assert total == pytest.approx(8.0 / 3.0, rel=1e-5)
        assert total < 0.5 * octahedron_mesh.total_area

    @pytest.mark.parametrize("subdivisions", [2, 3])
    def test_closed_surface_areas_sum_to_surface_area(self, subdivisions):
        mesh = sphere_icosahedral.load(subdivisions=subdivisions)
        assert mesh.dual_areas.sum().item() == pytest.approx(mesh.total_area, rel=0.03)

    def test_isolated_vertex_has_zero_area(self):
        mesh = SurfaceMesh.from_arrays(
            points=torch.tensor(
                [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [5.0, 5.0, 5.0]]
            ),
            triangles=torch.tensor([[0, 1, 2]]),
        )
        assert mesh.dual_areas[3].item() == 0.0

    def test_custom_fallback_area(self, triangle_mesh):
        adjacency = build_face_adjacency(triangle_mesh.triangles, 3)
        areas = compute_dual_areas(
            triangle_mesh.points,
            triangle_mesh.triangles,
            adjacency,
            non_manifold_area=2.5,
        )
        assert areas.tolist() == [2.5, 2.5, 2.5]

    def test_degenerate_fan_uses_fallback(self):
        """A closed fan containing a zero-area triangle falls back."""
        points = torch.tensor(
            [
                [0.0, 0.0, 0.0],
                [1.0, 0.0, 0.0],
                [0.0, 1.0, 0.0],
                [-1.0, 0.0, 0.0],
                [0.0, 0.0, 0.0],
            ]
        )
        # Vertex 4 coincides with the center, so triangle (0, 3, 4) is degenerate
        triangles = torch.tensor([[0, 1, 2], [0, 2, 3], [0, 3, 4], [0, 4, 1]])
        adjacency = build_face_adjacency(triangles, 5)
        areas = compute_dual_areas(points, triangles, adjacency)
        assert areas[0].item() == NON_MANIFOLD_DUAL_AREA

    def test_non_manifold_warning_logged(self, caplog):
        points = torch.tensor([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        triangles = torch.tensor([[0, 1, 2]])
        with caplog.at_level(logging.WARNING, logger="flowguide.mesh.geometry.dual_areas"):
            SurfaceMesh.from_arrays(points=points, triangles=triangles)
        assert "3 of 3 vertices" in caplog.text

    def test_closed_mesh_logs_no_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="flowguide.mesh.geometry.dual_areas"):
            sphere_icosahedral.load(subdivisions=1)
        assert caplog.text == ""


def test_triangle_areas(octahedron_mesh):
    areas = compute_triangle_areas(octahedron_mesh.points, octahedron_mesh.triangles)
    assert torch.allclose(areas, torch.full((8,), math.sqrt(3) / 2))
