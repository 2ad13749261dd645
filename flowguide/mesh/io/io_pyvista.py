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

"""Bridge between PyVista surfaces and :class:`SurfaceMesh`.

PyVista reads the usual surface formats (PLY, STL, OBJ, VTP, ...) and renders
the result, so it sits on both ends of the pipeline: :func:`from_pyvista`
turns a loaded surface into a mesh, :func:`to_pyvista` turns a mesh and its
orientation field back into display data.
"""

import importlib
from typing import TYPE_CHECKING

import numpy as np
import torch

from flowguide.mesh.surface_mesh import SurfaceMesh

if TYPE_CHECKING:
    import pyvista


def from_pyvista(
    pyvista_mesh: "pyvista.PolyData",
    use_point_normals: bool = True,
    non_manifold_area: float = 1.0,
) -> SurfaceMesh:
    """Convert a PyVista surface to a :class:`SurfaceMesh`.

    Polygonal faces are triangulated first; vertex and line cells are
    ignored.

    Parameters
    ----------
    pyvista_mesh : pv.PolyData
        Input surface, e.g. from ``pyvista.read("model.ply")``.
    use_point_normals : bool, optional
        Use the ``"Normals"`` point array when present. Otherwise normals are
        derived from the triangles. Default: True
    non_manifold_area : float, optional
        Fallback dual area, see :meth:`SurfaceMesh.from_arrays`.

    Returns
    -------
    SurfaceMesh
        Mesh on CPU with float32 points.

    Raises
    ------
    TypeError
        If the input is not a ``pyvista.PolyData``.
    ImportError
        If pyvista is not installed.
    """
    pv = importlib.import_module("pyvista")

    if not isinstance(pyvista_mesh, pv.PolyData):
        raise TypeError(
            f"Expected a pyvista.PolyData surface, but got {type(pyvista_mesh)=}. "
            f"Use `.extract_surface()` on volumetric grids first."
        )

    if pyvista_mesh.n_faces_strict > 0 and not pyvista_mesh.is_all_triangles:
        pyvista_mesh = pyvista_mesh.triangulate()

    points = torch.from_numpy(np.asarray(pyvista_mesh.points)).float()
    if pyvista_mesh.n_faces_strict > 0:
        triangles = torch.from_numpy(np.asarray(pyvista_mesh.regular_faces)).long()
    else:
        triangles = torch.zeros((0, 3), dtype=torch.int64)

    normals = None
    if use_point_normals and "Normals" in pyvista_mesh.point_data:
        normals = torch.from_numpy(np.asarray(pyvista_mesh.point_data["Normals"])).float()

    return SurfaceMesh.from_arrays(
        points=points,
        triangles=triangles,
        normals=normals,
        non_manifold_area=non_manifold_area,
    )


def to_pyvista(
    mesh: SurfaceMesh,
    field: torch.Tensor | None = None,
) -> "pyvista.PolyData":
    """Convert a mesh, and optionally its orientation field, to PyVista.

    Point arrays written: ``"Normals"``, ``"dual_area"`` and, with a field,
    ``"orientation"`` and ``"orientation_cross"`` (the field rotated by 90
    degrees about the normal), ready for ``PolyData.glyph``.

    Parameters
    ----------
    mesh : SurfaceMesh
        Mesh to export. Coarsened meshes export as point clouds.
    field : torch.Tensor, optional
        Per-vertex directions, shape (mesh.n_points, 3).

    Returns
    -------
    pv.PolyData
        Surface with triangles as faces.
    """
    pv = importlib.import_module("pyvista")

    points_np = mesh.points.detach().cpu().numpy()
    if mesh.n_triangles == 0:
        pv_mesh = pv.PolyData(points_np)
    else:
        triangles_np = mesh.triangles.cpu().numpy()
        # PyVista padded format: [3, v0, v1, v2, 3, v0, v1, v2, ...]
        faces_array = np.column_stack(
            [np.full(len(triangles_np), 3, dtype=np.int64), triangles_np]
        ).ravel()
        pv_mesh = pv.PolyData(points_np, faces=faces_array)

    pv_mesh.point_data["Normals"] = mesh.normals.detach().cpu().numpy()
    pv_mesh.point_data["dual_area"] = mesh.dual_areas.detach().cpu().numpy()

    if field is not None:
        if field.shape != mesh.points.shape:
            raise ValueError(
                f"`field` must have shape (n_points, 3), but got "
                f"{field.shape=} with {mesh.n_points=}."
            )
        cross = torch.linalg.cross(mesh.normals, field, dim=-1)
        pv_mesh.point_data["orientation"] = field.detach().cpu().numpy()
        pv_mesh.point_data["orientation_cross"] = cross.detach().cpu().numpy()

    return pv_mesh
