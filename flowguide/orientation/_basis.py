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

"""Tangent frames and random initial fields."""

import math

import torch


def tangent_frames(normals: torch.Tensor) -> tuple[torch.Tensor, torch.Tensor]:
    """Build an orthonormal tangent basis for every normal without branching.

    Uses the construction of Duff et al., "Building an Orthonormal Basis,
    Revisited" (JCGT 2017), which only switches on the sign of the normal's
    z component and therefore has no singular orientation.

    Parameters
    ----------
    normals : torch.Tensor
        Unit normals, shape (..., 3).

    Returns
    -------
    tuple[torch.Tensor, torch.Tensor]
        ``(x, y)``, each shape (..., 3), with ``x``, ``y`` and the normal
        forming a right-handed orthonormal frame.

    Examples
    --------
    >>> x, y = tangent_frames(torch.tensor([0.0, 0.0, 1.0]))
    >>> x.tolist(), y.tolist()
    ([1.0, -0.0, -0.0], [-0.0, 1.0, -0.0])
    """
    nx, ny, nz = normals.unbind(dim=-1)
    sign = torch.where(nz < 0, -torch.ones_like(nz), torch.ones_like(nz))
    a = -1.0 / (sign + nz)
    b = nx * ny * a

    x = torch.stack([1.0 + sign * nx * nx * a, sign * b, -sign * nx], dim=-1)
    y = torch.stack([b, sign + ny * ny * a, -ny], dim=-1)
    return x, y


def random_tangent_field(
    normals: torch.Tensor, generator: torch.Generator | None = None
) -> torch.Tensor:
    """Draw one uniformly random unit tangent direction per normal.

    Each direction is ``cos(t) x + sin(t) y`` in the frame of
    :func:`tangent_frames`, with ``t`` uniform in ``[0, 2 pi)``.

    Parameters
    ----------
    normals : torch.Tensor
        Unit normals, shape (n, 3).
    generator : torch.Generator, optional
        Source of randomness; draws ``n`` samples from it.

    Returns
    -------
    torch.Tensor
        Shape (n, 3).
    """
    x, y = tangent_frames(normals)
    theta = (
        torch.rand(
            normals.shape[0],
            generator=generator,
            dtype=normals.dtype,
            device=normals.device,
        )
        * math.tau
    ).unsqueeze(-1)
    return x * torch.cos(theta) + y * torch.sin(theta)
