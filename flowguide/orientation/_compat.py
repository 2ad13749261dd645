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

"""Compatibility of 4-RoSy directions between two vertices.

A cross field direction ``o`` at a vertex with normal ``n`` is equivalent to
its rotations by 90, 180 and 270 degrees about ``n``. Before two directions
can be averaged, one representative of each must be chosen so that they are
as aligned as possible.
"""

import torch


def symmetric_compat(
    o0: torch.Tensor, n0: torch.Tensor, o1: torch.Tensor, n1: torch.Tensor
) -> tuple[torch.Tensor, torch.Tensor]:
    """Pick the best-aligned representatives of two 4-RoSy directions.

    With ``p = n x o``, the candidate pairs are, in order,
    ``(o0, o1), (p0, o1), (-o0, o1), (-p0, o1), (o0, p1), (p0, p1),
    (-o0, p1), (-p0, p1)``. The pair with the largest dot product is
    returned; ties go to the later pair. Negated representatives of the
    second direction are not searched, since negating both sides leaves the
    dot product unchanged.

    Parameters
    ----------
    o0, n0 : torch.Tensor
        Direction and normal at the first vertex, shape (..., 3).
    o1, n1 : torch.Tensor
        Direction and normal at the second vertex, shape (..., 3).

    Returns
    -------
    tuple[torch.Tensor, torch.Tensor]
        Representatives of the first and second direction, shape (..., 3).

    Examples
    --------
    >>> n = torch.tensor([0.0, 0.0, 1.0])
    >>> r0, r1 = symmetric_compat(
    ...     torch.tensor([1.0, 0.0, 0.0]), n, torch.tensor([0.6, 0.8, 0.0]), n
    ... )
    >>> round(float((r0 * r1).sum()), 4)
    0.8
    """
    p0 = torch.linalg.cross(n0, o0, dim=-1)
    p1 = torch.linalg.cross(n1, o1, dim=-1)

    reps0 = torch.stack([o0, p0, -o0, -p0, o0, p0, -o0, -p0], dim=-2)
    reps1 = torch.stack([o1, o1, o1, o1, p1, p1, p1, p1], dim=-2)
    dots = (reps0 * reps1).sum(dim=-1)  # (..., 8)

    # argmax returns the first maximum; search reversed to get the last
    best = dots.shape[-1] - 1 - torch.argmax(torch.flip(dots, dims=[-1]), dim=-1)
    index = best[..., None, None].expand(*best.shape, 1, 3)

    return (
        torch.gather(reps0, -2, index).squeeze(-2),
        torch.gather(reps1, -2, index).squeeze(-2),
    )


Vec3 = tuple[float, float, float]


def _cross(a: Vec3, b: Vec3) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def _dot(a: Vec3, b: Vec3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def _neg(a: Vec3) -> Vec3:
    return (-a[0], -a[1], -a[2])


def symmetric_compat_scalar(
    o0: Vec3, n0: Vec3, o1: Vec3, n1: Vec3
) -> tuple[Vec3, Vec3]:
    """Single-pair version of :func:`symmetric_compat` on plain float triples.

    Used inside the sequential relaxation sweep, where launching tensor
    kernels per edge dominates the run time. Candidate order and tie
    breaking are identical to the batched version.

    Examples
    --------
    >>> x, z = (1.0, 0.0, 0.0), (0.0, 0.0, 1.0)
    >>> symmetric_compat_scalar(x, z, x, z)
    ((0.0, 1.0, 0.0), (0.0, 1.0, 0.0))
    """
    p0 = _cross(n0, o0)
    p1 = _cross(n1, o1)

    best = None
    best_dot = float("-inf")
    for r1 in (o1, p1):
        for r0 in (o0, p0, _neg(o0), _neg(p0)):
            d = _dot(r0, r1)
            # >= keeps the last maximum
            if d >= best_dot:
                best_dot = d
                best = (r0, r1)
    if best is None:
        # Every dot product is NaN
        best = (o0, o1)
    return best
