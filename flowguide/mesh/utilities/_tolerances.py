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

"""Dtype-aware numerical floors for surface and field computations.

Dual areas, normal averages and tangent projections all divide by quantities
that are exactly zero only on degenerate input (coincident vertices, opposite
normals, a direction parallel to the normal). A fixed ``1e-10`` floor is far
too large for float64 meshes at small scales, so the floor is derived from
the dtype instead: ``torch.finfo(dtype).tiny ** 0.25``. Its reciprocal
squared is still finite, so ratios such as ``a_max / a_min`` never overflow.
"""

import torch


def safe_eps(dtype: torch.dtype) -> float:
    """Return a small positive floor for divisions in ``dtype`` arithmetic.

    Parameters
    ----------
    dtype : torch.dtype
        Floating-point dtype of the quantities being divided.

    Returns
    -------
    float
        ``torch.finfo(dtype).tiny ** 0.25``.

    Examples
    --------
    >>> safe_eps(torch.float32) < 1e-9
    True
    """
    return torch.finfo(dtype).tiny ** 0.25

