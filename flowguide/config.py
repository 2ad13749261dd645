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

from pydantic import Field
from pydantic.dataclasses import dataclass


@dataclass(config={"extra": "forbid"})
class DualAreaConfig:
    """Dual area derivation: cfg.dual_area"""

    non_manifold_area: float = Field(
        default=1.0, gt=0.0
    )  # area given to vertices whose one-ring does not close


@dataclass(config={"extra": "forbid"})
class OrientationConfig:
    """Field solver: cfg.orientation"""

    iterations: int = Field(default=10, ge=0)  # relaxation sweeps per level
    seed: int | None = 0  # seed for initial field and sweep orders, None for random


@dataclass(config={"extra": "forbid"})
class FlowguideConfig:
    """Top-level configuration"""

    dual_area: DualAreaConfig = Field(default_factory=DualAreaConfig)
    orientation: OrientationConfig = Field(default_factory=OrientationConfig)
