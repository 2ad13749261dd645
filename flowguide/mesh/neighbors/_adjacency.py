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

"""Ragged per-vertex adjacency for triangulated surfaces.

Each vertex owns an ordered list of ``(neighbor, face)`` pairs stored with the
offset-indices encoding: the neighbors of vertex ``i`` are
``indices[offsets[i]:offsets[i + 1]]`` and ``faces`` runs parallel to
``indices``, holding the triangle that produced each directed edge (``-1`` on
coarsened meshes, which carry no triangles).
"""

import torch
from tensordict import tensorclass

NO_FACE = -1


@tensorclass
class Adjacency:
    """Ordered directed-edge lists stored with offset-indices encoding.

    Attributes:
        offsets: Start of each vertex's list in ``indices``.
            Shape (n_sources + 1,), dtype int64.
        indices: Flattened neighbor vertex indices.
            Shape (total_neighbors,), dtype int64.
        faces: Originating triangle of each entry of ``indices``, or ``-1``.
            Shape (total_neighbors,), dtype int64.

    Examples
    --------
        >>> adj = Adjacency(
        ...     offsets=torch.tensor([0, 2, 2, 3]),
        ...     indices=torch.tensor([1, 2, 0]),
        ...     faces=torch.tensor([0, 1, 1]),
        ... )
        >>> adj.to_list()
        [[1, 2], [], [0]]
        >>> adj.to_pairs_list()
        [[(1, 0), (2, 1)], [], [(0, 1)]]
    """

    offsets: torch.Tensor  # shape: (n_sources + 1,), dtype: int64
    indices: torch.Tensor  # shape: (total_neighbors,), dtype: int64
    faces: torch.Tensor  # shape: (total_neighbors,), dtype: int64

    def __post_init__(self):
        if not torch.compiler.is_compiling():
            if len(self.offsets) < 1:
                raise ValueError(
                    f"Offsets array must have length >= 1 (n_sources + 1), but got {len(self.offsets)=}. "
                    f"Even for 0 sources, offsets should be [0]."
                )
            if self.offsets[0].item() != 0:
                raise ValueError(
                    f"First offset must be 0, but got {self.offsets[0].item()=}."
                )
            last_offset = self.offsets[-1].item()
            indices_length = len(self.indices)
            if last_offset != indices_length:
                raise ValueError(
                    f"Last offset must equal length of indices, but got "
                    f"{last_offset=} != {indices_length=}."
                )
            if len(self.faces) != indices_length:
                raise ValueError(
                    f"faces must run parallel to indices, but got "
                    f"{len(self.faces)=} != {indices_length=}."
                )

    def to_list(self) -> list[list[int]]:
        """Neighbor indices of every vertex as a ragged list-of-lists.

        Order within each sublist is the adjacency order, which the
        relaxation sweep depends on.
        """
        offsets = self.offsets.tolist()
        indices = self.indices.tolist()
        return [indices[offsets[i] : offsets[i + 1]] for i in range(self.n_sources)]

    def to_pairs_list(self) -> list[list[tuple[int, int]]]:
        """``(neighbor, face)`` pairs of every vertex, in adjacency order."""
        offsets = self.offsets.tolist()
        pairs = list(zip(self.indices.tolist(), self.faces.tolist()))
        return [pairs[offsets[i] : offsets[i + 1]] for i in range(self.n_sources)]

    @property
    def n_sources(self) -> int:
        """Number of vertices the adjacency is defined over."""
        return len(self.offsets) - 1

    @property
    def n_total_neighbors(self) -> int:
        """Total number of directed edges."""
        return len(self.indices)

    @property
    def counts(self) -> torch.Tensor:
        """Number of directed edges leaving each vertex, shape (n_sources,)."""
        return self.offsets[1:] - self.offsets[:-1]

    def expand_to_pairs(self) -> tuple[torch.Tensor, torch.Tensor]:
        """Expand the encoding to parallel ``(source, target)`` tensors.

        Examples
        --------
            >>> adj = build_adjacency_from_pairs(
            ...     torch.tensor([2, 0, 0]), torch.tensor([0, 2, 1]), n_sources=3
            ... )
            >>> sources, targets = adj.expand_to_pairs()
            >>> sources.tolist(), targets.tolist()
            ([0, 0, 2], [1, 2, 0])
        """
        device = self.offsets.device
        if self.n_total_neighbors == 0:
            return (
                torch.zeros(0, dtype=torch.int64, device=device),
                self.indices,
            )
        return (
            torch.repeat_interleave(
                torch.arange(self.n_sources, device=device), self.counts
            ),
            self.indices,
        )


def _offsets_from_sorted_sources(
    sorted_sources: torch.Tensor, n_sources: int
) -> torch.Tensor:
    offsets = torch.zeros(n_sources + 1, dtype=torch.int64, device=sorted_sources.device)
    offsets[1:] = torch.cumsum(torch.bincount(sorted_sources, minlength=n_sources), dim=0)
    return offsets


def build_face_adjacency(triangles: torch.Tensor, n_points: int) -> Adjacency:
    """Build the outgoing-edge adjacency of a triangle list.

    Triangle ``t = (a, b, c)`` contributes ``(b, t)`` to vertex ``a``,
    ``(c, t)`` to ``b`` and ``(a, t)`` to ``c``. Each vertex's entries keep
    triangle order, so with consistent winding every vertex records the
    outgoing edge of each incident triangle.

    Parameters
    ----------
    triangles : torch.Tensor
        Triangle vertex indices, shape (n_triangles, 3), dtype int64.
    n_points : int
        Number of vertices; vertices without triangles get empty lists.

    Returns
    -------
    Adjacency
        Face-tagged adjacency over ``n_points`` vertices.

    Examples
    --------
        >>> adj = build_face_adjacency(torch.tensor([[0, 1, 2], [0, 2, 3]]), 5)
        >>> adj.to_pairs_list()
        [[(1, 0), (2, 1)], [(2, 0)], [(0, 0), (3, 1)], [(0, 1)], []]
    """
    device = triangles.device
    n_triangles = triangles.shape[0]

    if n_triangles == 0:
        return Adjacency(
            offsets=torch.zeros(n_points + 1, dtype=torch.int64, device=device),
            indices=torch.zeros(0, dtype=torch.int64, device=device),
            faces=torch.zeros(0, dtype=torch.int64, device=device),
        )

    sources = triangles.reshape(-1)
    targets = torch.roll(triangles, shifts=-1, dims=1).reshape(-1)
    faces = torch.arange(n_triangles, dtype=torch.int64, device=device).repeat_interleave(3)

    ### Stable sort by source keeps per-vertex entries in triangle order
    order = torch.argsort(sources, stable=True)

    return Adjacency(
        offsets=_offsets_from_sorted_sources(sources[order], n_points),
        indices=targets[order],
        faces=faces[order],
    )


def build_adjacency_from_pairs(
    source_indices: torch.Tensor,  # shape: (n_pairs,)
    target_indices: torch.Tensor,  # shape: (n_pairs,)
    n_sources: int,
) -> Adjacency:
    """Build a deduplicated adjacency without face information.

    Self loops are dropped and repeated ``(source, target)`` pairs collapse to
    one entry. Each vertex's neighbors come out sorted by index. This is the
    form used for coarsened meshes, which have no triangles.

    Examples
    --------
        >>> sources = torch.tensor([0, 0, 1, 3, 0, 2])
        >>> targets = torch.tensor([2, 1, 3, 0, 2, 2])
        >>> build_adjacency_from_pairs(sources, targets, n_sources=4).to_list()
        [[1, 2], [3], [], [0]]
    """
    device = source_indices.device

    keep = source_indices != target_indices
    pairs = torch.stack([source_indices[keep], target_indices[keep]], dim=1)

    if len(pairs) == 0:
        return Adjacency(
            offsets=torch.zeros(n_sources + 1, dtype=torch.int64, device=device),
            indices=torch.zeros(0, dtype=torch.int64, device=device),
            faces=torch.zeros(0, dtype=torch.int64, device=device),
        )

    ### Lexicographically sorted unique rows: by source, then by target
    unique_pairs = torch.unique(pairs, dim=0)

    return Adjacency(
        offsets=_offsets_from_sorted_sources(unique_pairs[:, 0], n_sources),
        indices=unique_pairs[:, 1].contiguous(),
        faces=torch.full(
            (len(unique_pairs),), NO_FACE, dtype=torch.int64, device=device
        ),
    )
