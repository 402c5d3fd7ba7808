"""Compressed sparse row graphs, edge lists and edge records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

import numpy as np


class CSRGraph:
    """A graph stored as row pointers and column indices."""

    def __init__(self, rowptr, colidx):
        self.rowptr = np.array(rowptr, dtype=np.int64).reshape(-1)
        self.colidx = np.array(colidx, dtype=np.int64).reshape(-1)
        if self.rowptr.size == 0:
            raise ValueError("rowptr must hold at least one entry")
        if self.rowptr[0] != 0:
            raise ValueError("rowptr must start at 0")
        if np.any(np.diff(self.rowptr) < 0):
            raise ValueError("rowptr must be non-decreasing")
        if self.rowptr[-1] != self.colidx.size:
            raise ValueError(
                f"rowptr ends at {int(self.rowptr[-1])} but there are "
                f"{self.colidx.size} column indices"
            )
        nv = self.rowptr.size - 1
        if self.colidx.size and (self.colidx.min() < 0 or self.colidx.max() >= nv):
            raise ValueError("column index out of vertex range")

    @classmethod
    def from_adjacency(cls, adj_lists: Iterable[Iterable[int]]) -> "CSRGraph":
        """Build a graph from per-vertex neighbour sequences, keeping their order."""
        rows = [list(row) for row in adj_lists]
        rowptr = np.zeros(len(rows) + 1, dtype=np.int64)
        rowptr[1:] = np.cumsum([len(row) for row in rows], dtype=np.int64)
        colidx = [u for row in rows for u in row]
        return cls(rowptr, colidx)

    def num_vertices(self) -> int:
        return int(self.rowptr.size - 1)

    def num_edges(self) -> int:
        return int(self.colidx.size)

    def neighbors(self, v: int) -> np.ndarray:
        return self.colidx[self.rowptr[v]:self.rowptr[v + 1]]

    def degree(self, v: int) -> int:
        return int(self.rowptr[v + 1] - self.rowptr[v])

    def degrees(self) -> np.ndarray:
        return np.diff(self.rowptr)

    def edge_begin(self, v: int) -> int:
        return int(self.rowptr[v])

    def edge_end(self, v: int) -> int:
        return int(self.rowptr[v + 1])

    def max_degree(self) -> int:
        degrees = self.degrees()
        return int(degrees.max()) if degrees.size else 0

    def sort_neighbors(self) -> None:
        """Sort every adjacency list in ascending order, in place."""
        for begin, end in zip(self.rowptr[:-1], self.rowptr[1:]):
            self.colidx[begin:end].sort()

    def edges(self) -> Iterator[tuple[int, int]]:
        """Yield every (source, destination) pair in CSR order."""
        sources = np.repeat(np.arange(self.num_vertices(), dtype=np.int64), self.degrees())
        for src, dst in zip(sources.tolist(), self.colidx.tolist()):
            yield src, dst

    def __eq__(self, other):
        if not isinstance(other, CSRGraph):
            return NotImplemented
        return np.array_equal(self.rowptr, other.rowptr) and np.array_equal(
            self.colidx, other.colidx
        )

    __hash__ = None

    def __repr__(self) -> str:
        return f"CSRGraph(|V|={self.num_vertices()}, |E|={self.num_edges()})"


class EdgeList:
    """Coordinate (source, destination) view of a graph's edges."""

    def __init__(self, graph: CSRGraph):
        self._src = np.repeat(
            np.arange(graph.num_vertices(), dtype=np.int64), graph.degrees()
        )
        self._dst = graph.colidx.copy()

    def _check(self, eid: int) -> None:
        if not 0 <= eid < len(self):
            raise IndexError(f"edge id {eid} out of range")

    def src(self, eid: int) -> int:
        self._check(eid)
        return int(self._src[eid])

    def dst(self, eid: int) -> int:
        self._check(eid)
        return int(self._dst[eid])

    def __len__(self) -> int:
        return int(self._dst.size)


@dataclass(frozen=True, order=True)
class Edge:
    """A directed edge."""

    src: int
    dst: int

    def __str__(self) -> str:
        return f"<{self.src},{self.dst}>"


@dataclass(frozen=True)
class WeightedEdge:
    """A directed edge with a label; ordering looks at the endpoints only."""

    src: int
    dst: int
    label: float

    @property
    def key(self) -> tuple[int, int]:
        return (self.src, self.dst)

    def __lt__(self, other: "WeightedEdge") -> bool:
        if not isinstance(other, WeightedEdge):
            return NotImplemented
        return self.key < other.key

    def __str__(self) -> str:
        return f"<{self.src},{self.dst},{self.label}>"