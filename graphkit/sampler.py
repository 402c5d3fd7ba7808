"""Frontier sampling of training vertices and induced-subgraph construction."""

from __future__ import annotations

import random
from typing import Iterable

import numpy as np

from .graph import CSRGraph


def create_masks(num_vertices: int, vertices: Iterable[int]) -> np.ndarray:
    """Return a 0/1 mask of length ``num_vertices`` set at the given vertices."""
    masks = np.zeros(num_vertices, dtype=np.uint8)
    for v in vertices:
        if not 0 <= v < num_vertices:
            raise ValueError(f"vertex {v} out of range [0, {num_vertices})")
        masks[v] = 1
    return masks


def _edge_sources(graph: CSRGraph) -> np.ndarray:
    return np.repeat(np.arange(graph.num_vertices(), dtype=np.int64), graph.degrees())


def _check_masks(graph: CSRGraph, masks) -> np.ndarray:
    masks = np.asarray(masks).reshape(-1)
    if masks.size != graph.num_vertices():
        raise ValueError(
            f"expected {graph.num_vertices()} mask entries, got {masks.size}"
        )
    return masks


def _kept_edges(graph: CSRGraph, masks: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    sources = _edge_sources(graph)
    keep = (masks[sources] == 1) & (masks[graph.colidx] == 1)
    return sources, keep


def masked_degrees(graph: CSRGraph, masks) -> np.ndarray:
    """Count, for each masked vertex, its neighbours that are masked too."""
    masks = _check_masks(graph, masks)
    sources, keep = _kept_edges(graph, masks)
    return np.bincount(sources[keep], minlength=graph.num_vertices()).astype(np.int64)


def masked_graph(graph: CSRGraph, masks) -> CSRGraph:
    """Keep every vertex but only the edges whose two ends are both masked."""
    masks = _check_masks(graph, masks)
    sources, keep = _kept_edges(graph, masks)
    degrees = np.bincount(sources[keep], minlength=graph.num_vertices())
    rowptr = np.zeros(graph.num_vertices() + 1, dtype=np.int64)
    rowptr[1:] = np.cumsum(degrees, dtype=np.int64)
    return CSRGraph(rowptr, graph.colidx[keep])


def reindex_subgraph(kept: Iterable[int], graph: CSRGraph) -> CSRGraph:
    """Renumber the kept vertices 0.. in ascending order and keep their edges.

    Every neighbour of a kept vertex must be kept as well.
    """
    old_ids = sorted(set(kept))
    new_ids = {old: new for new, old in enumerate(old_ids)}
    rows = []
    for old in old_ids:
        if not 0 <= old < graph.num_vertices():
            raise ValueError(f"vertex {old} out of range")
        try:
            rows.append([new_ids[dst] for dst in graph.neighbors(old).tolist()])
        except KeyError as exc:
            raise ValueError(
                f"vertex {old} has neighbour {exc.args[0]} outside the kept set"
            ) from None
    return CSRGraph.from_adjacency(rows)


class Sampler:
    """Samples vertex sets from the training part of a graph by frontier walks."""

    def __init__(
        self,
        full_graph: CSRGraph,
        train_masks,
        frontier_size: int = 1000,
        sample_clip: int = 3000,
    ):
        if frontier_size < 1:
            raise ValueError("frontier_size must be at least 1")
        if sample_clip < 1:
            raise ValueError("sample_clip must be at least 1")
        masks = _check_masks(full_graph, train_masks).astype(np.uint8)
        self.full_graph = full_graph
        self.train_masks = masks
        self.training_nodes = np.flatnonzero(masks == 1)
        self.masked_graph = masked_graph(full_graph, masks)
        self.frontier_size = frontier_size
        self.sample_clip = sample_clip

    def _weight(self, v: int) -> int:
        return min(self.masked_graph.degree(v), self.sample_clip)

    def select_vertices(self, n: int, seed: int = 0) -> set[int]:
        """Select up to ``n`` training vertices by frontier sampling.

        A frontier of random training vertices is grown by repeatedly picking a
        frontier vertex with probability proportional to its clipped degree and
        replacing it by one of its neighbours chosen uniformly.
        """
        if n < 0:
            raise ValueError("n must be non-negative")
        if self.training_nodes.size == 0:
            raise ValueError("there are no training vertices to sample from")
        rng = random.Random(seed)
        nodes = self.training_nodes.tolist()
        m = min(self.frontier_size, n)
        frontier = [nodes[rng.randrange(len(nodes))] for _ in range(m)]
        sampled = set(frontier)
        weights = [self._weight(v) for v in frontier]
        positions = range(len(frontier))
        for _ in range(n - m):
            if sum(weights) == 0:
                break
            pos = rng.choices(positions, weights=weights)[0]
            neighbors = self.masked_graph.neighbors(frontier[pos])
            u = int(neighbors[rng.randrange(neighbors.size)])
            sampled.add(u)
            frontier[pos] = u
            weights[pos] = self._weight(u)
        return sampled

    def generate_subgraph(self, sampled: Iterable[int]) -> tuple[np.ndarray, CSRGraph]:
        """Return the masks of the sampled set and the subgraph it induces."""
        sampled = set(sampled)
        masks = create_masks(self.full_graph.num_vertices(), sampled)
        induced = masked_graph(self.full_graph, masks)
        return masks, reindex_subgraph(sampled, induced)