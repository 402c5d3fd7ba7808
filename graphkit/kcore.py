"""K-core decomposition of symmetric graphs by repeated peeling."""

from __future__ import annotations

import sys
import time

import numpy as np

from .graph import CSRGraph
from .grformat import GRFormatError, read_binary_graph


def kcore_decomposition(graph: CSRGraph) -> tuple[np.ndarray, int]:
    """Return each vertex's core number and the largest core number.

    For k = 1, 2, ... vertices whose remaining degree is below k are removed
    repeatedly; a vertex removed in round k has core number k - 1. The largest
    core is -1 for a graph without vertices.
    """
    nv = graph.num_vertices()
    degrees = graph.degrees().astype(np.int64)
    coreness = np.zeros(nv, dtype=np.int64)
    sources = np.repeat(np.arange(nv, dtype=np.int64), graph.degrees())
    largest_core = -1
    total_removed = 0
    for k in range(1, nv + 1):
        while True:
            to_remove = (degrees != -1) & (degrees < k)
            count = int(np.count_nonzero(to_remove))
            if not count:
                break
            coreness[to_remove] = k - 1
            degrees[to_remove] = -1
            hits = np.bincount(graph.colidx[to_remove[sources]], minlength=nv)
            positive = degrees > 0
            degrees[positive] = np.maximum(degrees[positive] - hits[positive], 0)
            total_removed += count
        if total_removed == nv:
            largest_core = k - 1
            break
    return coreness, largest_core


def main(argv=None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("Usage: kcore <graph> [num_devices] [chunk_size]", file=sys.stderr)
        return 1
    print("K-Core decomposition: assumes symmetric graph")
    try:
        graph = read_binary_graph(args[0])
    except (GRFormatError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(f"|V| {graph.num_vertices()} |E| {graph.num_edges()}")
    start = time.perf_counter()
    _, largest = kcore_decomposition(graph)
    print(f"runtime [kcore] = {time.perf_counter() - start} sec")
    print(f"largestCore = {largest}")
    return 0


if __name__ == "__main__":
    sys.exit(main())