"""Convert graph files in text or GR formats into binary CSR files."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np

from .graph import CSRGraph
from .grformat import GRFormatError, read_gr, split_gr_file, write_binary_graph
from .textformats import FormatError, read_edgelist, read_lg, read_mtx

GR_TYPES = frozenset({"gr", "sgr", "csgr"})

_USAGE = (
    "Usage: converter <file_type> <input_file> <output_prefix> "
    "[is_bipartite] [write_vlabel] [write_elabel]\n"
    "Example: converter gr inputs/mico.gr inputs/mico/graph 0 0 0"
)


@dataclass
class ConvertedGraph:
    """A loaded graph with the labels that go along with it."""

    graph: CSRGraph
    edge_weights: Optional[np.ndarray] = None
    vertex_labels: Optional[np.ndarray] = None

    def write(
        self, out_prefix, write_vlabels: bool = True, write_elabels: bool = True
    ) -> list[Path]:
        """Write the graph and whichever labels are present and requested."""
        vlabels = self.vertex_labels if write_vlabels else None
        elabels = self.edge_weights if write_elabels else None
        return write_binary_graph(self.graph, out_prefix, vlabels=vlabels, elabels=elabels)


def load_graph(file_type: str, path, is_bipartite: bool = False) -> ConvertedGraph:
    """Load a graph file; unknown types are read as LG files."""
    if file_type in GR_TYPES:
        return ConvertedGraph(read_gr(path, need_sort=True))
    if file_type == "mtx":
        parsed = read_mtx(path, is_bipartite)
    elif file_type == "edges":
        parsed = read_edgelist(path)
    else:
        parsed = read_lg(path)
    labels = np.asarray(parsed.vertex_labels, dtype=np.int64) if parsed.vertex_labels else None
    return ConvertedGraph(parsed.graph, parsed.edge_weights, labels)


def _flag(args: list[str], index: int) -> bool:
    return bool(int(args[index])) if len(args) > index else False


def main(argv=None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 3:
        print(_USAGE, file=sys.stderr)
        return 1
    file_type, infile, out_prefix = args[:3]
    try:
        is_bipartite = _flag(args, 3)
        write_vlabel = _flag(args, 4)
        write_elabel = _flag(args, 5)
    except ValueError:
        print(_USAGE, file=sys.stderr)
        return 1
    print(file_type)
    try:
        if file_type in GR_TYPES:
            split_gr_file(infile, out_prefix)
        else:
            converted = load_graph(file_type, infile, is_bipartite)
            print(f"|V| {converted.graph.num_vertices()} |E| {converted.graph.num_edges()}")
            converted.write(out_prefix, write_vlabel, write_elabel)
    except (FormatError, GRFormatError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())