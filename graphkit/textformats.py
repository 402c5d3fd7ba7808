"""Readers for text graph formats and builders of CSR graphs from them."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

import numpy as np

from .graph import CSRGraph, WeightedEdge

_WHITESPACE = " \t\r\n"


class FormatError(ValueError):
    """Raised when an input file does not follow its format."""


@dataclass
class ParsedGraph:
    """A graph read from a file, with optional edge weights and vertex labels."""

    graph: CSRGraph
    edge_weights: Optional[np.ndarray] = None
    vertex_labels: list = field(default_factory=list)

    @property
    def num_vertices(self) -> int:
        return self.graph.num_vertices()

    @property
    def num_edges(self) -> int:
        return self.graph.num_edges()


def split_tokens(text: str, delimiters: str = " ") -> list[str]:
    """Split text on runs of any delimiter character, dropping empty tokens."""
    if not delimiters:
        return [text] if text else []
    pattern = "[" + re.escape(delimiters) + "]+"
    return [token for token in re.split(pattern, text) if token]


def _read_lines(path) -> list[str]:
    with open(path, encoding="utf-8") as handle:
        return handle.read().splitlines()


def _to_int(token: str, lineno: int) -> int:
    try:
        return int(token)
    except ValueError:
        raise FormatError(f"line {lineno}: {token!r} is not an integer") from None


def _to_float32(token: str, lineno: int) -> float:
    try:
        return float(np.float32(float(token)))
    except ValueError:
        raise FormatError(f"line {lineno}: {token!r} is not a number") from None


def _check_vertex(u: int, num_vertices: int) -> None:
    if not 0 <= u < num_vertices:
        raise FormatError(f"vertex {u} out of range [0, {num_vertices})")


def count_degrees(
    edges: Iterable, num_vertices: int, symmetrize: bool = False, transpose: bool = False
) -> list[int]:
    """Count per-vertex degrees of edges with ``src`` and ``dst`` attributes."""
    degrees = [0] * num_vertices
    for edge in edges:
        _check_vertex(edge.src, num_vertices)
        _check_vertex(edge.dst, num_vertices)
        if symmetrize or not transpose:
            degrees[edge.src] += 1
        if symmetrize or transpose:
            degrees[edge.dst] += 1
    return degrees


def adjlist_to_csr(adj_lists: Sequence[Iterable[int]]) -> CSRGraph:
    """Build a CSR graph from neighbour sets; each row comes out sorted."""
    num_vertices = len(adj_lists)
    rows = []
    for row in adj_lists:
        ordered = sorted(row)
        for u in ordered:
            _check_vertex(u, num_vertices)
        rows.append(ordered)
    return CSRGraph.from_adjacency(rows)


def weighted_adjlist_to_csr(
    adj_lists: Sequence[Iterable[tuple[int, float]]],
) -> tuple[CSRGraph, np.ndarray]:
    """Build a CSR graph and its edge weights from sets of (neighbour, weight) pairs."""
    num_vertices = len(adj_lists)
    rows = []
    weights = []
    for row in adj_lists:
        ordered = sorted(row)
        for dst, weight in ordered:
            _check_vertex(dst, num_vertices)
            weights.append(weight)
        rows.append([dst for dst, _ in ordered])
    return CSRGraph.from_adjacency(rows), np.array(weights, dtype=np.float32)


def weighted_edgelist_to_csr(
    edges: Iterable[WeightedEdge], num_vertices: int
) -> tuple[CSRGraph, np.ndarray]:
    """Build a CSR graph from weighted edges.

    Edges with the same endpoints are merged, keeping the first one seen; the
    result is ordered by (source, destination).
    """
    unique: dict[tuple[int, int], WeightedEdge] = {}
    for edge in edges:
        unique.setdefault(edge.key, edge)
    ordered = [unique[key] for key in sorted(unique)]
    degrees = count_degrees(ordered, num_vertices)
    rowptr = np.zeros(num_vertices + 1, dtype=np.int64)
    rowptr[1:] = np.cumsum(degrees, dtype=np.int64)
    colidx = [edge.dst for edge in ordered]
    weights = np.array([edge.label for edge in ordered], dtype=np.float32)
    return CSRGraph(rowptr, colidx), weights


def read_mtx(path, is_bipartite: bool = False) -> ParsedGraph:
    """Read a Matrix Market coordinate file as a graph.

    Self-loops and repeated entries are dropped; symmetric matrices and
    bipartite graphs get both edge directions.
    """
    lines = _read_lines(path)
    if not lines:
        raise FormatError(".mtx file is empty")
    header = split_tokens(lines[0], _WHITESPACE)
    if len(header) < 5 or header[0] != "%%MatrixMarket":
        raise FormatError(".mtx file did not start with %%MatrixMarket")
    _, obj, fmt, field_type, symmetry = header[:5]
    if obj != "matrix" or fmt != "coordinate":
        raise FormatError("only allow matrix coordinate format for .mtx")
    if field_type == "complex":
        raise FormatError("do not support complex weights for .mtx")
    if field_type == "pattern":
        read_weights = False
    elif field_type in ("real", "double", "integer"):
        read_weights = True
    else:
        raise FormatError("unrecognized field type for .mtx")
    if symmetry == "symmetric":
        undirected = True
    elif symmetry in ("general", "skew-symmetric"):
        undirected = False
    else:
        raise FormatError("unsupported symmetry type for .mtx")

    body = (
        (lineno, split_tokens(line, _WHITESPACE))
        for lineno, line in enumerate(lines[1:], start=2)
        if line.strip() and not line.lstrip().startswith("%")
    )
    size = next(body, None)
    if size is None or len(size[1]) < 3:
        raise FormatError("missing size line in .mtx file")
    size_lineno, size_tokens = size
    m, n, _nnz = (_to_int(tok, size_lineno) for tok in size_tokens[:3])
    if is_bipartite:
        num_vertices = m + n
        undirected = True
    else:
        if m != n:
            raise FormatError(
                "matrix must be square for .mtx unless it is a bipartite graph"
            )
        num_vertices = m

    adj: list[set] = [set() for _ in range(num_vertices)]
    for lineno, tokens in body:
        if len(tokens) < 2:
            raise FormatError(f"line {lineno}: expected a row and a column")
        u = _to_int(tokens[0], lineno)
        v = _to_int(tokens[1], lineno)
        if u < 1 or v < 1:
            raise FormatError(f"line {lineno}: indices must start at 1")
        src, dst = u - 1, v - 1
        if is_bipartite:
            dst += m
        _check_vertex(src, num_vertices)
        _check_vertex(dst, num_vertices)
        if src == dst:
            continue
        if read_weights:
            label = _to_float32(tokens[2], lineno) if len(tokens) > 2 else 0.0
            entry, reverse = (dst, label), (src, label)
        else:
            entry, reverse = dst, src
        if entry not in adj[src]:
            adj[src].add(entry)
            if undirected:
                adj[dst].add(reverse)

    if read_weights:
        graph, weights = weighted_adjlist_to_csr(adj)
        return ParsedGraph(graph, edge_weights=weights)
    return ParsedGraph(adjlist_to_csr(adj))


def read_edgelist(path) -> ParsedGraph:
    """Read a plain edge list with 1-based vertex ids into an undirected graph."""
    edges: dict[tuple[int, int], WeightedEdge] = {}
    num_vertices = 0
    for lineno, line in enumerate(_read_lines(path), start=1):
        tokens = split_tokens(line, _WHITESPACE)
        if not tokens:
            continue
        if len(tokens) < 2:
            raise FormatError(f"line {lineno}: expected two vertex ids")
        src = _to_int(tokens[0], lineno)
        dst = _to_int(tokens[1], lineno)
        if src < 1 or dst < 1:
            raise FormatError(f"line {lineno}: src={src} dst={dst}; ids start at 1")
        src -= 1
        dst -= 1
        if src == dst:
            continue
        num_vertices = max(num_vertices, src + 1, dst + 1)
        if (src, dst) not in edges:
            edges[(src, dst)] = WeightedEdge(src, dst, 0.0)
            edges.setdefault((dst, src), WeightedEdge(dst, src, 0.0))
    graph, _ = weighted_edgelist_to_csr(edges.values(), num_vertices)
    return ParsedGraph(graph)


def read_lg(path) -> ParsedGraph:
    """Read the first graph of an LG file (``t``/``v``/``e`` lines) as undirected."""
    edges: dict[tuple[int, int], WeightedEdge] = {}
    num_vertices = 0
    for lineno, line in enumerate(_read_lines(path), start=1):
        tokens = split_tokens(line, _WHITESPACE)
        if not tokens:
            continue
        kind = tokens[0]
        if kind == "t":
            if num_vertices:
                break
        elif kind == "v" and len(tokens) >= 3:
            num_vertices = _to_int(tokens[1], lineno) + 1
        elif kind == "e" and len(tokens) >= 4:
            src = _to_int(tokens[1], lineno)
            dst = _to_int(tokens[2], lineno)
            label = _to_float32(tokens[3], lineno)
            if (src, dst) not in edges:
                edges[(src, dst)] = WeightedEdge(src, dst, label)
                edges.setdefault((dst, src), WeightedEdge(dst, src, label))
    graph, _ = weighted_edgelist_to_csr(edges.values(), num_vertices)
    return ParsedGraph(graph, vertex_labels=[0] * num_vertices)


def read_sadj(path) -> ParsedGraph:
    """Read a labelled adjacency file: ``vertex label neighbour...`` per line."""
    edges: dict[tuple[int, int], WeightedEdge] = {}
    labels: list[int] = []
    num_vertices = 0
    for lineno, line in enumerate(_read_lines(path), start=1):
        tokens = split_tokens(line)
        if not tokens:
            continue
        if len(tokens) < 2:
            raise FormatError(f"line {lineno}: expected a vertex and its label")
        num_vertices += 1
        src = _to_int(tokens[0], lineno)
        if src < 0:
            raise FormatError(f"line {lineno}: negative vertex id {src}")
        if len(labels) <= src:
            labels.extend([0] * (src + 1 - len(labels)))
        else:
            del labels[src + 1:]
        labels[src] = _to_int(tokens[1], lineno)
        neighbors = {_to_int(tok, lineno) for tok in tokens[2:]}
        neighbors.discard(src)
        for dst in sorted(neighbors):
            edges.setdefault((src, dst), WeightedEdge(src, dst, 0.0))
    graph, _ = weighted_edgelist_to_csr(edges.values(), num_vertices)
    return ParsedGraph(graph, vertex_labels=labels)