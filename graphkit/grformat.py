"""Binary graph files: the GR format, split CSR files, labels and masks."""

from __future__ import annotations

import struct
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from .graph import CSRGraph

GR_VERSION = 1
_HEADER = struct.Struct("<4Q")


class GRFormatError(ValueError):
    """Raised when a binary graph file is malformed."""


def _parse_gr(data: bytes):
    """Return (size_edge_type, nv, ne, out_idx, outs) from raw GR bytes."""
    if len(data) < _HEADER.size:
        raise GRFormatError("GR file is shorter than its header")
    version, size_edge_ty, nv, ne = _HEADER.unpack_from(data, 0)
    if version != GR_VERSION:
        raise GRFormatError(f"unsupported GR version {version}")
    if nv >= 2**31:
        raise GRFormatError(f"too many vertices: {nv}")
    needed = _HEADER.size + 8 * nv + 4 * ne
    if len(data) < needed:
        raise GRFormatError(f"GR file truncated: {len(data)} bytes, need {needed}")
    out_idx = np.frombuffer(data, dtype="<u8", count=nv, offset=_HEADER.size)
    outs = np.frombuffer(data, dtype="<u4", count=ne, offset=_HEADER.size + 8 * nv)
    return size_edge_ty, nv, ne, out_idx, outs


def read_gr(path, need_sort: bool = False) -> CSRGraph:
    """Read a GR file into a CSR graph, optionally sorting each adjacency list."""
    _, nv, ne, out_idx, outs = _parse_gr(Path(path).read_bytes())
    rowptr = np.zeros(nv + 1, dtype=np.int64)
    rowptr[1:] = out_idx.astype(np.int64)
    if np.any(np.diff(rowptr) < 0) or rowptr[-1] != ne:
        raise GRFormatError("GR row indices are not a valid CSR layout")
    colidx = outs.astype(np.int64)
    bad = np.flatnonzero(colidx >= nv)
    if bad.size:
        eid = int(bad[0])
        vid = int(np.searchsorted(rowptr, eid, side="right") - 1)
        raise GRFormatError(
            f"invalid edge from {vid} to {int(colidx[eid])} at index "
            f"{eid - int(rowptr[vid])}({eid})"
        )
    graph = CSRGraph(rowptr, colidx)
    if need_sort:
        graph.sort_neighbors()
    return graph


def write_gr(graph: CSRGraph, path) -> None:
    """Write a graph as a version-1 GR file without edge data."""
    nv, ne = graph.num_vertices(), graph.num_edges()
    with open(path, "wb") as handle:
        handle.write(_HEADER.pack(GR_VERSION, 0, nv, ne))
        handle.write(graph.rowptr[1:].astype("<u8").tobytes())
        handle.write(graph.colidx.astype("<u4").tobytes())
        if ne % 2:
            handle.write(b"\0" * 4)


def split_gr_file(path, out_prefix) -> list[Path]:
    """Split a GR file into ``<prefix>.vertex.bin`` and ``<prefix>.edge.bin``."""
    _, nv, ne, out_idx, outs = _parse_gr(Path(path).read_bytes())
    written = []
    if nv:
        vertex_path = Path(f"{out_prefix}.vertex.bin")
        with open(vertex_path, "wb") as handle:
            handle.write(np.zeros(1, dtype="<u8").tobytes())
            handle.write(out_idx.astype("<u8").tobytes())
        written.append(vertex_path)
    if ne:
        edge_path = Path(f"{out_prefix}.edge.bin")
        edge_path.write_bytes(outs.astype("<u4").tobytes())
        written.append(edge_path)
    return written


def write_binary_graph(
    graph: CSRGraph,
    out_prefix,
    vlabels: Optional[Sequence[int]] = None,
    elabels: Optional[Sequence[float]] = None,
) -> list[Path]:
    """Write a graph and optional labels as raw little-endian arrays."""
    nv, ne = graph.num_vertices(), graph.num_edges()
    written = []
    vertex_path = Path(f"{out_prefix}.vertex.bin")
    vertex_path.write_bytes(graph.rowptr.astype("<u8").tobytes())
    written.append(vertex_path)
    edge_path = Path(f"{out_prefix}.edge.bin")
    edge_path.write_bytes(graph.colidx.astype("<u4").tobytes())
    written.append(edge_path)
    if vlabels is not None:
        labels = np.asarray(vlabels, dtype=np.int64)
        if labels.size != nv:
            raise ValueError(f"expected {nv} vertex labels, got {labels.size}")
        if labels.size and (labels.min() < 0 or labels.max() > 255):
            raise ValueError("vertex labels must fit in one byte")
        vlabel_path = Path(f"{out_prefix}.vlabel.bin")
        vlabel_path.write_bytes(labels.astype(np.uint8).tobytes())
        written.append(vlabel_path)
    if elabels is not None:
        weights = np.asarray(elabels, dtype="<f4")
        if weights.size != ne:
            raise ValueError(f"expected {ne} edge labels, got {weights.size}")
        elabel_path = Path(f"{out_prefix}.elabel.bin")
        elabel_path.write_bytes(weights.tobytes())
        written.append(elabel_path)
    return written


def read_binary_graph(prefix) -> CSRGraph:
    """Read a graph written as ``<prefix>.vertex.bin`` and ``<prefix>.edge.bin``."""
    vertex_path = Path(f"{prefix}.vertex.bin")
    edge_path = Path(f"{prefix}.edge.bin")
    rowptr = np.frombuffer(vertex_path.read_bytes(), dtype="<u8").astype(np.int64)
    if edge_path.exists():
        colidx = np.frombuffer(edge_path.read_bytes(), dtype="<u4").astype(np.int64)
    else:
        colidx = np.zeros(0, dtype=np.int64)
    try:
        return CSRGraph(rowptr, colidx)
    except ValueError as exc:
        raise GRFormatError(str(exc)) from None


def read_labels(
    path, num_vertices: int, num_classes: int, is_single_class: bool = True
) -> np.ndarray:
    """Read one row of class indicators per vertex.

    Single-class labels give the index of the first non-zero entry per vertex;
    multi-class labels come back flattened, ``num_vertices * num_classes`` long.
    """
    size = num_vertices if is_single_class else num_vertices * num_classes
    labels = np.zeros(size, dtype=np.int64)
    lines = Path(path).read_text(encoding="utf-8").splitlines()
    for v, line in enumerate(lines):
        if v >= num_vertices:
            raise GRFormatError(f"more label rows than the {num_vertices} vertices")
        tokens = line.split()
        for idx in range(num_classes):
            if idx >= len(tokens):
                raise GRFormatError(f"line {v + 1}: expected {num_classes} values")
            try:
                x = int(tokens[idx])
            except ValueError:
                raise GRFormatError(f"line {v + 1}: {tokens[idx]!r} is not an integer") from None
            if is_single_class:
                if x != 0:
                    labels[v] = idx
                    break
            else:
                labels[v * num_classes + idx] = x
    return labels


def read_masks(path, begin: int, end: int, num_vertices: int) -> tuple[np.ndarray, int]:
    """Read a mask file whose first line gives its ``begin end`` range.

    Returns the mask array and the number of samples set within the range.
    """
    lines = Path(path).read_text(encoding="utf-8").splitlines()
    header = lines[0].split() if lines else []
    if len(header) < 2:
        raise GRFormatError("mask file lacks its range line")
    try:
        file_begin, file_end = int(header[0]), int(header[1])
    except ValueError:
        raise GRFormatError("mask range must be two integers") from None
    if (file_begin, file_end) != (begin, end):
        raise GRFormatError(
            f"mask range [{file_begin}, {file_end}) does not match [{begin}, {end})"
        )
    masks = np.zeros(num_vertices, dtype=np.uint8)
    count = 0
    for i, line in enumerate(lines[1:]):
        if not begin <= i < end:
            continue
        tokens = line.split()
        try:
            mask = int(tokens[0]) if tokens else 0
        except ValueError:
            raise GRFormatError(f"mask row {i}: {tokens[0]!r} is not an integer") from None
        if mask == 1:
            if i >= num_vertices:
                raise GRFormatError(f"mask row {i} beyond {num_vertices} vertices")
            masks[i] = 1
            count += 1
    return masks, count