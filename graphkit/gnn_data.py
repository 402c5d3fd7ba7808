"""Dataset files for graph learning and GCN normalisation scores."""

from __future__ import annotations

import struct
from pathlib import Path

import numpy as np

from .graph import CSRGraph
from .grformat import GRFormatError, read_gr


def _header(line: str, what: str) -> tuple[int, int]:
    tokens = line.split()
    if len(tokens) < 2:
        raise GRFormatError(f"{what} lacks its two-number header")
    try:
        return int(tokens[0]), int(tokens[1])
    except ValueError:
        raise GRFormatError(f"{what} header must be two integers") from None


class DatasetReader:
    """Reads labels, features, masks and the graph of a named dataset."""

    def __init__(self, path, dataset: str):
        self.path = Path(path)
        self.dataset = dataset

    def _file(self, suffix: str) -> Path:
        return self.path / f"{self.dataset}{suffix}"

    def read_labels(self, is_single_class: bool = True) -> tuple[np.ndarray, int]:
        """Read ``<dataset>-labels.txt``; return the labels and the class count.

        Single-class labels hold the index of the first non-zero entry of each
        row; multi-class labels are flattened rows of indicators.
        """
        lines = self._file("-labels.txt").read_text(encoding="utf-8").splitlines()
        if not lines:
            raise GRFormatError("labels file is empty")
        m, num_classes = _header(lines[0], "labels file")
        labels = np.zeros(m if is_single_class else m * num_classes, dtype=np.uint8)
        for v, line in enumerate(lines[1:]):
            if v >= m:
                raise GRFormatError(f"more label rows than the {m} samples")
            tokens = line.split()
            if len(tokens) < num_classes:
                raise GRFormatError(f"label row {v}: expected {num_classes} values")
            try:
                values = [int(tok) for tok in tokens[:num_classes]]
            except ValueError:
                raise GRFormatError(f"label row {v}: values must be integers") from None
            if is_single_class:
                labels[v] = next((idx for idx, x in enumerate(values) if x != 0), 0)
            else:
                labels[v * num_classes:(v + 1) * num_classes] = values
        return labels, num_classes

    def read_features(self, filetype: str = "txt") -> np.ndarray:
        """Read the feature matrix, of shape (samples, feature length).

        ``txt`` reads ``<dataset>.ft`` (a header then ``row column value`` lines);
        ``bin`` reads ``<dataset>-dims.txt`` and raw float32 ``<dataset>-feats.bin``.
        """
        if filetype == "bin":
            dims = self._file("-dims.txt").read_text(encoding="utf-8")
            m, feat_len = _header(dims, "dims file")
            raw = np.frombuffer(self._file("-feats.bin").read_bytes(), dtype="<f4")
            if raw.size < m * feat_len:
                raise GRFormatError(
                    f"feature file holds {raw.size} values, need {m * feat_len}"
                )
            return raw[: m * feat_len].astype(np.float32).reshape(m, feat_len)
        lines = self._file(".ft").read_text(encoding="utf-8").splitlines()
        if not lines:
            raise GRFormatError("feature file is empty")
        m, feat_len = _header(lines[0], "feature file")
        feats = np.zeros((m, feat_len), dtype=np.float32)
        for lineno, line in enumerate(lines[1:], start=2):
            tokens = line.split()
            if not tokens:
                continue
            if len(tokens) < 3:
                raise GRFormatError(f"line {lineno}: expected row, column and value")
            try:
                u, v, w = int(tokens[0]), int(tokens[1]), float(tokens[2])
            except ValueError:
                raise GRFormatError(f"line {lineno}: malformed feature entry") from None
            if not (0 <= u < m and 0 <= v < feat_len):
                raise GRFormatError(f"line {lineno}: entry ({u}, {v}) out of range")
            feats[u, v] = w
        return feats

    def read_masks(
        self, mask_type: str, num_samples: int
    ) -> tuple[np.ndarray, int, int, int]:
        """Read ``<dataset>-<type>_mask.txt``.

        Returns the mask array, the range's begin and end, and the number of
        samples set within that range.
        """
        path = self._file(f"-{mask_type}_mask.txt")
        lines = path.read_text(encoding="utf-8").splitlines()
        if not lines:
            raise GRFormatError("mask file is empty")
        begin, end = _header(lines[0], "mask file")
        masks = np.zeros(num_samples, dtype=np.uint8)
        count = 0
        for i, line in enumerate(lines[1:]):
            if not begin <= i < end:
                continue
            tokens = line.split()
            try:
                mask = int(tokens[0]) if tokens else 0
            except ValueError:
                raise GRFormatError(f"mask row {i}: not an integer") from None
            if mask == 1:
                if i >= num_samples:
                    raise GRFormatError(f"mask row {i} beyond {num_samples} samples")
                masks[i] = 1
                count += 1
        return masks, begin, end, count

    def read_graph(self) -> CSRGraph:
        """Read ``<dataset>.csgr``; files carrying edge data are refused."""
        path = self._file(".csgr")
        with open(path, "rb") as handle:
            head = handle.read(16)
        if len(head) < 16:
            raise GRFormatError("GR file is shorter than its header")
        _, size_edge_ty = struct.unpack("<2Q", head)
        if size_edge_ty != 0:
            raise GRFormatError("edge data is not supported")
        return read_gr(path)


def vertex_norms(graph: CSRGraph) -> np.ndarray:
    """Return 1/sqrt(degree) per vertex, 0 for isolated vertices."""
    roots = np.sqrt(graph.degrees().astype(np.float32))
    norms = np.zeros_like(roots)
    np.divide(np.float32(1.0), roots, out=norms, where=roots != 0)
    return norms


def edge_norms(graph: CSRGraph) -> np.ndarray:
    """Return 1/(sqrt(deg(i)) * sqrt(deg(j))) for every edge (i, j)."""
    roots = np.sqrt(graph.degrees().astype(np.float32))
    sources = np.repeat(np.arange(graph.num_vertices(), dtype=np.int64), graph.degrees())
    products = roots[sources] * roots[graph.colidx]
    norms = np.zeros_like(products)
    np.divide(np.float32(1.0), products, out=norms, where=products != 0)
    return norms