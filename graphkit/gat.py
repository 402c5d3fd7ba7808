"""Graph attention aggregation with learnable left and right attention vectors."""

from __future__ import annotations

from typing import Optional

import numpy as np

from .graph import CSRGraph


def leaky_relu(x, negative_slope: float = 0.2) -> np.ndarray:
    """Return x where x > 0 and ``negative_slope * x`` elsewhere."""
    x = np.asarray(x, dtype=np.float64)
    return np.where(x > 0, x, negative_slope * x)


def softmax(x) -> np.ndarray:
    """Numerically stable softmax of a one-dimensional vector."""
    x = np.asarray(x, dtype=np.float64).reshape(-1)
    if x.size == 0:
        return x.copy()
    exps = np.exp(x - x.max())
    return exps / exps.sum()


def softmax_backward(y, grad) -> np.ndarray:
    """Gradient of the softmax input given its output ``y`` and the output gradient."""
    y = np.asarray(y, dtype=np.float64).reshape(-1)
    grad = np.asarray(grad, dtype=np.float64).reshape(-1)
    if y.shape != grad.shape:
        raise ValueError(f"shape mismatch: {y.shape} and {grad.shape}")
    return y * (grad - np.dot(grad, y))


def _sources(graph: CSRGraph) -> np.ndarray:
    return np.repeat(np.arange(graph.num_vertices(), dtype=np.int64), graph.degrees())


def transpose_edge_values(graph: CSRGraph, values) -> np.ndarray:
    """Move each edge value to the reverse edge of a structurally symmetric graph.

    The value stored on edge (i, j) ends up at the position of edge (j, i).
    """
    values = np.asarray(values, dtype=np.float64).reshape(-1)
    ne = graph.num_edges()
    if values.size != ne:
        raise ValueError(f"expected {ne} edge values, got {values.size}")
    if ne == 0:
        return values.copy()
    nv = graph.num_vertices()
    sources = _sources(graph)
    keys = sources * nv + graph.colidx
    order = np.argsort(keys, kind="stable")
    sorted_keys = keys[order]
    reverse = graph.colidx * nv + sources
    idx = np.searchsorted(sorted_keys, reverse)
    inside = idx < ne
    if not inside.all() or not np.array_equal(sorted_keys[idx], reverse):
        raise ValueError("graph is not structurally symmetric")
    return values[order[idx]]


def _scatter(graph: CSRGraph, sources, edge_scale, feats) -> np.ndarray:
    out = np.zeros_like(feats)
    np.add.at(out, sources, feats[graph.colidx] * edge_scale[:, None])
    return out


class GATAggregator:
    """Attention-weighted neighbour aggregation.

    Attention logits are ``a_l . h_src + a_r . h_dst`` passed through a leaky
    ReLU, then normalised by a softmax over each vertex's edges.
    """

    def __init__(
        self,
        length: int,
        num_edges: int,
        negative_slope: float = 0.2,
        seed: int = 0,
    ):
        if length < 1:
            raise ValueError("length must be at least 1")
        if num_edges < 0:
            raise ValueError("num_edges must be non-negative")
        self.length = length
        self.num_edges = num_edges
        self.negative_slope = negative_slope
        limit = np.sqrt(6.0 / (length + 1))
        rng = np.random.default_rng(seed)
        self.alpha_l = rng.uniform(-limit, limit, size=length)
        self.alpha_r = rng.uniform(-limit, limit, size=length)
        self.alpha_lgrad = np.zeros(length)
        self.alpha_rgrad = np.zeros(length)
        self.temp_scores: Optional[np.ndarray] = None
        self.norm_scores: Optional[np.ndarray] = None

    def _check(self, graph: CSRGraph, features) -> np.ndarray:
        if graph.num_edges() != self.num_edges:
            raise ValueError(
                f"graph has {graph.num_edges()} edges, aggregator sized for "
                f"{self.num_edges}"
            )
        feats = np.asarray(features, dtype=np.float64)
        if feats.shape != (graph.num_vertices(), self.length):
            raise ValueError(
                f"features must have shape ({graph.num_vertices()}, {self.length}), "
                f"got {feats.shape}"
            )
        return feats

    def aggregate(self, graph: CSRGraph, features) -> np.ndarray:
        """Return each vertex's attention-weighted sum of neighbour features."""
        feats = self._check(graph, features)
        sources = _sources(graph)
        src_score = feats @ self.alpha_l
        dst_score = feats @ self.alpha_r
        temp = src_score[sources] + dst_score[graph.colidx]
        scores = leaky_relu(temp, self.negative_slope)
        norm = np.empty_like(scores)
        for begin, end in zip(graph.rowptr[:-1], graph.rowptr[1:]):
            norm[begin:end] = softmax(scores[begin:end])
        self.temp_scores = temp
        self.norm_scores = norm
        return _scatter(graph, sources, norm, feats)

    def backward(self, graph: CSRGraph, features, grad) -> np.ndarray:
        """Fill the attention-vector gradients and return the feature gradient.

        Must follow :meth:`aggregate` on the same graph and features.
        """
        if self.norm_scores is None or self.temp_scores is None:
            raise RuntimeError("backward called before aggregate")
        feats = self._check(graph, features)
        grad = np.asarray(grad, dtype=np.float64)
        if grad.shape != feats.shape:
            raise ValueError(f"grad must have shape {feats.shape}, got {grad.shape}")
        sources = _sources(graph)
        norm_grad = np.einsum("ij,ij->i", grad[sources], feats[graph.colidx])
        score_grad = np.empty_like(norm_grad)
        for begin, end in zip(graph.rowptr[:-1], graph.rowptr[1:]):
            score_grad[begin:end] = softmax_backward(
                self.norm_scores[begin:end], norm_grad[begin:end]
            )
        temp_grad = score_grad * np.where(self.temp_scores > 0, 1.0, self.negative_slope)
        self.alpha_rgrad = temp_grad @ feats[graph.colidx] if temp_grad.size else np.zeros(self.length)
        src_grad = np.bincount(sources, weights=temp_grad, minlength=graph.num_vertices())
        self.alpha_lgrad = src_grad @ feats
        transposed = transpose_edge_values(graph, self.norm_scores)
        return _scatter(graph, sources, transposed, grad)