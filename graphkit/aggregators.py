"""Neighbourhood aggregation for graph convolution and GraphSAGE layers."""

from __future__ import annotations

import numpy as np

from .graph import CSRGraph


def _features(graph: CSRGraph, features) -> np.ndarray:
    feats = np.asarray(features, dtype=np.float32)
    if feats.ndim != 2 or feats.shape[0] != graph.num_vertices():
        raise ValueError(
            f"features must have shape ({graph.num_vertices()}, length), "
            f"got {feats.shape}"
        )
    return feats


def _scatter(graph: CSRGraph, feats: np.ndarray, sources, edge_scale) -> np.ndarray:
    out = np.zeros_like(feats)
    contributions = feats[graph.colidx] * edge_scale.astype(np.float32)[:, None]
    np.add.at(out, sources, contributions)
    return out


def _sources(graph: CSRGraph) -> np.ndarray:
    return np.repeat(np.arange(graph.num_vertices(), dtype=np.int64), graph.degrees())


def gcn_aggregate(graph: CSRGraph, norms, features) -> np.ndarray:
    """Sum neighbours' features scaled by ``norms[src] * norms[dst]``.

    The same operation is its own gradient on a symmetric graph.
    """
    feats = _features(graph, features)
    norms = np.asarray(norms, dtype=np.float32).reshape(-1)
    if norms.size != graph.num_vertices():
        raise ValueError(f"expected {graph.num_vertices()} norms, got {norms.size}")
    sources = _sources(graph)
    return _scatter(graph, feats, sources, norms[sources] * norms[graph.colidx])


def sage_aggregate(graph: CSRGraph, features) -> np.ndarray:
    """Average each vertex's neighbour features; isolated vertices get zeros."""
    feats = _features(graph, features)
    sources = _sources(graph)
    degrees = graph.degrees().astype(np.float32)
    return _scatter(graph, feats, sources, np.float32(1.0) / degrees[sources])


def sage_backward(graph: CSRGraph, grad) -> np.ndarray:
    """Gradient of :func:`sage_aggregate`: neighbours scaled by 1/degree(neighbour)."""
    feats = _features(graph, grad)
    sources = _sources(graph)
    degrees = graph.degrees().astype(np.float32)
    with np.errstate(divide="ignore"):
        scale = np.float32(1.0) / degrees[graph.colidx]
    return _scatter(graph, feats, sources, scale)