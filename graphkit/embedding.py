"""Matrix completion by gradient descent on latent vectors of a rating graph."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Sequence

import numpy as np

from .graph import CSRGraph

_MINSTD_A = 16807
_MINSTD_M = 2**31 - 1


@dataclass(frozen=True)
class SGDParams:
    """Parameters of the latent-factor solver."""

    lambda_: float = 0.001
    step: float = 0.00000035
    max_iters: int = 5
    epsilon: float = 0.1
    k: int = 20
    compute_error: bool = True

    def __post_init__(self):
        if self.max_iters < 1:
            raise ValueError("max_iters must be at least 1")
        if self.k < 1:
            raise ValueError("k must be at least 1")


def _minstd(seed: int = 1) -> Iterator[int]:
    state = seed % _MINSTD_M or 1
    while True:
        state = (state * _MINSTD_A) % _MINSTD_M
        yield state


def _uniform_row(k: int) -> np.ndarray:
    """Draw k floats in [0, 1) from a freshly seeded minimal-standard generator."""
    span = np.float32(_MINSTD_M - 1)
    below_one = np.nextafter(np.float32(1.0), np.float32(0.0))
    row = np.empty(k, dtype=np.float32)
    for i, x in zip(range(k), _minstd()):
        value = np.float32(x - 1) / span
        row[i] = below_one if value >= 1 else value
    return row


def initialize_latents(num_vertices: int, k: int = 20) -> np.ndarray:
    """Return a (num_vertices, k) array of initial latent vectors.

    Every vertex restarts the default generator, so all rows are the same
    sequence of uniform values in [0, 1).
    """
    if num_vertices < 0 or k < 1:
        raise ValueError("num_vertices must be non-negative and k positive")
    return np.tile(_uniform_row(k), (num_vertices, 1))


def rmse(squared_errors: Sequence[float], num_edges: int) -> float:
    """Root mean squared error from per-vertex sums of squared errors."""
    if num_edges <= 0:
        raise ValueError("num_edges must be positive")
    return math.sqrt(float(np.sum(squared_errors, dtype=np.float64)) / num_edges)


def sgd_train(
    graph: CSRGraph, ratings, latents, params: SGDParams = SGDParams()
) -> tuple[np.ndarray, int, list[float]]:
    """Fit latent vectors so that dot products along edges match the ratings.

    Returns the updated latents, the number of iterations run and the RMSE of
    each iteration (empty when ``params.compute_error`` is off). Training stops
    after ``max_iters`` iterations or once the RMSE falls below ``epsilon``.
    """
    nv, ne = graph.num_vertices(), graph.num_edges()
    ratings = np.asarray(ratings, dtype=np.float64).reshape(-1)
    if ratings.size != ne:
        raise ValueError(f"expected {ne} ratings, got {ratings.size}")
    current = np.array(latents, dtype=np.float64)
    if current.ndim != 2 or current.shape[0] != nv:
        raise ValueError(f"latents must have shape ({nv}, k)")

    sources = np.repeat(np.arange(nv, dtype=np.int64), graph.degrees())
    targets = graph.colidx
    history: list[float] = []
    iterations = 0
    while True:
        iterations += 1
        src_latent = current[sources]
        dst_latent = current[targets]
        estimates = np.einsum("ij,ij->i", src_latent, dst_latent)
        delta = ratings - estimates
        gradient = np.zeros_like(current)
        np.add.at(gradient, sources, dst_latent * delta[:, None])
        current += params.step * (-params.lambda_ * current + gradient)
        if params.compute_error and ne:
            squared = np.bincount(sources, weights=delta * delta, minlength=nv)
            error = rmse(squared, ne)
            history.append(error)
            if error < params.epsilon:
                break
        if iterations >= params.max_iters:
            break
    return current, iterations, history