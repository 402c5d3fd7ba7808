import numpy as np
import pytest

from graphkit.gat import (
    GATAggregator,
    leaky_relu,
    softmax,
    softmax_backward,
    transpose_edge_values,
)
from graphkit.graph import CSRGraph


def _graph():
    # triangle 0-1-2, pendant 3 on 2, isolated 4
    return CSRGraph.from_adjacency([[1, 2], [0, 2], [0, 1, 3], [2], []])


def test_leaky_relu_positive_kept_negative_scaled():
    out = leaky_relu([3.0, -1.0, 0.0], 0.2)
    assert out[0] == 3.0
    assert out[1] == pytest.approx(-0.2)
    assert out[2] == 0.0


def test_softmax_sums_to_one_and_shift_invariant():
    x = np.array([1.0, 2.0, -3.0, 0.5])
    y = softmax(x)
    assert y.sum() == pytest.approx(1.0)
    assert np.allclose(softmax(x + 100.0), y)
    assert np.argmax(y) == 1


def test_softmax_empty():
    assert softmax([]).size == 0


def test_softmax_backward_matches_finite_difference():
    x = np.array([0.3, -1.2, 0.8])
    g = np.array([1.0, 2.0, -0.5])
    analytic = softmax_backward(softmax(x), g)
    eps = 1e-6
    numeric = np.array(
        [
            (np.dot(g, softmax(x + eps * e)) - np.dot(g, softmax(x - eps * e))) / (2 * eps)
            for e in np.eye(3)
        ]
    )
    assert np.allclose(analytic, numeric, atol=1e-6)


def test_softmax_backward_constant_grad_is_zero():
    y = softmax([0.1, 0.2, 0.3])
    assert np.allclose(softmax_backward(y, [5.0, 5.0, 5.0]), 0.0)


def test_softmax_backward_shape_mismatch():
    with pytest.raises(ValueError):
        softmax_backward([0.5, 0.5], [1.0])


def test_transpose_edge_values_moves_to_reverse_edge():
    g = _graph()
    values = np.array([src * 10 + dst for src, dst in g.edges()], dtype=float)
    out = transpose_edge_values(g, values)
    for e, (src, dst) in enumerate(g.edges()):
        assert out[e] == dst * 10 + src


def test_transpose_twice_is_identity():
    g = _graph()
    values = np.arange(g.num_edges(), dtype=float) * 1.5
    assert np.array_equal(transpose_edge_values(g, transpose_edge_values(g, values)), values)


def test_transpose_rejects_asymmetric_graph():
    g = CSRGraph.from_adjacency([[1], []])
    with pytest.raises(ValueError):
        transpose_edge_values(g, [1.0])


def test_transpose_rejects_wrong_length():
    with pytest.raises(ValueError):
        transpose_edge_values(_graph(), [1.0])


def test_same_seed_same_attention_vectors():
    a = GATAggregator(4, 8, seed=7)
    b = GATAggregator(4, 8, seed=7)
    assert np.array_equal(a.alpha_l, b.alpha_l)
    assert np.array_equal(a.alpha_r, b.alpha_r)
    limit = np.sqrt(6.0 / 5)
    assert np.all(np.abs(a.alpha_l) <= limit)


def test_aggregate_scores_normalised_per_vertex():
    g = _graph()
    rng = np.random.default_rng(1)
    feats = rng.normal(size=(5, 3))
    agg = GATAggregator(3, g.num_edges(), seed=2)
    out = agg.aggregate(g, feats)
    for v in range(4):
        assert agg.norm_scores[g.edge_begin(v):g.edge_end(v)].sum() == pytest.approx(1.0)
    assert np.allclose(out[4], 0.0)


def test_aggregate_equal_features_are_preserved():
    g = _graph()
    feats = np.tile([1.0, -2.0], (5, 1))
    agg = GATAggregator(2, g.num_edges())
    out = agg.aggregate(g, feats)
    assert np.allclose(out[:4], feats[:4])


def test_aggregate_rejects_bad_shapes():
    g = _graph()
    agg = GATAggregator(3, g.num_edges())
    with pytest.raises(ValueError):
        agg.aggregate(g, np.zeros((5, 2)))
    other = GATAggregator(3, 3)
    with pytest.raises(ValueError):
        other.aggregate(g, np.zeros((5, 3)))


def test_backward_before_aggregate():
    g = _graph()
    agg = GATAggregator(2, g.num_edges())
    with pytest.raises(RuntimeError):
        agg.backward(g, np.zeros((5, 2)), np.zeros((5, 2)))


def test_backward_grad_is_transposed_attention():
    g = _graph()
    rng = np.random.default_rng(3)
    feats = rng.normal(size=(5, 3))
    grad = rng.normal(size=(5, 3))
    agg = GATAggregator(3, g.num_edges(), seed=4)
    agg.aggregate(g, feats)
    dense = np.zeros((5, 5))
    for e, (src, dst) in enumerate(g.edges()):
        dense[src, dst] = agg.norm_scores[e]
    out = agg.backward(g, feats, grad)
    assert np.allclose(out, dense.T @ grad)


def test_backward_attention_gradients_match_finite_difference():
    g = _graph()
    rng = np.random.default_rng(5)
    feats = rng.normal(size=(5, 3))
    grad = rng.normal(size=(5, 3))
    agg = GATAggregator(3, g.num_edges(), seed=6)
    agg.aggregate(g, feats)
    agg.backward(g, feats, grad)

    def loss():
        return float(np.sum(grad * agg.aggregate(g, feats)))

    eps = 1e-6
    for name, analytic in (("alpha_l", agg.alpha_lgrad.copy()), ("alpha_r", agg.alpha_rgrad.copy())):
        vec = getattr(agg, name)
        numeric = np.zeros_like(vec)
        for i in range(vec.size):
            vec[i] += eps
            plus = loss()
            vec[i] -= 2 * eps
            minus = loss()
            vec[i] += eps
            numeric[i] = (plus - minus) / (2 * eps)
        assert np.allclose(analytic, numeric, atol=1e-5)