import numpy as np
import pytest

from graphkit.aggregators import gcn_aggregate, sage_aggregate, sage_backward
from graphkit.gnn_data import vertex_norms
from graphkit.graph import CSRGraph


def symmetric(num_vertices, pairs):
    rows = [set() for _ in range(num_vertices)]
    for a, b in pairs:
        rows[a].add(b)
        rows[b].add(a)
    return CSRGraph.from_adjacency([sorted(r) for r in rows])


@pytest.fixture
def graph():
    return symmetric(6, [(0, 1), (1, 2), (2, 3), (0, 3), (1, 3), (3, 4)])


@pytest.fixture
def features():
    rng = np.random.default_rng(4)
    return rng.standard_normal((6, 3)).astype(np.float32)


def test_gcn_unit_norms_counts_degrees(graph):
    out = gcn_aggregate(graph, np.ones(6), np.ones((6, 1)))
    assert out[:, 0].tolist() == graph.degrees().astype(float).tolist()


def test_gcn_regular_graph_preserves_constants():
    cycle = symmetric(5, [(i, (i + 1) % 5) for i in range(5)])
    out = gcn_aggregate(cycle, vertex_norms(cycle), np.full((5, 2), 3.0))
    assert np.allclose(out, 3.0)


def test_gcn_is_linear(graph, features):
    norms = vertex_norms(graph)
    other = features[::-1].copy()
    combined = gcn_aggregate(graph, norms, 2 * features + other)
    separate = 2 * gcn_aggregate(graph, norms, features) + gcn_aggregate(graph, norms, other)
    assert np.allclose(combined, separate, atol=1e-5)


def test_gcn_is_self_adjoint(graph, features):
    norms = vertex_norms(graph)
    y = features[:, ::-1].copy()
    lhs = np.sum(gcn_aggregate(graph, norms, features) * y)
    rhs = np.sum(features * gcn_aggregate(graph, norms, y))
    assert lhs == pytest.approx(rhs, rel=1e-4)


def test_gcn_rejects_bad_shapes(graph):
    with pytest.raises(ValueError):
        gcn_aggregate(graph, np.ones(6), np.ones((5, 2)))
    with pytest.raises(ValueError):
        gcn_aggregate(graph, np.ones(4), np.ones((6, 2)))


def test_sage_mean_of_constants(graph):
    out = sage_aggregate(graph, np.full((6, 2), 5.0))
    assert np.allclose(out[:5], 5.0)
    assert out[5].tolist() == [0.0, 0.0]


def test_sage_path_mean():
    path = symmetric(3, [(0, 1), (1, 2)])
    out = sage_aggregate(path, [[1.0], [2.0], [3.0]])
    assert out[:, 0].tolist() == [2.0, 2.0, 2.0]


def test_sage_backward_is_adjoint(graph, features):
    y = np.roll(features, 1, axis=0)
    lhs = np.sum(sage_aggregate(graph, features) * y)
    rhs = np.sum(features * sage_backward(graph, y))
    assert lhs == pytest.approx(rhs, rel=1e-4)


def test_sage_backward_shape_preserved(graph, features):
    assert sage_backward(graph, features).shape == features.shape
    assert sage_backward(graph, features)[5].tolist() == [0.0, 0.0, 0.0]


def test_sage_rejects_one_dimensional(graph):
    with pytest.raises(ValueError):
        sage_aggregate(graph, np.ones(6))