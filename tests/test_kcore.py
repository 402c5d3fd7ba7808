import numpy as np

from graphkit.graph import CSRGraph
from graphkit.grformat import write_binary_graph
from graphkit.kcore import kcore_decomposition, main


def undirected(n, pairs):
    adj = [set() for _ in range(n)]
    for a, b in pairs:
        adj[a].add(b)
        adj[b].add(a)
    return CSRGraph.from_adjacency([sorted(row) for row in adj])


def test_triangle_with_pendant():
    g = undirected(4, [(0, 1), (1, 2), (0, 2), (2, 3)])
    coreness, largest = kcore_decomposition(g)
    assert coreness.tolist() == [2, 2, 2, 1]
    assert largest == 2


def test_complete_graph():
    n = 5
    g = undirected(n, [(a, b) for a in range(n) for b in range(a + 1, n)])
    coreness, largest = kcore_decomposition(g)
    assert set(coreness.tolist()) == {n - 1}
    assert largest == n - 1


def test_empty_graph():
    coreness, largest = kcore_decomposition(CSRGraph([0], []))
    assert coreness.size == 0
    assert largest == -1


def test_core_invariants():
    rng = np.random.default_rng(7)
    n = 30
    pairs = {tuple(sorted(p)) for p in rng.integers(0, n, size=(80, 2)).tolist() if p[0] != p[1]}
    g = undirected(n, pairs)
    coreness, largest = kcore_decomposition(g)
    assert largest == int(coreness.max())
    for v in range(n):
        assert coreness[v] <= g.degree(v)
    for c in range(largest + 1):
        inside = coreness >= c
        for v in np.flatnonzero(inside):
            assert int(inside[g.neighbors(v)].sum()) >= c


def test_main_prints_largest_core(tmp_path, capsys):
    g = undirected(4, [(0, 1), (1, 2), (0, 2), (2, 3)])
    prefix = tmp_path / "g"
    write_binary_graph(g, prefix)
    assert main([str(prefix)]) == 0
    _, largest = kcore_decomposition(g)
    assert f"largestCore = {largest}" in capsys.readouterr().out


def test_main_usage():
    assert main([]) == 1