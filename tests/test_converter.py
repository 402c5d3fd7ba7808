from pathlib import Path

import numpy as np

from graphkit.converter import ConvertedGraph, load_graph, main
from graphkit.graph import CSRGraph
from graphkit.grformat import read_binary_graph, write_gr


def write_mtx(path, field, rows):
    path.write_text(
        f"%%MatrixMarket matrix coordinate {field} symmetric\n"
        "% comment\n3 3 2\n" + "\n".join(rows) + "\n"
    )


def test_load_mtx_symmetric(tmp_path):
    path = tmp_path / "g.mtx"
    write_mtx(path, "pattern", ["1 2", "2 3"])
    converted = load_graph("mtx", path)
    assert set(converted.graph.edges()) == {(0, 1), (1, 0), (1, 2), (2, 1)}
    assert converted.edge_weights is None


def test_load_gr_sorts_neighbors(tmp_path):
    g = CSRGraph.from_adjacency([[2, 1], [0], [0]])
    path = tmp_path / "g.gr"
    write_gr(g, path)
    converted = load_graph("gr", path)
    for v in range(g.num_vertices()):
        assert converted.graph.neighbors(v).tolist() == sorted(g.neighbors(v).tolist())


def test_load_edges_is_undirected(tmp_path):
    path = tmp_path / "g.edges"
    path.write_text("1 2\n2 3\n")
    graph = load_graph("edges", path).graph
    pairs = set(graph.edges())
    assert all((b, a) in pairs for a, b in pairs)
    assert graph.num_vertices() == 3


def test_unknown_type_reads_lg(tmp_path):
    path = tmp_path / "g.lg"
    path.write_text("t # 0\nv 0 1\nv 1 1\ne 0 1 5\n")
    converted = load_graph("lg", path)
    assert set(converted.graph.edges()) == {(0, 1), (1, 0)}
    assert len(converted.vertex_labels) == converted.graph.num_vertices()


def test_main_splits_gr(tmp_path):
    g = CSRGraph.from_adjacency([[1, 2], [0], [0]])
    gr = tmp_path / "g.gr"
    write_gr(g, gr)
    prefix = tmp_path / "out"
    assert main(["gr", str(gr), str(prefix)]) == 0
    assert read_binary_graph(prefix) == g


def test_main_mtx_with_edge_labels(tmp_path):
    path = tmp_path / "g.mtx"
    write_mtx(path, "real", ["1 2 0.5", "2 3 1.5"])
    prefix = tmp_path / "out"
    assert main(["mtx", str(path), str(prefix), "0", "0", "1"]) == 0
    expected = load_graph("mtx", path)
    assert read_binary_graph(prefix) == expected.graph
    stored = np.fromfile(f"{prefix}.elabel.bin", dtype="<f4")
    assert np.array_equal(stored, expected.edge_weights)


def test_write_without_weights_skips_elabel(tmp_path):
    converted = ConvertedGraph(CSRGraph.from_adjacency([[1], [0]]))
    written = converted.write(tmp_path / "x")
    assert not Path(f"{tmp_path / 'x'}.elabel.bin").exists()
    assert all(p.exists() for p in written)


def test_main_usage():
    assert main(["gr"]) == 1


def test_main_missing_input(tmp_path):
    assert main(["gr", str(tmp_path / "missing.gr"), str(tmp_path / "out")]) == 1