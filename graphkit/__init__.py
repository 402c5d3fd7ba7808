"""CSR graphs and file formats, k-core decomposition, matrix-completion embeddings and GNN helpers."""

__version__ = "0.1.0"

__all__ = [
    "aggregators",
    "converter",
    "embedding",
    "gat",
    "gnn_data",
    "graph",
    "grformat",
    "kcore",
    "sampler",
    "textformats",
]