# graphkit

Tools for sparse graphs held in CSR (compressed sparse row) form:

- reading Matrix Market (`.mtx`), plain 1-based edge lists, `.lg` files and
  labelled adjacency files, and the binary `.gr` format;
- writing graphs as binary `<prefix>.vertex.bin` / `<prefix>.edge.bin` pairs,
  with optional `.vlabel.bin` and `.elabel.bin` files;
- k-core decomposition;
- matrix-completion embeddings fitted by gradient descent on rating graphs;
- building blocks for graph neural networks: dataset readers, normalisation
  scores, subgraph sampling and GCN, GraphSAGE and attention aggregation.

The only runtime dependency is NumPy.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command line

### graphkit-convert

```
graphkit-convert <file_type> <input_file> <output_prefix> [is_bipartite] [write_vlabel] [write_elabel]
```

For `gr`, `sgr` and `csgr` input the file is split as it is into
`<prefix>.vertex.bin` (row pointers, starting with 0, as little-endian
64-bit integers) and `<prefix>.edge.bin` (column indices as little-endian
32-bit integers). Any other type is loaded (`mtx`, `edges`, and anything
else read as `.lg`) and written in the same layout; the flags `0`/`1` choose
whether a Matrix Market file is bipartite and whether vertex and edge label
files are written, where the input has them. Errors are reported on standard
error with exit status 1.

```
graphkit-convert gr input.gr out/graph
graphkit-convert mtx ratings.mtx out/ratings 1 0 1
```

### graphkit-kcore

```
graphkit-kcore <prefix>
```

Reads `<prefix>.vertex.bin` and `<prefix>.edge.bin`, runs a k-core
decomposition (the graph is assumed symmetric) and prints the largest core
number. Two further arguments are accepted and ignored.

## Library use

### Graphs

```python
from graphkit.graph import CSRGraph, EdgeList

g = CSRGraph.from_adjacency([[1, 2], [0, 2], [0, 1, 3], [2]])
print(g.num_vertices(), g.num_edges(), g.max_degree())
print(list(g.neighbors(2)), list(g.edges())[:3])

edges = EdgeList(g)
print(len(edges), edges.src(0), edges.dst(0))
```

`graphkit.graph` also has the `Edge` and `WeightedEdge` records.

### Reading and writing files

- `graphkit.textformats`: `read_mtx(path, is_bipartite)`, `read_edgelist`,
  `read_lg`, `read_sadj`, each returning a `ParsedGraph` (graph, optional edge
  weights, vertex labels); self-loops and duplicate edges are dropped. Also
  `split_tokens`, `count_degrees`, `adjlist_to_csr`,
  `weighted_adjlist_to_csr` and `weighted_edgelist_to_csr`.
- `graphkit.grformat`: `read_gr(path, need_sort)`, `write_gr`,
  `split_gr_file`, `write_binary_graph`, `read_binary_graph`, and
  `read_labels` / `read_masks` for label and mask text files.
- `graphkit.converter`: `load_graph(file_type, path, is_bipartite)` returns a
  `ConvertedGraph` whose `write(out_prefix, write_vlabels, write_elabels)`
  writes the binary files.

Malformed input raises `graphkit.textformats.FormatError` or
`graphkit.grformat.GRFormatError`, both subclasses of `ValueError`.

### Core numbers

```python
from graphkit.kcore import kcore_decomposition

coreness, largest = kcore_decomposition(g)
```

### Matrix completion

```python
from graphkit.embedding import SGDParams, initialize_latents, sgd_train

latents = initialize_latents(g.num_vertices(), k=20)
ratings = [1.0] * g.num_edges()
latents, iterations, history = sgd_train(g, ratings, latents, SGDParams(max_iters=5))
```

`history` holds the RMSE of each iteration when `compute_error` is on;
training stops after `max_iters` or once the RMSE drops below `epsilon`.
Every row from `initialize_latents` is the same sequence of uniform values.

### Graph neural network helpers

- `graphkit.gnn_data.DatasetReader(path, dataset)` reads
  `<dataset>-labels.txt`, features (`<dataset>.ft`, or `-dims.txt` with
  `-feats.bin`), `<dataset>-<type>_mask.txt` and `<dataset>.csgr`;
  `vertex_norms` and `edge_norms` give GCN normalisation scores.
- `graphkit.sampler`: `Sampler(full_graph, train_masks, frontier_size,
  sample_clip)` with `select_vertices(n, seed)` and
  `generate_subgraph(sampled)`, plus `create_masks`, `masked_degrees`,
  `masked_graph` and `reindex_subgraph`.
- `graphkit.aggregators`: `gcn_aggregate`, `sage_aggregate`, `sage_backward`.
- `graphkit.gat`: `GATAggregator` with `aggregate` and `backward`, and the
  helpers `leaky_relu`, `softmax`, `softmax_backward`,
  `transpose_edge_values`.

## What the package does not do

- There is no complete GNN model, layer stack, optimiser or training command;
  only the data, sampling and aggregation pieces above.
- There is no command for matrix completion; use `sgd_train` from Python.
- There are no commands to symmetrize, orient or clean graphs, and no GPU or
  multi-threaded execution.