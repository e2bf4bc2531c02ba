"""Build validated networks from adjacency matrices and covariate tables.

Input-graph construction is deliberately separate from modelling: callers
read spreadsheets or other files themselves and hand over a matrix plus
covariates. Repairs applied here (collapsing signed weights, symmetrizing,
dropping self-loops) are logged, shape problems raise InputShapeError.
"""

import logging
from collections.abc import Mapping, Sequence

import numpy as np

from ergmfit.errors import InputShapeError
from ergmfit.graph.types import Network

log = logging.getLogger(__name__)


def _as_covariate_column(name: str, values, n: int) -> np.ndarray:
    column = np.array(values)
    if column.ndim != 1 or column.shape[0] != n:
        raise InputShapeError(
            f"Covariate {name!r} has shape {column.shape}, expected ({n},)"
        )
    if column.dtype.kind not in "biuf":
        column = column.astype(object)
    column.flags.writeable = False
    return column


def build_network(
    adjacency,
    covariates: Mapping[str, Sequence] | None = None,
    vertex_ids: Sequence | None = None,
) -> Network:
    """Create a Network from a square matrix and per-vertex covariate columns.

    Any non-zero entry (including negative weights of a signed network) is a
    tie. Asymmetric input is symmetrized with logical OR; self-loops are
    dropped.

    Args:
        adjacency: Square array-like of shape (n, n).
        covariates: Mapping of covariate name to a length-n sequence,
            row-aligned with the adjacency matrix.
        vertex_ids: Optional vertex identifiers; defaults to "0".."n-1".

    Returns:
        Validated Network.

    Raises:
        InputShapeError: If the matrix is not square or a covariate column
            or the id list does not have one entry per vertex.
    """
    matrix = np.asarray(adjacency)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise InputShapeError(
            f"Adjacency matrix must be square, got shape {matrix.shape}"
        )
    n = matrix.shape[0]

    adj = (matrix != 0).astype(np.uint8)

    n_loops = int(np.trace(adj))
    if n_loops:
        log.warning("Dropping %d self-loops from adjacency input", n_loops)
        np.fill_diagonal(adj, 0)

    if not np.array_equal(adj, adj.T):
        n_asym = int((adj != adj.T).sum()) // 2
        log.warning(
            "Adjacency input is asymmetric in %d dyads; symmetrizing", n_asym
        )
        adj = np.maximum(adj, adj.T)

    if vertex_ids is None:
        ids = tuple(str(i) for i in range(n))
    else:
        ids = tuple(str(v) for v in vertex_ids)
        if len(ids) != n:
            raise InputShapeError(
                f"Got {len(ids)} vertex ids for {n} vertices"
            )
        if len(set(ids)) != n:
            raise InputShapeError("Vertex ids must be unique")

    columns = {
        name: _as_covariate_column(name, values, n)
        for name, values in (covariates or {}).items()
    }

    adj.flags.writeable = False
    network = Network(adjacency=adj, covariates=columns, vertex_ids=ids)
    log.debug(
        "Built network: n=%d, edges=%d, density=%.4f, covariates=%s",
        network.n,
        network.n_edges,
        network.density,
        sorted(columns),
    )
    return network


def covariates_from_records(
    records: Mapping[str, Sequence],
    names: Sequence[str],
    vertex_ids: Sequence,
) -> dict[str, list]:
    """Convert a vertex-id -> covariate-tuple mapping into named columns.

    Args:
        records: Mapping from vertex id to a tuple of covariate values.
        names: Covariate names, one per tuple position.
        vertex_ids: Vertex ordering of the adjacency matrix.

    Raises:
        InputShapeError: If a vertex has no record or a tuple has the wrong
            length.
    """
    columns: dict[str, list] = {name: [] for name in names}
    for vid in vertex_ids:
        if vid not in records:
            raise InputShapeError(f"No covariate record for vertex {vid!r}")
        values = tuple(records[vid])
        if len(values) != len(names):
            raise InputShapeError(
                f"Vertex {vid!r} has {len(values)} covariate values, "
                f"expected {len(names)}"
            )
        for name, value in zip(names, values):
            columns[name].append(value)
    return columns
