"""Network persistence: sparse adjacency npz plus JSON metadata.

A stored network is a directory holding:
- adjacency.npz: upper-triangle scipy sparse matrix
- metadata.json: vertex ids, covariate columns, edge count, timestamp
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import scipy.sparse

from ergmfit.graph.construction import build_network
from ergmfit.graph.types import Network

log = logging.getLogger(__name__)

REQUIRED_FILES = ("adjacency.npz", "metadata.json")


def _covariate_to_json(column: np.ndarray) -> dict:
    if column.dtype.kind in "biuf":
        return {"dtype": column.dtype.str, "values": column.tolist()}
    # Categorical columns are stored as strings
    return {"dtype": "categorical", "values": [str(v) for v in column]}


def _covariate_from_json(entry: dict) -> np.ndarray:
    if entry["dtype"] == "categorical":
        return np.array(entry["values"], dtype=object)
    return np.array(entry["values"], dtype=np.dtype(entry["dtype"]))


def save_network(network: Network, path: Path | str) -> Path:
    """Save a network to a directory, creating it if needed.

    Returns:
        The directory the network was written to.
    """
    out_dir = Path(path)
    out_dir.mkdir(parents=True, exist_ok=True)

    upper = scipy.sparse.csr_matrix(np.triu(network.adjacency, k=1))
    scipy.sparse.save_npz(str(out_dir / "adjacency.npz"), upper)

    metadata = {
        "n": network.n,
        "n_edges": network.n_edges,
        "vertex_ids": list(network.vertex_ids),
        "covariates": {
            name: _covariate_to_json(column)
            for name, column in network.covariates.items()
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    with open(out_dir / "metadata.json", "w") as f:
        json.dump(metadata, f, indent=2)

    log.info("Network saved to %s", out_dir)
    return out_dir


def load_network(path: Path | str) -> Network | None:
    """Load a network saved by save_network.

    Returns:
        The Network, or None when the directory is missing either file.
    """
    in_dir = Path(path)
    for fname in REQUIRED_FILES:
        if not (in_dir / fname).exists():
            return None

    upper = scipy.sparse.load_npz(str(in_dir / "adjacency.npz")).toarray()
    with open(in_dir / "metadata.json") as f:
        metadata = json.load(f)

    covariates = {
        name: _covariate_from_json(entry)
        for name, entry in metadata["covariates"].items()
    }
    network = build_network(
        upper + upper.T,
        covariates=covariates,
        vertex_ids=metadata["vertex_ids"],
    )
    log.info(
        "Network loaded from %s (n=%d, edges=%d)",
        in_dir,
        network.n,
        network.n_edges,
    )
    return network
