"""Network data structure for the observed and simulated graphs."""

from dataclasses import dataclass, field

import numpy as np


@dataclass(frozen=True)
class Network:
    """Immutable undirected simple graph over a fixed vertex set.

    Holds a dense symmetric 0/1 adjacency matrix (zero diagonal) together
    with per-vertex covariate columns. Uses frozen=True but omits slots=True
    since numpy arrays don't interact well with __slots__. Arrays are marked
    read-only on construction so simulated and observed graphs can share
    covariate columns safely.
    """

    adjacency: np.ndarray  # uint8 array of shape (n, n)
    covariates: dict[str, np.ndarray] = field(default_factory=dict)
    vertex_ids: tuple[str, ...] = ()

    @property
    def n(self) -> int:
        return int(self.adjacency.shape[0])

    @property
    def n_dyads(self) -> int:
        return self.n * (self.n - 1) // 2

    @property
    def n_edges(self) -> int:
        return int(self.adjacency.sum()) // 2

    @property
    def density(self) -> float:
        return self.n_edges / self.n_dyads if self.n_dyads else 0.0

    @property
    def degrees(self) -> np.ndarray:
        return self.adjacency.sum(axis=1).astype(np.int64)

    def edge_list(self) -> np.ndarray:
        """Array of shape (n_edges, 2) with i < j in each row."""
        rows, cols = np.nonzero(np.triu(self.adjacency, k=1))
        return np.column_stack([rows, cols])

    def with_adjacency(self, adjacency: np.ndarray) -> "Network":
        """Return a network on the same vertex set with a different tie set."""
        adj = np.array(adjacency, dtype=np.uint8)
        if adj.shape != self.adjacency.shape:
            raise ValueError(
                f"adjacency shape {adj.shape} does not match vertex set "
                f"of size {self.n}"
            )
        adj.flags.writeable = False
        return Network(
            adjacency=adj, covariates=self.covariates, vertex_ids=self.vertex_ids
        )


def dyad_indices(n: int) -> tuple[np.ndarray, np.ndarray]:
    """Row and column indices of the n(n-1)/2 dyads, ordered with i < j."""
    return np.triu_indices(n, k=1)
