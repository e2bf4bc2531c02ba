"""Incrementally maintained graph state for the Metropolis-Hastings chain.

Toggling one dyad touches only the rows and columns of its two endpoints:
degrees change by one, and shared-partner counts change for every pair
(i, k) with k a neighbour of j and every pair (j, k) with k a neighbour of
i. The running statistic vector is updated by the toggle's change vector,
so after any sequence of toggles the state equals a full recomputation.
"""

from collections.abc import Sequence

import numpy as np

from ergmfit.errors import InputShapeError
from ergmfit.graph.types import Network
from ergmfit.terms.base import Term


class GraphState:
    """Mutable graph plus the derived quantities terms need.

    Attributes:
        adjacency: int64 symmetric (n, n) adjacency matrix.
        degrees: int64 (n,) vertex degrees.
        shared_partners: int64 (n, n) matrix A @ A with zero diagonal.
        statistics: float64 (p,) current term statistics.
        n_edges: current number of ties.
    """

    def __init__(
        self,
        terms: Sequence[Term],
        adjacency: np.ndarray,
        track_edges: bool = False,
    ) -> None:
        adj = np.array(adjacency, dtype=np.int64)
        if adj.ndim != 2 or adj.shape[0] != adj.shape[1]:
            raise InputShapeError(
                f"Adjacency matrix must be square, got shape {adj.shape}"
            )
        if not np.array_equal(adj, adj.T) or np.any(np.diag(adj)):
            raise InputShapeError(
                "Adjacency matrix must be symmetric with a zero diagonal"
            )

        self.terms = tuple(terms)
        self.n = adj.shape[0]
        self.n_dyads = self.n * (self.n - 1) // 2
        self.adjacency = adj
        self.degrees = adj.sum(axis=1)
        self.shared_partners = adj @ adj
        np.fill_diagonal(self.shared_partners, 0)
        self.n_edges = int(self.degrees.sum()) // 2

        self._edges: list[tuple[int, int]] | None = None
        self._edge_pos: dict[tuple[int, int], int] = {}
        if track_edges:
            rows, cols = np.nonzero(np.triu(adj, k=1))
            self._edges = [(int(i), int(j)) for i, j in zip(rows, cols)]
            self._edge_pos = {e: k for k, e in enumerate(self._edges)}

        self.statistics = self.compute_statistics()

    @classmethod
    def from_network(
        cls, network: Network, terms: Sequence[Term], track_edges: bool = False
    ) -> "GraphState":
        return cls(terms, network.adjacency, track_edges=track_edges)

    @property
    def density(self) -> float:
        return self.n_edges / self.n_dyads if self.n_dyads else 0.0

    def compute_statistics(self) -> np.ndarray:
        """Full recomputation of every term statistic."""
        return np.array([t.statistic(self) for t in self.terms], dtype=np.float64)

    def change_statistics(self, i: int, j: int) -> np.ndarray:
        """Change vector for adding tie i-j (to the graph without it)."""
        return np.array(
            [t.change(self, i, j) for t in self.terms], dtype=np.float64
        )

    def has_edge(self, i: int, j: int) -> bool:
        return bool(self.adjacency[i, j])

    def random_edge(self, rng: np.random.Generator) -> tuple[int, int]:
        """Uniformly chosen existing tie. Requires track_edges=True."""
        if self._edges is None:
            raise RuntimeError("GraphState was created without edge tracking")
        if not self._edges:
            raise ValueError("Graph has no ties to choose from")
        return self._edges[int(rng.integers(len(self._edges)))]

    def toggle(self, i: int, j: int, delta: np.ndarray | None = None) -> None:
        """Flip dyad i-j and update all derived quantities.

        Args:
            i, j: Distinct vertex indices.
            delta: Precomputed change vector from change_statistics(i, j);
                computed here when omitted.
        """
        if i == j:
            raise ValueError("Cannot toggle a self-loop")
        if i > j:
            i, j = j, i
        if delta is None:
            delta = self.change_statistics(i, j)

        adding = not self.adjacency[i, j]
        sign = 1 if adding else -1

        self.statistics += sign * delta

        row_i = self.adjacency[i].copy()
        row_i[j] = 0
        row_j = self.adjacency[j].copy()
        row_j[i] = 0
        sp = self.shared_partners
        sp[i, :] += sign * row_j
        sp[:, i] += sign * row_j
        sp[j, :] += sign * row_i
        sp[:, j] += sign * row_i

        self.adjacency[i, j] = self.adjacency[j, i] = 1 if adding else 0
        self.degrees[i] += sign
        self.degrees[j] += sign
        self.n_edges += sign

        if self._edges is not None:
            if adding:
                self._edge_pos[(i, j)] = len(self._edges)
                self._edges.append((i, j))
            else:
                # Swap-remove to keep uniform edge sampling O(1)
                pos = self._edge_pos.pop((i, j))
                last = self._edges.pop()
                if last != (i, j):
                    self._edges[pos] = last
                    self._edge_pos[last] = pos

    def to_network(self, template: Network) -> Network:
        """Snapshot the current graph on the template's vertex set."""
        return template.with_adjacency(self.adjacency)
