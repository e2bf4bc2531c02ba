"""Graph summary distributions compared in goodness-of-fit checks."""

import numpy as np
from scipy.sparse.csgraph import shortest_path

from ergmfit.graph.types import Network, dyad_indices


def degree_distribution(network: Network) -> np.ndarray:
    """Vertex counts per degree 0..n-1."""
    return np.bincount(network.degrees, minlength=network.n)[: network.n]


def esp_distribution(network: Network) -> np.ndarray:
    """Tie counts per number of edgewise shared partners 0..n-2."""
    adj = network.adjacency.astype(np.int64)
    shared = adj @ adj
    ties = np.triu(adj, k=1).astype(bool)
    size = max(network.n - 1, 1)
    return np.bincount(shared[ties], minlength=size)[:size]


def geodesic_distribution(network: Network) -> tuple[np.ndarray, int]:
    """Dyad counts per geodesic distance 1..n-1, plus the unreachable count.

    Returns:
        Tuple (counts, n_unreachable) where counts[k - 1] is the number of
        dyads at distance k.
    """
    n = network.n
    if n < 2:
        return np.zeros(0, dtype=np.int64), 0
    dist = shortest_path(
        network.adjacency.astype(np.float64), directed=False, unweighted=True
    )
    rows, cols = dyad_indices(n)
    pair_dist = dist[rows, cols]
    finite = np.isfinite(pair_dist)
    counts = np.bincount(
        pair_dist[finite].astype(np.int64), minlength=n
    )[1:n]
    return counts, int((~finite).sum())


def degree_labels(n: int) -> list[str]:
    return [str(k) for k in range(n)]


def esp_labels(n: int) -> list[str]:
    return [str(k) for k in range(max(n - 1, 1))]


def distance_labels(n: int) -> list[str]:
    return [str(k) for k in range(1, n)] + ["inf"]
