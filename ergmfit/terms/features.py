"""Dyadic feature builder: change statistics for every dyad of a graph."""

import numpy as np

from ergmfit.graph.types import dyad_indices


def dyad_features(state) -> tuple[np.ndarray, np.ndarray]:
    """Change-statistic matrix of all dyads under the state's term list.

    Row d holds, for dyad (i, j), the change in every term when tie i-j is
    added to the current graph with that tie removed. Covariate terms give
    their fixed per-dyad value; structural terms give the increment implied
    by toggling the dyad.

    Args:
        state: GraphState holding the graph and its terms.

    Returns:
        Tuple of (dyads, features): dyads of shape (D, 2) with i < j and
        features of shape (D, p).
    """
    rows, cols = dyad_indices(state.n)
    n_terms = len(state.terms)
    features = np.empty((rows.size, n_terms), dtype=np.float64)

    for col, term in enumerate(state.terms):
        if term.dyad_independent:
            features[:, col] = term.dyad_values[rows, cols]
        else:
            features[:, col] = [
                term.change(state, int(i), int(j)) for i, j in zip(rows, cols)
            ]

    return np.column_stack([rows, cols]), features
