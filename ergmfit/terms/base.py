"""Base classes for ERGM terms.

A term maps a graph to a scalar sufficient statistic. Every term also
provides its change statistic: the value with the tie i-j present minus the
value with it absent, all other dyads held at their current state. Terms
read the incrementally maintained adjacency, degrees and shared-partner
matrix of a GraphState, so a change statistic costs O(1) or O(n).
"""

from abc import ABC, abstractmethod

import numpy as np

from ergmfit.errors import InputShapeError
from ergmfit.graph.types import Network


class Term(ABC):
    """A named ERGM statistic bound to a fixed vertex set."""

    name: str = ""
    dyad_independent: bool = False

    @property
    def label(self) -> str:
        """Coefficient name, e.g. "edges" or "nodematch.party"."""
        return self.name

    @abstractmethod
    def statistic(self, state) -> float:
        """Full value of the statistic for the state's current graph."""

    @abstractmethod
    def change(self, state, i: int, j: int) -> float:
        """Change in the statistic from adding tie i-j to the graph without it."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.label})"


class DyadicTerm(Term):
    """Term whose statistic is a sum of fixed per-dyad values over ties.

    The change statistic of a dyad does not depend on the rest of the graph,
    so the whole model stays dyad-independent when only these terms are used.
    """

    dyad_independent = True

    def __init__(self, values: np.ndarray) -> None:
        values = np.array(values, dtype=np.float64)
        np.fill_diagonal(values, 0.0)
        values.flags.writeable = False
        self._values = values

    @property
    def dyad_values(self) -> np.ndarray:
        """Symmetric (n, n) matrix of per-dyad values, zero diagonal."""
        return self._values

    def statistic(self, state) -> float:
        return float((np.triu(state.adjacency, k=1) * self._values).sum())

    def change(self, state, i: int, j: int) -> float:
        return float(self._values[i, j])


def covariate(network: Network, attribute: str | None, numeric: bool) -> np.ndarray:
    """Look up a covariate column for a term.

    Raises:
        InputShapeError: If the attribute is missing from the network.
        ValueError: If a numeric column is required but the column is
            categorical.
    """
    if attribute is None:
        raise ValueError("This term requires a covariate attribute")
    if attribute not in network.covariates:
        raise InputShapeError(
            f"Covariate {attribute!r} not found; available: "
            f"{sorted(network.covariates)}"
        )
    column = network.covariates[attribute]
    if numeric:
        if column.dtype.kind not in "biuf":
            raise ValueError(f"Covariate {attribute!r} must be numeric")
        return column.astype(np.float64)
    return column
