"""Dyad-independent terms: edges and vertex-covariate effects."""

import numpy as np

from ergmfit.graph.types import Network
from ergmfit.terms.base import DyadicTerm, covariate


class Edges(DyadicTerm):
    """Number of ties."""

    name = "edges"

    def __init__(self, network: Network) -> None:
        super().__init__(np.ones((network.n, network.n)))

    def statistic(self, state) -> float:
        return float(state.n_edges)

    def change(self, state, i: int, j: int) -> float:
        return 1.0


class NodeCov(DyadicTerm):
    """Sum over ties of x_i + x_j for a numeric covariate."""

    name = "nodecov"

    def __init__(self, network: Network, attribute: str) -> None:
        x = covariate(network, attribute, numeric=True)
        self.attribute = attribute
        super().__init__(x[:, None] + x[None, :])

    @property
    def label(self) -> str:
        return f"nodecov.{self.attribute}"


class NodeMatch(DyadicTerm):
    """Number of ties between vertices sharing a categorical value."""

    name = "nodematch"

    def __init__(self, network: Network, attribute: str) -> None:
        x = covariate(network, attribute, numeric=False)
        self.attribute = attribute
        super().__init__((x[:, None] == x[None, :]).astype(np.float64))

    @property
    def label(self) -> str:
        return f"nodematch.{self.attribute}"


class AbsDiff(DyadicTerm):
    """Sum over ties of |x_i - x_j|^pow for a numeric covariate."""

    name = "absdiff"

    def __init__(self, network: Network, attribute: str, pow: float = 1.0) -> None:
        x = covariate(network, attribute, numeric=True)
        self.attribute = attribute
        self.pow = pow
        super().__init__(np.abs(x[:, None] - x[None, :]) ** pow)

    @property
    def label(self) -> str:
        if self.pow != 1.0:
            return f"absdiff{self.pow:g}.{self.attribute}"
        return f"absdiff.{self.attribute}"
