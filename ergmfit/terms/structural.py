"""Dyad-dependent structural terms: triangles, stars and geometric weights.

Change statistics here are evaluated against the graph with tie i-j
removed. When the tie is present, degrees of i and j and the shared-partner
counts of ties closing a triangle with it are corrected by the tie
indicator a = A[i, j].
"""

import math

import numpy as np
from scipy.special import comb

from ergmfit.terms.base import Term


class Triangle(Term):
    """Number of triangles."""

    name = "triangle"

    def statistic(self, state) -> float:
        upper = np.triu(state.adjacency, k=1)
        return float((upper * state.shared_partners).sum()) / 3.0

    def change(self, state, i: int, j: int) -> float:
        return float(state.shared_partners[i, j])


class KStar(Term):
    """Number of k-stars: sum over vertices of C(degree, k)."""

    name = "kstar"

    def __init__(self, k: int = 2) -> None:
        if k < 1:
            raise ValueError(f"kstar requires k >= 1, got {k}")
        self.k = k

    @property
    def label(self) -> str:
        return f"kstar{self.k}"

    def statistic(self, state) -> float:
        return float(comb(state.degrees, self.k).sum())

    def change(self, state, i: int, j: int) -> float:
        a = int(state.adjacency[i, j])
        di = int(state.degrees[i]) - a
        dj = int(state.degrees[j]) - a
        return float(math.comb(di, self.k - 1) + math.comb(dj, self.k - 1))


class GWESP(Term):
    """Geometrically weighted edgewise shared partners with fixed decay.

    statistic = e^a * sum over ties (1 - r^sp_ij), r = 1 - e^-a

    Adding tie i-j contributes its own weight plus, for every common
    neighbour k, the marginal gain r^sp on ties i-k and j-k whose
    shared-partner count grows by one.
    """

    name = "gwesp"

    def __init__(self, decay: float = 0.5) -> None:
        if decay < 0:
            raise ValueError(f"gwesp decay must be >= 0, got {decay}")
        self.decay = decay
        self._scale = math.exp(decay)
        self._ratio = 1.0 - math.exp(-decay)

    @property
    def label(self) -> str:
        return f"gwesp.fixed.{self.decay:g}"

    def _weight(self, sp) -> np.ndarray:
        return self._scale * (1.0 - self._ratio ** np.asarray(sp, dtype=np.float64))

    def statistic(self, state) -> float:
        ties = np.triu(state.adjacency, k=1).astype(bool)
        return float(self._weight(state.shared_partners[ties]).sum())

    def change(self, state, i: int, j: int) -> float:
        adj = state.adjacency
        sp = state.shared_partners
        a = adj[i, j]
        common = np.flatnonzero(adj[i] & adj[j])
        own = float(self._weight(sp[i, j]))
        if common.size == 0:
            return own
        sp_ik = (sp[i, common] - a).astype(np.float64)
        sp_jk = (sp[j, common] - a).astype(np.float64)
        gain = (self._ratio**sp_ik).sum() + (self._ratio**sp_jk).sum()
        return own + float(gain)


class GWDegree(Term):
    """Geometrically weighted degree with fixed decay.

    statistic = e^a * sum over vertices (1 - r^d_i), r = 1 - e^-a
    """

    name = "gwdegree"

    def __init__(self, decay: float = 0.5) -> None:
        if decay < 0:
            raise ValueError(f"gwdegree decay must be >= 0, got {decay}")
        self.decay = decay
        self._scale = math.exp(decay)
        self._ratio = 1.0 - math.exp(-decay)

    @property
    def label(self) -> str:
        return f"gwdeg.fixed.{self.decay:g}"

    def statistic(self, state) -> float:
        d = state.degrees.astype(np.float64)
        return float(self._scale * (1.0 - self._ratio**d).sum())

    def change(self, state, i: int, j: int) -> float:
        a = int(state.adjacency[i, j])
        di = int(state.degrees[i]) - a
        dj = int(state.degrees[j]) - a
        return float(self._ratio**di + self._ratio**dj)
