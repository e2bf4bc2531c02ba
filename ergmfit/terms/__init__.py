"""ERGM term library and dyadic change-statistic features."""

from ergmfit.terms.base import DyadicTerm, Term
from ergmfit.terms.covariate import AbsDiff, Edges, NodeCov, NodeMatch
from ergmfit.terms.features import dyad_features
from ergmfit.terms.registry import build_terms, make_term
from ergmfit.terms.structural import GWDegree, GWESP, KStar, Triangle

__all__ = [
    "AbsDiff",
    "DyadicTerm",
    "Edges",
    "GWDegree",
    "GWESP",
    "KStar",
    "NodeCov",
    "NodeMatch",
    "Term",
    "Triangle",
    "build_terms",
    "dyad_features",
    "make_term",
]
