"""Construct bound Term objects from TermConfig specifications."""

from collections.abc import Iterable

from ergmfit.config.experiment import TermConfig
from ergmfit.graph.types import Network
from ergmfit.terms.base import Term
from ergmfit.terms.covariate import AbsDiff, Edges, NodeCov, NodeMatch
from ergmfit.terms.structural import GWDegree, GWESP, KStar, Triangle

DEFAULT_DECAY = 0.5


def make_term(spec: TermConfig, network: Network) -> Term:
    """Build one term for the given network.

    Raises:
        ValueError: For an unknown term name or invalid term parameters.
        InputShapeError: If a covariate the term needs is missing.
    """
    name = spec.name
    if name == "edges":
        return Edges(network)
    if name == "nodecov":
        return NodeCov(network, spec.attribute)
    if name == "nodematch":
        return NodeMatch(network, spec.attribute)
    if name == "absdiff":
        return AbsDiff(network, spec.attribute, pow=spec.pow or 1.0)
    if name == "triangle":
        return Triangle()
    if name == "kstar":
        return KStar(spec.k if spec.k is not None else 2)
    if name == "gwesp":
        return GWESP(spec.decay if spec.decay is not None else DEFAULT_DECAY)
    if name == "gwdegree":
        return GWDegree(spec.decay if spec.decay is not None else DEFAULT_DECAY)
    raise ValueError(f"Unknown term {name!r}")


def build_terms(specs: Iterable[TermConfig], network: Network) -> tuple[Term, ...]:
    terms = tuple(make_term(spec, network) for spec in specs)
    labels = [t.label for t in terms]
    duplicates = {label for label in labels if labels.count(label) > 1}
    if duplicates:
        raise ValueError(f"Duplicate model terms: {sorted(duplicates)}")
    return terms
