"""ERGM specification: an ordered term list bound to an observed network."""

from dataclasses import dataclass

import numpy as np

from ergmfit.config.experiment import ModelConfig
from ergmfit.graph.types import Network
from ergmfit.mcmc.state import GraphState
from ergmfit.terms.base import Term
from ergmfit.terms.registry import build_terms


@dataclass(frozen=True)
class ERGModel:
    """Terms bound to the vertex set and covariates of an observed network."""

    network: Network
    terms: tuple[Term, ...]

    @classmethod
    def from_config(cls, network: Network, config: ModelConfig) -> "ERGModel":
        return cls(network=network, terms=build_terms(config.terms, network))

    @property
    def coef_names(self) -> tuple[str, ...]:
        return tuple(t.label for t in self.terms)

    @property
    def n_terms(self) -> int:
        return len(self.terms)

    @property
    def is_dyad_independent(self) -> bool:
        return all(t.dyad_independent for t in self.terms)

    def new_state(
        self, adjacency: np.ndarray | None = None, track_edges: bool = True
    ) -> GraphState:
        """Chain state starting at the given graph (the observed one by default)."""
        start = self.network.adjacency if adjacency is None else adjacency
        return GraphState(self.terms, start, track_edges=track_edges)

    def statistics(self, adjacency: np.ndarray | None = None) -> np.ndarray:
        """Full statistic vector g(y) for a graph on this vertex set."""
        return self.new_state(adjacency, track_edges=False).statistics

    @property
    def observed_statistics(self) -> np.ndarray:
        return self.statistics()
