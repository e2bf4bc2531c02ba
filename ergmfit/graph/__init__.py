"""Graph and attribute store: undirected networks with vertex covariates."""

from ergmfit.graph.construction import build_network, covariates_from_records
from ergmfit.graph.storage import load_network, save_network
from ergmfit.graph.types import Network, dyad_indices

__all__ = [
    "Network",
    "build_network",
    "covariates_from_records",
    "dyad_indices",
    "load_network",
    "save_network",
]
