"""Incremental graph state and Metropolis-Hastings sampling over graphs."""

from ergmfit.mcmc.sampler import (
    ChainResult,
    metropolis_step,
    propose,
    run_chain,
    sample_chain,
)
from ergmfit.mcmc.state import GraphState

__all__ = [
    "ChainResult",
    "GraphState",
    "metropolis_step",
    "propose",
    "run_chain",
    "sample_chain",
]
