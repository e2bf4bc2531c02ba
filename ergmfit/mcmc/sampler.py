"""Metropolis-Hastings sampler over graphs on a fixed vertex set.

Each step proposes toggling one dyad and accepts with probability
min(1, q_rev / q_fwd * exp(+/- theta . delta)), where delta is the change
statistic of the dyad and the sign is negative for removing a tie. Two
proposals are supported:

1. "random": a uniformly chosen dyad (symmetric, q_rev / q_fwd = 1)
2. "tnt": tie/no-tie; with probability 1/2 a uniformly chosen existing tie,
   otherwise a uniformly chosen dyad. Mixes much faster on sparse graphs.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from ergmfit.mcmc.state import GraphState

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChainResult:
    """Statistics and optional graphs collected from one chain run.

    Uses frozen=True but omits slots=True since numpy arrays don't interact
    well with __slots__.
    """

    statistics: np.ndarray  # float64 (sample_size, p)
    densities: np.ndarray  # float64 (sample_size,)
    graphs: tuple[np.ndarray, ...] | None  # uint8 adjacency snapshots
    acceptance_rate: float
    n_steps: int


def _random_dyad(n: int, rng: np.random.Generator) -> tuple[int, int]:
    i = int(rng.integers(n))
    j = int(rng.integers(n - 1))
    if j >= i:
        j += 1
    return (i, j) if i < j else (j, i)


def _tnt_probability(n_edges: int, is_edge: bool, n_dyads: int) -> float:
    """Probability that the TNT proposal picks a given dyad."""
    if n_edges == 0:
        return 1.0 / n_dyads
    p = 0.5 / n_dyads
    if is_edge:
        p += 0.5 / n_edges
    return p


def propose(
    state: GraphState, rng: np.random.Generator, proposal: str = "tnt"
) -> tuple[int, int, float]:
    """Draw a dyad to toggle.

    Returns:
        Tuple (i, j, log_q_ratio) with i < j and log_q_ratio the log of the
        Hastings correction q_rev / q_fwd.
    """
    if proposal == "random":
        i, j = _random_dyad(state.n, rng)
        return i, j, 0.0
    if proposal != "tnt":
        raise ValueError(f"Unknown proposal {proposal!r}")

    if state.n_edges > 0 and rng.random() < 0.5:
        i, j = state.random_edge(rng)
    else:
        i, j = _random_dyad(state.n, rng)

    is_edge = state.has_edge(i, j)
    q_fwd = _tnt_probability(state.n_edges, is_edge, state.n_dyads)
    n_edges_after = state.n_edges - 1 if is_edge else state.n_edges + 1
    q_rev = _tnt_probability(n_edges_after, not is_edge, state.n_dyads)
    return i, j, math.log(q_rev) - math.log(q_fwd)


def metropolis_step(
    state: GraphState,
    theta: np.ndarray,
    rng: np.random.Generator,
    proposal: str = "tnt",
) -> bool:
    """Run one Metropolis-Hastings toggle step. Returns True if accepted."""
    i, j, log_q_ratio = propose(state, rng, proposal)
    delta = state.change_statistics(i, j)
    sign = -1.0 if state.has_edge(i, j) else 1.0
    log_alpha = sign * float(theta @ delta) + log_q_ratio
    if log_alpha >= 0.0 or math.log(rng.random()) < log_alpha:
        state.toggle(i, j, delta)
        return True
    return False


def run_chain(
    state: GraphState,
    theta: np.ndarray,
    n_steps: int,
    rng: np.random.Generator,
    proposal: str = "tnt",
) -> int:
    """Advance the chain n_steps toggles in place. Returns accepted count."""
    accepted = 0
    for _ in range(n_steps):
        accepted += metropolis_step(state, theta, rng, proposal)
    return accepted


def sample_chain(
    state: GraphState,
    theta: np.ndarray,
    rng: np.random.Generator,
    burn_in: int,
    interval: int,
    sample_size: int,
    proposal: str = "tnt",
    keep_graphs: bool = False,
    max_steps: int = 10_000_000,
) -> ChainResult:
    """Burn in, then record sample_size states spaced interval steps apart.

    The state is advanced in place, so consecutive calls continue the same
    chain.

    Args:
        state: Chain state; must track edges for the "tnt" proposal.
        theta: Coefficient vector of length p.
        rng: Random stream owned by this chain.
        burn_in: Toggles discarded before the first sample.
        interval: Toggles between consecutive samples.
        sample_size: Number of samples to record.
        proposal: "random" or "tnt".
        keep_graphs: Also keep an adjacency snapshot per sample.
        max_steps: Upper bound on burn_in + interval * sample_size.

    Returns:
        ChainResult with sampled statistics, densities and acceptance rate.

    Raises:
        ValueError: If the run would exceed max_steps or theta has the
            wrong length.
    """
    theta = np.asarray(theta, dtype=np.float64)
    if theta.shape != (len(state.terms),):
        raise ValueError(
            f"theta has shape {theta.shape}, expected ({len(state.terms)},)"
        )
    n_steps = burn_in + interval * sample_size
    if n_steps > max_steps:
        raise ValueError(
            f"Chain run of {n_steps} steps exceeds max_steps={max_steps}"
        )
    if state.n < 2:
        raise ValueError("Cannot sample graphs with fewer than 2 vertices")

    statistics = np.empty((sample_size, len(state.terms)), dtype=np.float64)
    densities = np.empty(sample_size, dtype=np.float64)
    graphs: list[np.ndarray] | None = [] if keep_graphs else None

    accepted = run_chain(state, theta, burn_in, rng, proposal)
    for s in range(sample_size):
        accepted += run_chain(state, theta, interval, rng, proposal)
        statistics[s] = state.statistics
        densities[s] = state.density
        if graphs is not None:
            graphs.append(state.adjacency.astype(np.uint8))

    acceptance_rate = accepted / n_steps if n_steps else 0.0
    log.debug(
        "Chain run: %d steps, acceptance=%.3f, mean density=%.4f",
        n_steps,
        acceptance_rate,
        float(densities.mean()) if sample_size else float("nan"),
    )
    return ChainResult(
        statistics=statistics,
        densities=densities,
        graphs=tuple(graphs) if graphs is not None else None,
        acceptance_rate=acceptance_rate,
        n_steps=n_steps,
    )
