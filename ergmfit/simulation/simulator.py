"""Draw graphs from an ERGM with fixed coefficients.

A single chain is a pure function of (model, coefficients, seed, burn-in,
interval, n_sim): it starts at the model's observed graph, burns in, and
keeps every interval-th state. Independent chains get their own streams
from np.random.SeedSequence.spawn and may run in separate processes;
results are concatenated in chain order so the output does not depend on
the worker count.
"""

import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Any

import numpy as np

from ergmfit.graph.types import Network
from ergmfit.mcmc.sampler import sample_chain
from ergmfit.model import ERGModel

log = logging.getLogger(__name__)

SeedLike = int | np.random.SeedSequence | np.random.Generator | None


@dataclass(frozen=True)
class SampleSet:
    """Ordered simulated graphs with their term statistics.

    Independent of the model after creation. Uses frozen=True but omits
    slots=True since numpy arrays don't interact well with __slots__.
    """

    networks: tuple[Network, ...]
    statistics: np.ndarray  # float64 (n_sim, p)
    coef_names: tuple[str, ...]
    coefficients: tuple[float, ...]
    acceptance_rate: float

    def __len__(self) -> int:
        return len(self.networks)

    def __iter__(self):
        return iter(self.networks)

    def __getitem__(self, index: int) -> Network:
        return self.networks[index]

    def adjacency_stack(self) -> np.ndarray:
        """uint8 array of shape (n_sim, n, n)."""
        return np.stack([net.adjacency for net in self.networks])

    def mean_statistics(self) -> np.ndarray:
        return self.statistics.mean(axis=0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "n_sim": len(self),
            "coef_names": list(self.coef_names),
            "coefficients": list(self.coefficients),
            "acceptance_rate": self.acceptance_rate,
            "mean_statistics": self.mean_statistics().tolist(),
            "edge_counts": [net.n_edges for net in self.networks],
        }


def simulate(
    model: ERGModel,
    coefficients,
    n_sim: int,
    seed: SeedLike = None,
    burn_in: int = 2000,
    interval: int = 50,
    proposal: str = "tnt",
    start: np.ndarray | None = None,
    max_steps: int = 10_000_000,
) -> SampleSet:
    """Simulate n_sim graphs from the ERGM at the given coefficients.

    Args:
        model: Terms bound to the vertex set to simulate on.
        coefficients: Coefficient vector, one entry per term.
        n_sim: Number of graphs to return.
        seed: Seed, SeedSequence or Generator for this chain's stream.
        burn_in: Toggles discarded before the first kept graph.
        interval: Toggles between kept graphs.
        proposal: "random" or "tnt".
        start: Starting adjacency; the model's observed graph by default.
        max_steps: Cap on total toggles.

    Returns:
        SampleSet of n_sim networks sharing the model's vertex set.
    """
    theta = np.asarray(coefficients, dtype=np.float64)
    if n_sim < 1:
        raise ValueError(f"n_sim must be >= 1, got {n_sim}")
    rng = np.random.default_rng(seed)
    state = model.new_state(start, track_edges=proposal == "tnt")

    chain = sample_chain(
        state,
        theta,
        rng,
        burn_in=burn_in,
        interval=interval,
        sample_size=n_sim,
        proposal=proposal,
        keep_graphs=True,
        max_steps=max_steps,
    )
    networks = tuple(model.network.with_adjacency(g) for g in chain.graphs)
    log.info(
        "Simulated %d graphs (mean edges %.1f, acceptance %.3f)",
        n_sim,
        float(np.mean([net.n_edges for net in networks])),
        chain.acceptance_rate,
    )
    return SampleSet(
        networks=networks,
        statistics=chain.statistics,
        coef_names=model.coef_names,
        coefficients=tuple(float(t) for t in theta),
        acceptance_rate=chain.acceptance_rate,
    )


def _simulate_worker(kwargs: dict[str, Any]) -> SampleSet:
    return simulate(**kwargs)


def simulate_chains(
    model: ERGModel,
    coefficients,
    n_chains: int,
    n_per_chain: int,
    seed: int | np.random.SeedSequence | None = None,
    burn_in: int = 2000,
    interval: int = 50,
    proposal: str = "tnt",
    max_workers: int | None = 1,
    n_total: int | None = None,
) -> SampleSet:
    """Run independent chains and concatenate their samples in chain order.

    Each chain gets its own child SeedSequence spawned from `seed`, so the
    result is identical for any max_workers. With max_workers == 1 chains
    run sequentially in this process. When n_total is given the
    concatenation is cut to its first n_total graphs, so n_per_chain may be
    rounded up to cover it.
    """
    if n_chains < 1:
        raise ValueError(f"n_chains must be >= 1, got {n_chains}")
    if n_total is not None and not 1 <= n_total <= n_chains * n_per_chain:
        raise ValueError(
            f"n_total ({n_total}) must lie in [1, {n_chains * n_per_chain}]"
        )
    root = seed if isinstance(seed, np.random.SeedSequence) else np.random.SeedSequence(seed)
    jobs = [
        {
            "model": model,
            "coefficients": np.asarray(coefficients, dtype=np.float64),
            "n_sim": n_per_chain,
            "seed": child,
            "burn_in": burn_in,
            "interval": interval,
            "proposal": proposal,
        }
        for child in root.spawn(n_chains)
    ]

    if max_workers == 1 or n_chains == 1:
        results = [_simulate_worker(job) for job in jobs]
    else:
        with ProcessPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(_simulate_worker, jobs))

    total_steps = [len(r) for r in results]
    acceptance = float(
        np.average([r.acceptance_rate for r in results], weights=total_steps)
    )
    networks = tuple(net for r in results for net in r.networks)
    statistics = np.concatenate([r.statistics for r in results], axis=0)
    if n_total is not None:
        networks = networks[:n_total]
        statistics = statistics[:n_total]
    log.info("Combined %d chains into %d graphs", n_chains, len(networks))
    return SampleSet(
        networks=networks,
        statistics=statistics,
        coef_names=model.coef_names,
        coefficients=results[0].coefficients,
        acceptance_rate=acceptance,
    )
