"""Explicit random streams for reproducible chains.

No process-wide seed is ever set. Every chain receives its own
np.random.Generator, derived from a master seed through SeedSequence so
concurrent chains are independent and each is reproducible on its own.
"""

import numpy as np


def make_rng(seed: int | np.random.SeedSequence | None) -> np.random.Generator:
    """Generator for a single chain."""
    return np.random.default_rng(seed)


def spawn_rngs(seed: int | None, n: int) -> list[np.random.Generator]:
    """n independent Generators derived from one master seed.

    Child k is the same for a given (seed, k) regardless of n, so adding
    chains never changes the streams of existing ones.
    """
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}")
    return [np.random.default_rng(child) for child in np.random.SeedSequence(seed).spawn(n)]


def verify_stream_determinism(seed: int, n_streams: int = 3) -> bool:
    """Self-test: re-deriving streams from a seed reproduces their draws.

    Also checks that sibling streams are not identical to each other.
    """
    first = [rng.random(10) for rng in spawn_rngs(seed, n_streams)]
    second = [rng.random(10) for rng in spawn_rngs(seed, n_streams)]
    same = all(np.array_equal(a, b) for a, b in zip(first, second))
    distinct = all(
        not np.array_equal(first[a], first[b])
        for a in range(n_streams)
        for b in range(a + 1, n_streams)
    )
    return same and distinct


def pipeline_streams(
    seed: int | None,
) -> tuple[np.random.Generator, np.random.Generator, np.random.SeedSequence]:
    """Independent streams for the estimation, GOF and simulation stages.

    The simulation stage gets a SeedSequence rather than a Generator so it
    can spawn one child per chain; none of those children coincide with the
    estimation or GOF streams.
    """
    fit_seq, gof_seq, sim_seq = np.random.SeedSequence(seed).spawn(3)
    return np.random.default_rng(fit_seq), np.random.default_rng(gof_seq), sim_seq
