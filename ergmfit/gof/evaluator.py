"""Goodness-of-fit evaluation of simulated graphs against an observed graph.

For each statistic the evaluator computes the per-bucket distribution over
the sample set and reports where the observed value falls: its percentile
(scipy.stats.percentileofscore, kind="mean", always in [0, 100]) and a
two-sided Monte-Carlo p-value.
"""

import logging
import warnings
from dataclasses import dataclass
from typing import Any

import numpy as np
from scipy.stats import percentileofscore

from ergmfit.config.experiment import GOF_STATISTICS
from ergmfit.errors import DisconnectedGraphWarning
from ergmfit.estimation.results import ERGMFit
from ergmfit.gof.statistics import (
    degree_distribution,
    degree_labels,
    distance_labels,
    esp_distribution,
    esp_labels,
    geodesic_distribution,
)
from ergmfit.graph.types import Network
from ergmfit.model import ERGModel
from ergmfit.simulation.simulator import SampleSet, simulate

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GOFTable:
    """Observed versus simulated values for one statistic, bucket by bucket."""

    statistic: str
    labels: tuple[str, ...]
    observed: np.ndarray  # (B,)
    simulated: np.ndarray  # (n_sim, B)
    percentiles: np.ndarray  # (B,) in [0, 100]
    p_values: np.ndarray  # (B,) in [0, 1]

    @property
    def sim_min(self) -> np.ndarray:
        return self.simulated.min(axis=0)

    @property
    def sim_mean(self) -> np.ndarray:
        return self.simulated.mean(axis=0)

    @property
    def sim_max(self) -> np.ndarray:
        return self.simulated.max(axis=0)

    def rows(self) -> list[dict[str, Any]]:
        return [
            {
                "bucket": label,
                "observed": float(obs),
                "min": float(lo),
                "mean": float(mean),
                "max": float(hi),
                "percentile": float(pct),
                "p_value": float(p),
            }
            for label, obs, lo, mean, hi, pct, p in zip(
                self.labels,
                self.observed,
                self.sim_min,
                self.sim_mean,
                self.sim_max,
                self.percentiles,
                self.p_values,
            )
        ]


@dataclass(frozen=True)
class GOFReport:
    tables: dict[str, GOFTable]

    def __getitem__(self, statistic: str) -> GOFTable:
        return self.tables[statistic]

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {name: table.rows() for name, table in self.tables.items()}


def _compare(
    statistic: str, labels: list[str], observed: np.ndarray, simulated: np.ndarray
) -> GOFTable:
    observed = np.asarray(observed, dtype=np.float64)
    simulated = np.asarray(simulated, dtype=np.float64)
    percentiles = np.array(
        [
            percentileofscore(simulated[:, b], observed[b], kind="mean")
            for b in range(observed.size)
        ]
    )
    below = (simulated <= observed).mean(axis=0)
    above = (simulated >= observed).mean(axis=0)
    p_values = np.minimum(1.0, 2.0 * np.minimum(below, above))
    return GOFTable(
        statistic=statistic,
        labels=tuple(labels),
        observed=observed,
        simulated=simulated,
        percentiles=percentiles,
        p_values=p_values,
    )


def _distance_with_inf(network: Network) -> tuple[np.ndarray, int]:
    counts, unreachable = geodesic_distribution(network)
    return np.append(counts, unreachable), unreachable


def goodness_of_fit(
    observed: Network,
    sample_set: SampleSet,
    statistics: tuple[str, ...] = GOF_STATISTICS,
    model: ERGModel | None = None,
) -> GOFReport:
    """Compare summary-statistic distributions of simulated and observed graphs.

    Args:
        observed: The observed network.
        sample_set: Simulated networks on the same vertex set.
        statistics: Any of "degree", "esp", "distance", "model".
        model: Needed for "model" to compute the observed term statistics.

    Returns:
        GOFReport with one table per statistic.

    Warns:
        DisconnectedGraphWarning: If any graph has unreachable vertex pairs;
            those pairs are counted in the "inf" distance bucket.
    """
    if len(sample_set) == 0:
        raise ValueError("sample_set is empty")
    for net in sample_set:
        if net.n != observed.n:
            raise ValueError(
                f"Simulated graph has {net.n} vertices, observed has {observed.n}"
            )

    n = observed.n
    tables: dict[str, GOFTable] = {}
    for statistic in statistics:
        if statistic == "degree":
            tables[statistic] = _compare(
                statistic,
                degree_labels(n),
                degree_distribution(observed),
                np.stack([degree_distribution(net) for net in sample_set]),
            )
        elif statistic == "esp":
            tables[statistic] = _compare(
                statistic,
                esp_labels(n),
                esp_distribution(observed),
                np.stack([esp_distribution(net) for net in sample_set]),
            )
        elif statistic == "distance":
            obs_counts, obs_unreachable = _distance_with_inf(observed)
            sims = [_distance_with_inf(net) for net in sample_set]
            unreachable = obs_unreachable + sum(u for _, u in sims)
            if unreachable:
                warnings.warn(
                    f"{unreachable} unreachable vertex pairs across observed "
                    f"and simulated graphs; counted as infinite distance",
                    DisconnectedGraphWarning,
                    stacklevel=2,
                )
            tables[statistic] = _compare(
                statistic,
                distance_labels(n),
                obs_counts,
                np.stack([counts for counts, _ in sims]),
            )
        elif statistic == "model":
            if model is None:
                raise ValueError("The 'model' statistic requires a model")
            tables[statistic] = _compare(
                statistic,
                list(sample_set.coef_names),
                model.statistics(observed.adjacency),
                sample_set.statistics,
            )
        else:
            raise ValueError(f"Unknown GOF statistic {statistic!r}")

    log.info(
        "GOF computed for %s over %d simulated graphs",
        ", ".join(tables),
        len(sample_set),
    )
    return GOFReport(tables=tables)


def gof_for_fit(
    fit: ERGMFit,
    n_sim: int = 100,
    seed=None,
    burn_in: int = 2000,
    interval: int = 50,
    proposal: str = "tnt",
    statistics: tuple[str, ...] = GOF_STATISTICS,
) -> tuple[GOFReport, SampleSet]:
    """Simulate from a fitted model and evaluate its goodness of fit."""
    sample_set = simulate(
        fit.model,
        fit.coefficients,
        n_sim,
        seed=seed,
        burn_in=burn_in,
        interval=interval,
        proposal=proposal,
    )
    report = goodness_of_fit(
        fit.model.network, sample_set, statistics=statistics, model=fit.model
    )
    return report, sample_set
