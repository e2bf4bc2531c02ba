"""Fitted-model containers: per-iteration trace and the immutable ERGMFit."""

from dataclasses import dataclass
from typing import Any

import numpy as np
from scipy.stats import norm

from ergmfit.model import ERGModel


@dataclass(frozen=True, slots=True)
class IterationRecord:
    """One MCMC-MLE iteration: where theta was and how far the sample sat."""

    iteration: int
    theta: tuple[float, ...]
    mean_statistics: tuple[float, ...]
    distance: float  # Mahalanobis distance of observed from sampled mean
    step_norm: float
    acceptance_rate: float
    mean_density: float


@dataclass(frozen=True)
class ERGMFit:
    """Immutable result of fitting an ERGM.

    Uses frozen=True but omits slots=True since numpy arrays don't interact
    well with __slots__. Coefficient arrays are made read-only.
    """

    model: ERGModel
    coefficients: np.ndarray
    std_errors: np.ndarray
    covariance: np.ndarray
    method: str  # "mple" or "mcmcmle"
    iterations: int
    converged: bool
    trace: tuple[IterationRecord, ...] = ()
    loglik: float | None = None  # exact only for dyad-independent models
    initial_coefficients: tuple[float, ...] | None = None

    def __post_init__(self) -> None:
        for arr in (self.coefficients, self.std_errors, self.covariance):
            arr.flags.writeable = False

    @property
    def coef_names(self) -> tuple[str, ...]:
        return self.model.coef_names

    @property
    def aic(self) -> float | None:
        if self.loglik is None:
            return None
        return -2.0 * self.loglik + 2.0 * len(self.coefficients)

    @property
    def bic(self) -> float | None:
        if self.loglik is None:
            return None
        n_obs = self.model.network.n_dyads
        return -2.0 * self.loglik + len(self.coefficients) * np.log(n_obs)

    def coef(self) -> dict[str, float]:
        return dict(zip(self.coef_names, self.coefficients.tolist()))

    def summary(self) -> list[dict[str, float | str]]:
        """Coefficient table: estimate, std. error, z value and Pr(>|z|)."""
        rows = []
        for name, est, se in zip(self.coef_names, self.coefficients, self.std_errors):
            z = est / se if se > 0 else float("nan")
            p = 2.0 * norm.sf(abs(z)) if np.isfinite(z) else float("nan")
            rows.append(
                {
                    "term": name,
                    "estimate": float(est),
                    "std_error": float(se),
                    "z_value": float(z),
                    "p_value": float(p),
                }
            )
        return rows

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "converged": self.converged,
            "iterations": self.iterations,
            "coefficients": self.coef(),
            "summary": self.summary(),
            "covariance": self.covariance.tolist(),
            "initial_coefficients": self.initial_coefficients,
            "loglik": self.loglik,
            "aic": self.aic,
            "bic": self.bic,
            "trace": [
                {
                    "iteration": r.iteration,
                    "theta": list(r.theta),
                    "distance": r.distance,
                    "step_norm": r.step_norm,
                    "acceptance_rate": r.acceptance_rate,
                    "mean_density": r.mean_density,
                }
                for r in self.trace
            ],
        }
