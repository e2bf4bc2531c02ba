"""MCMC maximum likelihood estimation (Geyer-Thompson / Hunter-Handcock).

Each iteration samples graphs from the ERGM at the current theta, compares
the sampled mean statistics with the observed statistics, and takes a
damped Newton step

    theta <- theta + damping * Cov^-1 (g(y_obs) - mean)

using the sampled covariance as the (negated) Hessian of the log-likelihood.
The chain persists across iterations so each one starts near stationarity.
"""

import logging

import numpy as np

from ergmfit.config.defaults import DEFAULT_CONFIG
from ergmfit.config.experiment import FitConfig
from ergmfit.errors import DegenerateModelError, NonConvergenceError
from ergmfit.estimation.mple import check_observed_graph, fit_mple
from ergmfit.estimation.results import ERGMFit, IterationRecord
from ergmfit.mcmc.sampler import sample_chain
from ergmfit.model import ERGModel

log = logging.getLogger(__name__)


def _sample_moments(statistics: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    mean = statistics.mean(axis=0)
    cov = np.atleast_2d(np.cov(statistics, rowvar=False))
    return mean, cov


def _check_degeneracy(
    model: ERGModel, densities: np.ndarray, theta: np.ndarray, threshold: float
) -> None:
    """Raise if the sampled graphs have collapsed toward empty or complete."""
    observed = model.network.density
    mean_density = float(densities.mean())
    lower = 1.0 - threshold
    if not lower < observed < threshold:
        return
    if mean_density >= threshold or mean_density <= lower:
        raise DegenerateModelError(
            f"Sampled graphs collapsed to mean density {mean_density:.4f} "
            f"(observed {observed:.4f}) at theta={np.round(theta, 4).tolist()}",
            theta=theta.copy(),
        )


def _stuck_terms(
    observed: np.ndarray, mean: np.ndarray, cov: np.ndarray, var_tol: float = 1e-10
) -> np.ndarray:
    """Indices of terms the chain never varied while missing the observed value.

    pinv(Cov) gives such a term a zero step and a zero standard error.
    """
    constant = np.diag(cov) <= var_tol
    missed = ~np.isclose(observed, mean, rtol=1e-8, atol=1e-8)
    return np.flatnonzero(constant & missed)


def _is_drifting(distances: list[float], window: int) -> bool:
    """True when the last `window` distances each grew and exceed the first."""
    if window < 1 or len(distances) < window + 1:
        return False
    recent = distances[-(window + 1):]
    growing = all(b > a for a, b in zip(recent, recent[1:]))
    return growing and recent[-1] > distances[0]


def fit_mcmcmle(
    model: ERGModel,
    config: FitConfig = DEFAULT_CONFIG,
    rng: np.random.Generator | None = None,
    init: np.ndarray | None = None,
) -> ERGMFit:
    """Fit ERGM coefficients by MCMC-MLE.

    Args:
        model: Terms bound to the observed network.
        config: Fit configuration (mcmc and estimation sections are used).
        rng: Random stream for the chain; defaults to one seeded from
            config.seed.
        init: Starting coefficients; the MPLE is used when omitted.

    Returns:
        Converged ERGMFit with standard errors from the final sample.

    Raises:
        DegenerateModelError: If the observed graph is empty or complete,
            or sampled graphs collapse toward either extreme.
        NonConvergenceError: If the step norm does not fall below the
            tolerance within max_iterations, or the sampled statistics
            drift steadily away from the observed ones, or a term never
            varies in the sample while its observed value differs.
    """
    check_observed_graph(model)
    est = config.estimation
    mcmc = config.mcmc
    rng = rng if rng is not None else np.random.default_rng(config.seed)

    if init is None:
        init = fit_mple(model, est.mple_max_iterations, est.mple_tolerance).coefficients
    theta = np.array(init, dtype=np.float64)
    if theta.shape != (model.n_terms,):
        raise ValueError(
            f"init has shape {theta.shape}, expected ({model.n_terms},)"
        )
    initial = tuple(float(t) for t in theta)

    observed = model.observed_statistics
    state = model.new_state(track_edges=mcmc.proposal == "tnt")
    trace: list[IterationRecord] = []
    distances: list[float] = []

    for iteration in range(1, est.max_iterations + 1):
        chain = sample_chain(
            state,
            theta,
            rng,
            burn_in=mcmc.burn_in,
            interval=mcmc.interval,
            sample_size=mcmc.sample_size,
            proposal=mcmc.proposal,
            max_steps=mcmc.max_steps,
        )
        _check_degeneracy(model, chain.densities, theta, est.degeneracy_threshold)

        mean, cov = _sample_moments(chain.statistics)
        cov_inv = np.linalg.pinv(cov)
        diff = observed - mean
        step = est.step_damping * (cov_inv @ diff)
        step_norm = float(np.linalg.norm(step))
        distance = float(np.sqrt(max(diff @ cov_inv @ diff, 0.0)))
        distances.append(distance)

        record = IterationRecord(
            iteration=iteration,
            theta=tuple(float(t) for t in theta),
            mean_statistics=tuple(float(m) for m in mean),
            distance=distance,
            step_norm=step_norm,
            acceptance_rate=chain.acceptance_rate,
            mean_density=float(chain.densities.mean()),
        )
        trace.append(record)
        log.info(
            "MCMC-MLE iteration %d: distance=%.4f, step=%.4f, acceptance=%.3f",
            iteration,
            distance,
            step_norm,
            chain.acceptance_rate,
        )
        log.debug("theta=%s mean=%s", theta.tolist(), mean.tolist())

        stuck = _stuck_terms(observed, mean, cov)
        if stuck.size:
            detail = ", ".join(
                f"{model.coef_names[k]} (observed {observed[k]:.4g}, "
                f"every sample {mean[k]:.4g})"
                for k in stuck
            )
            raise NonConvergenceError(
                f"Sampled statistics never varied for {detail}; the observed "
                f"value lies outside the sampled range at "
                f"theta={np.round(theta, 4).tolist()}",
                theta=theta.copy(),
                trace=trace,
            )

        if step_norm < est.tolerance:
            std_errors = np.sqrt(np.clip(np.diag(cov_inv), 0.0, None))
            log.info(
                "MCMC-MLE converged after %d iterations: %s",
                iteration,
                ", ".join(
                    f"{n}={t:.4f}" for n, t in zip(model.coef_names, theta)
                ),
            )
            return ERGMFit(
                model=model,
                coefficients=theta,
                std_errors=std_errors,
                covariance=cov_inv,
                method="mcmcmle",
                iterations=iteration,
                converged=True,
                trace=tuple(trace),
                initial_coefficients=initial,
            )

        if _is_drifting(distances, est.drift_window):
            raise NonConvergenceError(
                f"Sampled statistics drifted away from observed for "
                f"{est.drift_window} consecutive iterations "
                f"(distance {distances[0]:.3f} -> {distance:.3f})",
                theta=theta.copy(),
                trace=trace,
            )

        theta = theta + step

    raise NonConvergenceError(
        f"MCMC-MLE did not converge in {est.max_iterations} iterations "
        f"(last step norm {trace[-1].step_norm:.4f}, "
        f"tolerance {est.tolerance})",
        theta=theta.copy(),
        trace=trace,
    )


def fit_ergm(
    model: ERGModel,
    config: FitConfig = DEFAULT_CONFIG,
    rng: np.random.Generator | None = None,
    init: np.ndarray | None = None,
) -> ERGMFit:
    """Fit an ERGM, choosing the estimator from config.estimation.method.

    "auto" uses the exact MPLE for dyad-independent models and MCMC-MLE
    otherwise; "mple" and "mcmcmle" force a method.
    """
    method = config.estimation.method
    if method == "auto":
        method = "mple" if model.is_dyad_independent else "mcmcmle"
    log.info(
        "Fitting %d-term model (%s) by %s on n=%d, edges=%d",
        model.n_terms,
        ", ".join(model.coef_names),
        method,
        model.network.n,
        model.network.n_edges,
    )
    if method == "mple":
        return fit_mple(
            model,
            config.estimation.mple_max_iterations,
            config.estimation.mple_tolerance,
        )
    return fit_mcmcmle(model, config, rng=rng, init=init)
