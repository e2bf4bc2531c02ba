"""Maximum pseudo-likelihood estimation by logistic regression on change statistics.

For dyad-independent models the pseudo-likelihood is the likelihood, so the
MPLE is the exact MLE; with edges alone it reduces to logit(density). For
dyad-dependent models the MPLE seeds the MCMC-MLE iterations.
"""

import logging

import numpy as np
from scipy.special import expit

from ergmfit.errors import DegenerateModelError, NonConvergenceError
from ergmfit.estimation.results import ERGMFit
from ergmfit.model import ERGModel
from ergmfit.terms.features import dyad_features

log = logging.getLogger(__name__)


def check_observed_graph(model: ERGModel) -> None:
    """Reject observed graphs whose MLE lies on the parameter-space boundary.

    Raises:
        DegenerateModelError: If the observed graph is empty or complete.
    """
    network = model.network
    if network.n_dyads == 0:
        raise DegenerateModelError("Network has fewer than two vertices")
    if network.n_edges == 0:
        raise DegenerateModelError(
            "Observed graph is empty; the MLE diverges to -inf"
        )
    if network.n_edges == network.n_dyads:
        raise DegenerateModelError(
            "Observed graph is complete; the MLE diverges to +inf"
        )


def _solve(hessian: np.ndarray, rhs: np.ndarray) -> np.ndarray:
    try:
        return np.linalg.solve(hessian, rhs)
    except np.linalg.LinAlgError:
        log.warning("Singular information matrix; using pseudo-inverse")
        return np.linalg.pinv(hessian) @ rhs


def logistic_irls(
    features: np.ndarray,
    response: np.ndarray,
    max_iterations: int = 100,
    tolerance: float = 1e-10,
) -> tuple[np.ndarray, np.ndarray, int]:
    """Fit logistic regression by Newton-Raphson (IRLS) without intercept.

    Args:
        features: Design matrix of shape (D, p).
        response: 0/1 outcomes of shape (D,).
        max_iterations: Newton iteration cap.
        tolerance: Stop when the largest coefficient update falls below this.

    Returns:
        Tuple of (coefficients, information matrix at the solution,
        iterations used).

    Raises:
        NonConvergenceError: If the cap is reached (typically under
            complete separation).
    """
    beta = np.zeros(features.shape[1], dtype=np.float64)
    for iteration in range(1, max_iterations + 1):
        mu = expit(features @ beta)
        weights = mu * (1.0 - mu)
        gradient = features.T @ (response - mu)
        information = features.T @ (features * weights[:, None])
        step = _solve(information, gradient)
        beta = beta + step
        if np.max(np.abs(step)) < tolerance:
            mu = expit(features @ beta)
            weights = mu * (1.0 - mu)
            information = features.T @ (features * weights[:, None])
            return beta, information, iteration

    raise NonConvergenceError(
        f"Logistic regression did not converge in {max_iterations} iterations "
        f"(possible separation)",
        theta=beta,
    )


def fit_mple(
    model: ERGModel, max_iterations: int = 100, tolerance: float = 1e-10
) -> ERGMFit:
    """Maximum pseudo-likelihood estimate of the model coefficients.

    Raises:
        DegenerateModelError: If the observed graph is empty or complete.
        NonConvergenceError: If the logistic regression fails to converge.
    """
    check_observed_graph(model)

    state = model.new_state(track_edges=False)
    dyads, features = dyad_features(state)
    response = state.adjacency[dyads[:, 0], dyads[:, 1]].astype(np.float64)

    beta, information, iterations = logistic_irls(
        features, response, max_iterations, tolerance
    )
    covariance = np.linalg.pinv(information)
    std_errors = np.sqrt(np.clip(np.diag(covariance), 0.0, None))

    eta = features @ beta
    loglik = float((response * eta - np.logaddexp(0.0, eta)).sum())

    log.info(
        "MPLE converged in %d iterations: %s",
        iterations,
        ", ".join(f"{n}={b:.4f}" for n, b in zip(model.coef_names, beta)),
    )
    return ERGMFit(
        model=model,
        coefficients=beta,
        std_errors=std_errors,
        covariance=covariance,
        method="mple",
        iterations=iterations,
        converged=True,
        loglik=loglik if model.is_dyad_independent else None,
    )
