"""Exceptions and warnings raised by network construction, fitting and GOF."""


class InputShapeError(ValueError):
    """Raised when adjacency or covariate input has an inconsistent shape."""


class NonConvergenceError(RuntimeError):
    """Raised when the MCMC-MLE estimator fails to converge.

    Carries the last coefficient vector and the per-iteration trace so the
    caller can inspect how the fit went wrong.
    """

    def __init__(self, message: str, theta=None, trace=None) -> None:
        super().__init__(message)
        self.theta = theta
        self.trace = list(trace) if trace is not None else []


class DegenerateModelError(RuntimeError):
    """Raised when the model collapses toward the empty or complete graph."""

    def __init__(self, message: str, theta=None) -> None:
        super().__init__(message)
        self.theta = theta


class DisconnectedGraphWarning(UserWarning):
    """Emitted when geodesic distances include unreachable vertex pairs."""
