"""ERGM estimation: MPLE initializer and MCMC-MLE estimator."""

from ergmfit.estimation.mcmcmle import fit_ergm, fit_mcmcmle
from ergmfit.estimation.mple import check_observed_graph, fit_mple, logistic_irls
from ergmfit.estimation.results import ERGMFit, IterationRecord

__all__ = [
    "ERGMFit",
    "IterationRecord",
    "check_observed_graph",
    "fit_ergm",
    "fit_mcmcmle",
    "fit_mple",
    "logistic_irls",
]
