"""Tests for MPLE and MCMC-MLE estimation."""

import dataclasses
import math

import numpy as np
import pytest

from ergmfit.config import (
    EstimationConfig,
    FitConfig,
    MCMCConfig,
    ModelConfig,
    TermConfig,
)
from ergmfit.errors import DegenerateModelError, NonConvergenceError
from ergmfit.estimation import fit_ergm, fit_mcmcmle, fit_mple, logistic_irls
from ergmfit.estimation.mcmcmle import _is_drifting
from ergmfit.graph import build_network
from ergmfit.mcmc import ChainResult
from ergmfit.model import ERGModel

EDGES = ModelConfig(terms=(TermConfig(name="edges"),))
EDGES_GWESP = ModelConfig(
    terms=(TermConfig(name="edges"), TermConfig(name="gwesp", decay=0.5))
)


def _random_network(n: int, p: float, seed: int, **covariates):
    rng = np.random.default_rng(seed)
    upper = np.triu(rng.random((n, n)) < p, k=1).astype(int)
    return build_network(upper + upper.T, covariates=covariates or None)


def _small_chain_config(**estimation) -> FitConfig:
    return FitConfig(
        model=EDGES,
        mcmc=MCMCConfig(burn_in=500, interval=20, sample_size=400),
        estimation=EstimationConfig(method="mcmcmle", **estimation),
        seed=3,
    )


class TestMPLE:
    """Closed-form checks for dyad-independent models."""

    def test_edges_only_is_logit_density(self) -> None:
        net = _random_network(15, 0.3, seed=0)
        fit = fit_mple(ERGModel.from_config(net, EDGES))
        m, d = net.n_edges, net.n_dyads
        assert fit.coefficients[0] == pytest.approx(math.log(m / (d - m)), abs=1e-8)
        p = m / d
        assert fit.std_errors[0] == pytest.approx(
            math.sqrt(1.0 / (d * p * (1 - p))), rel=1e-6
        )
        assert fit.method == "mple"
        assert fit.converged

    def test_edges_nodematch_closed_form(self) -> None:
        group = ["a"] * 6 + ["b"] * 6
        net = _random_network(12, 0.35, seed=1, group=group)
        model = ERGModel.from_config(
            net,
            ModelConfig(
                terms=(
                    TermConfig(name="edges"),
                    TermConfig(name="nodematch", attribute="group"),
                )
            ),
        )
        fit = fit_mple(model)

        labels = np.array(group)
        same = labels[:, None] == labels[None, :]
        upper = np.triu(np.ones((12, 12), dtype=bool), k=1)
        adj = net.adjacency.astype(bool)
        p_within = adj[upper & same].mean()
        p_between = adj[upper & ~same].mean()

        def logit(p):
            return math.log(p / (1 - p))

        assert fit.coefficients[0] == pytest.approx(logit(p_between), abs=1e-8)
        assert fit.coefficients[1] == pytest.approx(
            logit(p_within) - logit(p_between), abs=1e-8
        )

    def test_loglik_and_information_criteria(self) -> None:
        net = _random_network(10, 0.4, seed=2)
        fit = fit_mple(ERGModel.from_config(net, EDGES))
        m, d = net.n_edges, net.n_dyads
        p = m / d
        expected = m * math.log(p) + (d - m) * math.log(1 - p)
        assert fit.loglik == pytest.approx(expected, rel=1e-8)
        assert fit.aic == pytest.approx(-2 * expected + 2)
        assert fit.bic == pytest.approx(-2 * expected + math.log(d))

    def test_dyad_dependent_mple_has_no_loglik(self) -> None:
        net = _random_network(12, 0.3, seed=4)
        fit = fit_mple(ERGModel.from_config(net, EDGES_GWESP))
        assert fit.loglik is None
        assert fit.aic is None
        assert fit.coefficients.shape == (2,)
        assert np.all(np.isfinite(fit.coefficients))

    def test_empty_graph_is_degenerate(self) -> None:
        net = build_network(np.zeros((5, 5), dtype=int))
        with pytest.raises(DegenerateModelError, match="empty"):
            fit_mple(ERGModel.from_config(net, EDGES))

    def test_complete_graph_is_degenerate(self) -> None:
        net = build_network(np.ones((5, 5), dtype=int))
        with pytest.raises(DegenerateModelError, match="complete"):
            fit_ergm(ERGModel.from_config(net, EDGES_GWESP))

    def test_separation_does_not_converge(self) -> None:
        features = np.array([[-1.0], [-2.0], [1.0], [2.0]])
        response = np.array([0.0, 0.0, 1.0, 1.0])
        with pytest.raises(NonConvergenceError):
            logistic_irls(features, response, max_iterations=25)


class TestFitResult:
    """ERGMFit accessors."""

    def setup_method(self) -> None:
        net = _random_network(12, 0.3, seed=6)
        self.fit = fit_mple(ERGModel.from_config(net, EDGES))

    def test_summary_rows(self) -> None:
        (row,) = self.fit.summary()
        assert row["term"] == "edges"
        assert row["z_value"] == pytest.approx(row["estimate"] / row["std_error"])
        assert 0.0 <= row["p_value"] <= 1.0

    def test_arrays_read_only(self) -> None:
        with pytest.raises(ValueError):
            self.fit.coefficients[0] = 0.0

    def test_to_dict(self) -> None:
        d = self.fit.to_dict()
        assert d["method"] == "mple"
        assert set(d["coefficients"]) == {"edges"}
        assert d["trace"] == []


class TestMCMCMLE:
    """Stochastic estimator behaviour."""

    def test_recovers_edges_coefficient_from_zero(self) -> None:
        net = _random_network(12, 0.3, seed=8)
        model = ERGModel.from_config(net, EDGES)
        fit = fit_mcmcmle(
            model, _small_chain_config(), rng=np.random.default_rng(0), init=[0.0]
        )
        target = math.log(net.n_edges / (net.n_dyads - net.n_edges))
        assert fit.converged
        assert fit.method == "mcmcmle"
        assert fit.coefficients[0] == pytest.approx(target, abs=0.3)
        assert fit.initial_coefficients == (0.0,)
        assert len(fit.trace) == fit.iterations
        assert fit.std_errors[0] > 0

    def test_iteration_cap_raises_with_trace(self) -> None:
        net = _random_network(12, 0.3, seed=8)
        config = _small_chain_config(max_iterations=1, tolerance=1e-9)
        with pytest.raises(NonConvergenceError) as excinfo:
            fit_mcmcmle(
                ERGModel.from_config(net, EDGES), config, rng=np.random.default_rng(1)
            )
        assert len(excinfo.value.trace) == 1
        assert excinfo.value.theta.shape == (1,)

    def test_collapse_to_complete_graph_is_degenerate(self) -> None:
        net = _random_network(12, 0.3, seed=8)
        config = dataclasses.replace(
            _small_chain_config(), mcmc=MCMCConfig(burn_in=2000, interval=20, sample_size=100)
        )
        with pytest.raises(DegenerateModelError) as excinfo:
            fit_mcmcmle(
                ERGModel.from_config(net, EDGES),
                config,
                rng=np.random.default_rng(2),
                init=[8.0],
            )
        np.testing.assert_allclose(excinfo.value.theta, [8.0])

    def test_init_shape_checked(self) -> None:
        net = _random_network(8, 0.4, seed=9)
        with pytest.raises(ValueError, match="init has shape"):
            fit_mcmcmle(ERGModel.from_config(net, EDGES), _small_chain_config(), init=[0.0, 1.0])

    def test_same_seed_same_fit(self) -> None:
        net = _random_network(10, 0.3, seed=10)
        model = ERGModel.from_config(net, EDGES)
        a = fit_mcmcmle(model, _small_chain_config(), rng=np.random.default_rng(5), init=[0.0])
        b = fit_mcmcmle(model, _small_chain_config(), rng=np.random.default_rng(5), init=[0.0])
        np.testing.assert_array_equal(a.coefficients, b.coefficients)
        assert a.iterations == b.iterations

    def test_frozen_term_is_not_reported_as_converged(self) -> None:
        # A very negative gwesp coefficient keeps every sampled graph free of
        # shared partners, while the observed graph has plenty of them.
        net = _random_network(14, 0.3, seed=0)
        model = ERGModel.from_config(net, EDGES_GWESP)
        assert model.observed_statistics[1] > 1.0
        config = FitConfig(
            model=EDGES_GWESP,
            mcmc=MCMCConfig(burn_in=2000, interval=20, sample_size=200),
            estimation=EstimationConfig(method="mcmcmle"),
            seed=0,
        )
        with pytest.raises(NonConvergenceError, match="gwesp.fixed.0.5") as excinfo:
            fit_mcmcmle(model, config, rng=np.random.default_rng(0), init=[-1.0, -30.0])
        assert excinfo.value.trace
        assert excinfo.value.trace[-1].mean_statistics[1] == pytest.approx(0.0, abs=1e-6)

    def test_drifting_statistics_raise(self, monkeypatch: pytest.MonkeyPatch) -> None:
        net = _random_network(12, 0.3, seed=8)
        model = ERGModel.from_config(net, EDGES)
        observed = float(net.n_edges)
        calls = []

        def receding_chain(state, theta, rng, burn_in, interval, sample_size, **kwargs):
            # Each call samples further from the observed edge count.
            calls.append(1)
            offset = 2.0 * len(calls)
            noise = np.tile([-1.0, 1.0], sample_size // 2)
            return ChainResult(
                statistics=(observed + offset + noise)[:, None],
                densities=np.full(sample_size, net.density),
                graphs=None,
                acceptance_rate=0.5,
                n_steps=burn_in + interval * sample_size,
            )

        monkeypatch.setattr(
            "ergmfit.estimation.mcmcmle.sample_chain", receding_chain
        )
        config = _small_chain_config(drift_window=4, max_iterations=30)
        with pytest.raises(NonConvergenceError, match="drifted") as excinfo:
            fit_mcmcmle(model, config, rng=np.random.default_rng(0), init=[0.0])
        assert len(excinfo.value.trace) == 5
        distances = [r.distance for r in excinfo.value.trace]
        assert distances == sorted(distances)

    def test_gwesp_model_fits(self) -> None:
        net = _random_network(14, 0.25, seed=11)
        config = FitConfig(
            model=EDGES_GWESP,
            mcmc=MCMCConfig(burn_in=1000, interval=20, sample_size=500),
            estimation=EstimationConfig(tolerance=0.5, drift_window=8, max_iterations=40),
            seed=11,
        )
        fit = fit_ergm(ERGModel.from_config(net, config.model), config)
        assert fit.method == "mcmcmle"
        assert fit.converged
        assert fit.coef_names == ("edges", "gwesp.fixed.0.5")
        assert fit.initial_coefficients is not None


class TestDispatch:
    """fit_ergm estimator selection."""

    def test_auto_uses_mple_for_dyad_independent(self) -> None:
        net = _random_network(10, 0.3, seed=12)
        fit = fit_ergm(ERGModel.from_config(net, EDGES), FitConfig(model=EDGES))
        assert fit.method == "mple"
        assert fit.iterations >= 1

    def test_forced_mcmcmle(self) -> None:
        net = _random_network(10, 0.3, seed=12)
        fit = fit_ergm(
            ERGModel.from_config(net, EDGES),
            _small_chain_config(),
            rng=np.random.default_rng(0),
        )
        assert fit.method == "mcmcmle"


class TestDriftDetection:
    """Steadily growing distances signal divergence."""

    def test_monotone_growth_is_drift(self) -> None:
        assert _is_drifting([1.0, 1.5, 2.0, 3.0, 4.5], window=4)

    def test_too_short_history(self) -> None:
        assert not _is_drifting([1.0, 2.0, 3.0], window=4)

    def test_noise_is_not_drift(self) -> None:
        assert not _is_drifting([2.0, 1.0, 1.5, 1.2, 1.8], window=4)

    def test_growth_below_start_is_not_drift(self) -> None:
        assert not _is_drifting([5.0, 0.5, 0.8, 1.2, 1.9], window=3)
