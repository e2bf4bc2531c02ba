"""Tests for the Metropolis-Hastings graph sampler."""

import itertools
import math

import numpy as np
import pytest

from ergmfit.graph import build_network
from ergmfit.mcmc import GraphState, propose, sample_chain
from ergmfit.terms import Edges, Triangle


def _empty_network(n: int):
    return build_network(np.zeros((n, n), dtype=int))


def _exact_mean_statistics(terms, n: int, theta: np.ndarray) -> np.ndarray:
    """Enumerate every graph on n vertices and weight by exp(theta . g)."""
    rows, cols = np.triu_indices(n, 1)
    stats = []
    for bits in itertools.product((0, 1), repeat=rows.size):
        adj = np.zeros((n, n), dtype=int)
        adj[rows, cols] = bits
        adj = adj + adj.T
        stats.append(GraphState(terms, adj).statistics)
    stats = np.array(stats)
    log_w = stats @ theta
    w = np.exp(log_w - log_w.max())
    return (w[:, None] * stats).sum(axis=0) / w.sum()


class TestProposals:
    """Dyad proposals and Hastings corrections."""

    def test_random_proposal_is_symmetric(self) -> None:
        net = _empty_network(6)
        state = GraphState([Edges(net)], net.adjacency)
        rng = np.random.default_rng(0)
        for _ in range(50):
            i, j, log_q = propose(state, rng, "random")
            assert 0 <= i < j < 6
            assert log_q == 0.0

    def test_tnt_on_empty_graph_adds_tie(self) -> None:
        net = _empty_network(5)
        state = GraphState([Edges(net)], net.adjacency, track_edges=True)
        i, j, log_q = propose(state, np.random.default_rng(1), "tnt")
        # forward 1/D, reverse 0.5/D + 0.5/1
        d = state.n_dyads
        assert log_q == pytest.approx(math.log(0.5 / d + 0.5) - math.log(1.0 / d))

    def test_tnt_ratio_for_removing_tie(self) -> None:
        adj = np.zeros((5, 5), dtype=int)
        for i, j in [(0, 1), (1, 2), (3, 4)]:
            adj[i, j] = adj[j, i] = 1
        net = build_network(adj)
        state = GraphState([Edges(net)], net.adjacency, track_edges=True)
        rng = np.random.default_rng(3)
        d, e = state.n_dyads, state.n_edges
        seen_edge = False
        for _ in range(40):
            i, j, log_q = propose(state, rng, "tnt")
            assert i < j
            if state.has_edge(i, j):
                seen_edge = True
                expected = math.log(0.5 / d) - math.log(0.5 / d + 0.5 / e)
            else:
                expected = math.log(0.5 / d + 0.5 / (e + 1)) - math.log(0.5 / d)
            assert log_q == pytest.approx(expected)
        assert seen_edge

    def test_unknown_proposal(self) -> None:
        net = _empty_network(4)
        state = GraphState([Edges(net)], net.adjacency)
        with pytest.raises(ValueError, match="Unknown proposal"):
            propose(state, np.random.default_rng(0), "gibbs")


class TestStationaryDistribution:
    """Chain averages match exact expectations on tiny graphs."""

    @pytest.mark.parametrize("proposal", ["random", "tnt"])
    def test_edges_only_matches_binomial(self, proposal: str) -> None:
        net = _empty_network(4)
        theta = np.array([-0.5])
        state = GraphState([Edges(net)], net.adjacency, track_edges=True)
        chain = sample_chain(
            state, theta, np.random.default_rng(11),
            burn_in=500, interval=5, sample_size=4000, proposal=proposal,
        )
        expected = 6 / (1 + math.exp(0.5))
        assert chain.statistics[:, 0].mean() == pytest.approx(expected, abs=0.15)

    @pytest.mark.parametrize("proposal", ["random", "tnt"])
    def test_triangle_model_matches_enumeration(self, proposal: str) -> None:
        net = _empty_network(4)
        terms = [Edges(net), Triangle()]
        theta = np.array([-0.3, 0.6])
        exact = _exact_mean_statistics(terms, 4, theta)

        state = GraphState(terms, net.adjacency, track_edges=True)
        chain = sample_chain(
            state, theta, np.random.default_rng(5),
            burn_in=500, interval=5, sample_size=5000, proposal=proposal,
        )
        np.testing.assert_allclose(chain.statistics.mean(axis=0), exact, atol=0.15)


class TestSampleChain:
    """Bookkeeping of sample_chain."""

    def setup_method(self) -> None:
        self.net = _empty_network(8)
        self.terms = [Edges(self.net), Triangle()]

    def _state(self) -> GraphState:
        return GraphState(self.terms, self.net.adjacency, track_edges=True)

    def test_same_seed_same_chain(self) -> None:
        theta = np.array([-1.0, 0.2])
        a = sample_chain(self._state(), theta, np.random.default_rng(7), 100, 10, 50)
        b = sample_chain(self._state(), theta, np.random.default_rng(7), 100, 10, 50)
        np.testing.assert_array_equal(a.statistics, b.statistics)
        assert a.acceptance_rate == b.acceptance_rate

    def test_kept_graphs_match_statistics(self) -> None:
        theta = np.array([-1.0, 0.2])
        chain = sample_chain(
            self._state(), theta, np.random.default_rng(2), 100, 10, 20,
            keep_graphs=True,
        )
        assert len(chain.graphs) == 20
        for graph, stats, density in zip(chain.graphs, chain.statistics, chain.densities):
            assert graph.dtype == np.uint8
            np.testing.assert_allclose(GraphState(self.terms, graph).statistics, stats)
            assert density == pytest.approx(graph.sum() / 2 / 28)

    def test_graphs_not_kept_by_default(self) -> None:
        chain = sample_chain(
            self._state(), np.array([0.0, 0.0]), np.random.default_rng(0), 10, 1, 5
        )
        assert chain.graphs is None
        assert chain.n_steps == 15
        assert 0.0 <= chain.acceptance_rate <= 1.0

    def test_state_advances_in_place(self) -> None:
        state = self._state()
        theta = np.array([0.5, 0.0])
        chain = sample_chain(state, theta, np.random.default_rng(4), 200, 1, 1)
        np.testing.assert_allclose(state.statistics, chain.statistics[-1])
        assert state.n_edges > 0

    def test_theta_length_checked(self) -> None:
        with pytest.raises(ValueError, match="theta has shape"):
            sample_chain(self._state(), np.array([0.0]), np.random.default_rng(0), 10, 1, 5)

    def test_max_steps_enforced(self) -> None:
        with pytest.raises(ValueError, match="max_steps"):
            sample_chain(
                self._state(), np.zeros(2), np.random.default_rng(0),
                burn_in=100, interval=10, sample_size=10, max_steps=150,
            )
