"""Simulation of graphs from fitted or user-specified ERGMs."""

from ergmfit.simulation.simulator import SampleSet, simulate, simulate_chains

__all__ = ["SampleSet", "simulate", "simulate_chains"]
