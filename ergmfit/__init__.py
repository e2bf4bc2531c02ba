"""Exponential random graph model fitting, simulation and goodness of fit."""

__version__ = "0.1.0"
