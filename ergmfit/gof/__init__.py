"""Goodness-of-fit statistics and evaluation."""

from ergmfit.gof.evaluator import GOFReport, GOFTable, gof_for_fit, goodness_of_fit
from ergmfit.gof.statistics import (
    degree_distribution,
    esp_distribution,
    geodesic_distribution,
)

__all__ = [
    "GOFReport",
    "GOFTable",
    "degree_distribution",
    "esp_distribution",
    "geodesic_distribution",
    "gof_for_fit",
    "goodness_of_fit",
]
