"""Fit configuration system with frozen, hashable, serializable dataclasses."""

from ergmfit.config.defaults import COVARIATE_GWESP_MODEL, DEFAULT_CONFIG
from ergmfit.config.experiment import (
    EstimationConfig,
    FitConfig,
    GOFConfig,
    MCMCConfig,
    ModelConfig,
    SimulationConfig,
    TermConfig,
)
from ergmfit.config.hashing import config_hash, full_config_hash, model_config_hash
from ergmfit.config.serialization import (
    config_from_dict,
    config_from_json,
    config_to_dict,
    config_to_json,
)

__all__ = [
    "COVARIATE_GWESP_MODEL",
    "DEFAULT_CONFIG",
    "EstimationConfig",
    "FitConfig",
    "GOFConfig",
    "MCMCConfig",
    "ModelConfig",
    "SimulationConfig",
    "TermConfig",
    "config_from_dict",
    "config_from_json",
    "config_hash",
    "config_to_dict",
    "config_to_json",
    "full_config_hash",
    "model_config_hash",
]
