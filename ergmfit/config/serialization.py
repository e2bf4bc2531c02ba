"""JSON serialization and deserialization for fit configs."""

import json
from dataclasses import asdict
from typing import Any

from dacite import Config as DaciteConfig
from dacite import from_dict

from ergmfit.config.experiment import FitConfig

_DACITE_CONFIG = DaciteConfig(cast=[tuple], check_types=True, strict=True)


def config_to_json(config: FitConfig) -> str:
    """Serialize a FitConfig to a JSON string with sorted keys."""
    return json.dumps(asdict(config), indent=2, sort_keys=True)


def config_from_json(json_str: str) -> FitConfig:
    """Deserialize a JSON string to a FitConfig.

    dacite runs with strict=True to reject unknown keys and cast=[tuple] to
    turn JSON arrays back into tuples (terms, GOF statistics, tags).
    """
    return config_from_dict(json.loads(json_str))


def config_to_dict(config: FitConfig) -> dict[str, Any]:
    return asdict(config)


def config_from_dict(d: dict[str, Any]) -> FitConfig:
    return from_dict(data_class=FitConfig, data=d, config=_DACITE_CONFIG)
