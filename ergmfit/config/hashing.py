"""Deterministic config hashing using SHA-256 over sorted JSON."""

import hashlib
import json
from dataclasses import asdict
from typing import Any

from ergmfit.config.experiment import FitConfig


def _remove_nested(d: dict[str, Any], field_path: str) -> None:
    """Remove a dotted-path key such as "mcmc.burn_in" from a nested dict."""
    *parents, leaf = field_path.split(".")
    current = d
    for part in parents:
        current = current.get(part)
        if not isinstance(current, dict):
            return
    current.pop(leaf, None)


def config_hash(config: Any, exclude_fields: list[str] | None = None) -> str:
    """Deterministic SHA-256 hash of a config dataclass.

    Args:
        config: Any dataclass instance (or sub-config).
        exclude_fields: Optional list of dotted field paths to exclude.

    Returns:
        First 16 hex characters of the SHA-256 hash.
    """
    d = asdict(config)
    for field_path in exclude_fields or ():
        _remove_nested(d, field_path)
    serialized = json.dumps(
        d, sort_keys=True, ensure_ascii=True, separators=(",", ":")
    )
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()[:16]


def model_config_hash(config: FitConfig) -> str:
    """Hash of the term specification only.

    Two configs with the same terms but different chain settings or seeds
    describe the same model and share this hash.
    """
    return config_hash(config.model)


def full_config_hash(config: FitConfig) -> str:
    """Hash for full fit identity, seed included."""
    return config_hash(config)
