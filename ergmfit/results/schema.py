"""Result schema validation and writing.

Uses a Python validation function (not jsonschema) to check required fields
and types before writing result.json files.
"""

import json
import math
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ergmfit.config.experiment import FitConfig
from ergmfit.config.hashing import full_config_hash, model_config_hash
from ergmfit.estimation.results import ERGMFit
from ergmfit.gof.evaluator import GOFReport
from ergmfit.reproducibility.provenance import get_code_version
from ergmfit.results.fit_id import generate_fit_id
from ergmfit.simulation.simulator import SampleSet

SCHEMA_VERSION = "1.0"

REQUIRED_TOP_FIELDS = {
    "schema_version",
    "fit_id",
    "timestamp",
    "description",
    "tags",
    "config",
    "network",
    "fit",
}

REQUIRED_FIT_FIELDS = {"method", "converged", "coefficients", "summary"}


def _json_safe(value: Any) -> Any:
    """Replace NaN and infinities with None so result.json stays strict JSON."""
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


def validate_result(result: dict[str, Any]) -> list[str]:
    """Validate a result dict. An empty list means the result is valid."""
    errors: list[str] = []

    missing = REQUIRED_TOP_FIELDS - set(result.keys())
    if missing:
        errors.append(f"Missing required top-level fields: {sorted(missing)}")

    if "schema_version" in result and not isinstance(result["schema_version"], str):
        errors.append("schema_version must be a string")

    if "tags" in result and not isinstance(result["tags"], list):
        errors.append("tags must be a list")

    if "config" in result and not isinstance(result["config"], dict):
        errors.append("config must be a dict")

    if "timestamp" in result:
        ts = result["timestamp"]
        if not isinstance(ts, str):
            errors.append("timestamp must be a string")
        else:
            try:
                datetime.fromisoformat(ts)
            except ValueError:
                errors.append("timestamp must be in ISO 8601 format")

    fit = result.get("fit")
    if fit is not None:
        if not isinstance(fit, dict):
            errors.append("fit must be a dict")
        else:
            missing_fit = REQUIRED_FIT_FIELDS - set(fit.keys())
            if missing_fit:
                errors.append(f"fit missing fields: {sorted(missing_fit)}")
            coefficients = fit.get("coefficients", {})
            summary = fit.get("summary", [])
            if isinstance(coefficients, dict) and isinstance(summary, list):
                if len(summary) != len(coefficients):
                    errors.append(
                        f"fit.summary length ({len(summary)}) != number of "
                        f"coefficients ({len(coefficients)})"
                    )

    gof = result.get("gof")
    if gof is not None:
        if not isinstance(gof, dict):
            errors.append("gof must be a dict")
        else:
            for name, rows in gof.items():
                for row in rows:
                    pct = row.get("percentile")
                    if pct is None or not 0.0 <= pct <= 100.0:
                        errors.append(
                            f"gof.{name} bucket {row.get('bucket')} has "
                            f"percentile outside [0, 100]: {pct}"
                        )

    return errors


def build_result(
    config: FitConfig,
    fit: ERGMFit,
    gof_report: GOFReport | None = None,
    sample_set: SampleSet | None = None,
    fit_id: str | None = None,
) -> dict[str, Any]:
    """Assemble the result dict for a fit and optional GOF/simulation output."""
    network = fit.model.network
    return {
        "schema_version": SCHEMA_VERSION,
        "fit_id": fit_id or generate_fit_id(config, network),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "description": config.description,
        "tags": list(config.tags),
        "config": asdict(config),
        "network": {
            "n": network.n,
            "n_edges": network.n_edges,
            "density": network.density,
            "covariates": sorted(network.covariates),
        },
        "fit": fit.to_dict(),
        "gof": gof_report.to_dict() if gof_report is not None else None,
        "simulation": sample_set.to_dict() if sample_set is not None else None,
        "metadata": {
            "code_version": get_code_version(),
            "config_hash": full_config_hash(config),
            "model_hash": model_config_hash(config),
        },
    }


def write_result(
    config: FitConfig,
    fit: ERGMFit,
    gof_report: GOFReport | None = None,
    sample_set: SampleSet | None = None,
    results_dir: str = "results",
) -> str:
    """Write results/{fit_id}/result.json.

    Returns:
        The generated fit_id.

    Raises:
        ValueError: If the assembled result fails validation.
    """
    result = _json_safe(build_result(config, fit, gof_report, sample_set))
    errors = validate_result(result)
    if errors:
        raise ValueError(f"Result validation failed: {'; '.join(errors)}")

    fit_id = result["fit_id"]
    out_dir = Path(results_dir) / fit_id
    out_dir.mkdir(parents=True, exist_ok=True)
    with open(out_dir / "result.json", "w") as f:
        json.dump(result, f, indent=2, allow_nan=False)
    return fit_id


def load_result(result_path: str | Path) -> dict[str, Any]:
    with open(result_path) as f:
        return json.load(f)
