"""Reproducibility infrastructure: random streams and code provenance."""

from ergmfit.reproducibility.provenance import get_code_version
from ergmfit.reproducibility.streams import (
    make_rng,
    pipeline_streams,
    spawn_rngs,
    verify_stream_determinism,
)

__all__ = [
    "get_code_version",
    "make_rng",
    "pipeline_streams",
    "spawn_rngs",
    "verify_stream_determinism",
]
