"""Result schema validation, writing, and fit ID generation."""

from ergmfit.results.fit_id import generate_fit_id
from ergmfit.results.schema import (
    build_result,
    load_result,
    validate_result,
    write_result,
)

__all__ = [
    "build_result",
    "generate_fit_id",
    "load_result",
    "validate_result",
    "write_result",
]
