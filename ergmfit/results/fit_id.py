"""Fit ID generation with scannable parameter slug format."""

from datetime import datetime, timezone

from ergmfit.config.experiment import FitConfig
from ergmfit.graph.types import Network


def generate_fit_id(config: FitConfig, network: Network) -> str:
    """Generate a scannable fit ID from the network and config.

    Format: n{n}_e{edges}_t{n_terms}_s{seed}_{YYYYMMDD}_{HHMMSS}
    Example: n30_e87_t4_s42_20261017_143012
    """
    ts = datetime.now(timezone.utc)
    return (
        f"n{network.n}"
        f"_e{network.n_edges}"
        f"_t{len(config.model.terms)}"
        f"_s{config.seed}"
        f"_{ts.strftime('%Y%m%d_%H%M%S')}"
    )
