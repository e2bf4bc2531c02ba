#!/usr/bin/env python3
"""Entry point for fitting an ERGM to a stored network.

Chains all pipeline stages into a single executable command:
network loading -> model construction -> estimation -> simulation ->
goodness of fit -> result writing.

Usage:
    python run_fit.py --config config.json --network data/senate
    python run_fit.py --config config.json --network data/senate --dry-run
    python run_fit.py --config config.json --network data/senate --verbose
"""

import argparse
import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from ergmfit.config import FitConfig, config_from_json, full_config_hash
from ergmfit.errors import DegenerateModelError, NonConvergenceError

log = logging.getLogger(__name__)


@contextmanager
def stage_timer(name: str) -> Generator[None, None, None]:
    """Context manager that prints stage banners with elapsed time."""
    print(f"\n=== {name} ===")
    log.info("Starting: %s", name)
    t0 = time.monotonic()
    yield
    elapsed = time.monotonic() - t0
    print(f"... done in {elapsed:.1f}s")
    log.info("Completed: %s in %.1fs", name, elapsed)


def run_pipeline(
    config: FitConfig, network_dir: Path, results_dir: str = "results"
) -> Path:
    """Execute the full fit pipeline.

    Args:
        config: Fit configuration.
        network_dir: Directory written by save_network.
        results_dir: Base directory for results output.

    Returns:
        Path to the output directory.
    """
    from ergmfit.estimation import fit_ergm
    from ergmfit.gof import gof_for_fit
    from ergmfit.graph import load_network
    from ergmfit.model import ERGModel
    from ergmfit.reproducibility import get_code_version, pipeline_streams
    from ergmfit.results import write_result
    from ergmfit.simulation import simulate_chains

    pipeline_start = time.monotonic()
    log.info("Seed: %d", config.seed)
    log.info("Code version: %s", get_code_version())

    # Independent streams for estimation, goodness of fit and simulation chains
    fit_rng, gof_rng, sim_seed = pipeline_streams(config.seed)

    with stage_timer("Network Loading"):
        network = load_network(network_dir)
        if network is None:
            raise FileNotFoundError(f"No stored network found in {network_dir}")
        log.info(
            "Network: n=%d, edges=%d, density=%.4f",
            network.n, network.n_edges, network.density,
        )

    with stage_timer("Model Construction"):
        model = ERGModel.from_config(network, config.model)
        log.info("Terms: %s", ", ".join(model.coef_names))

    with stage_timer("Estimation"):
        fit = fit_ergm(model, config, rng=fit_rng)
        for row in fit.summary():
            print(
                f"  {row['term']:<24} {row['estimate']:>10.4f} "
                f"{row['std_error']:>10.4f} {row['p_value']:>10.4g}"
            )

    with stage_timer("Simulation"):
        sim = config.simulation
        n_per_chain = -(-sim.n_sim // sim.n_chains)
        sample_set = simulate_chains(
            model,
            fit.coefficients,
            n_chains=sim.n_chains,
            n_per_chain=n_per_chain,
            seed=sim_seed,
            burn_in=sim.burn_in,
            interval=sim.interval,
            proposal=sim.proposal,
            max_workers=sim.n_chains,
            n_total=sim.n_sim,
        )

    with stage_timer("Goodness of Fit"):
        report, _ = gof_for_fit(
            fit,
            n_sim=config.gof.n_sim,
            seed=gof_rng,
            burn_in=sim.burn_in,
            interval=sim.interval,
            proposal=sim.proposal,
            statistics=config.gof.statistics,
        )

    with stage_timer("Write Result"):
        fit_id = write_result(
            config, fit, report, sample_set, results_dir=results_dir
        )
        output_dir = Path(results_dir) / fit_id

    total_elapsed = time.monotonic() - pipeline_start
    print(f"\n{'=' * 60}")
    print(f"Pipeline complete in {total_elapsed:.1f}s")
    print(f"  Fit:       {fit_id}")
    print(f"  Method:    {fit.method} ({fit.iterations} iterations)")
    print(f"  Result:    {output_dir / 'result.json'}")
    print(f"{'=' * 60}")
    return output_dir


def main() -> None:
    parser = argparse.ArgumentParser(description="Fit an ERGM to a stored network")
    parser.add_argument(
        "--config", type=str, required=True, help="Path to fit config JSON file"
    )
    parser.add_argument(
        "--network",
        type=str,
        required=True,
        help="Directory holding adjacency.npz and metadata.json",
    )
    parser.add_argument(
        "--results-dir", type=str, default="results", help="Output base directory"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show pipeline plan without fitting",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable DEBUG-level logging"
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Error: config file not found: {config_path}", file=sys.stderr)
        sys.exit(1)
    config = config_from_json(config_path.read_text())

    terms = ", ".join(
        t.name + (f"({t.attribute})" if t.attribute else "")
        + (f"({t.decay})" if t.decay is not None else "")
        for t in config.model.terms
    )
    print(f"Config hash: {full_config_hash(config)}")
    print(f"Terms:       {terms}")
    print(f"Method:      {config.estimation.method}")
    print(f"MCMC:        burn_in={config.mcmc.burn_in}, "
          f"interval={config.mcmc.interval}, "
          f"sample_size={config.mcmc.sample_size}, "
          f"proposal={config.mcmc.proposal}")
    print(f"Seed:        {config.seed}")

    if args.dry_run:
        print("\n[dry-run] Config loaded successfully. Exiting.")
        return

    try:
        run_pipeline(config, Path(args.network), results_dir=args.results_dir)
    except (DegenerateModelError, NonConvergenceError) as exc:
        log.error("Fit failed: %s", exc)
        sys.exit(2)
    except Exception:
        log.exception("Pipeline failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
