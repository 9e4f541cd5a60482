#!/usr/bin/env python
"""Overfitting and cross-validation simulations.

Usage:
    overfitstats trials --observation obs1
    overfitstats trials --n-trials 1000 --cal-size 50 --val-size 1000 --r2 0.25 --degree 3
    overfitstats crossval --observation appendix_b
    overfitstats crossval --method montecarlo --n-repeats 100 --train-frac 0.8
    overfitstats crossval --data survey.csv --response wellbeing --method kfold
"""

import argparse
import time
from dataclasses import asdict, fields
from typing import List, Optional

from .config import CrossValidationConfig, SimulationConfig, get_observation
from .crossval import cross_validate, cross_validate_simulated
from .data import load_personality_data
from .dgp import PopulationSpec
from .estimators import empirical_formula
from .exceptions import InvalidParameterError, OverfitStatsError
from .logs import create_full_report, format_human_readable, save_report
from .partition import PARTITIONERS, get_partitioner
from .trials import run_trials


# =============================================================================
# Config
# =============================================================================

def _apply_overrides(config, args: argparse.Namespace):
    """Copy explicitly given CLI values onto ``config``."""
    for f in fields(config):
        value = getattr(args, f.name, None)
        if value is not None:
            setattr(config, f.name, value)
    return config


def _simulation_config(args: argparse.Namespace) -> SimulationConfig:
    config = get_observation(args.observation) if args.observation else SimulationConfig()
    if not isinstance(config, SimulationConfig):
        raise InvalidParameterError(f"{args.observation} is a cross-validation scenario; use 'crossval'")
    config = _apply_overrides(config, args)
    if args.calibration_only:
        config.val_size = None
    return config


def _crossval_config(args: argparse.Namespace) -> CrossValidationConfig:
    config = get_observation(args.observation) if args.observation else CrossValidationConfig()
    if not isinstance(config, CrossValidationConfig):
        raise InvalidParameterError(f"{args.observation} is a simulation scenario; use 'trials'")
    return _apply_overrides(config, args)


# =============================================================================
# Commands
# =============================================================================

def run_trials_command(config: SimulationConfig, verbose: bool = True):
    population = PopulationSpec(r2=config.population_r2, exact_signal_sd=config.exact_signal_sd)

    print("=" * 60)
    print("Overfitting Simulation")
    print("=" * 60)
    print(f"Trials={config.n_trials}, calibration n={config.cal_size}, validation n={config.val_size}")
    print(f"Population R²={population.r2}, noise sd={population.noise_sd:.4f}")
    print(f"Model: polynomial, degree {config.degree}")
    print(f"Seed: {config.seed}, parallel jobs: {config.n_jobs}")
    print("=" * 60)

    return run_trials(
        n_trials=config.n_trials,
        cal_size=config.cal_size,
        val_size=config.val_size,
        population_r2=config.population_r2,
        degree=config.degree,
        seed=config.seed,
        population=population,
        n_jobs=config.n_jobs,
        verbose=verbose,
    )


def run_crossval_command(config: CrossValidationConfig, verbose: bool = True):
    partitioner = get_partitioner(config.method, **config.partitioner_kwargs())

    print("=" * 60)
    print("Cross-Validation")
    print("=" * 60)
    print(f"Policy: {partitioner!r}")

    if config.data_source is not None:
        if config.response is None:
            raise InvalidParameterError("--response is required with --data")
        data = load_personality_data(config.data_source, config.response)
        formula = empirical_formula(config.response)
        print(f"Data: {config.data_source} ({len(data)} rows)")
        print(f"Model: {formula}")
        print("=" * 60)
        return cross_validate(
            data, partitioner, formula, seed=config.seed, n_jobs=config.n_jobs, verbose=verbose
        )

    population = PopulationSpec(r2=config.population_r2, exact_signal_sd=config.exact_signal_sd)
    print(f"Simulated sample: n={config.n_rows}, population R²={population.r2}")
    print(f"Model: polynomial, degree {config.degree}")
    print("=" * 60)
    return cross_validate_simulated(
        n_rows=config.n_rows,
        population_r2=config.population_r2,
        degree=config.degree,
        partitioner=partitioner,
        seed=config.seed,
        population=population,
        n_jobs=config.n_jobs,
        verbose=verbose,
    )


# =============================================================================
# Main
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="overfitstats",
        description="Overfitting and cross-validation simulations",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--observation", type=str, default=None, help="Named scenario preset")
    common.add_argument("--seed", type=int, default=None, help="Random seed")
    common.add_argument("--n-jobs", type=int, default=None, help="Parallel jobs (-1 for all cores)")
    common.add_argument("--exact-signal-sd", action="store_true", default=None,
                        help="Derive sd(signal) analytically instead of using 0.6364")
    common.add_argument("--log-dir", type=str, default=None, help="Directory for run logs")
    common.add_argument("--output", type=str, default=None, help="Raw per-trial CSV")
    common.add_argument("--quiet", action="store_true", help="No progress bar")

    trials = sub.add_parser("trials", parents=[common], help="Calibration/validation simulation")
    trials.add_argument("--n-trials", type=int, default=None, help="Number of trials")
    trials.add_argument("--cal-size", type=int, default=None, help="Calibration sample size")
    trials.add_argument("--val-size", type=int, default=None, help="Validation sample size")
    trials.add_argument("--calibration-only", action="store_true", help="Skip validation samples")
    trials.add_argument("--r2", dest="population_r2", type=float, default=None, help="Population R²")
    trials.add_argument("--degree", type=int, default=None, help="Polynomial degree")

    crossval = sub.add_parser("crossval", parents=[common], help="k-fold or Monte Carlo cross-validation")
    crossval.add_argument("--method", choices=list(PARTITIONERS.keys()), default=None)
    crossval.add_argument("--n-folds", type=int, default=None, help="Folds for k-fold")
    crossval.add_argument("--n-repeats", type=int, default=None, help="Monte Carlo repetitions")
    crossval.add_argument("--train-frac", type=float, default=None, help="Monte Carlo train proportion")
    crossval.add_argument("--n-rows", type=int, default=None, help="Simulated sample size")
    crossval.add_argument("--r2", dest="population_r2", type=float, default=None, help="Population R²")
    crossval.add_argument("--degree", type=int, default=None, help="Polynomial degree")
    crossval.add_argument("--data", dest="data_source", type=str, default=None,
                          help="CSV path or URL for the empirical example")
    crossval.add_argument("--response", type=str, default=None, help="Response column of --data")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    verbose = not args.quiet

    start_time = time.time()
    try:
        if args.command == "trials":
            config = _simulation_config(args)
            results = run_trials_command(config, verbose=verbose)
        else:
            config = _crossval_config(args)
            results = run_crossval_command(config, verbose=verbose)
    except OverfitStatsError as err:
        print(f"Error: {err}")
        return 1

    print("\n")
    print(results.summary())

    end_time = time.time()
    elapsed = end_time - start_time

    try:
        _write_outputs(args, config, results, start_time, end_time)
    except OSError as err:
        print(f"Error: could not write results: {err}")
        return 1

    print(f"\nTotal time: {elapsed:.1f}s")
    return 0


def _write_outputs(args, config, results, start_time: float, end_time: float) -> None:
    if args.output:
        results.to_frame().to_csv(args.output, index=False)
        print(f"\nRaw results saved to: {args.output}")

    if config.log_dir:
        elapsed = end_time - start_time
        timing = {
            "total_seconds": elapsed,
            "start_time": time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime(start_time)),
            "end_time": time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime(end_time)),
        }
        report_json = create_full_report(config=asdict(config), results=results, timing=timing)
        log_path = save_report(report_json, config.log_dir, prefix=args.command)
        print(f"\nComprehensive report saved to: {log_path}")

        human_path = log_path.replace(".log", "_readable.txt")
        with open(human_path, "w") as f:
            f.write(format_human_readable(report_json))
        print(f"Human-readable report saved to: {human_path}")


if __name__ == "__main__":
    raise SystemExit(main())
