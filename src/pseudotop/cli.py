"""Command-line interface for running pseudo-top reconstruction on event inputs."""

from __future__ import annotations

import argparse
import importlib.util
import logging
from pathlib import Path
from typing import Any

from .io import config_from_dict, load_config_json, load_events_json, write_results_table
from .models import CLUSTERING_ALGORITHMS, PseudoTopConfig, PseudoTopResult
from .producer import PseudoTopProducer

logger = logging.getLogger(__name__)

# Config fields that can be overridden from the command line.
_OVERRIDES = (
    "lepton_min_pt",
    "lepton_max_eta",
    "jet_min_pt",
    "jet_max_eta",
    "w_mass",
    "t_mass",
    "lepton_cone_size",
    "jet_cone_size",
    "algorithm",
)


def build_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="pseudotop",
        description="Reconstruct pseudo-top decay trees from generator-level final states.",
    )
    parser.add_argument("--events", required=True, help="Input JSON with key 'events'.")
    parser.add_argument(
        "--config",
        default=None,
        help="Optional JSON with reconstruction settings (flat or under key 'pseudo_top').",
    )
    parser.add_argument("--lepton-min-pt", type=float, default=None, help="Dressed-lepton minimum pT.")
    parser.add_argument("--lepton-max-eta", type=float, default=None, help="Dressed-lepton maximum |eta|.")
    parser.add_argument("--jet-min-pt", type=float, default=None, help="Jet minimum pT.")
    parser.add_argument("--jet-max-eta", type=float, default=None, help="Jet maximum |eta|.")
    parser.add_argument("--w-mass", type=float, default=None, help="Reference W mass.")
    parser.add_argument("--t-mass", type=float, default=None, help="Reference top mass.")
    parser.add_argument("--lepton-cone-size", type=float, default=None, help="Lepton dressing radius.")
    parser.add_argument("--jet-cone-size", type=float, default=None, help="Jet clustering radius.")
    parser.add_argument(
        "--algorithm",
        choices=list(CLUSTERING_ALGORITHMS),
        default=None,
        help="Sequential-recombination algorithm for both clusterings.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of worker threads processing events (default: 1).",
    )
    parser.add_argument(
        "--out",
        required=True,
        help="Output table file for reconstructed objects (.parquet, .csv, .pkl).",
    )
    parser.add_argument(
        "--custom-script",
        default=None,
        help="Path to Python file with process(results, context) function.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def setup_logging(verbose: bool = False) -> None:
    """Configure process-wide logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%H:%M:%S",
    )


def resolve_config(args: argparse.Namespace) -> PseudoTopConfig:
    """Combine the optional config file with command-line overrides."""
    config = load_config_json(args.config) if args.config else PseudoTopConfig()
    overrides = {
        name: getattr(args, name)
        for name in _OVERRIDES
        if getattr(args, name) is not None
    }
    return config_from_dict(overrides, base=config)


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint: load inputs, run reconstruction, write table, optional custom hook."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    config = resolve_config(args)
    logger.info("Reading events from %s", args.events)
    events = load_events_json(args.events)

    producer = PseudoTopProducer(config)
    results = producer.produce_events(events, max_workers=args.workers)
    write_results_table(args.out, results)
    logger.info("Wrote %d events to %s", len(results), args.out)

    if args.custom_script:
        run_custom_script(
            script_path=args.custom_script,
            results=results,
            context={
                "events_path": args.events,
                "config_path": args.config,
                "config": config,
                "output_path": args.out,
            },
        )
    return 0


def run_custom_script(
    script_path: str, results: list[PseudoTopResult], context: dict[str, Any]
) -> None:
    """Execute user-supplied post-processing callback `process(results, context)`."""
    module = _load_module(script_path)
    process = getattr(module, "process", None)
    if process is None or not callable(process):
        raise ValueError(
            f"Custom script {script_path} must define callable process(results, context)."
        )
    process(results, context)


def _load_module(script_path: str):
    """Import a Python module from an arbitrary file path."""
    path = Path(script_path)
    spec = importlib.util.spec_from_file_location(path.stem, path)
    if spec is None or spec.loader is None:
        raise ValueError(f"Cannot import custom script: {script_path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


if __name__ == "__main__":
    raise SystemExit(main())
