"""Command line entry point for neuroplay training runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from neuroplay.core.types import RunResult
from neuroplay.data import available_datasets
from neuroplay.training import pipelines


def _format_result(result: RunResult) -> str:
    payload = {
        "epochs": result.epochs,
        "completed": result.completed,
        "final_error": result.error_history[-1] if result.error_history else None,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "summary": result.summary_path,
    }
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="xor-network",
        help="Preset configuration to execute",
    )
    parser.add_argument(
        "--config", type=Path, help="Optional JSON/YAML config override"
    )
    parser.add_argument(
        "--dataset", choices=sorted(available_datasets()), help="Override the dataset"
    )
    parser.add_argument("--epochs", type=int, help="Number of training epochs")
    parser.add_argument("--lr", type=float, help="Learning rate")
    parser.add_argument(
        "--hidden", type=int, help="Hidden layer size (network learners only)"
    )
    parser.add_argument(
        "--eval-every", type=int, help="Evaluate on held-out samples every N epochs"
    )
    parser.add_argument("--seed", type=int, help="Seed used for initialisation and shuffling")
    parser.add_argument(
        "--legacy-order",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Back-propagate the hidden error through already-updated output weights",
    )
    parser.add_argument("--run-dir", help="Directory receiving metrics and manifests")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Render loss.png with matplotlib"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> dict:
    config = pipelines.load_preset(args.preset)

    if args.config:
        override = pipelines.read_config_file(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = pipelines.merge_config(config, override)

    train = config.setdefault("train", {})
    model = config.setdefault("model", {})
    if args.dataset:
        config["data"] = {"name": args.dataset, "options": {}}
    if args.epochs is not None:
        train["epochs"] = int(args.epochs)
    if args.lr is not None:
        train["lr"] = float(args.lr)
    if args.eval_every is not None:
        train["eval_every"] = int(args.eval_every)
    if args.seed is not None:
        train["seed"] = int(args.seed)
    if args.run_dir:
        train["run_dir"] = args.run_dir
    if args.enable_plots:
        train["enable_plots"] = True
    if args.hidden is not None:
        model["hidden"] = int(args.hidden)
    if args.legacy_order is not None:
        model["legacy_order"] = bool(args.legacy_order)
    return config


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = resolve_config(args)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)
    print(_format_result(result))


if __name__ == "__main__":
    main()
