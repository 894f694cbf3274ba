"""CLI entry point: python -m voice_splitter split/batch/presets."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .batch import compute_batch_statistics, run_batch
from .params import SplitterParameters, all_preset_names, get_parameters, load_parameters
from .report import format_batch_text, format_json, format_text
from .runner import split_file

_LOG_FORMAT = "%(levelname)s: %(message)s"


def _build_parameters(args: argparse.Namespace) -> SplitterParameters:
    """Preset or parameter file, then command-line overrides."""
    if args.params:
        params = load_parameters(args.params)
    else:
        params = get_parameters(args.preset)
    return params.with_overrides(
        beam_size=args.beam_size,
        max_voices=args.max_voices,
        new_voice_probability=args.new_voice_prob,
    )


def _write(output: str, path: Optional[str]) -> None:
    if path:
        Path(path).write_text(output)
    else:
        print(output)


def cmd_split(args: argparse.Namespace) -> int:
    """Split a single file into voices."""
    params = _build_parameters(args)
    score, result, evaluation = split_file(
        args.input, params, with_evaluation=args.evaluate
    )
    if args.json:
        output = format_json(score, result, evaluation, params)
    else:
        output = format_text(score, result, evaluation, params)
    _write(output, args.output)
    return 0


def cmd_batch(args: argparse.Namespace) -> int:
    """Split and evaluate several files."""
    params = _build_parameters(args)
    results = run_batch(args.inputs, params)
    stats = compute_batch_statistics(results)
    if args.json:
        output = json.dumps({"results": results, "statistics": stats}, indent=2)
    else:
        output = format_batch_text(results, stats)
    _write(output, args.output)
    return 0 if not stats["failed_files"] else 1


def cmd_presets(args: argparse.Namespace) -> int:
    """List parameter presets."""
    for name in all_preset_names():
        values = ", ".join(f"{k}={v}" for k, v in get_parameters(name).to_dict().items())
        print(f"{name}: {values}")
    return 0


def _add_parameter_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("--preset", default="default", help="Parameter preset name")
    p.add_argument("--params", help="JSON file with parameter overrides")
    p.add_argument("--beam-size", type=int, help="Hypotheses kept between onsets")
    p.add_argument("--max-voices", type=int, help="Voice cap (0 = never create voices)")
    p.add_argument("--new-voice-prob", type=float, help="Base probability of a new voice")
    p.add_argument("--json", action="store_true", help="JSON output")
    p.add_argument("-o", "--output", help="Output file path")


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="voice_splitter",
        description="Split polyphonic note streams into monophonic voices",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    # split
    p_split = subparsers.add_parser("split", help="Split a single file")
    p_split.add_argument("input", help="Path to a .json or .mid file")
    p_split.add_argument("--evaluate", action="store_true",
                         help="Score the split against the file's tracks")
    _add_parameter_flags(p_split)

    # batch
    p_batch = subparsers.add_parser("batch", help="Evaluate several files")
    p_batch.add_argument("inputs", nargs="+", help="Paths to .json or .mid files")
    _add_parameter_flags(p_batch)

    # presets
    subparsers.add_parser("presets", help="List parameter presets")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO, format=_LOG_FORMAT
    )

    commands = {
        "split": cmd_split,
        "batch": cmd_batch,
        "presets": cmd_presets,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return 0

    try:
        return command(args)
    except (KeyError, ValueError, OSError) as exc:
        logging.error(str(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
