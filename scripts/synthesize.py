"""Run a grid synthesis pipeline from a YAML config or a saved archive."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Sequence

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from gridsynth import Engine, GridSynthError, SynthesisReport, load_archive, save_archive
from gridsynth.config import build_engine_from_file
from gridsynth.render import render_text, save_png
from gridsynth.utils import open_event_log


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synthesize a grid from a transformation pipeline")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--config", type=Path, help="Path to YAML engine config")
    source.add_argument("--archive", type=Path, help="Path to a JSON engine archive")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible output")
    parser.add_argument("--runs", type=int, default=1, help="Number of synthesize passes")
    parser.add_argument("--output", type=Path, default=None, help="Write the resulting archive here")
    parser.add_argument("--png", type=Path, default=None, help="Write a PNG rendering here")
    parser.add_argument("--cell-size", type=int, default=8, help="Pixels per cell in the PNG")
    parser.add_argument("--events", type=Path, default=None, help="Append JSONL step events here")
    parser.add_argument("--print", dest="print_grid", action="store_true", help="Print the grid as text")
    args = parser.parse_args(argv)
    if args.runs <= 0:
        parser.error("--runs must be positive")
    return args


def build(args: argparse.Namespace) -> Engine:
    if args.config is not None:
        return build_engine_from_file(args.config, seed=args.seed)
    return load_archive(args.archive, seed=args.seed)


def run(engine: Engine, runs: int, events: Path | None = None) -> List[SynthesisReport]:
    if events is None:
        return [engine.synthesize() for _ in range(runs)]
    with open_event_log(events) as log:
        return [engine.synthesize(event_log=log) for _ in range(runs)]


def summarise(engine: Engine, reports: Sequence[SynthesisReport]) -> Dict[str, object]:
    last = reports[-1]
    return {
        "runs": len(reports),
        "grid": {"width": engine.grid.width, "height": engine.grid.height},
        "symbols": len(engine.alphabet),
        "palette": engine.grid.palette(),
        "last_run": last.to_dict(),
    }


def write_outputs(engine: Engine, args: argparse.Namespace) -> None:
    if args.output:
        path = save_archive(engine, args.output)
        print(f"[synthesize] Wrote archive to {path}")

    if args.png:
        try:
            path = save_png(engine.grid, args.png, args.cell_size)
        except ImportError as exc:
            print(f"[synthesize] Pillow not installed, skipping PNG export ({exc})")
        else:
            print(f"[synthesize] Wrote image to {path}")


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        engine = build(args)
        reports = run(engine, args.runs, args.events)
    except (GridSynthError, ValueError, OSError) as exc:
        print(f"[synthesize] error: {exc}", file=sys.stderr)
        return 1

    print(f"[synthesize] Ran {len(reports)} pass(es) over {engine.grid.width}x{engine.grid.height} grid")

    try:
        write_outputs(engine, args)
    except (GridSynthError, ValueError, OSError) as exc:
        print(f"[synthesize] error: {exc}", file=sys.stderr)
        return 1

    if args.print_grid:
        print(render_text(engine.grid, engine.alphabet))

    print("[synthesize] Summary:")
    print(json.dumps(summarise(engine, reports), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
