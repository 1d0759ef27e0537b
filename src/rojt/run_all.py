#!/usr/bin/env python3
"""
ROJT - Orchestrator

Run the jewel field and/or interlock sculpture pipelines and export results.

Usage:
    python -m rojt.run_all --pipelines jewel sculpture --seed 7
    python -m rojt.run_all --pipelines sculpture --threshold -0.4 --reseed --output outputs
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional
from datetime import datetime

import numpy as np

from .common.config import Config
from .common.io import save_mesh
from .common.gltf_exporter import GLTFExporter

logger = logging.getLogger(__name__)

PIPELINES = ("jewel", "sculpture")


def run_jewel(args: argparse.Namespace, config: Config, rng: np.random.Generator) -> dict:
    """Run Option J: Jewel Field."""
    from .option_J_jewel_field.build import JewelParams, build_jewel_field

    params = JewelParams(
        count=args.count,
        min_radius=args.min_radius,
        max_radius=args.max_radius,
        height=args.height,
        rotation=args.rotation
    )
    jewel_field, metadata = build_jewel_field(params, config, rng)

    output_dir = config.get_output_path("jewel")
    written = []
    if len(jewel_field) == 0:
        logger.warning("Jewel field is empty, nothing to export")
        return {"metadata": metadata.to_dict(), "files": written}

    for fmt in config.export_formats:
        path = output_dir / f"jewel_field.{fmt}"
        if fmt == "glb":
            GLTFExporter().export_parts(jewel_field.scene_parts(), path, metadata.to_dict())
            metadata.save(path.with_suffix(".json"))
        else:
            save_mesh(jewel_field.combined_mesh(), path, metadata)
        written.append(str(path))

    return {"metadata": metadata.to_dict(), "files": written}


def run_sculpture(args: argparse.Namespace, config: Config, rng: np.random.Generator) -> dict:
    """Run Option S: Interlock Sculpture."""
    from .option_S_interlock_sculpture.build import SculptureParams, build_interlock_sculpture
    from .option_S_interlock_sculpture.noise import NoiseField

    noise = NoiseField()
    if args.reseed:
        noise.reseed(rng)

    params = SculptureParams.randomized(
        rng,
        frame_start=args.frame_start,
        frame_step=args.frame_step,
        threshold=args.threshold
    )
    sculpture, metadata = build_interlock_sculpture(params, config, noise=noise)

    output_dir = config.get_output_path("sculpture")
    written = []
    for fmt in config.export_formats:
        if fmt == "glb":
            path = output_dir / "sculpture.glb"
            scene_meta = {part: meta.to_dict() for part, meta in metadata.items()}
            GLTFExporter().export_parts(sculpture.scene_parts(), path, scene_meta)
            written.append(str(path))
            continue
        for part, solid in sculpture.solids().items():
            path = output_dir / f"sculpture_{part}.{fmt}"
            save_mesh(solid.mesh, path, metadata[part])
            written.append(str(path))

    return {
        "metadata": {part: meta.to_dict() for part, meta in metadata.items()},
        "files": written,
    }


def run_all(
    pipelines: List[str],
    args: argparse.Namespace,
    config: Config
) -> dict:
    """
    Run the requested pipelines.

    Args:
        pipelines: Pipeline names ("jewel", "sculpture")
        args: Parsed command line (shape parameters)
        config: Configuration

    Returns:
        Summary dictionary
    """
    summary = {
        "timestamp": datetime.now().isoformat(),
        "config": config.to_dict(),
        "pipelines": pipelines,
        "results": {},
        "errors": []
    }

    runners = {
        "jewel": run_jewel,
        "sculpture": run_sculpture,
    }

    rng = np.random.default_rng(config.seed)

    for pipeline in pipelines:
        pipeline = pipeline.lower()
        if pipeline not in runners:
            logger.warning(f"Unknown pipeline: {pipeline}")
            continue

        logger.info(f"\n--- Pipeline {pipeline} ---")
        try:
            result = runners[pipeline](args, config, rng)
            summary["results"][pipeline] = {
                "status": "success",
                **result
            }
        except Exception as e:
            logger.error(f"Pipeline {pipeline} failed: {e}")
            summary["results"][pipeline] = {
                "status": "error",
                "error": str(e)
            }
            summary["errors"].append({
                "pipeline": pipeline,
                "error": str(e)
            })

    return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ROJT - Generate jewel fields and interlocking sculptures"
    )
    parser.add_argument(
        "--pipelines", "-p",
        nargs="+",
        default=list(PIPELINES),
        help="Pipelines to run (jewel, sculpture)"
    )
    parser.add_argument("--config", "-c", type=Path, help="JSON config file")
    parser.add_argument("--seed", "-s", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Output directory"
    )
    parser.add_argument(
        "--formats", "-f",
        nargs="+",
        default=None,
        help="Export formats (stl, glb, obj, ply)"
    )
    parser.add_argument("--engine", default=None, help="trimesh boolean engine")
    parser.add_argument("--progress", action="store_true", help="Show boolean fold progress")

    jewel = parser.add_argument_group("jewel field")
    jewel.add_argument("--count", type=int, default=20, help="Number of circles to pack")
    jewel.add_argument("--min-radius", type=float, default=0.5)
    jewel.add_argument("--max-radius", type=float, default=3.0)
    jewel.add_argument("--height", type=float, default=2.0, help="Base diamond height")
    jewel.add_argument("--rotation", type=float, default=1.0, help="Spin speed multiplier")

    sculpture = parser.add_argument_group("interlock sculpture")
    sculpture.add_argument("--frame-start", type=int, default=None, help="First frame scale (random 5-9)")
    sculpture.add_argument("--frame-step", type=int, default=None, help="Frame scale step (random 5-9)")
    sculpture.add_argument("--threshold", type=float, default=None, help="Light/dark balance, -1..1")
    sculpture.add_argument("--reseed", action="store_true", help="Shuffle the noise table first")

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )
    return parser


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)

    # Setup logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    # Build config
    config = Config.from_json(args.config) if args.config else Config()
    if args.seed is not None:
        config.seed = args.seed
    if args.output is not None:
        config.output_dir = args.output
    if args.formats:
        config.export_formats = [f.lower().lstrip(".") for f in args.formats]
    if args.engine:
        config.boolean_engine = args.engine
    if args.progress:
        config.show_progress = True

    logger.info(f"Running pipelines {args.pipelines} (seed={config.seed})")
    logger.info(f"Output: {config.output_dir}")

    summary = run_all(args.pipelines, args, config)

    # Save summary
    summary_path = config.output_dir / "run_summary.json"
    summary_path.parent.mkdir(parents=True, exist_ok=True)
    with open(summary_path, 'w') as f:
        json.dump(summary, f, indent=2)

    logger.info(f"\nSummary saved to: {summary_path}")

    n_success = sum(1 for r in summary["results"].values() if r.get("status") == "success")
    n_errors = len(summary["errors"])

    logger.info(f"\n{'='*60}")
    logger.info(f"COMPLETE: {n_success} successful, {n_errors} errors")
    logger.info(f"{'='*60}")

    if n_errors > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
