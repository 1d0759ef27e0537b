"""
Option S: Interlock Sculpture

Two complementary solids (light positive, dark negative) grown from
concentric square frames of noise-extruded blocks.

Algorithm:
1. Sample frames i = frame_start, frame_start + frame_step, ... <= frame_cap
2. Classify each boundary block light/dark against the balance threshold
3. Fold each class into one solid with boolean ADDITION
4. Add the base plate to the dark solid
5. Subtract the dark solid from the light solid (interlock)

"Regenerate" draws new frame parameters with the same noise table;
"new seed" reseeds the noise table first.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Tuple

import numpy as np

from ..common.config import Config, MeshMetadata, DEFAULT_BOOLEAN_ENGINE
from ..common.gltf_exporter import ScenePart
from ..common.io import build_metadata
from ..common.mesh_ops import compute_mesh_stats
from .brush import Brush
from .noise import NoiseField
from .frames import generate_frames, balance_label, FRAME_CAP
from .composition import (
    BooleanEvaluator, CompositionReport, compose, make_base_plate,
    PLATE_SIZE, PLATE_THICKNESS,
)

logger = logging.getLogger(__name__)

LIGHT_COLOR = (0xf5 / 255, 0xf5 / 255, 0xf5 / 255, 1.0)
DARK_COLOR = (0x14 / 255, 0x14 / 255, 0x14 / 255, 1.0)

FRAME_PARAM_RANGE = (5, 9)


@dataclass
class SculptureParams:
    """Parameters for Option S generation."""
    frame_start: int = 5
    frame_step: int = 5
    frame_cap: int = FRAME_CAP
    threshold: float = 0.0  # -1 .. 1, lower = more light blocks
    plate_size: float = PLATE_SIZE
    plate_thickness: float = PLATE_THICKNESS

    def __post_init__(self):
        self.frame_start = max(int(self.frame_start), 1)
        self.frame_step = max(int(self.frame_step), 1)
        self.threshold = float(np.clip(self.threshold, -1.0, 1.0))

    @classmethod
    def randomized(cls, rng: np.random.Generator, **overrides) -> "SculptureParams":
        """Frame start and step drawn uniformly from 5..9."""
        low, high = FRAME_PARAM_RANGE
        values = {
            "frame_start": int(rng.integers(low, high + 1)),
            "frame_step": int(rng.integers(low, high + 1)),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frame_start": self.frame_start,
            "frame_step": self.frame_step,
            "frame_cap": self.frame_cap,
            "threshold": self.threshold,
            "balance": balance_label(self.threshold),
            "plate_size": self.plate_size,
            "plate_thickness": self.plate_thickness,
        }


@dataclass
class Sculpture:
    """Result of one build: light may be unset, dark always holds the plate."""
    light: Optional[Brush]
    dark: Brush
    report: CompositionReport
    params: SculptureParams = field(default_factory=SculptureParams)

    def solids(self) -> Dict[str, Brush]:
        """Named solids that exist (unset light is simply absent)."""
        named = {"dark": self.dark}
        if self.light is not None:
            named["light"] = self.light
        return named

    def scene_parts(self) -> List[ScenePart]:
        parts = []
        if self.light is not None:
            parts.append(ScenePart(name="light", mesh=self.light.mesh, color=LIGHT_COLOR,
                                   metalness=0.1, roughness=0.6, extras={"shade": "light"}))
        parts.append(ScenePart(name="dark", mesh=self.dark.mesh, color=DARK_COLOR,
                               metalness=0.2, roughness=0.4, extras={"shade": "dark"}))
        return parts


def build_interlock_sculpture(
    params: Optional[SculptureParams] = None,
    config: Optional[Config] = None,
    noise: Optional[NoiseField] = None,
    evaluator: Optional[BooleanEvaluator] = None
) -> Tuple[Sculpture, Dict[str, MeshMetadata]]:
    """
    Generate the interlocking light/dark sculpture.

    Args:
        params: Frame/threshold/plate parameters (defaults to SculptureParams())
        config: Run configuration (boolean engine, progress bars, seed)
        noise: Noise field to sample; Perlin's reference table when omitted
        evaluator: Boolean evaluator; BooleanEvaluator(config.boolean_engine) when omitted

    Returns:
        Tuple of (Sculpture, metadata per existing solid keyed "light"/"dark")
    """
    params = params or SculptureParams()
    config = config or Config()
    noise = noise or NoiseField()
    evaluator = evaluator or BooleanEvaluator(engine=config.boolean_engine or DEFAULT_BOOLEAN_ENGINE)

    logger.info("=" * 60)
    logger.info("OPTION S: Interlock Sculpture")
    logger.info("=" * 60)

    # Step 1-2: Frames
    logger.info(f"\nStep 1: Frames {params.frame_start}..{params.frame_cap} step {params.frame_step}, "
                f"threshold {params.threshold:+.2f} ({balance_label(params.threshold)})")
    cells = generate_frames(
        params.frame_start,
        params.frame_step,
        noise,
        threshold=params.threshold,
        frame_cap=params.frame_cap
    )

    # Step 3-5: Composition
    logger.info(f"\nStep 2: Merging {len(cells.light)} light cubes and {len(cells.dark)} dark cubes")
    result = compose(
        cells.light,
        cells.dark,
        evaluator=evaluator,
        plate=make_base_plate(params.plate_size, params.plate_thickness),
        show_progress=config.show_progress
    )

    sculpture = Sculpture(light=result.light_solid, dark=result.dark_solid, report=result.report, params=params)

    metadata = {}
    for part, solid in sculpture.solids().items():
        stats = compute_mesh_stats(solid.mesh)
        metadata[part] = build_metadata(
            solid.mesh,
            pipeline="sculpture",
            part=part,
            seed=config.seed,
            generation_params={
                "algorithm": "noise_frame_interlock",
                **params.to_dict(),
                "boolean_engine": getattr(evaluator, "engine", None),
                "computed": {
                    "n_light_cells": len(cells.light),
                    "n_dark_cells": len(cells.dark),
                    "composition": result.report.to_dict(),
                    "noise_permutation_head": noise.permutation[:8].tolist(),
                },
                "quality": {
                    "is_watertight": stats["is_watertight"],
                    "volume": stats["volume"],
                },
            }
        )

    if result.report.n_failures:
        logger.warning(f"Sculpture complete with {result.report.n_failures} recovered boolean failures")
    else:
        logger.info("Sculpture complete!")

    return sculpture, metadata
