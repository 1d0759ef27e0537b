"""
Option S: Interlock Sculpture

Noise-driven square frames of extruded blocks, folded by boolean ADDITION into
a light and a dark solid, then interlocked by subtracting the dark solid
(with its base plate) from the light one.
"""

from pathlib import Path

__version__ = "1.0.0"

MODULE_DIR = Path(__file__).parent

from .noise import NoiseField
from .brush import Brush, Shade, make_box
from .frames import FrameCells, generate_frames, draw_cube_frame, frame_points, balance_label
from .composition import (
    BooleanOp,
    BooleanEvaluator,
    CompositionError,
    CompositionReport,
    CompositionResult,
    FoldReport,
    compose,
    fold_union,
    make_base_plate,
)
from .build import SculptureParams, Sculpture, build_interlock_sculpture

__all__ = [
    "NoiseField",
    "Brush",
    "Shade",
    "make_box",
    "FrameCells",
    "generate_frames",
    "draw_cube_frame",
    "frame_points",
    "balance_label",
    "BooleanOp",
    "BooleanEvaluator",
    "CompositionError",
    "CompositionReport",
    "CompositionResult",
    "FoldReport",
    "compose",
    "fold_union",
    "make_base_plate",
    "SculptureParams",
    "Sculpture",
    "build_interlock_sculpture",
]
