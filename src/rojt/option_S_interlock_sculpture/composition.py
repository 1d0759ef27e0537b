"""
Fault-tolerant boolean composition of box primitives.

Pipeline:
1. Fold each shade's primitives into one solid with ADDITION
2. Add the base plate to the dark solid
3. Interlock: SUBTRACT the dark solid (plate included) from the light solid

Any single boolean may fail, either by raising inside the kernel or by
returning a mesh with no surface. A failed step raises CompositionError; the
fold catches it, logs a warning and keeps the previous accumulator, so an
accumulator is always either unset (None) or the last good solid. The one
exception is the plate step: if adding the plate fails the dark solid
becomes the plate alone, because the interlock needs the plate present.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import trimesh
from tqdm import tqdm

from ..common.config import DEFAULT_BOOLEAN_ENGINE
from ..common.mesh_ops import is_renderable
from .brush import Brush, Shade, make_box

logger = logging.getLogger(__name__)

PLATE_SIZE = 300.0
PLATE_THICKNESS = 1.0


class BooleanOp(Enum):
    """Boolean operators, valued by their trimesh.boolean function name."""
    ADDITION = "union"
    SUBTRACTION = "difference"


class CompositionError(Exception):
    """A single boolean step failed or produced an unusable solid."""

    def __init__(self, op: BooleanOp, reason: str):
        super().__init__(f"{op.name} failed: {reason}")
        self.op = op
        self.reason = reason


class BooleanEvaluator:
    """
    Runs boolean operations through trimesh.boolean.

    Args:
        engine: trimesh boolean backend ("manifold", "blender")
        check_volume: Ask trimesh to reject non-volume operands
    """

    def __init__(self, engine: str = DEFAULT_BOOLEAN_ENGINE, check_volume: bool = False):
        self.engine = engine
        self.check_volume = check_volume

    def run(self, a: trimesh.Trimesh, b: trimesh.Trimesh, op: BooleanOp) -> Any:
        """Raw kernel call; may raise or return anything."""
        operation = getattr(trimesh.boolean, op.value)
        return operation([a, b], engine=self.engine, check_volume=self.check_volume)

    def evaluate(self, a: Brush, b: Brush, op: BooleanOp) -> Brush:
        """
        Combine two solids.

        Returns:
            World-space Brush carrying the shade of ``a``

        Raises:
            CompositionError: kernel error or result without a surface
        """
        try:
            result = self.run(a.world_mesh(), b.world_mesh(), op)
        except Exception as exc:
            raise CompositionError(op, f"{type(exc).__name__}: {exc}") from exc

        if isinstance(result, (list, tuple)):
            result = trimesh.util.concatenate(list(result)) if result else None

        if not is_renderable(result):
            raise CompositionError(op, "result has no renderable surface")

        return Brush(mesh=result, shade=a.shade)


@dataclass
class FoldReport:
    """Outcome of folding one shade's primitives."""
    label: str
    n_input: int = 0
    merged: int = 0
    skipped: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "n_input": self.n_input,
            "merged": self.merged,
            "skipped": list(self.skipped),
        }


@dataclass
class CompositionReport:
    light: FoldReport
    dark: FoldReport
    plate_only: bool = False
    plate_fallback: bool = False
    interlock_applied: bool = False

    @property
    def n_failures(self) -> int:
        return (len(self.light.skipped) + len(self.dark.skipped) +
                int(self.plate_fallback) +
                int(self.light.merged > 0 and not self.interlock_applied))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "light": self.light.to_dict(),
            "dark": self.dark.to_dict(),
            "plate_only": self.plate_only,
            "plate_fallback": self.plate_fallback,
            "interlock_applied": self.interlock_applied,
            "n_failures": self.n_failures,
        }


@dataclass
class CompositionResult:
    """light_solid is None when there were no light primitives."""
    light_solid: Optional[Brush]
    dark_solid: Brush
    report: CompositionReport


def make_base_plate(size: float = PLATE_SIZE, thickness: float = PLATE_THICKNESS) -> Brush:
    """Flat square plate centred on the origin."""
    return make_box(size, size, thickness, position=np.zeros(3), shade=Shade.DARK)


def fold_union(
    primitives: Sequence[Brush],
    evaluator: Optional[BooleanEvaluator] = None,
    label: str = "solid",
    show_progress: bool = False
) -> Tuple[Optional[Brush], FoldReport]:
    """
    Merge primitives with ADDITION, skipping any step that fails.

    The first primitive seeds the accumulator. Failing at step k leaves the
    same result as leaving primitive k out of the input.

    Returns:
        (merged solid or None for an empty input, FoldReport)
    """
    evaluator = evaluator or BooleanEvaluator()
    report = FoldReport(label=label, n_input=len(primitives))

    if not primitives:
        logger.info(f"No {label} primitives to merge")
        return None, report

    first = primitives[0]
    accumulator = Brush(mesh=first.world_mesh(), shade=first.shade)
    report.merged = 1

    steps = tqdm(
        range(1, len(primitives)),
        desc=f"Merging {label}",
        unit="op",
        disable=not show_progress,
        leave=False
    )
    for index in steps:
        try:
            accumulator = evaluator.evaluate(accumulator, primitives[index], BooleanOp.ADDITION)
            report.merged += 1
        except CompositionError as e:
            logger.warning(f"Skipping {label} primitive {index}: {e}")
            report.skipped.append(index)

    logger.info(f"Merged {report.merged}/{report.n_input} {label} primitives ({len(report.skipped)} skipped)")
    return accumulator, report


def compose(
    light_primitives: Sequence[Brush],
    dark_primitives: Sequence[Brush],
    evaluator: Optional[BooleanEvaluator] = None,
    plate: Optional[Brush] = None,
    show_progress: bool = False
) -> CompositionResult:
    """
    Build the interlocking light/dark pair.

    Args:
        light_primitives: Light boxes (may be empty)
        dark_primitives: Dark boxes (may be empty)
        evaluator: Boolean evaluator (BooleanEvaluator() when omitted)
        plate: Base plate (make_base_plate() when omitted)
        show_progress: tqdm progress bars for the folds

    Returns:
        CompositionResult; dark_solid is always set
    """
    evaluator = evaluator or BooleanEvaluator()
    plate = plate or make_base_plate()

    # Step 1: independent folds
    light_solid, light_report = fold_union(light_primitives, evaluator, "light", show_progress)
    dark_solid, dark_report = fold_union(dark_primitives, evaluator, "dark", show_progress)
    report = CompositionReport(light=light_report, dark=dark_report)

    # Step 2: base plate
    if dark_solid is None:
        logger.info("No dark pieces, using base plate as dark solid")
        dark_solid = Brush(mesh=plate.world_mesh(), shade=Shade.DARK)
        report.plate_only = True
    else:
        logger.info("Adding base plate to dark pieces")
        try:
            dark_solid = evaluator.evaluate(dark_solid, plate, BooleanOp.ADDITION)
        except CompositionError as e:
            logger.warning(f"Error adding base plate, using base only: {e}")
            dark_solid = Brush(mesh=plate.world_mesh(), shade=Shade.DARK)
            report.plate_fallback = True

    # Step 3: interlock
    if light_solid is not None:
        logger.info("Creating interlocking geometry - subtracting dark from light")
        try:
            light_solid = evaluator.evaluate(light_solid, dark_solid, BooleanOp.SUBTRACTION)
            report.interlock_applied = True
        except CompositionError as e:
            logger.warning(f"Interlock failed, keeping unsubtracted light pieces: {e}")

    return CompositionResult(light_solid=light_solid, dark_solid=dark_solid, report=report)
