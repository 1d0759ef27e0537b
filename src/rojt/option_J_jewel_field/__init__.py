"""
Option J: Jewel Field

Circle packing seeds independent faceted diamonds, each built from a lattice
of small cubes inside an asymmetric bipyramid envelope.
"""

from pathlib import Path

__version__ = "1.0.0"

MODULE_DIR = Path(__file__).parent

from .packer import Circle, CirclePacker
from .diamond import ParametricDiamond, synthesize, stamp_cubes
from .build import (
    JewelParams,
    JewelField,
    Diamond,
    Appearance,
    build_jewel_field,
    height_levels,
)

__all__ = [
    "Circle",
    "CirclePacker",
    "ParametricDiamond",
    "synthesize",
    "stamp_cubes",
    "JewelParams",
    "JewelField",
    "Diamond",
    "Appearance",
    "build_jewel_field",
    "height_levels",
]
