"""
ROJT - procedural jewel fields and interlocking sculptures.

Two generation pipelines:
- Option J: Jewel Field (circle packing seeding faceted cube-lattice diamonds)
- Option S: Interlock Sculpture (noise-driven frame extrusions merged into
  complementary light/dark solids by boolean composition)

Usage:
    python -m rojt.run_all --pipelines jewel sculpture --seed 7
"""

__version__ = "1.0.0"
