"""
Configuration and constants for jewel field and sculpture generation.

Geometry units are abstract scene units (1 unit ≈ 1 mm when exported to STL
for printing). Nothing is normalized after generation: the interlock
sculpture and its base plate must keep their relative scale.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
import json
from pathlib import Path


# Smallest edge length any generated primitive may have.
MIN_DIMENSION = 0.01

# Boolean backend handed to trimesh.boolean.
DEFAULT_BOOLEAN_ENGINE = "manifold"


@dataclass
class MeshMetadata:
    """
    Metadata written next to every exported mesh.

    Every exported mesh MUST include:
    - pipeline: "jewel" | "sculpture"
    - part: which solid of the pipeline this is (e.g. "light", "dark", "field")
    - n_triangles / n_vertices of the exported geometry
    """
    pipeline: str
    part: str
    n_triangles: int
    n_vertices: int
    seed: Optional[int] = None
    bounds: Optional[Dict[str, List[float]]] = None
    generation_params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pipeline": self.pipeline,
            "part": self.part,
            "n_triangles": self.n_triangles,
            "n_vertices": self.n_vertices,
            "seed": self.seed,
            "bounds": self.bounds,
            "generation_params": self.generation_params
        }

    def save(self, path: Path) -> None:
        """Save metadata to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MeshMetadata":
        return cls(**data)


@dataclass
class Config:
    """
    Global configuration shared by both pipelines.

    Per-pipeline shape parameters live in JewelParams / SculptureParams;
    this object only carries run-wide settings.
    """

    # Seed for numpy.random.default_rng (None = fresh entropy)
    seed: Optional[int] = None

    # Boolean backend for the sculpture composition
    boolean_engine: str = DEFAULT_BOOLEAN_ENGINE

    # Show tqdm progress bars during boolean folds
    show_progress: bool = False

    # Formats written by run_all (suffixes understood by save_mesh)
    export_formats: List[str] = field(default_factory=lambda: ["stl", "glb"])

    # Paths (relative to project root)
    output_dir: Path = field(default_factory=lambda: Path("outputs"))

    def get_output_path(self, pipeline: str) -> Path:
        """Get output directory for a pipeline ("jewel" or "sculpture")."""
        return self.output_dir / ("jewel_field" if pipeline == "jewel" else "interlock_sculpture")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seed": self.seed,
            "boolean_engine": self.boolean_engine,
            "show_progress": self.show_progress,
            "export_formats": list(self.export_formats),
            "output_dir": str(self.output_dir)
        }

    @classmethod
    def from_json(cls, path: Path) -> "Config":
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
        data["output_dir"] = Path(data.get("output_dir", "outputs"))
        return cls(**data)

    def save(self, path: Path) -> None:
        """Save config to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


# Global default config
DEFAULT_CONFIG = Config()
