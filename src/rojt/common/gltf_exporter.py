"""
glTF/GLB Export Module

Exports generated solids to glTF binary with one node and one PBR material
per part, so the renderer receives the light/dark classification, opacity
and placement alongside the geometry.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List, Sequence, Tuple
from pathlib import Path

import numpy as np
import trimesh
from pygltflib import (
    GLTF2, Scene, Node, Mesh as GLTFMesh, Primitive, Attributes, Accessor, BufferView, Buffer,
    Material, PbrMetallicRoughness,
    ARRAY_BUFFER, ELEMENT_ARRAY_BUFFER, FLOAT, UNSIGNED_INT, TRIANGLES,
)

from .mesh_ops import is_renderable

logger = logging.getLogger(__name__)


@dataclass
class ScenePart:
    """A mesh plus the display metadata the renderer needs."""
    name: str
    mesh: trimesh.Trimesh
    color: Tuple[float, float, float, float] = (0.8, 0.8, 0.8, 1.0)  # RGBA
    metalness: float = 0.1
    roughness: float = 0.6
    translation: Sequence[float] = (0.0, 0.0, 0.0)
    extras: Dict[str, Any] = field(default_factory=dict)


class GLTFExporter:
    """
    Exports jewel fields and sculptures to GLB for Three.js visualization.
    """

    def __init__(self, embed_metadata: bool = True):
        """
        Initialize exporter.

        Args:
            embed_metadata: Whether to embed generation metadata in glTF extras
        """
        self.embed_metadata = embed_metadata

    def export(
        self,
        mesh: trimesh.Trimesh,
        output_path: Path,
        metadata: Optional[Dict[str, Any]] = None,
        material_color: tuple = (0.8, 0.8, 0.8, 1.0)
    ) -> Path:
        """Export a single mesh to GLB."""
        return self.export_parts(
            [ScenePart(name="mesh", mesh=mesh, color=material_color)],
            output_path,
            metadata
        )

    def export_parts(
        self,
        parts: List[ScenePart],
        output_path: Path,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Path:
        """
        Export several parts to one GLB file.

        Parts without a renderable surface are skipped.

        Args:
            parts: Scene parts (mesh + material + placement)
            output_path: Output file path (.glb)
            metadata: Optional metadata dictionary to embed

        Returns:
            Path to exported file
        """
        output_path = Path(output_path)

        parts = [p for p in parts if is_renderable(p.mesh)]
        if not parts:
            raise ValueError("No renderable parts to export")

        output_path.parent.mkdir(parents=True, exist_ok=True)

        gltf = GLTF2(
            scene=0,
            scenes=[Scene(nodes=list(range(len(parts))))],
            nodes=[],
            meshes=[],
            materials=[],
            accessors=[],
            bufferViews=[],
            buffers=[]
        )

        blob = b""
        for index, part in enumerate(parts):
            vertices = np.asarray(part.mesh.vertices, dtype=np.float32)
            indices = np.asarray(part.mesh.faces, dtype=np.uint32).flatten()
            normals = np.asarray(part.mesh.vertex_normals, dtype=np.float32)

            vertex_blob = vertices.tobytes()
            index_blob = indices.tobytes()
            normal_blob = normals.tobytes()

            first_accessor = len(gltf.accessors)
            first_view = len(gltf.bufferViews)

            # Positions, indices, normals; float32/uint32 keep 4-byte alignment
            for data, target in (
                (vertex_blob, ARRAY_BUFFER),
                (index_blob, ELEMENT_ARRAY_BUFFER),
                (normal_blob, ARRAY_BUFFER),
            ):
                gltf.bufferViews.append(
                    BufferView(
                        buffer=0,
                        byteOffset=len(blob),
                        byteLength=len(data),
                        target=target
                    )
                )
                blob += data

            gltf.accessors.extend([
                Accessor(
                    bufferView=first_view,
                    componentType=FLOAT,
                    count=len(vertices),
                    type="VEC3",
                    max=vertices.max(axis=0).tolist(),
                    min=vertices.min(axis=0).tolist()
                ),
                Accessor(
                    bufferView=first_view + 1,
                    componentType=UNSIGNED_INT,
                    count=len(indices),
                    type="SCALAR"
                ),
                Accessor(
                    bufferView=first_view + 2,
                    componentType=FLOAT,
                    count=len(normals),
                    type="VEC3"
                ),
            ])

            color = [float(c) for c in part.color]
            gltf.materials.append(
                Material(
                    name=f"{part.name}_material",
                    pbrMetallicRoughness=PbrMetallicRoughness(
                        baseColorFactor=color,
                        metallicFactor=float(part.metalness),
                        roughnessFactor=float(part.roughness)
                    ),
                    alphaMode="BLEND" if color[3] < 1.0 else "OPAQUE",
                    doubleSided=True
                )
            )

            gltf.meshes.append(GLTFMesh(
                name=part.name,
                primitives=[
                    Primitive(
                        attributes=Attributes(POSITION=first_accessor, NORMAL=first_accessor + 2),
                        indices=first_accessor + 1,
                        material=index,
                        mode=TRIANGLES
                    )
                ]
            ))

            node = Node(
                name=part.name,
                mesh=index,
                translation=[float(t) for t in part.translation]
            )
            if part.extras:
                node.extras = part.extras
            gltf.nodes.append(node)

        gltf.buffers.append(Buffer(byteLength=len(blob)))

        if self.embed_metadata and metadata:
            gltf.extras = metadata

        gltf.set_binary_blob(blob)
        gltf.save(str(output_path))

        logger.info(f"Exported GLB with {len(parts)} parts to {output_path}")
        return output_path
