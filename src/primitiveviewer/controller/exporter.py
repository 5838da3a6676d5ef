"""
GLB Export (trimesh Adapter)
============================
This module translates the assembled scene into a binary glTF container.

Why is this file needed?
------------------------
1. Translation: It converts our BuiltObjects (local PyVista geometry plus a
   4x4 transform) into trimesh geometry hung on scene-graph nodes, so the
   exported file keeps one node per primitive.
2. Export: It produces the ``.glb`` bytes; the binary container embeds every
   buffer, so no side files are written.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Collection, Sequence, TYPE_CHECKING

import numpy as np
import trimesh
from trimesh.path import Path3D
from trimesh.path.entities import Line

from primitiveviewer.model.builder import BuiltObject, ObjectKind

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


class ExportError(RuntimeError):
    """The scene could not be encoded or written."""


UNLIT_EXTENSION = "KHR_materials_unlit"


@dataclass(frozen=True)
class ExportOptions:
    include_lines: bool = True
    # Vertex normals for meshes (trimesh computes them with scipy)
    include_normals: bool = True
    # A GLB container always embeds images and buffers; False cannot be honoured
    embed_images: bool = True
    # Tag points and lines with KHR_materials_unlit, as the viewport draws them
    unlit_materials: bool = True


def color_to_rgba(color: Sequence[float]) -> npt.NDArray[np.uint8]:
    """Unit-interval RGB -> opaque RGBA bytes (out-of-range values are clipped)."""
    rgb = np.clip(np.round(np.asarray(color, dtype=np.float64) * 255.0), 0, 255)
    return np.append(rgb, 255).astype(np.uint8)


def node_name(index: int, obj: BuiltObject) -> str:
    return f"{index:03d}_{obj.type.value}"


def mark_unlit(tree: dict[str, Any], names: Collection[str]) -> dict[str, Any]:
    """
    Give every glTF mesh named in `names` its own unlit material.

    Runs on the glTF JSON tree before trimesh serialises it. An existing
    material is copied rather than edited, so lit meshes sharing it keep
    their shading.
    """
    materials = tree.get("materials", [])
    marked = False
    for mesh in tree.get("meshes", []):
        if mesh.get("name") not in names:
            continue
        for primitive in mesh.get("primitives", []):
            index = primitive.get("material")
            if index is None:
                material = {"pbrMetallicRoughness": {"baseColorFactor": [1.0, 1.0, 1.0, 1.0]}}
            else:
                material = dict(materials[index])
            material["extensions"] = {**material.get("extensions", {}), UNLIT_EXTENSION: {}}
            materials.append(material)
            primitive["material"] = len(materials) - 1
            marked = True

    if marked:
        tree["materials"] = materials
        used = tree.setdefault("extensionsUsed", [])
        if UNLIT_EXTENSION not in used:
            used.append(UNLIT_EXTENSION)
    return tree


class GlbExporter:
    def to_trimesh(self, obj: BuiltObject) -> trimesh.Trimesh | Path3D:
        """Local-frame trimesh geometry for one object."""
        vertices = np.asarray(obj.geometry.points, dtype=np.float64)
        rgba = color_to_rgba(obj.color)

        if obj.kind == ObjectKind.POLYLINE:
            entity = Line(points=np.arange(len(vertices)), color=rgba)
            return Path3D(entities=[entity], vertices=vertices, process=False)

        # The builder triangulates every mesh: [3, i, j, k] per face
        faces = np.asarray(obj.geometry.faces).reshape(-1, 4)[:, 1:]
        return trimesh.Trimesh(
            vertices=vertices,
            faces=faces,
            face_colors=np.tile(rgba, (len(faces), 1)),
            process=False,
        )

    def to_scene(self, objects: Sequence[BuiltObject], options: ExportOptions = ExportOptions()) -> trimesh.Scene:
        scene = trimesh.Scene()
        for i, obj in enumerate(objects):
            if obj.kind == ObjectKind.POLYLINE and not options.include_lines:
                continue
            name = node_name(i, obj)
            scene.add_geometry(
                self.to_trimesh(obj),
                node_name=name,
                geom_name=name,
                transform=obj.matrix,
            )
        return scene

    def export(self, objects: Sequence[BuiltObject], options: ExportOptions = ExportOptions()) -> bytes:
        """
        Encode the objects as GLB bytes.

        Raises:
            ExportError: If there is nothing to export, the options ask for
                something a GLB cannot do, or trimesh fails.
        """
        if not options.embed_images:
            raise ExportError("A GLB container always embeds its images and buffers.")

        logger.info(f"Exporting {len(objects)} object(s) to GLB.")
        scene = self.to_scene(objects, options)
        if not scene.geometry:
            raise ExportError("Nothing to export.")
        unlit = {node_name(i, obj) for i, obj in enumerate(objects) if not obj.lit}

        def postprocess(tree: dict[str, Any]) -> dict[str, Any]:
            return mark_unlit(tree, unlit) if options.unlit_materials else tree

        try:
            data = scene.export(
                file_type="glb",
                include_normals=options.include_normals,
                tree_postprocessor=postprocess,
            )
        except Exception as e:
            logger.exception(f"GLB encoding failed: {e}")
            raise ExportError(f"GLB encoding failed: {e}") from e
        logger.info(f"GLB encoded ({len(data)} bytes).")
        return data
