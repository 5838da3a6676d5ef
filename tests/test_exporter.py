import json
import struct

import numpy as np
import pytest
import trimesh

from primitiveviewer.controller.exporter import (
    ExportError,
    ExportOptions,
    GlbExporter,
    UNLIT_EXTENSION,
    color_to_rgba,
    mark_unlit,
    node_name,
)
from primitiveviewer.model.builder import build
from primitiveviewer.model.scene import assemble


@pytest.fixture
def objects(mixed_document):
    return assemble(mixed_document["primitives"]).objects


def test_color_to_rgba():
    assert color_to_rgba((1.0, 0.5, 0.0)).tolist() == [255, 128, 0, 255]
    assert color_to_rgba((2.0, -1.0, 0.0)).tolist() == [255, 0, 0, 255]


def test_node_names_are_indexed(objects):
    assert node_name(0, objects[0]) == "000_box"
    assert node_name(12, objects[2]) == "012_line"


def test_mesh_conversion_keeps_local_frame(objects):
    box = objects[0]
    mesh = GlbExporter().to_trimesh(box)
    assert isinstance(mesh, trimesh.Trimesh)
    np.testing.assert_allclose(mesh.bounds, [[-1.0, -0.5, -0.5], [1.0, 0.5, 0.5]], atol=1e-6)
    assert len(mesh.faces) == 12


def test_scene_has_one_node_per_object(objects):
    scene = GlbExporter().to_scene(objects)
    assert len(scene.graph.nodes_geometry) == len(objects)
    np.testing.assert_allclose(scene.graph["000_box"][0], objects[0].matrix)


def test_lines_can_be_left_out(objects):
    scene = GlbExporter().to_scene(objects, ExportOptions(include_lines=False))
    assert sorted(scene.graph.nodes_geometry) == ["000_box", "001_sphere"]


def test_export_produces_glb(objects):
    data = GlbExporter().export(objects)
    magic, version, length = struct.unpack("<4sII", data[:12])
    assert magic == b"glTF"
    assert version == 2
    assert length == len(data)


def test_export_without_objects_raises():
    with pytest.raises(ExportError):
        GlbExporter().export(())


def test_encoder_failure_is_wrapped(objects, monkeypatch):
    def broken(self, *args, **kwargs):
        raise RuntimeError("encoder exploded")

    monkeypatch.setattr(trimesh.Scene, "export", broken)
    with pytest.raises(ExportError, match="encoder exploded"):
        GlbExporter().export(objects)


def glb_json(data):
    """The glTF JSON chunk of a GLB container."""
    chunk_length, chunk_type = struct.unpack("<I4s", data[12:20])
    assert chunk_type == b"JSON"
    return json.loads(data[20:20 + chunk_length])


def mesh_by_name(tree, name):
    return next(m for m in tree["meshes"] if m["name"] == name)


def test_export_writes_vertex_normals(objects):
    tree = glb_json(GlbExporter().export(objects))
    box = mesh_by_name(tree, "000_box")
    assert "NORMAL" in box["primitives"][0]["attributes"]


def test_unlit_objects_get_unlit_material():
    objects = [build({"type": "box"}).obj, build({"type": "point", "position": [2, 0, 0]}).obj]
    tree = glb_json(GlbExporter().export(objects))

    assert UNLIT_EXTENSION in tree["extensionsUsed"]
    point = mesh_by_name(tree, "001_point")["primitives"][0]
    assert UNLIT_EXTENSION in tree["materials"][point["material"]]["extensions"]

    box = mesh_by_name(tree, "000_box")["primitives"][0]
    if "material" in box:
        assert UNLIT_EXTENSION not in tree["materials"][box["material"]].get("extensions", {})


def test_unlit_materials_can_be_turned_off():
    objects = [build({"type": "point"}).obj]
    tree = glb_json(GlbExporter().export(objects, ExportOptions(unlit_materials=False)))
    assert UNLIT_EXTENSION not in tree.get("extensionsUsed", [])


def test_mark_unlit_copies_shared_material():
    tree = {
        "materials": [{"name": "shared"}],
        "meshes": [
            {"name": "lit", "primitives": [{"material": 0}]},
            {"name": "flat", "primitives": [{"material": 0}, {}]},
        ],
    }
    mark_unlit(tree, {"flat"})

    assert tree["meshes"][0]["primitives"][0]["material"] == 0
    assert "extensions" not in tree["materials"][0]
    flat = [tree["materials"][p["material"]] for p in tree["meshes"][1]["primitives"]]
    assert all(UNLIT_EXTENSION in m["extensions"] for m in flat)
    assert flat[0]["name"] == "shared"
    assert tree["extensionsUsed"] == [UNLIT_EXTENSION]


def test_mark_unlit_without_matches_leaves_tree():
    tree = {"meshes": [{"name": "lit", "primitives": [{}]}]}
    assert mark_unlit(tree, {"other"}) == {"meshes": [{"name": "lit", "primitives": [{}]}]}


def test_embed_images_cannot_be_disabled(objects):
    with pytest.raises(ExportError, match="embeds"):
        GlbExporter().export(objects, ExportOptions(embed_images=False))
