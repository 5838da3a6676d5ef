import numpy as np
import pytest
from numpy.testing import assert_allclose

from primitiveviewer import config
from primitiveviewer.model.builder import Built, Skipped
from primitiveviewer.model.scene import (
    Bounds,
    CameraFrame,
    SceneState,
    assemble,
    compute_bounds,
    is_record_sequence,
)


def test_outcomes_keep_document_order(mixed_document):
    assembly = assemble(mixed_document["primitives"])
    kinds = [type(o) for o in assembly.outcomes]
    assert kinds == [Built, Skipped, Built, Skipped, Built]
    assert [o.index for o in assembly.outcomes] == [0, 1, 2, 3, 4]
    assert len(assembly.objects) == 3
    assert [s.index for s in assembly.skipped] == [1, 3]
    assert [obj.type.value for obj in assembly.objects] == ["box", "sphere", "line"]


def test_frame_fits_bounds():
    assembly = assemble([
        {"type": "box", "position": [0, 0, 0], "size": [2, 2, 2]},
        {"type": "box", "position": [4, 0, 0], "size": [2, 2, 2]},
    ])
    assert_allclose(assembly.bounds.minimum, [-1, -1, -1])
    assert_allclose(assembly.bounds.maximum, [5, 1, 1])
    assert assembly.bounds.max_dim == pytest.approx(6.0)

    d = 6.0 * config.FIT_DISTANCE_FACTOR
    assert_allclose(assembly.frame.target, [2, 0, 0])
    assert_allclose(assembly.frame.eye, [2 + d, 0.7 * d, d])
    assert assembly.frame.up == config.UP


def test_camera_frame_fit_formula():
    bounds = Bounds(minimum=np.array([0.0, 0.0, 0.0]), maximum=np.array([1.0, 2.0, 4.0]))
    frame = CameraFrame.fit(bounds)
    assert_allclose(frame.target, [0.5, 1.0, 2.0])
    assert_allclose(frame.eye, [10.5, 8.0, 12.0])
    assert frame.as_camera_position() == [frame.eye, frame.target, frame.up]


def test_nothing_built_keeps_previous_frame():
    previous = CameraFrame(eye=(1.0, 2.0, 3.0), target=(0.0, 0.0, 0.0))
    assembly = assemble([{"type": "torus"}, {"type": "line", "points": []}], previous_frame=previous)
    assert assembly.objects == ()
    assert len(assembly.outcomes) == 2
    assert assembly.bounds is None
    assert assembly.frame is previous


def test_empty_list_keeps_previous_frame():
    previous = CameraFrame.default()
    assembly = assemble([], previous_frame=previous)
    assert assembly.outcomes == ()
    assert assembly.frame is previous


@pytest.mark.parametrize("records", [None, {"type": "box"}, "box", 3])
def test_non_sequence_gives_empty_assembly(records):
    assembly = assemble(records)
    assert assembly.objects == ()
    assert assembly.outcomes == ()
    assert assembly.frame is None


def test_is_record_sequence():
    assert is_record_sequence([])
    assert is_record_sequence(({"type": "box"},))
    assert not is_record_sequence("[]")
    assert not is_record_sequence({"primitives": []})


def test_assembly_is_deterministic(mixed_document):
    first = assemble(mixed_document["primitives"])
    second = assemble(mixed_document["primitives"])
    assert first.frame == second.frame
    for a, b in zip(first.objects, second.objects):
        assert_allclose(a.world_points(), b.world_points())
        assert_allclose(a.matrix, b.matrix)


def test_compute_bounds_empty():
    assert compute_bounds(()) is None


def test_scene_state_flags():
    assert not SceneState().is_loaded
    assert SceneState().is_empty
    loaded = SceneState(document={"primitives": []})
    assert loaded.is_loaded
    assert loaded.is_empty


def test_bundled_example_scene():
    from primitiveviewer.model.io import IOManager

    document = IOManager.read_document(config.EXAMPLE_SCENE_PATH)
    assembly = assemble(document["primitives"])
    assert len(assembly.outcomes) == 9
    assert len(assembly.objects) == 8
    assert [s.type_name for s in assembly.skipped] == ["torus"]
