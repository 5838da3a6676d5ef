import pytest

from primitiveviewer.controller.exporter import ExportError, GlbExporter
from primitiveviewer.controller.scene_controller import SceneController
from primitiveviewer.model.io import DocumentError
from primitiveviewer.model.scene import CameraFrame, compute_bounds


class FailingExporter(GlbExporter):
    def export(self, objects, options=None):
        raise ExportError("disk full")


def test_load_reports_counts(controller, mixed_document):
    report = controller.load_document(mixed_document)
    assert report.total == 5
    assert report.built == 3
    assert len(report.skipped) == 2
    assert report.frame_changed
    assert report.summary == "Loaded 3 of 5 primitive(s), 2 skipped."
    assert any("torus" in n for n in report.notices)
    assert controller.can_export


def test_load_file_sets_filepath(controller, scene_file):
    controller.load_file(str(scene_file))
    assert controller.filepath == str(scene_file)
    assert len(controller.state.objects) == 3


def test_malformed_document_keeps_previous_scene(controller, mixed_document):
    controller.load_document(mixed_document)
    state, frame = controller.state, controller.frame

    with pytest.raises(DocumentError):
        controller.load_text("{ this is not json")
    with pytest.raises(DocumentError):
        controller.load_text("[]")

    assert controller.state is state
    assert controller.frame is frame


def test_unreadable_file_keeps_filepath(controller, scene_file, tmp_path):
    controller.load_file(str(scene_file))
    with pytest.raises(DocumentError):
        controller.load_file(str(tmp_path / "missing.json"))
    assert controller.filepath == str(scene_file)


def test_missing_primitives_gives_empty_scene(controller, mixed_document):
    controller.load_document(mixed_document)
    frame = controller.frame

    report = controller.load_document({"name": "nothing here"})
    assert report.total == 0
    assert not report.frame_changed
    assert "No 'primitives' array" in report.notices[0]
    assert controller.state.is_loaded
    assert controller.state.is_empty
    assert controller.frame is frame
    assert not controller.can_export


def test_unrecognised_only_scene(controller):
    report = controller.load_document({"primitives": [{"type": "torus"}, {"type": "cylinder"}]})
    assert report.built == 0
    assert report.notices[-1] == "No recognizable primitives; the scene is empty."
    assert controller.frame == CameraFrame.default()


def test_reload_replaces_scene(controller, mixed_document):
    controller.load_document(mixed_document)
    controller.load_document({"primitives": [{"type": "point"}]})
    assert len(controller.state.objects) == 1
    assert controller.state.document == {"primitives": [{"type": "point"}]}


def test_export_unavailable_before_load(controller, tmp_path):
    assert not controller.can_export
    assert controller.export_bytes() is None
    assert controller.export_file(str(tmp_path / "model.glb")) is None
    assert not (tmp_path / "model.glb").exists()


def test_export_file_writes_glb(controller, mixed_document, tmp_path):
    controller.load_document(mixed_document)
    path = controller.export_file(str(tmp_path / "model.glb"))
    assert path == str(tmp_path / "model.glb")
    assert (tmp_path / "model.glb").read_bytes()[:4] == b"glTF"


def test_export_failure_leaves_state_intact(mixed_document, tmp_path):
    controller = SceneController(exporter=FailingExporter())
    controller.load_document(mixed_document)
    state = controller.state

    with pytest.raises(ExportError, match="disk full"):
        controller.export_file(str(tmp_path / "model.glb"))
    assert controller.state is state
    assert controller.can_export


def test_write_failure_becomes_export_error(controller, mixed_document, tmp_path):
    controller.load_document(mixed_document)
    blocker = tmp_path / "blocker"
    blocker.write_text("not a folder")
    with pytest.raises(ExportError):
        controller.export_file(str(blocker / "model.glb"))


def test_reset(controller, scene_file):
    controller.load_file(str(scene_file))
    controller.reset()
    assert controller.filepath is None
    assert not controller.state.is_loaded
    assert controller.frame == CameraFrame.default()


def test_reload_reapplies_frame(controller):
    document = {"primitives": [{"type": "box"}]}
    first = controller.load_document(document)
    second = controller.load_document(document)
    assert first.frame_changed
    assert second.frame_changed
    assert controller.frame == CameraFrame.fit(compute_bounds(controller.state.objects))


def test_huge_integer_is_skipped_not_raised(controller):
    text = '{"primitives": [{"type": "box", "position": [' + "9" * 400 + ', 0, 0]}, {"type": "sphere"}]}'
    report = controller.load_text(text)
    assert report.total == 2
    assert report.built == 1
    assert report.skipped[0].index == 0


def test_text_load_detaches_from_file(controller, scene_file):
    controller.load_file(str(scene_file))
    controller.load_text('{"primitives": [{"type": "point"}]}')
    assert controller.filepath is None


def test_failed_text_load_keeps_file(controller, scene_file):
    controller.load_file(str(scene_file))
    with pytest.raises(DocumentError):
        controller.load_text("[]")
    assert controller.filepath == str(scene_file)
