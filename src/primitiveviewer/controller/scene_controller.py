"""
Scene Controller
================
Owns the single committed SceneState and camera frame.

Why is this file needed?
------------------------
1. Transactions: A load is built completely before it is committed, so the
   viewport never sees a half-built scene and a failed load changes nothing.
2. Routing: The GUI and the headless converter call the same load/export
   methods; neither touches the model state directly.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from primitiveviewer import config
from primitiveviewer.controller.exporter import ExportError, ExportOptions, GlbExporter
from primitiveviewer.model.builder import Skipped
from primitiveviewer.model.io import DocumentError, IOManager
from primitiveviewer.model.scene import CameraFrame, SceneState, assemble, is_record_sequence

logger = logging.getLogger(__name__)


@dataclass
class LoadReport:
    """What happened during one load (shown to the user)."""
    total: int = 0
    built: int = 0
    skipped: list[Skipped] = field(default_factory=list)
    notices: list[str] = field(default_factory=list)
    # The load built objects: the viewport should apply the new frame
    frame_changed: bool = False

    @property
    def summary(self) -> str:
        text = f"Loaded {self.built} of {self.total} primitive(s)"
        if self.skipped:
            text += f", {len(self.skipped)} skipped"
        return text + "."


class SceneController:
    def __init__(self, exporter: Optional[GlbExporter] = None) -> None:
        self.exporter = exporter if exporter is not None else GlbExporter()
        self.state: SceneState = SceneState()
        self.frame: CameraFrame = CameraFrame.default()
        self.filepath: Optional[str] = None

    # --- LOADING ---

    def load_file(self, filepath: str) -> LoadReport:
        """
        Read and load a scene file.

        Raises:
            DocumentError: The file is unreadable or not a JSON object. The
                committed scene is left untouched.
        """
        data = IOManager.read_document(filepath)
        report = self.load_document(data)
        self.filepath = filepath
        return report

    def load_text(self, text: str) -> LoadReport:
        """Load a scene from JSON text; the scene is no longer tied to a file."""
        return self.load_document(IOManager.parse_document(text))

    def load_document(self, data: Any) -> LoadReport:
        """
        Assemble a parsed document and commit it as the new scene.

        A missing or non-array ``primitives`` value is not an error: the scene
        becomes empty and a notice is reported. Every load that builds at least
        one object reframes the camera, even when the frame is unchanged, so a
        reload undoes any orbiting. The committed scene is no longer tied to
        `filepath`; `load_file` sets it again after this returns.

        Raises:
            DocumentError: If `data` is not a JSON object.
        """
        if not isinstance(data, dict):
            raise DocumentError(f"Scene document must be a JSON object, got {type(data).__name__}.")

        report = LoadReport()
        primitives = data.get("primitives")
        if not is_record_sequence(primitives):
            notice = "No 'primitives' array found; the scene is empty."
            logger.warning(notice)
            report.notices.append(notice)
            primitives = []

        assembly = assemble(primitives, previous_frame=self.frame)

        report.total = len(assembly.outcomes)
        report.built = len(assembly.objects)
        report.skipped = assembly.skipped
        report.notices.extend(str(s) for s in assembly.skipped)
        if report.total and not report.built:
            report.notices.append("No recognizable primitives; the scene is empty.")

        # Commit: replace, never patch
        self.state = SceneState(objects=assembly.objects, outcomes=assembly.outcomes, document=data)
        self.filepath = None
        if assembly.objects and assembly.frame is not None:
            self.frame = assembly.frame
            report.frame_changed = True

        logger.info(report.summary)
        return report

    def reset(self) -> None:
        self.state = SceneState()
        self.frame = CameraFrame.default()
        self.filepath = None

    # --- EXPORT ---

    @property
    def can_export(self) -> bool:
        """Export needs a successful load that produced at least one object."""
        return self.state.is_loaded and not self.state.is_empty

    def export_bytes(self, options: ExportOptions = ExportOptions()) -> Optional[bytes]:
        """GLB bytes for the committed scene, or None when there is nothing to export."""
        if not self.can_export:
            logger.info("Export requested with no loaded scene; ignoring.")
            return None
        return self.exporter.export(self.state.objects, options)

    def export_file(
        self,
        filepath: str = config.EXPORT_FILENAME,
        options: ExportOptions = ExportOptions()
    ) -> Optional[str]:
        """
        Export the committed scene to `filepath`.

        Returns:
            The written path, or None when export is unavailable.

        Raises:
            ExportError: If encoding or writing fails.
        """
        data = self.export_bytes(options)
        if data is None:
            return None
        try:
            return IOManager.write_binary(data, filepath)
        except OSError as e:
            raise ExportError(f"Could not write '{filepath}': {e}") from e
