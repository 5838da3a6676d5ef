"""
3D Visualization Widget (PyVista Wrapper)
"""

from __future__ import annotations

from typing import Optional, List

import logging
import numpy as np

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QFrame, QStyle
)
from PySide6.QtGui import QCloseEvent

from pyvistaqt import QtInteractor
import pyvista as pv

from primitiveviewer import config
from primitiveviewer.model.builder import BuiltObject, ObjectKind
from primitiveviewer.model.scene import CameraFrame, SceneState

logger = logging.getLogger(__name__)


class ScenePreviewWidget(QWidget):
    """
    Interactive viewport for the committed scene.

    Rotation/pan/zoom are handled by the VTK interactor; this widget only
    swaps actors when a new SceneState is committed and applies camera frames.
    """
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        self.layout_box: QVBoxLayout = QVBoxLayout(self)
        self.layout_box.setContentsMargins(0, 0, 0, 0)

        self.plotter: QtInteractor = QtInteractor(self)
        self.layout_box.addWidget(self.plotter)

        self._init_plotter()

        # --- Actors state ---
        self._solid_actors: List[pv.Actor] = []
        self._line_actors: List[pv.Actor] = []

        # --- Visibility state ---
        self._visible_solids: bool = True
        self._visible_lines: bool = True

        self._last_frame: Optional[CameraFrame] = None

        self._setup_overlay_controls()

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    def show_scene(self, state: SceneState, frame: Optional[CameraFrame] = None) -> None:
        """
        Replace every actor with the objects of `state`.

        Args:
            state: The committed scene.
            frame: Camera frame to apply; None keeps the current camera.
        """
        logger.info(f"Updating 3D preview with {len(state.objects)} object(s).")
        self.clear_scene()

        for obj in state.objects:
            self._add_object(obj)

        self._apply_visibility()

        if frame is not None:
            self.apply_camera(frame)

        self.plotter.render()

    def clear_scene(self) -> None:
        """Removes all primitive actors."""
        for actor in self._solid_actors + self._line_actors:
            self.plotter.remove_actor(actor, render=False)
        self._solid_actors.clear()
        self._line_actors.clear()

    def apply_camera(self, frame: CameraFrame) -> None:
        self._last_frame = frame
        if np.allclose(frame.eye, frame.target):
            # A zero-sized scene gives a zero fit distance
            self.plotter.reset_camera()
        else:
            self.plotter.camera_position = frame.as_camera_position()
            self.plotter.reset_camera_clipping_range()

    def set_solids_visible(self, visible: bool, render: bool = True) -> None:
        self._visible_solids = visible
        if self.btn_vis_solids.isChecked() != visible:
            self.btn_vis_solids.blockSignals(True)
            self.btn_vis_solids.setChecked(visible)
            self.btn_vis_solids.blockSignals(False)

        self._apply_visibility()
        if render:
            self.plotter.render()

    def set_lines_visible(self, visible: bool, render: bool = True) -> None:
        self._visible_lines = visible
        if self.btn_vis_lines.isChecked() != visible:
            self.btn_vis_lines.blockSignals(True)
            self.btn_vis_lines.setChecked(visible)
            self.btn_vis_lines.blockSignals(False)

        self._apply_visibility()
        if render:
            self.plotter.render()

    # ------------------------------------------------------------------------------
    # Internal: Layer Management
    # ------------------------------------------------------------------------------

    def _add_object(self, obj: BuiltObject) -> None:
        if obj.kind == ObjectKind.POLYLINE:
            actor = self.plotter.add_mesh(
                obj.world_geometry(),
                color=obj.color,
                line_width=config.LINE_WIDTH,
                lighting=False,
                pickable=False,
                show_scalar_bar=False,
                render=False,
            )
            self._line_actors.append(actor)
        else:
            actor = self.plotter.add_mesh(
                obj.world_geometry(),
                color=obj.color,
                lighting=obj.lit,
                smooth_shading=obj.lit,
                pickable=False,
                show_scalar_bar=False,
                render=False,
            )
            self._solid_actors.append(actor)

    def _apply_visibility(self) -> None:
        for a in self._solid_actors:
            a.SetVisibility(self._visible_solids)
        for a in self._line_actors:
            a.SetVisibility(self._visible_lines)

    # ------------------------------------------------------------------------------
    # Internal: Setup
    # ------------------------------------------------------------------------------

    def _init_plotter(self) -> None:
        self.plotter.set_background(config.BACKGROUND_COLOR)
        self.plotter.enable_trackball_style()
        self.plotter.add_axes()
        self.plotter.camera_position = CameraFrame.default().as_camera_position()

    def _setup_overlay_controls(self) -> None:
        """Small button strip in the top-left corner of the viewport."""
        self.overlay_widget = QFrame(self)
        self.overlay_widget.setObjectName("viewportOverlay")
        self.overlay_widget.setStyleSheet(
            "#viewportOverlay { background: rgba(248, 249, 250, 220); border: 1px solid #adb5bd; border-radius: 4px; }"
            "QPushButton { border: none; padding: 3px; }"
            "QPushButton:checked { background: rgba(13, 110, 253, 40); border-radius: 3px; }"
        )

        row = QHBoxLayout(self.overlay_widget)
        row.setContentsMargins(3, 3, 3, 3)
        row.setSpacing(2)

        def make_btn(icon, slot, tooltip, checkable=True):
            btn = QPushButton(self.style().standardIcon(icon), "")
            btn.setToolTip(tooltip)
            if checkable:
                btn.setCheckable(True)
                btn.setChecked(True)
                btn.toggled.connect(slot)
            else:
                btn.clicked.connect(slot)
            row.addWidget(btn)
            return btn

        self.btn_vis_solids = make_btn(QStyle.SP_FileIcon, self.set_solids_visible, "Show solids")
        self.btn_vis_lines = make_btn(QStyle.SP_FileDialogListView, self.set_lines_visible, "Show lines")
        self.btn_reset_view = make_btn(
            QStyle.SP_BrowserReload, self.on_reset_view, "Reset view", checkable=False
        )

        self.overlay_widget.adjustSize()

    def on_reset_view(self) -> None:
        """Return to the frame of the last load."""
        if self._last_frame is not None:
            self.apply_camera(self._last_frame)
        else:
            self.plotter.reset_camera()
        self.plotter.render()

    def closeEvent(self, event: QCloseEvent) -> None:
        self.plotter.close()
        event.accept()
