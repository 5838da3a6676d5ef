"""
Main Application Window
=======================
The primary GUI container that holds the Menu Bar, the viewport and the
status bar.

Why is this file needed?
------------------------
1. Layout: It hosts the shared 3D viewport.
2. Routing: It connects global actions (File -> Open, File -> Export GLB) to
   the SceneController and reports the outcome to the user.
"""
import os

from typing import Optional
from PySide6.QtWidgets import QMainWindow, QFileDialog, QMessageBox
from PySide6.QtCore import QSettings
from PySide6.QtGui import QAction

from primitiveviewer import config
from primitiveviewer.controller.exporter import ExportError
from primitiveviewer.controller.scene_controller import LoadReport, SceneController
from primitiveviewer.model.io import DocumentError
from primitiveviewer.view.widgets.plot_3d import ScenePreviewWidget


VISIBLE_APP_NAME = "Primitive Viewer"
SETTINGS_LAST_DIR = "paths/last_dir"
STATUS_TIMEOUT_MS = 8000


class MainWindow(QMainWindow):
    def __init__(self, controller: SceneController) -> None:
        super().__init__()
        self.controller: SceneController = controller
        self.settings = QSettings()

        self.update_window_title()
        self.resize(1200, 800)

        # --- Shared 3D Visualization ---
        self.visualizer = ScenePreviewWidget()
        self.setCentralWidget(self.visualizer)

        # --- ACTIONS & MENUS ---
        self._create_actions()
        self._create_menus()

        self.statusBar().showMessage("Open a JSON scene to begin.")

        # Initial Render
        self.update_visualization()

    def _create_actions(self) -> None:
        self.act_open = QAction("Open Scene...", self)
        self.act_open.setShortcut("Ctrl+O")
        self.act_open.triggered.connect(self.on_file_open)

        self.act_reload = QAction("Reload", self)
        self.act_reload.setShortcut("F5")
        self.act_reload.triggered.connect(self.on_file_reload)
        self.act_reload.setEnabled(False)  # Disabled until a file is loaded

        self.act_open_example = QAction("Open Example Scene", self)
        self.act_open_example.triggered.connect(self.on_open_example)
        self.act_open_example.setEnabled(os.path.exists(config.EXAMPLE_SCENE_PATH))

        self.act_export_glb = QAction("Export GLB...", self)
        self.act_export_glb.setShortcut("Ctrl+E")
        self.act_export_glb.triggered.connect(self.on_export_glb)
        self.act_export_glb.setEnabled(False)  # Disabled until a scene is loaded

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

    def _create_menus(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("&File")
        file_menu.addAction(self.act_open)
        file_menu.addAction(self.act_open_example)
        file_menu.addAction(self.act_reload)
        file_menu.addSeparator()
        file_menu.addAction(self.act_export_glb)
        file_menu.addSeparator()
        file_menu.addAction(self.act_exit)

    # --- HELPER METHODS ---
    def update_window_title(self) -> None:
        """Updates the window title based on the loaded file."""
        title = VISIBLE_APP_NAME
        if self.controller.filepath:
            title += f" - [{os.path.basename(self.controller.filepath)}]"
        self.setWindowTitle(title)

    def _last_dir(self) -> str:
        return str(self.settings.value(SETTINGS_LAST_DIR, "", type=str))

    def _remember_dir(self, filepath: str) -> None:
        self.settings.setValue(SETTINGS_LAST_DIR, os.path.dirname(os.path.abspath(filepath)))

    def refresh_ui_from_state(self, report: Optional[LoadReport] = None) -> None:
        """Sync actions, title, viewport and status bar with the controller."""
        self.act_export_glb.setEnabled(self.controller.can_export)
        self.act_reload.setEnabled(self.controller.filepath is not None)
        self.update_window_title()

        frame = self.controller.frame if report is not None and report.frame_changed else None
        self.update_visualization(frame=frame)

        if report is not None:
            message = report.summary
            if report.notices:
                message += " " + report.notices[0]
                if len(report.notices) > 1:
                    message += f" (+{len(report.notices) - 1} more, see log)"
            self.statusBar().showMessage(message, STATUS_TIMEOUT_MS)

    def update_visualization(self, frame=None) -> None:
        self.visualizer.show_scene(self.controller.state, frame)

    # --- FILE SLOTS ---

    def load_path(self, filepath: str) -> bool:
        """Load a scene file; errors are shown to the user. Returns success."""
        try:
            report = self.controller.load_file(filepath)
        except DocumentError as e:
            QMessageBox.critical(self, "Invalid Scene", f"Could not load the scene:\n{e}")
            return False

        self._remember_dir(filepath)
        self.refresh_ui_from_state(report)
        return True

    def on_file_open(self) -> None:
        fname, _ = QFileDialog.getOpenFileName(
            self, "Open Scene", self._last_dir(), "JSON Files (*.json);;All Files (*)"
        )
        if fname:
            self.load_path(fname)

    def on_open_example(self) -> None:
        self.load_path(config.EXAMPLE_SCENE_PATH)

    def on_file_reload(self) -> None:
        if self.controller.filepath:
            self.load_path(self.controller.filepath)

    def on_export_glb(self) -> None:
        if not self.controller.can_export:
            return

        default_path = os.path.join(self._last_dir(), config.EXPORT_FILENAME)
        fname, _ = QFileDialog.getSaveFileName(
            self, "Export GLB", default_path, "Binary glTF (*.glb)"
        )
        if not fname:
            return
        # Ensure extension
        if not fname.lower().endswith(".glb"):
            fname += ".glb"

        try:
            path = self.controller.export_file(fname)
        except ExportError as e:
            QMessageBox.critical(self, "Export Failed", f"Export failed:\n{e}")
            return

        if path:
            self.statusBar().showMessage(f"Exported {path}", STATUS_TIMEOUT_MS)

    def closeEvent(self, event, /) -> None:
        """Close the PyVista plotter safely."""
        if self.visualizer and self.visualizer.plotter:
            self.visualizer.plotter.close()
        event.accept()
