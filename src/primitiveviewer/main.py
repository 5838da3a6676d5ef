"""
Application Initialization
==========================
This module parses the command line and either converts a scene headlessly
or constructs the MVC architecture and starts the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Instantiates the SceneController (which owns the scene state).
2. Instantiates the Main Window (View) and passes the controller in.
3. Keeps Qt out of the headless path: ``--export`` never imports PySide6.
"""
import argparse
import logging
import sys
from typing import Optional, Sequence

from primitiveviewer.controller.exporter import ExportError
from primitiveviewer.controller.scene_controller import SceneController
from primitiveviewer.logging_config import setup_logging
from primitiveviewer.model.io import APP_VERSION, DocumentError

logger = logging.getLogger(__name__)

ORG_ID = "primitiveviewer"
APP_ID = "primitive-viewer"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NOTHING_TO_EXPORT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="primitiveviewer",
        description="View a JSON scene of geometric primitives and export it as binary glTF.",
    )
    parser.add_argument("scene", nargs="?", help="JSON scene file to load")
    parser.add_argument(
        "--export", metavar="OUT.glb",
        help="convert SCENE to binary glTF without opening a window",
    )
    parser.add_argument("--log-level", default="INFO", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--log-file", default=None, help="also write the log to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    return parser


def convert(scene_path: str, output_path: str) -> int:
    """Headless JSON -> GLB conversion. Returns a process exit code."""
    controller = SceneController()
    try:
        report = controller.load_file(scene_path)
    except DocumentError as e:
        logger.error(str(e))
        return EXIT_FAILED

    for notice in report.notices:
        logger.warning(notice)

    try:
        written = controller.export_file(output_path)
    except ExportError as e:
        logger.error(str(e))
        return EXIT_FAILED

    if written is None:
        logger.error("Nothing to export: the scene has no objects.")
        return EXIT_NOTHING_TO_EXPORT

    logger.info(f"{report.summary} Exported to {written}.")
    return EXIT_OK


def run_gui(scene_path: Optional[str] = None) -> int:
    from PySide6.QtWidgets import QApplication
    from PySide6.QtCore import QCoreApplication, QSettings

    from primitiveviewer.view.main_window import MainWindow, VISIBLE_APP_NAME

    QCoreApplication.setOrganizationName(ORG_ID)
    QCoreApplication.setApplicationName(APP_ID)
    QSettings.setDefaultFormat(QSettings.Format.IniFormat)

    # 1. Create the Qt Application
    app = QApplication(sys.argv)
    app.setApplicationDisplayName(VISIBLE_APP_NAME)

    # 2. Initialize the Controller (owns the scene state)
    controller = SceneController()

    # 3. Initialize the Main Window, passing the controller
    window = MainWindow(controller)
    window.show()

    if scene_path:
        window.load_path(scene_path)

    # 4. Start Event Loop
    return app.exec()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        setup_logging(level=args.log_level, log_file=args.log_file)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILED

    if args.export:
        if not args.scene:
            logger.error("--export requires a SCENE file.")
            return EXIT_FAILED
        return convert(args.scene, args.export)

    return run_gui(args.scene)


if __name__ == "__main__":
    sys.exit(main())
