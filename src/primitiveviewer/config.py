"""
Configuration & Path Management
===============================
This module serves as the central registry for file paths and global constants.

Why is this file needed?
------------------------
1. Abstraction: Tessellation settings, camera framing factors and default
   field values live here instead of being scattered through the builder.
2. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find assets (example scenes) when the app is frozen into an .exe.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    EXAMPLE_SCENE_PATH (str): Absolute path to the bundled example scene.
"""
import sys
import os
from pathlib import Path


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        # PyInstaller temp folder
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # Development mode: resolve relative to this file
    # config.py is in src/primitiveviewer/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


# Paths
ASSETS_PATH: str = get_resource_path("assets")
EXAMPLE_SCENE_PATH: str = os.path.join(ASSETS_PATH, "example_scene.json")

# Record defaults
DEFAULT_POSITION: tuple[float, float, float] = (0.0, 0.0, 0.0)
DEFAULT_ROTATION: tuple[float, float, float] = (0.0, 0.0, 0.0)
DEFAULT_COLOR: tuple[float, float, float] = (1.0, 1.0, 1.0)
DEFAULT_SIZE: tuple[float, float, float] = (1.0, 1.0, 1.0)
DEFAULT_RADIUS: float = 1.0
DEFAULT_NORMAL: tuple[float, float, float] = (0.0, 1.0, 0.0)
DEFAULT_APEX_OFFSET: tuple[float, float, float] = (0.0, 2.0, 0.0)

# Tessellation
POINT_RADIUS: float = 0.08
POINT_RESOLUTION: int = 16
CIRCLE_SEGMENTS: int = 64
SPHERE_RESOLUTION: int = 32
PYRAMID_SIDES: int = 4

# Camera framing (Y is up)
UP: tuple[float, float, float] = (0.0, 1.0, 0.0)
FIT_DISTANCE_FACTOR: float = 2.5
EYE_HEIGHT_FACTOR: float = 0.7
DEFAULT_EYE: tuple[float, float, float] = (10.0, 10.0, 10.0)
DEFAULT_TARGET: tuple[float, float, float] = (0.0, 0.0, 0.0)

# Viewport
BACKGROUND_COLOR: str = "#f8f9fa"
LINE_WIDTH: float = 2.0

# Export
EXPORT_FILENAME: str = "model.glb"
