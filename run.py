"""
Development runner
==================
Starts the viewer straight from a checkout, without `pip install -e .`.

The 'src' folder is put on 'sys.path' first so that 'primitiveviewer'
resolves to the working copy rather than any installed version.

Usage:
    $ python run.py [scene.json]
    $ python run.py scene.json --export model.glb
"""
import os
import sys

SRC_DIR: str = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from primitiveviewer.main import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
