"""Run with: python -m primitiveviewer [SCENE.json] [--export OUT.glb]"""
import sys

from primitiveviewer.main import main

if __name__ == "__main__":
    sys.exit(main())
