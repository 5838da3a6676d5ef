import json

import pytest

from primitiveviewer.controller.scene_controller import SceneController


@pytest.fixture
def controller():
    return SceneController()


@pytest.fixture
def mixed_document():
    return {
        "primitives": [
            {"type": "box", "position": [0, 0.5, 0], "size": [2, 1, 1], "color": [0.2, 0.5, 0.9]},
            {"type": "torus"},
            {"type": "sphere", "position": [3, 1, 0], "radius": 1},
            {"type": "line", "points": [[0, 0, 0]]},
            {"type": "line", "points": [[-1, 0, 2], [1, 0, 2]]},
        ]
    }


@pytest.fixture
def scene_file(tmp_path, mixed_document):
    path = tmp_path / "scene.json"
    path.write_text(json.dumps(mixed_document), encoding="utf-8")
    return path
