"""Smoke tests for the preview painter (headless, no window needed)."""

import os
import sys

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

pygame = pytest.importorskip("pygame")

# Add the project root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from motion import EVALUATORS
from scene import build_scene, evaluate
from visualization import Visualizer
from test_scene import SCENE


@pytest.fixture
def visualizer():
    vis = Visualizer(build_scene(SCENE), window_size=(400, 300))
    yield vis
    vis.close()


def test_draws_every_kind(visualizer):
    """All particle kinds and figures paint without error."""
    config = dict(SCENE)
    config["emitters"] = [
        {"name": kind, "kind": kind, "count": 3, "seed": i, "bounds": [0, 0, 800, 600]}
        for i, kind in enumerate(sorted(EVALUATORS))
    ]
    scene = build_scene(config)
    for frame in (0, 15, 30):
        assert visualizer.draw(evaluate(frame, scene), frame) is True


def test_draws_gesturing_figure(visualizer):
    config = dict(SCENE)
    config["figures"] = [{"name": "host", "gait": "idle", "position": [300, 400],
                          "talking": True, "gesture": "wave"}]
    scene = build_scene(config)
    assert visualizer.draw(evaluate(20, scene), 20) is True


def test_quit_event_stops(visualizer):
    pygame.event.post(pygame.event.Event(pygame.QUIT))
    assert visualizer.draw([], 0) is False


def test_states_left_untouched(visualizer):
    states = evaluate(12, build_scene(SCENE))
    snapshot = list(states)
    visualizer.draw(states, 12)
    assert states == snapshot
