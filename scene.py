# scene.py
"""
Scene configuration and per-frame evaluation.

build_scene() validates a scene configuration once and turns it into an
immutable Scene: particle sets with their kind constants, and figures with
their gait parameters. evaluate() is the engine's whole contract with the
painter:

    evaluate(frame, scene) -> list of RenderState / FigureState

The Scene holds no mutable state, so it can be passed by reference to any
number of concurrent evaluations, or pickled into worker processes.
"""
import logging
from dataclasses import dataclass
from collections.abc import Iterable
from typing import Any, Dict, Optional, Set, Tuple

from constants import CANVAS_WIDTH, CANVAS_HEIGHT, GAIT_LIMB_NAMES, GESTURE_DURATIONS
from expression import (
    GestureState, IDLE_GESTURE, blink_openness, gesture_state,
    mouth_shape, talking_bounce, talking_gesture,
)
from gait import GaitParams, IdleTerm, LimbSet, GaitPose, evaluate_gait, gait_from_preset
from motion import ParticleStates, make_constants, evaluate as evaluate_kind
from particle import ParticleSet, ParticleRanges, make_particles
from utils import config_error, require_count, require_finite

# --- Data Contracts ---
#
# build_scene(config: Dict[str, Any]) -> Scene:
#   - Inputs: the "scene" section of config.json:
#     - "name": str
#     - "canvas": [width, height]
#     - "emitters": list of {"name", "kind", "count", "seed", "bounds",
#       optional "ranges", optional "constants"}
#     - "figures": list of {"name", "gait", "seed", optional "speed",
#       "position", optional "idle", "talking", "blink_seed", "gesture"};
#       "gait" is a preset name or a mapping
#       with "stride_frequency", "limb_phase_offsets", "limb_amplitudes" and
#       optional "limb_names", "bob", "lean", "idle_amplitudes"; "gesture"
#       is a gesture name or {"name", "start"}.
#   - Outputs: An immutable Scene.
#   - Side Effects: Logs. Raises ConfigurationError on any invalid value.
#
# evaluate(frame: int, scene: Scene, only=None) -> List[RenderState | FigureState]:
#   - Inputs: "only", when given, is a collection of names the scene has.
#   - Outputs: Emitters in config order, particles in index order, then figures.
#   - Invariants: Pure. Two calls with the same frame return equal lists.


@dataclass(frozen=True)
class Emitter:
    name: str
    kind: str
    particles: ParticleSet
    constants: Any


@dataclass(frozen=True)
class Figure:
    name: str
    params: GaitParams
    limbs: LimbSet
    idle: IdleTerm
    x: float
    y: float
    talking: bool = False
    blink_seed: float = 0.0
    gesture: str = "idle"
    gesture_start: int = 0


@dataclass(frozen=True)
class Scene:
    name: str
    width: float
    height: float
    emitters: Tuple[Emitter, ...]
    figures: Tuple[Figure, ...]


@dataclass(frozen=True)
class RenderState:
    """One paintable particle; no paint instructions beyond numbers."""
    kind: str
    name: str
    index: int
    x: float
    y: float
    scale: float
    opacity: float
    angle: float


@dataclass(frozen=True)
class FigureState:
    name: str
    x: float
    y: float
    limb_names: Tuple[str, ...]
    limb_angles: Tuple[float, ...]
    body_bob: float
    body_lean: float
    eye_openness: float = 1.0
    mouth: int = 0
    gesture: GestureState = IDLE_GESTURE
    kind: str = "figure"


def _pair(name: str, value, length: int = 2) -> Tuple[float, ...]:
    if not isinstance(value, (list, tuple)) or len(value) != length:
        raise config_error(f"{name} must be a list of {length} numbers, got {value!r}.")
    return tuple(require_finite(name, v) for v in value)


def _entry_name(what: str, entry: Any, taken: set) -> str:
    if not isinstance(entry, dict):
        raise config_error(f"Every {what} must be a mapping, got {entry!r}.")
    name = entry.get("name")
    if not isinstance(name, str) or not name or name in taken:
        raise config_error(f"Every {what} needs a unique name, got {name!r}.")
    return name


def _build_emitter(entry: Dict[str, Any], taken: set) -> Emitter:
    name = _entry_name("emitter", entry, taken)
    kind = entry.get("kind")
    constants = make_constants(kind, entry.get("constants"))
    ranges = entry.get("ranges", {})
    if not isinstance(ranges, dict):
        raise config_error(f"Emitter {name!r} ranges must be a mapping, got {ranges!r}.")
    ranges = ParticleRanges.coerce(ranges)

    particles = make_particles(
        count=require_count(f"{name} count", entry.get("count")),
        seed=require_finite(f"{name} seed", entry.get("seed")),
        bounds=_pair(f"{name} bounds", entry.get("bounds"), 4),
        ranges=ranges,
    )
    return Emitter(name=name, kind=kind, particles=particles, constants=constants)


def _list(name: str, value) -> list:
    if not isinstance(value, (list, tuple)):
        raise config_error(f"{name} must be a list, got {value!r}.")
    return list(value)


def _build_gait(name: str, gait: Any, seed: float, speed: float):
    if isinstance(gait, str):
        return gait_from_preset(gait, seed, speed)
    if not isinstance(gait, dict):
        raise config_error(f"Figure {name!r} gait must be a preset name or a mapping.")
    amplitudes = _list(f"{name} limb_amplitudes", gait.get("limb_amplitudes", ()))
    params = GaitParams(
        seed=seed,
        stride_frequency=require_finite(f"{name} stride_frequency", gait.get("stride_frequency")) * speed,
        limb_phase_offsets=_list(f"{name} limb_phase_offsets", gait.get("limb_phase_offsets", ())),
    )
    limbs = LimbSet(
        names=_list(f"{name} limb_names", gait.get("limb_names", GAIT_LIMB_NAMES[:len(amplitudes)])),
        amplitudes=amplitudes,
        idle_amplitudes=_list(f"{name} idle_amplitudes", gait.get("idle_amplitudes", ())),
        bob=gait.get("bob", 0.0),
        lean=gait.get("lean", 0.0),
    )
    if len(params.limb_phase_offsets) != len(limbs.amplitudes):
        raise config_error(
            f"Figure {name!r} has {len(params.limb_phase_offsets)} phase offsets "
            f"but {len(limbs.amplitudes)} limb amplitudes."
        )
    return params, limbs


def _build_gesture(name: str, gesture: Any) -> Tuple[str, int]:
    # "wave" starts at frame 0; {"name": "wave", "start": 120} starts later.
    if isinstance(gesture, str):
        gesture = {"name": gesture}
    if not isinstance(gesture, dict):
        raise config_error(f"Figure {name!r} gesture must be a name or a mapping.")
    gesture_name = gesture.get("name", "idle")
    if not isinstance(gesture_name, str) or (gesture_name != "idle" and gesture_name not in GESTURE_DURATIONS):
        raise config_error(
            f"Figure {name!r} has unknown gesture {gesture_name!r}. "
            f"Known gestures: {['idle'] + sorted(GESTURE_DURATIONS)}."
        )
    return gesture_name, require_count(f"{name} gesture start", gesture.get("start", 0))


def _build_figure(entry: Dict[str, Any], taken: set) -> Figure:
    name = _entry_name("figure", entry, taken)
    seed = require_finite(f"{name} seed", entry.get("seed", 0.0))
    speed = require_finite(f"{name} speed", entry.get("speed", 1.0))
    params, limbs = _build_gait(name, entry.get("gait", "idle"), seed, speed)
    try:
        idle = IdleTerm(**entry.get("idle", {}))
    except TypeError as e:
        raise config_error(f"Invalid idle term for figure {name!r}: {e}") from e
    x, y = _pair(f"{name} position", entry.get("position"))
    talking = entry.get("talking", False)
    if not isinstance(talking, bool):
        raise config_error(f"Figure {name!r} talking must be true or false, got {talking!r}.")
    blink_seed = require_finite(f"{name} blink_seed", entry.get("blink_seed", 0.0))
    gesture, gesture_start = _build_gesture(name, entry.get("gesture", "idle"))
    return Figure(name=name, params=params, limbs=limbs, idle=idle, x=x, y=y,
                  talking=talking, blink_seed=blink_seed,
                  gesture=gesture, gesture_start=gesture_start)


def build_scene(config: Dict[str, Any]) -> Scene:
    """
    Validates a scene configuration and builds its immutable particle sets
    and figures. This is the only place configuration errors can surface.
    """
    if not isinstance(config, dict):
        raise config_error(f"Scene configuration must be a mapping, got {type(config).__name__}.")
    name = config.get("name", "scene")
    width, height = _pair("canvas", config.get("canvas", [CANVAS_WIDTH, CANVAS_HEIGHT]))
    if width <= 0 or height <= 0:
        raise config_error(f"Canvas must have a positive size, got {(width, height)}.")

    names: set = set()
    emitters = []
    for entry in _list("emitters", config.get("emitters", [])):
        emitter = _build_emitter(entry, names)
        names.add(emitter.name)
        emitters.append(emitter)

    figures = []
    for entry in _list("figures", config.get("figures", [])):
        figure = _build_figure(entry, names)
        names.add(figure.name)
        figures.append(figure)

    scene = Scene(name=name, width=width, height=height,
                  emitters=tuple(emitters), figures=tuple(figures))
    logging.info(
        f"Scene '{name}' built: {len(emitters)} emitters "
        f"({sum(e.particles.count for e in emitters)} particles), {len(figures)} figures."
    )
    return scene


def _check_frame(frame: int) -> int:
    return require_count("frame", frame)


def evaluate_emitters(frame: int, scene: Scene) -> Dict[str, ParticleStates]:
    """Per-emitter state arrays, for painters that draw whole sets at once."""
    frame = _check_frame(frame)
    return {
        emitter.name: evaluate_kind(emitter.kind, frame, emitter.particles, emitter.constants)
        for emitter in scene.emitters
    }


def evaluate_figures(frame: int, scene: Scene) -> Dict[str, GaitPose]:
    frame = _check_frame(frame)
    return {
        figure.name: evaluate_gait(frame, figure.params, figure.limbs, figure.idle)
        for figure in scene.figures
    }


def _figure_state(frame: int, figure: Figure) -> FigureState:
    pose = evaluate_gait(frame, figure.params, figure.limbs, figure.idle)
    gesture = gesture_state(figure.gesture, frame, frame - figure.gesture_start)
    # The free hand keeps moving while the figure talks.
    gesture = gesture._replace(left_arm=gesture.left_arm + talking_gesture(frame, figure.talking))
    return FigureState(
        name=figure.name,
        x=figure.x,
        y=figure.y,
        limb_names=figure.limbs.names,
        limb_angles=pose.limb_angles,
        body_bob=pose.body_bob + talking_bounce(frame, figure.talking),
        body_lean=pose.body_lean,
        eye_openness=blink_openness(frame, figure.blink_seed),
        mouth=mouth_shape(frame, figure.talking),
        gesture=gesture,
    )


def _selected_names(only, scene: Scene) -> Optional[Set[str]]:
    if only is None:
        return None
    if isinstance(only, str) or not isinstance(only, Iterable):
        raise config_error(f"only must be a collection of names, got {only!r}.")
    selected = set(only)
    known = {e.name for e in scene.emitters} | {f.name for f in scene.figures}
    unknown = selected - known
    if unknown:
        raise config_error(f"Scene '{scene.name}' has no components named {sorted(map(str, unknown))}.")
    return selected


def evaluate(frame: int, scene: Scene, only: Optional[Iterable[str]] = None) -> list:
    """
    Evaluates every emitter and figure of the scene at `frame`.

    Args:
        frame (int): Non-negative frame index.
        scene (Scene): A scene from build_scene().
        only (Optional[Iterable[str]]): Restrict to these emitter/figure names.

    Returns:
        list: RenderState per particle, then FigureState per figure.
    """
    frame = _check_frame(frame)
    selected = _selected_names(only, scene)
    states = []
    for emitter in scene.emitters:
        if selected is not None and emitter.name not in selected:
            continue
        result = evaluate_kind(emitter.kind, frame, emitter.particles, emitter.constants)
        for i in range(result.count):
            states.append(RenderState(
                kind=emitter.kind,
                name=emitter.name,
                index=i,
                x=float(result.x[i]),
                y=float(result.y[i]),
                scale=float(result.scale[i]),
                opacity=float(result.opacity[i]),
                angle=float(result.angle[i]),
            ))
    for figure in scene.figures:
        if selected is not None and figure.name not in selected:
            continue
        states.append(_figure_state(frame, figure))
    return states
