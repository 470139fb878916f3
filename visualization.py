# visualization.py
"""
Preview painter for evaluated scene states, using Pygame.

The motion engine only produces numbers; this module is the stand-in
painter used to eyeball a scene while authoring it. It draws every
RenderState as a soft shape and every FigureState as a stick figure.
"""
import logging
import math
import pygame
from typing import Optional, Tuple

from constants import (
    BACKGROUND_COLOR, FULLSCREEN, FIGURE_COLOR, FIGURE_LIMB_LENGTH, KIND_COLORS,
)
from scene import Scene, RenderState, FigureState

# --- Data Contracts ---
#
# class Visualizer:
#   - __init__(self, scene: Scene, window_size: Optional[Tuple[int, int]] = None):
#     - Inputs:
#       - scene: the Scene being previewed; its canvas size is the drawing space.
#       - window_size: optional window size; the canvas is scaled to fit.
#     - Side Effects: Initializes Pygame and creates a display surface.
#
#   - draw(self, states: list, frame: int) -> bool:
#     - Inputs: the output of scene.evaluate() for `frame`.
#     - Outputs: bool, False if the user has quit, True otherwise.
#     - Side Effects: Renders the states to the screen, handles Pygame events.
#     - Invariants: Never mutates the states it is given.

# Radius of the drawn shape per unit of particle scale.
KIND_RADIUS = {
    "twinkle": 1.0,
    "puff": 4.0,
    "mote": 0.6,
    "fog": 15.0,
    "ripple": 20.0,
    "swim": 3.0,
    "sway": 6.0,
    "flash": 40.0,
    "flicker": 30.0,
}


class Visualizer:
    """
    Renders evaluated scene states in a Pygame window.
    """
    def __init__(self, scene: Scene, window_size: Optional[Tuple[int, int]] = None):
        """
        Initializes Pygame and the display window.
        """
        pygame.init()
        pygame.font.init()

        if FULLSCREEN:
            display_info = pygame.display.Info()
            width, height = display_info.current_w, display_info.current_h
            self.screen = pygame.display.set_mode((width, height), pygame.FULLSCREEN)
        else:
            width, height = window_size or (int(scene.width), int(scene.height))
            self.screen = pygame.display.set_mode((width, height))

        self.canvas_size = (int(scene.width), int(scene.height))
        # Particles are drawn at canvas resolution on a transparent layer and
        # the whole canvas is scaled to the window once per frame.
        self.canvas = pygame.Surface(self.canvas_size)
        self.particle_layer = pygame.Surface(self.canvas_size, pygame.SRCALPHA)

        pygame.display.set_caption(f"Scene preview: {scene.name}")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont(None, 20)

        logging.info(
            f"Visualizer initialized with Pygame display ({width}x{height}), "
            f"canvas {self.canvas_size[0]}x{self.canvas_size[1]}."
        )

    def _draw_particle(self, state: RenderState):
        color = KIND_COLORS.get(state.kind, (255, 255, 255))
        alpha = int(255 * min(max(state.opacity, 0.0), 1.0))
        if alpha == 0:
            return
        rgba = (color[0], color[1], color[2], alpha)
        radius = max(1, int(state.scale * KIND_RADIUS.get(state.kind, 1.0)))
        center = (int(state.x), int(state.y))

        if state.kind == "fog":
            rect = pygame.Rect(0, 0, radius * 2, max(2, int(radius * 4 / 15) * 2))
            rect.center = center
            pygame.draw.ellipse(self.particle_layer, rgba, rect)
        elif state.kind in ("sway", "swim"):
            # Stems and tails: a line rotated by the state's angle.
            rad = math.radians(state.angle)
            end = (center[0] + radius * math.sin(rad), center[1] - radius * math.cos(rad))
            pygame.draw.line(self.particle_layer, rgba, center, end, 2)
            if state.kind == "swim":
                pygame.draw.circle(self.particle_layer, rgba, center, max(1, radius // 2))
        elif state.kind == "ripple":
            rect = pygame.Rect(0, 0, radius * 2, 6)
            rect.center = center
            pygame.draw.arc(self.particle_layer, rgba, rect, 0, math.pi, 2)
        else:
            pygame.draw.circle(self.particle_layer, rgba, center, radius)

    def _draw_figure(self, state: FigureState):
        """Stick figure: legs from the hip, arms from the shoulder, leaning body."""
        hip = (state.x, state.y - FIGURE_LIMB_LENGTH + state.body_bob)
        lean = math.radians(state.body_lean)
        shoulder = (hip[0] + FIGURE_LIMB_LENGTH * math.sin(lean),
                    hip[1] - FIGURE_LIMB_LENGTH * math.cos(lean))
        pygame.draw.line(self.canvas, FIGURE_COLOR, hip, shoulder, 3)
        pygame.draw.circle(self.canvas, FIGURE_COLOR,
                           (int(shoulder[0]), int(shoulder[1] - 8)), 7)

        gesture_offsets = {"left_arm": state.gesture.left_arm, "right_arm": state.gesture.right_arm}
        for name, limb_angle in zip(state.limb_names, state.limb_angles):
            origin = hip if "leg" in name else shoulder
            limb_angle += gesture_offsets.get(name, 0.0)
            rad = math.radians(limb_angle)
            end = (origin[0] + FIGURE_LIMB_LENGTH * math.sin(rad),
                   origin[1] + FIGURE_LIMB_LENGTH * math.cos(rad))
            pygame.draw.line(self.canvas, FIGURE_COLOR, origin, end, 3)

    def draw(self, states: list, frame: int) -> bool:
        """
        Draws all states and handles events.

        Returns:
            bool: False if the preview should exit, True otherwise.
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                logging.info("ESC key pressed. Shutting down visualizer.")
                return False

        self.canvas.fill(BACKGROUND_COLOR)
        self.particle_layer.fill((0, 0, 0, 0))

        for state in states:
            if isinstance(state, FigureState):
                self._draw_figure(state)
            else:
                self._draw_particle(state)

        self.canvas.blit(self.particle_layer, (0, 0))

        label = self.font.render(f"frame {frame}  |  {len(states)} primitives", True, (200, 200, 200))
        self.canvas.blit(label, (10, 10))

        if self.screen.get_size() == self.canvas_size:
            self.screen.blit(self.canvas, (0, 0))
        else:
            self.screen.blit(pygame.transform.scale(self.canvas, self.screen.get_size()), (0, 0))

        pygame.display.flip()
        return True

    def tick(self, fps: int):
        self.clock.tick(fps)

    def close(self):
        """Shuts down Pygame."""
        pygame.font.quit()
        pygame.quit()
        logging.info("Visualizer closed.")
