# main.py
"""
Main entry point for the scene motion preview.

This script orchestrates a render run:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Builds the scene's particle sets and figures once.
4. Evaluates every frame and hands the states to the painter.
5. Re-renders sample frames out of order to confirm they are unchanged.
6. Handles clean shutdown.
"""
import logging
import sys
from utils import setup_logging, load_config, ConfigurationError
from constants import FPS
import numpy as np
import cProfile
import pstats
import io


def verify_frames(scene, frames, reference) -> int:
    """
    Re-evaluates `frames` in reverse order and compares with `reference`.

    Returns:
        int: The number of frames whose states differ.
    """
    from scene import evaluate

    mismatches = 0
    for frame in reversed(frames):
        if evaluate(frame, scene) != reference[frame]:
            logging.error(f"Frame {frame} rendered differently on re-evaluation.")
            mismatches += 1
    return mismatches


def main(config_path: str = 'config.json'):
    """
    The main function to run the preview.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config(config_path)
    except Exception as e:
        print(f"FATAL: Could not load {config_path}. Error: {e}")
        return 1

    setup_logging(config)

    logging.info("--- Scene Motion Preview Starting ---")

    run_params = config.get('run_control', {})
    vis_params = config.get('visualization', {})

    from scene import build_scene, evaluate

    try:
        scene = build_scene(config.get('scene', {}))
    except ConfigurationError:
        logging.critical("Scene could not be built. Fix the configuration and retry.")
        return 1

    visualizer = None
    if vis_params.get('enabled', True):
        from visualization import Visualizer
        visualizer = Visualizer(scene, vis_params.get('window_size'))

    profiler = cProfile.Profile()

    log_throttle = run_params.get('log_throttle_frames', 60)
    total_frames = run_params.get('total_frames', 300)
    loop = run_params.get('loop', False)
    fps = run_params.get('fps', FPS)
    sample_every = run_params.get('verify_every', 0)

    samples = {}
    running = True
    frame = 0

    profiler.enable()
    while running:
        states = evaluate(frame, scene)

        if sample_every and frame % sample_every == 0:
            samples[frame] = states

        if visualizer is not None:
            if not visualizer.draw(states, frame):
                running = False
            visualizer.tick(fps)

        if frame % log_throttle == 0:
            logging.info(f"Rendered frame {frame}/{total_frames}")
            opacities = [s.opacity for s in states if s.kind != "figure"]
            if opacities:
                logging.debug(f"Frame {frame} | Mean opacity: {np.mean(opacities):.4f}")

        frame += 1
        if frame >= total_frames:
            if loop and visualizer is not None:
                frame = 0
            else:
                logging.info(f"Reached total_frames ({total_frames}). Stopping render.")
                running = False
    profiler.disable()

    if visualizer is not None:
        visualizer.close()
    logging.info("Render loop finished.")

    exit_code = 0
    if samples:
        mismatches = verify_frames(scene, sorted(samples), samples)
        if mismatches:
            logging.error(f"{mismatches} of {len(samples)} sampled frames were not reproducible.")
            exit_code = 1
        else:
            logging.info(f"All {len(samples)} sampled frames reproduced exactly.")

    logging.info("--- Performance Profile ---")
    s = io.StringIO()
    stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
    stats.print_stats(20)
    logging.info(f"\n{s.getvalue()}")

    logging.info("--- Scene Motion Preview Shutting Down ---")
    return exit_code


if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:2]))
