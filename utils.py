# utils.py
"""
Utility functions for the motion engine.

This module provides helper functions, such as logging setup, config
loading and the construction-time validation helpers, that are used across
different parts of the application but do not belong to a specific domain
like particles or gaits.
"""
import logging
import logging.handlers
import json
import math
import numbers
import os
from typing import Dict, Any

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary containing a "logging" key with "level",
#       "format", and "log_file" sub-keys.
#   - Outputs: None
#   - Side Effects: Configures the root Python logger. Creates a log
#     directory if it doesn't exist. Sets up a console handler and a
#     rotating file handler.
#   - Invariants: After this function runs, the logging system is
#     initialized and ready for use throughout the application.
#
# require_*(name, value, ...) -> value:
#   - Inputs: the name of the configuration field and its value.
#   - Outputs: the value, unchanged, when it is valid.
#   - Side Effects: Logs at CRITICAL and raises ConfigurationError otherwise.
#   - Invariants: Values are never clamped or replaced with defaults.


class ConfigurationError(ValueError):
    """Raised when a scene, particle set or gait is authored with invalid values."""


def config_error(msg: str) -> ConfigurationError:
    """Logs a configuration defect and returns the exception to raise."""
    logging.critical(f"Configuration error: {msg}")
    return ConfigurationError(msg)


def _is_real(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def require_finite(name: str, value: Any) -> float:
    if not _is_real(value) or not math.isfinite(value):
        raise config_error(f"{name} must be a finite number, got {value!r}.")
    return value


def require_positive(name: str, value: Any) -> float:
    require_finite(name, value)
    if value <= 0:
        raise config_error(f"{name} must be strictly positive, got {value!r}.")
    return value


def require_non_negative(name: str, value: Any) -> float:
    require_finite(name, value)
    if value < 0:
        raise config_error(f"{name} must not be negative, got {value!r}.")
    return value


def require_count(name: str, value: Any) -> int:
    """Counts must be non-negative integers; floats and bools are rejected."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise config_error(f"{name} must be an integer, got {value!r}.")
    if value < 0:
        raise config_error(f"{name} must not be negative, got {value!r}.")
    return int(value)


def require_unit_interval(name: str, value: Any) -> float:
    require_finite(name, value)
    if not 0.0 <= value <= 1.0:
        raise config_error(f"{name} must lie within [0, 1], got {value!r}.")
    return value


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Configures the logging system from a configuration dictionary.

    Sets up logging to both the console and a rotating file.
    """
    log_config = config.get('logging', {})
    log_level = log_config.get('level', 'INFO').upper()
    log_format = log_config.get('format', '%(asctime)s - %(levelname)s - %(message)s')
    log_file_path = log_config.get('log_file', 'logs/render.log')

    # Ensure the log directory exists
    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    # Get the root logger
    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Clear existing handlers to avoid duplication
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Rotates when the log reaches 1MB, keeps 5 backup logs.
    file_handler = logging.handlers.RotatingFileHandler(
        log_file_path, maxBytes=1024*1024, backupCount=5
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    logging.info("Logging system initialized.")
    logging.debug(f"Log level set to {log_level}.")
    logging.debug(f"Log file path: {log_file_path}")


def load_config(path: str) -> Dict[str, Any]:
    """Loads a JSON configuration file."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
        logging.info("Configuration loaded successfully.")
        return config
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}.")
        raise
