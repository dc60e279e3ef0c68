# utils.py
"""
Utility functions for the firefly framework.

This module provides helpers that are used across the application but do
not belong to a specific domain like motion or rendering: logging setup,
config file loading, and parsing of the runtime firefly configuration.
"""
import logging
import logging.handlers
import json
import math
import os
import numpy as np
from dataclasses import dataclass
from typing import Dict, Any, Optional

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary containing a "logging" key with "level",
#       "format", and "log_file" sub-keys.
#   - Side Effects: Configures the root Python logger. Creates a log
#     directory if it doesn't exist. Sets up a console handler and a
#     rotating file handler.
#
# FireflyConfig.from_dict(params: Dict[str, Any]) -> FireflyConfig:
#   - Inputs: A "simulation" section, or a configuration object in the
#     external camelCase shape ({count, color, speed, flickerRate, wingSpeed}).
#   - Outputs: A FireflyConfig with defaults for every missing key.
#   - Invariants: Values are not validated here; the population clamps
#     the count when it reads it.

DEFAULT_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
DEFAULT_LOG_FILE = 'logs/fireflies.log'
LOG_MAX_BYTES = 1024 * 1024
LOG_BACKUP_COUNT = 5

# Maps the external camelCase keys onto our field names.
_CONFIG_KEY_ALIASES = {
    "flickerRate": "flicker_rate",
    "wingSpeed": "wing_speed",
    "maxParticles": "max_particles",
}


@dataclass(frozen=True)
class FireflyConfig:
    """Declarative swarm parameters, read by the engine every frame."""
    count: int = 35
    color: str = "#ffff00"
    speed: float = 1.2
    flicker_rate: float = 5.0
    wing_speed: float = 8.0
    max_particles: int = 2000

    @classmethod
    def from_dict(cls, params: Optional[Dict[str, Any]]) -> "FireflyConfig":
        if not params:
            return cls()
        known = cls.__dataclass_fields__
        values = {}
        for key, value in params.items():
            name = _CONFIG_KEY_ALIASES.get(key, key)
            if name in known:
                values[name] = value
        return cls(**values)

    def population_target(self) -> int:
        """The free-roam count, degraded to a bounded non-negative integer."""
        try:
            count = float(self.count)
        except (TypeError, ValueError):
            return 0
        if not math.isfinite(count):
            return 0
        return int(min(max(count, 0), max(self.max_particles, 0)))


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Routes all firefly log records to the console and to a rotating file.

    Safe to call more than once: the root logger's handlers are replaced,
    not appended to.
    """
    settings = config.get('logging') or {}
    level = str(settings.get('level', 'INFO')).upper()
    formatter = logging.Formatter(settings.get('format', DEFAULT_LOG_FORMAT))
    log_path = settings.get('log_file', DEFAULT_LOG_FILE)

    folder = os.path.dirname(log_path)
    if folder:
        os.makedirs(folder, exist_ok=True)

    handlers = [
        logging.StreamHandler(),
        logging.handlers.RotatingFileHandler(
            log_path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT
        ),
    ]
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    logging.info(f"Swarm logging ready (level {level}, file {log_path}).")


def load_config(path: str) -> Dict[str, Any]:
    """
    Reads the JSON run configuration. Missing or malformed files are logged
    and re-raised; main decides what to do with them.
    """
    logging.info(f"Reading swarm configuration from {path}")
    try:
        with open(path, 'r') as f:
            return json.load(f)
    except FileNotFoundError:
        logging.error(f"No configuration file at {path}.")
        raise
    except json.JSONDecodeError as e:
        logging.error(f"{path} is not valid JSON (line {e.lineno}, column {e.colno}).")
        raise


def make_rng(seed: Optional[int]):
    """
    Creates the master random generator. A None seed draws from system entropy.
    """
    rng = np.random.default_rng(seed)
    logging.info(f"Master RNG initialized with seed: {seed}")
    return rng
