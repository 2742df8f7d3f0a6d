import copy
import json
import logging
import os

from .models import DEFAULT_HOST
from .protocol import DEFAULT_DURATION, DEFAULT_PORT

CONFIG_PATH = os.environ.get("PICOTIMER_CONFIG", "picotimer.json")

DEFAULTS = {
    "connection": {
        "host": DEFAULT_HOST,
        "port": DEFAULT_PORT,
        "open_timeout": None,
    },
    "timer": {
        "duration": DEFAULT_DURATION,
        "tick_ms": 100,
        "presets": [30, 60, 90, 120],
    },
}

log = logging.getLogger(__name__)


def merge(base, override):
    """Return ``base`` with ``override`` laid over it, one level of sections deep."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged


def load_config(path=None):
    path = path or CONFIG_PATH
    config_data = {}
    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                config_data = json.load(f)
            log.info(f"Loaded config file {path}")
        except (OSError, ValueError) as e:
            log.error(f"Failed to load config file {path}: {e}")
            config_data = {}
    if not isinstance(config_data, dict):
        log.error(f"Config file {path} is not a JSON object, using defaults")
        config_data = {}
    return merge(DEFAULTS, config_data)
