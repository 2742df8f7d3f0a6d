import json
import logging
from enum import Enum
from typing import Optional

log = logging.getLogger(__name__)

DEFAULT_PORT = 8080
DEFAULT_DURATION = 60.0
MIN_DURATION = 1.0
MAX_DURATION = 3600.0


class Command(str, Enum):
    """Text tokens the remote device understands."""
    START = "start"
    STOP = "stop"
    TIMEOUT = "timeout"


def build_url(host, port=DEFAULT_PORT):
    host = (host or "").strip()
    if not host:
        raise ValueError("empty device address")
    return f"ws://{host}:{port}"


def parse_status(raw) -> Optional[bool]:
    """Return the remote ``running`` flag carried by an inbound frame.

    Frames that are not JSON are logged and dropped. Valid JSON without a
    boolean ``running`` field is accepted but yields None.
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            log.warning(f"[WS] undecodable frame dropped: {e}")
            return None
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        log.warning(f"[WS] invalid JSON from device: {e}")
        return None
    if not isinstance(data, dict):
        return None
    running = data.get("running")
    if isinstance(running, bool):
        return running
    return None


def parse_duration(text, default=DEFAULT_DURATION):
    """Turn the duration entry into seconds.

    Unparseable or zero input falls back to ``default``; anything else is
    clamped into 1..3600 and rounded to a tenth.
    """
    try:
        value = float(str(text).strip())
    except (TypeError, ValueError):
        return default
    if value != value or value == 0:
        return default
    value = min(MAX_DURATION, max(MIN_DURATION, value))
    return round(value, 1)
