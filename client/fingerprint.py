"""Environment fingerprint used as an anonymous session identity.

The hash is a 32-bit rolling hash with no collision or privacy guarantees.
It identifies a console install to the backend; it is not a security control.
"""

import json
import locale
import os
import platform
import socket
import time


def rolling_hash(text: str) -> str:
    """Hash ``text`` with ``h = h * 31 + ord(c)`` in signed 32-bit arithmetic.

    Returns the lowercase hex of the absolute value, e.g. ``rolling_hash("a") == "61"``.
    """
    h = 0
    for char in text:
        h = ((h << 5) - h + ord(char)) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 1 << 32
    return format(abs(h), "x")


def collect_environment() -> dict:
    """Properties of the running process that are stable across restarts."""
    lang, _encoding = locale.getlocale()
    return {
        "platform": platform.platform(),
        "machine": platform.machine(),
        "implementation": platform.python_implementation(),
        "python": platform.python_version(),
        "language": lang or "unknown",
        "timezone": time.tzname[0] if time.tzname else "unknown",
        "cpu_count": os.cpu_count() or "unknown",
        "hostname": socket.gethostname(),
    }


def generate_fingerprint(environment: dict | None = None) -> str:
    env = environment if environment is not None else collect_environment()
    return rolling_hash(json.dumps(env, sort_keys=True))


def new_session_id(fingerprint: str, now_ms: int | None = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{fingerprint}_{now_ms}"
