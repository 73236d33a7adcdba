"""
Environment-driven settings.

Each setting is a small function so callers always see the current process
environment (tests can monkeypatch it). Blank or unparsable values fall back
to the default instead of failing startup.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv


def load_env_file(path: str | None = None) -> bool:
    """
    Load a `.env` file into the process environment, if one exists.

    Variables already present in the environment win.
    """
    return load_dotenv(dotenv_path=path, override=False)


def env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def http_host() -> str:
    return env_str("HTTP_HOST", "0.0.0.0")


def http_port() -> int:
    return env_int("HTTP_PORT", 8080)


def request_timeout_s() -> float:
    return env_float("REQUEST_TIMEOUT_S", 15.0)


def shutdown_grace_s() -> float:
    return env_float("SHUTDOWN_GRACE_S", 15.0)


def idle_timeout_s() -> int:
    return env_int("HTTP_IDLE_TIMEOUT_S", 60)


def student_store_backend() -> str:
    # "postgres" (default) or "memory".
    return env_str("STUDENT_STORE", "postgres").lower()
