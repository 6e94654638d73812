from __future__ import annotations

"""Process configuration from the environment.

Settings (`ASSETDESK_JWT_SECRET`, `ASSETDESK_FIELD_PERMISSIONS`) are read from
os.environ. A local `.env` file may seed them for development; real
environment variables always take precedence unless override=True.
"""

import os
from pathlib import Path
from typing import Iterator


# backend/app/core/env.py -> repo root
REPO_ROOT = Path(__file__).resolve().parents[3]
ENV_FILES = (REPO_ROOT / ".env", REPO_ROOT / "backend" / ".env")


def _parse_env_line(line: str) -> tuple[str, str] | None:
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    key, sep, value = line.partition("=")
    key, value = key.strip(), value.strip()
    if not sep or not key:
        return None
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        value = value[1:-1]
    return key, value


def _iter_env_file(path: Path) -> Iterator[tuple[str, str]]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError:
        return
    for raw in content.splitlines():
        parsed = _parse_env_line(raw)
        if parsed:
            yield parsed


def load_env_if_present(*, override: bool = False) -> None:
    """Seed os.environ from the repo root `.env`, then `backend/.env`."""
    for path in ENV_FILES:
        if not path.is_file():
            continue
        for key, value in _iter_env_file(path):
            if override or key not in os.environ:
                os.environ[key] = value


def require_env(name: str) -> str:
    """Return a required setting or fail naming the missing variable."""
    value = os.environ.get(name)
    if not value:
        raise RuntimeError(f"Missing required env var {name}.")
    return value
