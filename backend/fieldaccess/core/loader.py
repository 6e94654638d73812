from __future__ import annotations

"""YAML loader and process-wide matrix singleton.

Operational intent:
- Permission changes are reviewed as YAML diffs, not code changes.
- The matrix is built once, fully validated, before first use.
- A broken matrix aborts startup; it can never surface at request time.
"""

import json
import logging
import os
import threading
from collections.abc import Hashable
from pathlib import Path
from typing import Final, Optional

import yaml

from fieldaccess.core.errors import ConfigurationError
from fieldaccess.core.matrix import PermissionMatrix


logger = logging.getLogger("assetdesk.fieldaccess")

MATRIX_PATH_ENV: Final[str] = "ASSETDESK_FIELD_PERMISSIONS"
DEFAULT_MATRIX_PATH: Final[Path] = Path(__file__).resolve().parents[1] / "config" / "field_permissions.yaml"

_lock = threading.Lock()
_matrix: Optional[PermissionMatrix] = None


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that rejects duplicate mapping keys instead of keeping the last one."""

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if not isinstance(key, Hashable):
                continue
            if key in seen:
                raise ConfigurationError(
                    f"Duplicate key {key!r} in permission matrix (line {key_node.start_mark.line + 1})."
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def default_matrix_path() -> Path:
    override = os.environ.get(MATRIX_PATH_ENV)
    if override:
        return Path(override)
    return DEFAULT_MATRIX_PATH


def load_matrix(path: Path) -> PermissionMatrix:
    """Read, parse and validate a matrix file."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read permission matrix {path}: {e}") from e
    try:
        raw = yaml.load(text, Loader=_UniqueKeyLoader)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Cannot parse permission matrix {path}: {e}") from e

    matrix = PermissionMatrix.from_mapping(raw, source=str(path))
    logger.info(
        json.dumps(
            {
                "event": "matrix_loaded",
                "source": matrix.source,
                "fields": matrix.field_count(),
            }
        )
    )
    return matrix


def get_matrix() -> PermissionMatrix:
    """Process-wide matrix, built on first call behind a one-time barrier."""
    global _matrix
    m = _matrix
    if m is not None:
        return m
    with _lock:
        if _matrix is None:
            _matrix = load_matrix(default_matrix_path())
        return _matrix


def reset_matrix(matrix: Optional[PermissionMatrix] = None) -> None:
    """Replace (or clear) the singleton. Intended for tests and startup wiring."""
    global _matrix
    with _lock:
        _matrix = matrix
