"""API dependencies for field-level access control."""

from __future__ import annotations

from fieldaccess.core.loader import get_matrix
from fieldaccess.core.matrix import PermissionMatrix


def get_permission_matrix() -> PermissionMatrix:
    """Process-wide matrix. Overridable in tests via dependency_overrides."""
    return get_matrix()
