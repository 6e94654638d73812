"""Role model for field-level access control."""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Optional, Union


logger = logging.getLogger("assetdesk.fieldaccess")


class Role(str, Enum):
    """Actor roles (ordered by trust: ADMIN > TECHNICIAN > USER)."""

    ADMIN = "ADMIN"
    TECHNICIAN = "TECHNICIAN"
    USER = "USER"


LEAST_PRIVILEGED_ROLE = Role.USER

_RANK = {
    Role.USER: 0,
    Role.TECHNICIAN: 1,
    Role.ADMIN: 2,
}

RoleLike = Union[Role, str]


def rank(role: Role) -> int:
    """Trust level, strictly increasing. Never used by the field matrix."""
    return _RANK[role]


def has_at_least(role: Role, minimum: Role) -> bool:
    """Coarse minimum-role check for gating whole sections or routes."""
    return rank(role) >= rank(minimum)


def is_role_allowed(subject_role: Role, allowed: set[Role]) -> bool:
    """Default-deny role check with explicit allow set."""
    return subject_role in allowed


def parse_role(raw: Optional[RoleLike]) -> Role:
    """Resolve a raw role value, degrading unknown values to least privilege.

    A corrupted or unrecognised role must never grant access, and must not
    crash the request either.
    """
    if isinstance(raw, Role):
        return raw
    value = str(raw) if raw is not None else ""
    try:
        return Role(value)
    except ValueError:
        logger.warning(
            json.dumps(
                {
                    "event": "role_degraded",
                    "raw_role": value[:32],
                    "resolved_role": LEAST_PRIVILEGED_ROLE.value,
                }
            )
        )
        return LEAST_PRIVILEGED_ROLE
