"""Closed vocabularies shared by the matrix, evaluator and projection layers."""

from __future__ import annotations

from enum import Enum
from typing import Union

from fieldaccess.core.errors import UnknownEntityTypeError


class EntityType(str, Enum):
    """Domain record categories whose fields are permissioned independently."""

    ASSET = "asset"
    USER = "user"
    TICKET = "ticket"


class Capability(str, Enum):
    """Access level of one role on one field. EDIT implies VIEW."""

    NONE = "NONE"
    VIEW = "VIEW"
    EDIT = "EDIT"

    @property
    def can_view(self) -> bool:
        return self is not Capability.NONE

    @property
    def can_edit(self) -> bool:
        return self is Capability.EDIT


class FieldState(str, Enum):
    """How a form should render a field for a role."""

    HIDDEN = "HIDDEN"
    READ_ONLY = "READ_ONLY"
    EDITABLE = "EDITABLE"


EntityTypeLike = Union[EntityType, str]


def coerce_entity_type(value: EntityTypeLike) -> EntityType:
    """Map a static entity type value onto the closed set.

    Anything outside the set is a caller bug, not a per-request condition.
    """
    if isinstance(value, EntityType):
        return value
    try:
        return EntityType(str(value))
    except ValueError as e:
        raise UnknownEntityTypeError(value) from e
