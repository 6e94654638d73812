"""Field-level access control primitives."""

from fieldaccess.core.actor import ActorContext, FieldPermissions
from fieldaccess.core.errors import (
    ActorUnresolvedError,
    ConfigurationError,
    FieldAccessError,
    FieldPermissionDenied,
    UnknownEntityTypeError,
)
from fieldaccess.core.evaluator import (
    can_edit,
    can_view,
    editable_fields,
    field_state,
    readable_fields,
    sensitive_fields,
    viewable_fields,
    writable_fields,
)
from fieldaccess.core.loader import get_matrix, load_matrix, reset_matrix
from fieldaccess.core.matrix import PermissionMatrix, validate_against_schema
from fieldaccess.core.projection import (
    WriteCheck,
    check_write,
    mask_value,
    project_for_read,
    project_for_write,
    project_many,
)
from fieldaccess.core.roles import Role, has_at_least, parse_role, rank
from fieldaccess.core.types import Capability, EntityType, FieldState

__all__ = [
    "ActorContext",
    "FieldPermissions",
    "ActorUnresolvedError",
    "ConfigurationError",
    "FieldAccessError",
    "FieldPermissionDenied",
    "UnknownEntityTypeError",
    "can_edit",
    "can_view",
    "editable_fields",
    "field_state",
    "readable_fields",
    "sensitive_fields",
    "viewable_fields",
    "writable_fields",
    "get_matrix",
    "load_matrix",
    "reset_matrix",
    "PermissionMatrix",
    "validate_against_schema",
    "WriteCheck",
    "check_write",
    "mask_value",
    "project_for_read",
    "project_for_write",
    "project_many",
    "Role",
    "has_at_least",
    "parse_role",
    "rank",
    "Capability",
    "EntityType",
    "FieldState",
]
