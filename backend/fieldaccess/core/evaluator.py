"""Permission evaluator (pure, default-deny).

Every decision is a function of (matrix, role, entity type, field). Unknown
fields are never "allowed"; unknown roles behave as the least privileged role;
unknown entity types are caller bugs and propagate.
"""

from __future__ import annotations

from typing import Iterable, Optional

from fieldaccess.core.errors import ActorUnresolvedError
from fieldaccess.core.loader import get_matrix
from fieldaccess.core.matrix import PermissionMatrix
from fieldaccess.core.roles import Role, RoleLike, parse_role
from fieldaccess.core.types import Capability, EntityTypeLike, FieldState


def resolve_role(role: Optional[RoleLike]) -> Role:
    """Bind a role for evaluation.

    `None` means the actor has not been resolved yet; that must block the
    caller rather than render with minimal permissions.
    """
    if role is None:
        raise ActorUnresolvedError("Actor role is not resolved; field permissions cannot be evaluated.")
    return parse_role(role)


def matrix_or_default(matrix: Optional[PermissionMatrix]) -> PermissionMatrix:
    return matrix if matrix is not None else get_matrix()


def capability(
    role: Optional[RoleLike],
    entity_type: EntityTypeLike,
    field: str,
    *,
    matrix: Optional[PermissionMatrix] = None,
) -> Capability:
    return matrix_or_default(matrix).lookup(resolve_role(role), entity_type, field)


def can_view(
    role: Optional[RoleLike],
    entity_type: EntityTypeLike,
    field: str,
    *,
    matrix: Optional[PermissionMatrix] = None,
) -> bool:
    return capability(role, entity_type, field, matrix=matrix) is not Capability.NONE


def can_edit(
    role: Optional[RoleLike],
    entity_type: EntityTypeLike,
    field: str,
    *,
    matrix: Optional[PermissionMatrix] = None,
) -> bool:
    return capability(role, entity_type, field, matrix=matrix) is Capability.EDIT


def viewable_fields(
    role: Optional[RoleLike],
    entity_type: EntityTypeLike,
    candidate_fields: Iterable[str],
    *,
    matrix: Optional[PermissionMatrix] = None,
) -> set[str]:
    """Candidates the role may view. Fields unknown to the matrix are excluded."""
    allowed = matrix_or_default(matrix).viewable(resolve_role(role), entity_type)
    return set(allowed.intersection(candidate_fields))


def editable_fields(
    role: Optional[RoleLike],
    entity_type: EntityTypeLike,
    candidate_fields: Iterable[str],
    *,
    matrix: Optional[PermissionMatrix] = None,
) -> set[str]:
    """Candidates the role may edit. Fields unknown to the matrix are excluded."""
    allowed = matrix_or_default(matrix).editable(resolve_role(role), entity_type)
    return set(allowed.intersection(candidate_fields))


def readable_fields(
    role: Optional[RoleLike], entity_type: EntityTypeLike, *, matrix: Optional[PermissionMatrix] = None
) -> list[str]:
    return sorted(matrix_or_default(matrix).viewable(resolve_role(role), entity_type))


def writable_fields(
    role: Optional[RoleLike], entity_type: EntityTypeLike, *, matrix: Optional[PermissionMatrix] = None
) -> list[str]:
    return sorted(matrix_or_default(matrix).editable(resolve_role(role), entity_type))


def sensitive_fields(
    role: Optional[RoleLike], entity_type: EntityTypeLike, *, matrix: Optional[PermissionMatrix] = None
) -> list[str]:
    """Declared fields the role may not see at all (candidates for masking in the UI)."""
    mx = matrix_or_default(matrix)
    return sorted(mx.known_fields(entity_type) - mx.viewable(resolve_role(role), entity_type))


def field_state(
    role: Optional[RoleLike],
    entity_type: EntityTypeLike,
    field: str,
    *,
    matrix: Optional[PermissionMatrix] = None,
) -> FieldState:
    cap = capability(role, entity_type, field, matrix=matrix)
    if cap is Capability.EDIT:
        return FieldState.EDITABLE
    if cap is Capability.VIEW:
        return FieldState.READ_ONLY
    return FieldState.HIDDEN
