"""Actor context and the bound permission view consumed by UI-facing callers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fieldaccess.core import evaluator
from fieldaccess.core.errors import ActorUnresolvedError
from fieldaccess.core.matrix import PermissionMatrix
from fieldaccess.core.roles import Role
from fieldaccess.core.types import EntityType, EntityTypeLike, FieldState, coerce_entity_type


@dataclass(frozen=True, slots=True)
class ActorContext:
    """Resolved actor for one request. Read-only to the engine.

    `role is None` is the unresolved state. It is distinct from USER: an
    unresolved actor blocks the caller instead of rendering least privilege.
    """

    sub: Optional[str]
    role: Optional[Role]

    @classmethod
    def unresolved(cls) -> "ActorContext":
        return cls(sub=None, role=None)

    @property
    def is_resolved(self) -> bool:
        return self.role is not None

    def require_role(self) -> Role:
        if self.role is None:
            raise ActorUnresolvedError("Actor role is not resolved.")
        return self.role


@dataclass(frozen=True, slots=True)
class FieldPermissions:
    """Permission checks bound to one actor role and one entity type."""

    role: Role
    entity_type: EntityType
    matrix: Optional[PermissionMatrix] = None

    @classmethod
    def for_actor(
        cls,
        actor: ActorContext,
        entity_type: EntityTypeLike,
        *,
        matrix: Optional[PermissionMatrix] = None,
    ) -> "FieldPermissions":
        return cls(role=actor.require_role(), entity_type=coerce_entity_type(entity_type), matrix=matrix)

    def can_view(self, field: str) -> bool:
        return evaluator.can_view(self.role, self.entity_type, field, matrix=self.matrix)

    def can_edit(self, field: str) -> bool:
        return evaluator.can_edit(self.role, self.entity_type, field, matrix=self.matrix)

    def field_state(self, field: str) -> FieldState:
        return evaluator.field_state(self.role, self.entity_type, field, matrix=self.matrix)

    # Derived from role equality; not separately stored.
    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_technician(self) -> bool:
        return self.role is Role.TECHNICIAN

    @property
    def is_user(self) -> bool:
        return self.role is Role.USER
