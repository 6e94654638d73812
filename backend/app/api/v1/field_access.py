"""Field access endpoints.

The web client renders forms from these responses instead of keeping its own
copy of the matrix, so server enforcement and client rendering cannot drift.
"""

from __future__ import annotations

from typing import Any, Union

from fastapi import APIRouter, Body, Depends, HTTPException, status

from app.api.deps import get_permission_matrix
from app.schemas.field_access import (
    AcceptedUpdate,
    FieldAccessDetail,
    FieldAccessSummary,
    FieldPermissionDeniedResponse,
    MatrixTable,
)
from app.security.auth import get_current_actor, require_min_role, require_roles
from fieldaccess.core import evaluator
from fieldaccess.core.actor import ActorContext, FieldPermissions
from fieldaccess.core.matrix import PermissionMatrix
from fieldaccess.core.projection import project_for_write, project_many
from fieldaccess.core.roles import Role
from fieldaccess.core.types import EntityType


router = APIRouter(
    dependencies=[
        Depends(require_roles(Role.ADMIN, Role.TECHNICIAN, Role.USER)),
    ]
)


# Declared before /{entity_type} so "matrix" is not parsed as an entity type.
@router.get("/matrix", response_model=MatrixTable)
async def get_matrix_table(
    _: ActorContext = Depends(require_min_role(Role.ADMIN)),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
) -> dict[str, Any]:
    """Full permission surface for audit."""
    return matrix.as_table()


@router.get("/{entity_type}", response_model=FieldAccessSummary)
async def get_field_access(
    entity_type: EntityType,
    actor: ActorContext = Depends(get_current_actor),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
) -> FieldAccessSummary:
    role = actor.require_role()
    return FieldAccessSummary(
        entity_type=entity_type,
        role=role,
        viewable=evaluator.readable_fields(role, entity_type, matrix=matrix),
        editable=evaluator.writable_fields(role, entity_type, matrix=matrix),
        sensitive=evaluator.sensitive_fields(role, entity_type, matrix=matrix),
        labels=matrix.labels(entity_type),
    )


@router.get("/{entity_type}/fields/{field}", response_model=FieldAccessDetail)
async def get_field_detail(
    entity_type: EntityType,
    field: str,
    actor: ActorContext = Depends(get_current_actor),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
) -> FieldAccessDetail:
    perms = FieldPermissions.for_actor(actor, entity_type, matrix=matrix)
    return FieldAccessDetail(
        field=field,
        label=matrix.label(entity_type, field),
        state=perms.field_state(field),
        can_view=perms.can_view(field),
        can_edit=perms.can_edit(field),
    )


@router.post("/{entity_type}/project")
async def project_record(
    entity_type: EntityType,
    body: Union[list[dict[str, Any]], dict[str, Any]] = Body(...),
    actor: ActorContext = Depends(get_current_actor),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
) -> Any:
    """Read projection of a record, a list of records, or a page envelope."""
    try:
        return project_many(actor.require_role(), entity_type, body, matrix=matrix)
    except TypeError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e


@router.post(
    "/{entity_type}/validate-update",
    response_model=AcceptedUpdate,
    responses={403: {"model": FieldPermissionDeniedResponse}},
)
async def validate_update(
    entity_type: EntityType,
    payload: dict[str, Any] = Body(...),
    actor: ActorContext = Depends(get_current_actor),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
) -> AcceptedUpdate:
    """Accept the whole update or reject it naming every denied field (403)."""
    accepted = project_for_write(actor.require_role(), entity_type, payload, matrix=matrix)
    return AcceptedUpdate(entity_type=entity_type, accepted=accepted)
