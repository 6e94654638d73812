"""Schemas for field access endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from fieldaccess.core.roles import Role
from fieldaccess.core.types import EntityType, FieldState


class FieldAccessSummary(BaseModel):
    """Everything a client needs to render one entity type for the caller."""

    entity_type: EntityType
    role: Role
    viewable: list[str]
    editable: list[str]
    sensitive: list[str]
    labels: dict[str, str]


class FieldAccessDetail(BaseModel):
    field: str
    label: str
    state: FieldState
    can_view: bool
    can_edit: bool


class AcceptedUpdate(BaseModel):
    entity_type: EntityType
    accepted: dict[str, Any]


class FieldPermissionDeniedResponse(BaseModel):
    detail: str
    denied_fields: list[str]


MatrixTable = dict[str, dict[str, dict[str, str]]]
