"""Entity schema source for the permission matrix.

Wire field names per entity type: mapped column names plus relationship keys
in the client's camelCase form (`created_by` -> `createdBy`).
"""

from __future__ import annotations

from typing import Type

from sqlalchemy import inspect

from app.core.base import Base
from app.models.asset import Asset
from app.models.ticket import Ticket
from app.models.user import User
from fieldaccess.core.types import EntityType


ENTITY_MODELS: dict[EntityType, Type[Base]] = {
    EntityType.ASSET: Asset,
    EntityType.USER: User,
    EntityType.TICKET: Ticket,
}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


def wire_fields(model: Type[Base]) -> frozenset[str]:
    mapper = inspect(model)
    columns = {c.name for c in mapper.columns}
    relations = {_camel(r.key) for r in mapper.relationships}
    return frozenset(columns | relations)


def entity_schema() -> dict[EntityType, frozenset[str]]:
    return {entity: wire_fields(model) for entity, model in ENTITY_MODELS.items()}
