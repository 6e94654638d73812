"""Field projection adapter.

Turns evaluator decisions into record transforms:
- read path removes keys the role may not view (removal, not nulling, so an
  absent field stays distinguishable from a legitimately null one);
- write path rejects the whole payload if any key is not editable.

Stateless. Never touches persistence.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from fieldaccess.core.errors import FieldPermissionDenied
from fieldaccess.core.evaluator import matrix_or_default, resolve_role
from fieldaccess.core.matrix import PermissionMatrix
from fieldaccess.core.roles import Role, RoleLike
from fieldaccess.core.types import EntityTypeLike, coerce_entity_type


logger = logging.getLogger("assetdesk.fieldaccess")


@dataclass(frozen=True, slots=True)
class WriteCheck:
    valid: bool
    denied_fields: list[str] = field(default_factory=list)


def project_for_read(
    role: Optional[RoleLike],
    entity_type: EntityTypeLike,
    record: Mapping[str, Any],
    *,
    matrix: Optional[PermissionMatrix] = None,
) -> dict[str, Any]:
    """Return exactly the viewable keys of `record`. Never adds keys."""
    allowed = matrix_or_default(matrix).viewable(resolve_role(role), entity_type)
    return {k: v for k, v in record.items() if k in allowed}


# Top-level keys a page envelope may carry besides "data".
PAGE_KEYS = frozenset(
    {"total", "totalPages", "page", "pageSize", "limit", "offset", "cursor", "nextCursor", "prevCursor", "hasMore"}
)


def _is_page_envelope(body: Mapping[str, Any], known_fields: frozenset[str]) -> bool:
    # A record with a "data" field is a record, not a page.
    if "data" in known_fields or not isinstance(body.get("data"), list):
        return False
    return all(k in PAGE_KEYS for k in body if k != "data")


def _project_rows(role: Role, entity_type: EntityTypeLike, rows: list, mx: PermissionMatrix) -> list[dict[str, Any]]:
    out = []
    for i, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise TypeError(f"Cannot project item {i}: {type(row).__name__} is not a record.")
        out.append(project_for_read(role, entity_type, row, matrix=mx))
    return out


def project_many(
    role: Optional[RoleLike],
    entity_type: EntityTypeLike,
    body: Any,
    *,
    matrix: Optional[PermissionMatrix] = None,
) -> Any:
    """Apply the read projection to a record, a list of records, or a page envelope.

    A page envelope is a mapping with a list under "data" whose other keys are
    all pagination metadata (`PAGE_KEYS`); those are kept as-is. Any other
    mapping is projected as a single record, so unknown top-level keys are
    dropped rather than passed through.
    """
    mx = matrix_or_default(matrix)
    bound = resolve_role(role)
    if isinstance(body, list):
        return _project_rows(bound, entity_type, body, mx)
    if isinstance(body, Mapping) and _is_page_envelope(body, mx.known_fields(entity_type)):
        out = dict(body)
        out["data"] = _project_rows(bound, entity_type, body["data"], mx)
        return out
    if isinstance(body, Mapping):
        return project_for_read(bound, entity_type, body, matrix=mx)
    raise TypeError(f"Cannot project {type(body).__name__}; expected a mapping, a list or a page envelope.")


def check_write(
    role: Optional[RoleLike],
    entity_type: EntityTypeLike,
    payload: Mapping[str, Any],
    *,
    matrix: Optional[PermissionMatrix] = None,
) -> WriteCheck:
    allowed = matrix_or_default(matrix).editable(resolve_role(role), entity_type)
    denied = sorted(k for k in payload if k not in allowed)
    return WriteCheck(valid=not denied, denied_fields=denied)


def project_for_write(
    role: Optional[RoleLike],
    entity_type: EntityTypeLike,
    payload: Mapping[str, Any],
    *,
    matrix: Optional[PermissionMatrix] = None,
) -> dict[str, Any]:
    """Accept the payload unchanged or reject it as a whole.

    Silently dropping disallowed keys would let a client believe a write
    succeeded for a field it did not, so any denied key fails the request.
    """
    mx = matrix_or_default(matrix)
    bound = resolve_role(role)
    entity = coerce_entity_type(entity_type)
    check = check_write(bound, entity, payload, matrix=mx)
    if not check.valid:
        logger.info(
            json.dumps(
                {
                    "event": "write_denied",
                    "entity_type": entity.value,
                    "role": bound.value,
                    "denied_fields": check.denied_fields,
                }
            )
        )
        raise FieldPermissionDenied(
            entity_type=entity.value,
            role=bound.value,
            denied_fields=check.denied_fields,
            labels=mx.labels(entity),
        )
    return dict(payload)


def mask_value(field_name: str, value: Any) -> Any:
    """Display placeholder for a value the UI chooses to show masked."""
    if value is None:
        return None
    name = field_name.lower()
    if "phone" in name:
        return "***-***-****"
    if "email" in name:
        return "***@***.***"
    if "password" in name or "secret" in name or "token" in name:
        return "[REDACTED]"
    if isinstance(value, str) and value:
        return "***"
    return "[HIDDEN]"
