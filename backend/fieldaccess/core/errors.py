from __future__ import annotations

"""Controlled errors for the field access engine.

Fail-closed intent:
- Configuration and unknown-entity errors are never caught by the engine;
  they stop the calling operation (startup or request) outright.
- A denied write is an expected, per-request outcome and carries the
  offending fields so the boundary can tell the client exactly what failed.
"""

from typing import Iterable, Mapping, Optional


class FieldAccessError(RuntimeError):
    """Base error for the field access engine."""


class ConfigurationError(FieldAccessError):
    """Raised when the permission matrix is invalid. Startup-time only."""


class UnknownEntityTypeError(FieldAccessError, ValueError):
    """Raised when a caller passes an entity type outside the closed set."""

    def __init__(self, entity_type: object) -> None:
        self.entity_type = entity_type
        super().__init__(f"Unknown entity type: {entity_type!r}.")


class ActorUnresolvedError(FieldAccessError):
    """Raised when a field check is attempted before the actor role is resolved."""


class FieldPermissionDenied(FieldAccessError):
    """Raised when a write payload contains fields the role cannot edit."""

    def __init__(
        self,
        *,
        entity_type: str,
        role: str,
        denied_fields: Iterable[str],
        labels: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.entity_type = entity_type
        self.role = role
        self.denied_fields: list[str] = sorted(denied_fields)
        # Labels from the matrix that made the decision.
        self.labels: dict[str, str] = dict(labels or {})
        super().__init__(self.message())

    def message(self, label_for: Optional[Mapping[str, str]] = None) -> str:
        lookup = self.labels if label_for is None else label_for
        names = [lookup.get(f, f) for f in self.denied_fields]
        noun = "field" if len(names) == 1 else "fields"
        return f"You do not have permission to edit {noun}: {', '.join(names)}."
