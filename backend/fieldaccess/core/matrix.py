"""Permission matrix: (role x entity type x field) -> capability.

The matrix is a flat declarative table so the whole permission surface can be
audited in one place and diffed in review. It is the single source of truth;
no other component hardcodes a field-permission decision.

Construction is the only place validation happens. Once built, the matrix is
immutable and every lookup is total: an undeclared field is NONE.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from fieldaccess.core.errors import ConfigurationError
from fieldaccess.core.roles import Role
from fieldaccess.core.types import Capability, EntityType, EntityTypeLike, coerce_entity_type


VIEW_TOKEN = "view"
EDIT_TOKEN = "edit"
_GRANT_TOKENS = frozenset({VIEW_TOKEN, EDIT_TOKEN})


@dataclass(frozen=True, slots=True)
class FieldRule:
    """Declared grants for one field of one entity type."""

    name: str
    label: Optional[str]
    grants: Mapping[Role, Capability]

    def capability_for(self, role: Role) -> Capability:
        return self.grants.get(role, Capability.NONE)


def _capability_from_tokens(entity: str, field: str, role: Role, tokens: Any) -> Capability:
    if tokens is None:
        return Capability.NONE
    if isinstance(tokens, str) or not isinstance(tokens, (list, tuple)):
        raise ConfigurationError(
            f"{entity}.{field}: grants for {role.value} must be a list of {sorted(_GRANT_TOKENS)}, got {tokens!r}."
        )
    granted = set()
    for t in tokens:
        if t not in _GRANT_TOKENS:
            raise ConfigurationError(f"{entity}.{field}: unknown grant {t!r} for {role.value}.")
        granted.add(t)
    if EDIT_TOKEN in granted and VIEW_TOKEN not in granted:
        # Edit-without-view is rejected, never silently upgraded.
        raise ConfigurationError(f"{entity}.{field}: {role.value} is granted edit without view.")
    if EDIT_TOKEN in granted:
        return Capability.EDIT
    if VIEW_TOKEN in granted:
        return Capability.VIEW
    return Capability.NONE


def _parse_field(entity: str, field: Any, spec: Any) -> FieldRule:
    if not isinstance(field, str) or not field.strip():
        raise ConfigurationError(f"{entity}: field names must be non-empty strings, got {field!r}.")
    if not isinstance(spec, Mapping):
        raise ConfigurationError(f"{entity}.{field}: expected a mapping with 'grants'.")

    raw_grants = spec.get("grants")
    if raw_grants is None:
        raw_grants = {}
    if not isinstance(raw_grants, Mapping):
        raise ConfigurationError(f"{entity}.{field}: 'grants' must map role names to grant lists.")

    grants: dict[Role, Capability] = {}
    for role_name, tokens in raw_grants.items():
        try:
            role = Role(str(role_name))
        except ValueError as e:
            raise ConfigurationError(f"{entity}.{field}: unknown role {role_name!r}.") from e
        grants[role] = _capability_from_tokens(entity, field, role, tokens)

    label = spec.get("label")
    return FieldRule(
        name=field,
        label=str(label) if label is not None else None,
        grants=MappingProxyType(grants),
    )


@dataclass(frozen=True, slots=True)
class PermissionMatrix:
    """Immutable permission table with per (role, entity) field sets precomputed."""

    rules: Mapping[EntityType, Mapping[str, FieldRule]]
    source: str
    _viewable: Mapping[tuple[Role, EntityType], frozenset[str]]
    _editable: Mapping[tuple[Role, EntityType], frozenset[str]]

    @classmethod
    def from_mapping(cls, raw: Any, *, source: str = "<mapping>") -> "PermissionMatrix":
        """Build and validate a matrix from its declarative form.

        Expected shape::

            entities:
              ticket:
                fields:
                  status:
                    label: Status
                    grants: {ADMIN: [view, edit], USER: [view]}
        """
        if not isinstance(raw, Mapping) or not isinstance(raw.get("entities"), Mapping):
            raise ConfigurationError(f"Invalid permission matrix ({source}): expected top-level mapping with 'entities'.")

        rules: dict[EntityType, Mapping[str, FieldRule]] = {e: MappingProxyType({}) for e in EntityType}
        for entity_name, entity_spec in raw["entities"].items():
            try:
                entity = EntityType(str(entity_name))
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid permission matrix ({source}): entity type {entity_name!r} is not one of "
                    f"{[t.value for t in EntityType]}."
                ) from e
            if not isinstance(entity_spec, Mapping) or not isinstance(entity_spec.get("fields"), Mapping):
                raise ConfigurationError(f"Invalid permission matrix ({source}): {entity.value} needs a 'fields' mapping.")

            fields = {
                str(name): _parse_field(entity.value, name, spec)
                for name, spec in entity_spec["fields"].items()
            }
            rules[entity] = MappingProxyType(fields)

        viewable: dict[tuple[Role, EntityType], frozenset[str]] = {}
        editable: dict[tuple[Role, EntityType], frozenset[str]] = {}
        for entity, fields in rules.items():
            for role in Role:
                viewable[(role, entity)] = frozenset(f for f, r in fields.items() if r.capability_for(role).can_view)
                editable[(role, entity)] = frozenset(f for f, r in fields.items() if r.capability_for(role).can_edit)

        return cls(
            rules=MappingProxyType(rules),
            source=source,
            _viewable=MappingProxyType(viewable),
            _editable=MappingProxyType(editable),
        )

    def lookup(self, role: Role, entity_type: EntityTypeLike, field: str) -> Capability:
        """Total lookup: undeclared fields are NONE."""
        entity = coerce_entity_type(entity_type)
        rule = self.rules[entity].get(field)
        if rule is None:
            return Capability.NONE
        return rule.capability_for(role)

    def viewable(self, role: Role, entity_type: EntityTypeLike) -> frozenset[str]:
        return self._viewable[(role, coerce_entity_type(entity_type))]

    def editable(self, role: Role, entity_type: EntityTypeLike) -> frozenset[str]:
        return self._editable[(role, coerce_entity_type(entity_type))]

    def known_fields(self, entity_type: EntityTypeLike) -> frozenset[str]:
        return frozenset(self.rules[coerce_entity_type(entity_type)])

    def label(self, entity_type: EntityTypeLike, field: str) -> str:
        rule = self.rules[coerce_entity_type(entity_type)].get(field)
        if rule is None or not rule.label:
            return field
        return rule.label

    def labels(self, entity_type: EntityTypeLike) -> dict[str, str]:
        entity = coerce_entity_type(entity_type)
        return {f: self.label(entity, f) for f in self.rules[entity]}

    def field_count(self) -> dict[str, int]:
        return {e.value: len(fields) for e, fields in self.rules.items()}

    def as_table(self) -> dict[str, dict[str, dict[str, str]]]:
        """Full surface as plain data (entity -> field -> role -> capability)."""
        return {
            entity.value: {
                name: {role.value: rule.capability_for(role).value for role in Role}
                for name, rule in sorted(fields.items())
            }
            for entity, fields in self.rules.items()
        }


def validate_against_schema(matrix: PermissionMatrix, schema: Mapping[EntityTypeLike, Iterable[str]]) -> None:
    """Reject matrix fields that do not exist in the entity schema.

    A typo in the matrix would otherwise silently under-grant (the real field
    stays NONE) and leave a dead entry that looks like a grant in review.
    """
    known = {coerce_entity_type(e): frozenset(fields) for e, fields in schema.items()}
    problems: list[str] = []
    for entity, fields in matrix.rules.items():
        if not fields:
            continue
        if entity not in known:
            problems.append(f"{entity.value}: no schema available")
            continue
        unknown = sorted(set(fields) - known[entity])
        if unknown:
            problems.append(f"{entity.value}: {', '.join(unknown)}")
    if problems:
        raise ConfigurationError(
            f"Permission matrix ({matrix.source}) declares fields missing from the entity schema: "
            + "; ".join(problems)
        )
