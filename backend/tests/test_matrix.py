from __future__ import annotations

from pathlib import Path

import pytest

from fieldaccess.core.errors import ConfigurationError, UnknownEntityTypeError
from fieldaccess.core.loader import DEFAULT_MATRIX_PATH, MATRIX_PATH_ENV, get_matrix, load_matrix, reset_matrix
from fieldaccess.core.matrix import PermissionMatrix
from fieldaccess.core.roles import Role
from fieldaccess.core.types import Capability, EntityType


def _one_field(grants, entity="ticket", field="status"):
    return {"entities": {entity: {"fields": {field: {"grants": grants}}}}}


def test_lookup_reads_declared_grants(scenario_matrix: PermissionMatrix):
    assert scenario_matrix.lookup(Role.ADMIN, EntityType.TICKET, "internalCost") is Capability.EDIT
    assert scenario_matrix.lookup(Role.TECHNICIAN, "ticket", "assignedToId") is Capability.VIEW
    assert scenario_matrix.lookup(Role.USER, "ticket", "assignedToId") is Capability.NONE


def test_lookup_is_total_for_undeclared_fields_and_entities(scenario_matrix: PermissionMatrix):
    assert scenario_matrix.lookup(Role.ADMIN, "ticket", "no_such_field") is Capability.NONE
    # asset is not declared at all in this matrix; still defined behaviour.
    assert scenario_matrix.lookup(Role.ADMIN, "asset", "name") is Capability.NONE
    assert scenario_matrix.viewable(Role.ADMIN, "asset") == frozenset()


def test_lookup_unknown_entity_type_is_fatal(scenario_matrix: PermissionMatrix):
    with pytest.raises(UnknownEntityTypeError):
        scenario_matrix.lookup(Role.ADMIN, "invoice", "total")


def test_edit_without_view_is_rejected_not_upgraded():
    with pytest.raises(ConfigurationError, match="edit without view"):
        PermissionMatrix.from_mapping(_one_field({"TECHNICIAN": ["edit"]}))


@pytest.mark.parametrize(
    "raw,match",
    [
        (_one_field({"ADMIN": ["view"]}, entity="invoice"), "entity type"),
        (_one_field({"SUPERUSER": ["view"]}), "unknown role"),
        (_one_field({"ADMIN": ["read"]}), "unknown grant"),
        (_one_field({"ADMIN": "view"}), "must be a list"),
        (_one_field([]), "'grants' must map"),
        (_one_field(""), "'grants' must map"),
        ({"entities": {"ticket": {"columns": {}}}}, "'fields'"),
        ({"ticket": {}}, "'entities'"),
        (None, "'entities'"),
    ],
)
def test_invalid_declarations_fail_fast(raw, match):
    with pytest.raises(ConfigurationError, match=match):
        PermissionMatrix.from_mapping(raw)


def test_empty_grant_list_and_omitted_roles_are_none():
    m = PermissionMatrix.from_mapping(_one_field({"ADMIN": []}))
    for role in Role:
        assert m.lookup(role, "ticket", "status") is Capability.NONE
    assert m.known_fields("ticket") == frozenset({"status"})


def test_labels_fall_back_to_field_name(scenario_matrix: PermissionMatrix):
    assert scenario_matrix.label("ticket", "assignedToId") == "Assigned To"
    assert scenario_matrix.label("ticket", "internalCost") == "internalCost"
    assert scenario_matrix.label("ticket", "undeclared") == "undeclared"


def test_as_table_lists_every_role(scenario_matrix: PermissionMatrix):
    table = scenario_matrix.as_table()
    assert table["ticket"]["assignedToId"] == {"ADMIN": "EDIT", "TECHNICIAN": "VIEW", "USER": "NONE"}
    assert table["asset"] == {}


def test_bundled_matrix_loads():
    m = load_matrix(DEFAULT_MATRIX_PATH)
    counts = m.field_count()
    assert counts["asset"] > 0 and counts["user"] > 0 and counts["ticket"] > 0
    assert m.lookup(Role.USER, "ticket", "assignedToId") is Capability.NONE
    assert m.lookup(Role.TECHNICIAN, "asset", "notes") is Capability.VIEW


def test_bundled_matrix_never_exposes_credentials():
    m = load_matrix(DEFAULT_MATRIX_PATH)
    for role in Role:
        for field in ("password", "twoFactorSecret", "backupCodes", "resetPasswordToken", "verificationOTP"):
            assert m.lookup(role, "user", field) is Capability.NONE


def test_bundled_matrix_admin_is_superset_in_practice():
    # Declarations are independent per role; this documents current content only.
    m = load_matrix(DEFAULT_MATRIX_PATH)
    for entity in EntityType:
        for lower in (Role.TECHNICIAN, Role.USER):
            assert m.viewable(lower, entity) <= m.viewable(Role.ADMIN, entity)


def test_load_matrix_errors_are_configuration_errors(tmp_path: Path):
    with pytest.raises(ConfigurationError, match="Cannot read"):
        load_matrix(tmp_path / "missing.yaml")

    bad = tmp_path / "bad.yaml"
    bad.write_text("entities: {ticket: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Cannot parse"):
        load_matrix(bad)


def test_get_matrix_honours_env_override_and_is_built_once(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    p = tmp_path / "perms.yaml"
    p.write_text(
        "entities:\n  asset:\n    fields:\n      name: {grants: {USER: [view]}}\n",
        encoding="utf-8",
    )
    monkeypatch.setenv(MATRIX_PATH_ENV, str(p))
    reset_matrix()

    first = get_matrix()
    assert first.source == str(p)
    assert get_matrix() is first
    assert first.lookup(Role.USER, "asset", "name") is Capability.VIEW


def test_matrix_is_immutable(scenario_matrix: PermissionMatrix):
    with pytest.raises(TypeError):
        scenario_matrix.rules[EntityType.TICKET]["status"] = None  # type: ignore[index]
    with pytest.raises(AttributeError):
        scenario_matrix.source = "other"  # type: ignore[misc]


def test_duplicate_field_declaration_is_rejected(tmp_path: Path):
    p = tmp_path / "perms.yaml"
    p.write_text(
        "entities:\n"
        "  ticket:\n"
        "    fields:\n"
        "      assignedToId: {grants: {USER: []}}\n"
        "      assignedToId: {grants: {USER: [view, edit]}}\n",
        encoding="utf-8",
    )
    with pytest.raises(ConfigurationError, match="Duplicate key 'assignedToId'"):
        load_matrix(p)
