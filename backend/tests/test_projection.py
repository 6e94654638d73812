from __future__ import annotations

import itertools
import logging

import pytest

from fieldaccess.core.errors import FieldPermissionDenied
from fieldaccess.core.matrix import PermissionMatrix
from fieldaccess.core.projection import check_write, mask_value, project_for_read, project_for_write, project_many
from fieldaccess.core.roles import Role


TICKET = {"id": "t1", "title": "Broken printer", "assignedToId": "u9", "internalCost": 450}


def test_user_read_projection_scenario(scenario_matrix: PermissionMatrix):
    # status is viewable but absent from the source: never fabricated.
    assert project_for_read(Role.USER, "ticket", TICKET, matrix=scenario_matrix) == {"title": "Broken printer"}


def test_read_projection_removes_rather_than_nulls(scenario_matrix: PermissionMatrix):
    out = project_for_read(Role.TECHNICIAN, "ticket", {**TICKET, "status": None}, matrix=scenario_matrix)
    assert out == {"id": "t1", "title": "Broken printer", "assignedToId": "u9", "status": None}
    assert "internalCost" not in out


def test_read_projection_is_idempotent(scenario_matrix: PermissionMatrix):
    for role in Role:
        once = project_for_read(role, "ticket", TICKET, matrix=scenario_matrix)
        assert project_for_read(role, "ticket", once, matrix=scenario_matrix) == once


def test_zero_viewable_fields_yields_empty_record(scenario_matrix: PermissionMatrix):
    assert project_for_read(Role.USER, "ticket", {"internalCost": 1, "id": "t"}, matrix=scenario_matrix) == {}


def test_read_projection_does_not_mutate_input(scenario_matrix: PermissionMatrix):
    record = dict(TICKET)
    project_for_read(Role.USER, "ticket", record, matrix=scenario_matrix)
    assert record == TICKET


def test_technician_write_rejected_as_a_whole(scenario_matrix: PermissionMatrix):
    payload = {"status": "resolved", "assignedToId": "u2"}
    with pytest.raises(FieldPermissionDenied) as ei:
        project_for_write(Role.TECHNICIAN, "ticket", payload, matrix=scenario_matrix)
    assert ei.value.denied_fields == ["assignedToId"]
    assert ei.value.entity_type == "ticket"
    assert ei.value.role == "TECHNICIAN"
    assert "assignedToId" in str(ei.value)


def test_removing_denied_key_makes_payload_acceptable(scenario_matrix: PermissionMatrix):
    payload = {"status": "resolved", "assignedToId": "u2"}
    check = check_write(Role.TECHNICIAN, "ticket", payload, matrix=scenario_matrix)
    assert not check.valid
    trimmed = {k: v for k, v in payload.items() if k not in check.denied_fields}
    assert project_for_write(Role.TECHNICIAN, "ticket", trimmed, matrix=scenario_matrix) == {"status": "resolved"}


def test_every_subset_of_accepted_payload_is_accepted(scenario_matrix: PermissionMatrix):
    payload = {"title": "t", "status": "open", "assignedToId": "u1", "internalCost": 3}
    assert project_for_write(Role.ADMIN, "ticket", payload, matrix=scenario_matrix) == payload
    keys = list(payload)
    for n in range(len(keys) + 1):
        for subset in itertools.combinations(keys, n):
            sub = {k: payload[k] for k in subset}
            assert project_for_write(Role.ADMIN, "ticket", sub, matrix=scenario_matrix) == sub


def test_unknown_write_keys_are_denied(scenario_matrix: PermissionMatrix):
    check = check_write(Role.ADMIN, "ticket", {"title": "x", "madeUp": 1, "alsoMadeUp": 2}, matrix=scenario_matrix)
    assert check.denied_fields == ["alsoMadeUp", "madeUp"]


def test_unknown_role_write_uses_user_grants(scenario_matrix: PermissionMatrix):
    with pytest.raises(FieldPermissionDenied) as ei:
        project_for_write("GUEST", "ticket", {"status": "closed"}, matrix=scenario_matrix)
    assert ei.value.role == "USER"


def test_write_returns_a_copy(scenario_matrix: PermissionMatrix):
    payload = {"title": "new"}
    out = project_for_write(Role.TECHNICIAN, "ticket", payload, matrix=scenario_matrix)
    assert out == payload and out is not payload


def test_denied_write_is_logged(scenario_matrix: PermissionMatrix, caplog):
    with caplog.at_level(logging.INFO, logger="assetdesk.fieldaccess"):
        with pytest.raises(FieldPermissionDenied):
            project_for_write(Role.USER, "ticket", {"status": "x"}, matrix=scenario_matrix)
    msgs = [r.getMessage() for r in caplog.records]
    assert any('"event": "write_denied"' in m and "status" in m for m in msgs)


def test_project_many_shapes(scenario_matrix: PermissionMatrix):
    rows = [TICKET, {"title": "Other", "internalCost": 1}]
    assert project_many(Role.USER, "ticket", rows, matrix=scenario_matrix) == [
        {"title": "Broken printer"},
        {"title": "Other"},
    ]

    page = {"data": rows, "total": 2, "page": 1}
    out = project_many(Role.USER, "ticket", page, matrix=scenario_matrix)
    assert out == {"data": [{"title": "Broken printer"}, {"title": "Other"}], "total": 2, "page": 1}

    assert project_many(Role.USER, "ticket", TICKET, matrix=scenario_matrix) == {"title": "Broken printer"}

    with pytest.raises(TypeError):
        project_many(Role.USER, "ticket", "not a record", matrix=scenario_matrix)


def test_record_with_data_list_is_projected_as_a_record(scenario_matrix: PermissionMatrix):
    record = {**TICKET, "data": []}
    assert project_many(Role.USER, "ticket", record, matrix=scenario_matrix) == {"title": "Broken printer"}


def test_envelope_requires_pagination_keys_only(scenario_matrix: PermissionMatrix):
    page = {"data": [TICKET], "total": 1, "pageSize": 20, "nextCursor": None}
    out = project_many(Role.USER, "ticket", page, matrix=scenario_matrix)
    assert out == {"data": [{"title": "Broken printer"}], "total": 1, "pageSize": 20, "nextCursor": None}

    # An unrecognised top-level key means it is not a page.
    mixed = {"data": [TICKET], "total": 1, "internalCost": 450}
    assert project_many(Role.USER, "ticket", mixed, matrix=scenario_matrix) == {}


def test_entity_with_a_data_field_never_uses_envelopes():
    raw = {"entities": {"asset": {"fields": {"data": {"grants": {"USER": ["view"]}}, "name": {"grants": {}}}}}}
    m = PermissionMatrix.from_mapping(raw)
    body = {"data": [{"name": "x"}], "total": 1}
    assert project_many(Role.USER, "asset", body, matrix=m) == {"data": [{"name": "x"}]}


@pytest.mark.parametrize("body", [[TICKET, 1], {"data": [1]}, {"data": ["x"], "total": 1}])
def test_non_record_items_raise_type_error(scenario_matrix: PermissionMatrix, body):
    with pytest.raises(TypeError, match="not a record"):
        project_many(Role.USER, "ticket", body, matrix=scenario_matrix)


def test_denied_message_uses_labels():
    exc = FieldPermissionDenied(entity_type="ticket", role="USER", denied_fields=["status", "assignedToId"])
    assert exc.message({"assignedToId": "Assigned To"}) == (
        "You do not have permission to edit fields: Assigned To, status."
    )


@pytest.mark.parametrize(
    "field,value,expected",
    [
        ("phone", "555-1234", "***-***-****"),
        ("email", "a@b.c", "***@***.***"),
        ("twoFactorSecret", "abc", "[REDACTED]"),
        ("resetPasswordToken", "abc", "[REDACTED]"),
        ("notes", "internal", "***"),
        ("loginAttempts", 3, "[HIDDEN]"),
        ("phone", None, None),
    ],
)
def test_mask_value(field, value, expected):
    assert mask_value(field, value) == expected


def test_denied_write_carries_labels_of_its_matrix(scenario_matrix: PermissionMatrix):
    with pytest.raises(FieldPermissionDenied) as ei:
        project_for_write(Role.USER, "ticket", {"assignedToId": "u2"}, matrix=scenario_matrix)
    assert ei.value.message() == "You do not have permission to edit field: Assigned To."
