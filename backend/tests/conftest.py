from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Generator

import pytest


ROOT = Path(__file__).resolve().parents[2]

# Ensure `backend/` packages (`app`, `fieldaccess`) are importable for tests.
BACKEND_DIR = ROOT / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from fieldaccess.core.loader import reset_matrix  # noqa: E402
from fieldaccess.core.matrix import PermissionMatrix  # noqa: E402


TICKET_SCENARIO_MATRIX: dict[str, Any] = {
    "entities": {
        "ticket": {
            "fields": {
                "id": {"grants": {"ADMIN": ["view"], "TECHNICIAN": ["view"]}},
                "title": {"label": "Title", "grants": {"ADMIN": ["view", "edit"], "TECHNICIAN": ["view", "edit"], "USER": ["view"]}},
                "status": {"label": "Status", "grants": {"ADMIN": ["view", "edit"], "TECHNICIAN": ["view", "edit"], "USER": ["view"]}},
                "assignedToId": {"label": "Assigned To", "grants": {"ADMIN": ["view", "edit"], "TECHNICIAN": ["view"]}},
                "internalCost": {"grants": {"ADMIN": ["view", "edit"]}},
            }
        }
    }
}


@pytest.fixture()
def scenario_matrix() -> PermissionMatrix:
    return PermissionMatrix.from_mapping(TICKET_SCENARIO_MATRIX, source="scenario")


@pytest.fixture(autouse=True)
def _fresh_matrix_singleton() -> Generator[None, None, None]:
    """Each test starts from the bundled matrix; overrides never leak."""
    reset_matrix()
    yield
    reset_matrix()


def make_jwt(sub: str, role: str, secret: str, *, exp: int | None = None) -> str:
    """HS256 JWT generator for API tests (no external dependency)."""
    import base64, hashlib, hmac, json  # noqa: E401

    def b64url(raw: bytes) -> str:
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    header = {"alg": "HS256", "typ": "JWT"}
    payload: dict[str, Any] = {"sub": sub, "role": role}
    if exp is not None:
        payload["exp"] = exp

    header_b64 = b64url(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = b64url(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    sig = hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()
    return f"{header_b64}.{payload_b64}.{b64url(sig)}"
