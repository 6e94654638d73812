from __future__ import annotations

"""Permission matrix check (CI / pre-deploy).

STRICT:
- Load the matrix exactly as the API would (same loader, same validation).
- Cross-check declared fields against the ORM entity schema.
- Exit non-zero on any problem; never start the API with a bad matrix.

Run:
  python fieldaccess/job/check_matrix.py [--path field_permissions.yaml] [--entity ticket] [--table]
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

# Ensure backend/ is importable as top-level `app` / `fieldaccess`.
BASE_DIR = Path(__file__).resolve().parents[2]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from app.core.env import load_env_if_present  # noqa: E402
from app.models.schema import entity_schema  # noqa: E402
from fieldaccess.core.errors import ConfigurationError  # noqa: E402
from fieldaccess.core.loader import default_matrix_path, load_matrix  # noqa: E402
from fieldaccess.core.matrix import validate_against_schema  # noqa: E402
from fieldaccess.core.roles import Role  # noqa: E402
from fieldaccess.core.types import EntityType  # noqa: E402


logger = logging.getLogger("assetdesk.fieldaccess")


def _log(event: dict) -> None:
    logger.info(json.dumps(event, ensure_ascii=False))


def render_table(table: dict[str, dict[str, dict[str, str]]], entity: Optional[str] = None) -> str:
    roles = [r.value for r in Role]
    lines: list[str] = []
    for name, fields in table.items():
        if entity is not None and name != entity:
            continue
        lines.append(f"[{name}]")
        width = max((len(f) for f in fields), default=5)
        lines.append("  " + "field".ljust(width) + "  " + "  ".join(r.ljust(10) for r in roles))
        for field, caps in fields.items():
            lines.append("  " + field.ljust(width) + "  " + "  ".join(caps[r].ljust(10) for r in roles))
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Validate the field permission matrix.")
    ap.add_argument("--path", type=Path, default=None)
    ap.add_argument("--entity", choices=[e.value for e in EntityType], default=None)
    ap.add_argument("--table", action="store_true", help="print the resolved matrix")
    args = ap.parse_args(argv)

    load_env_if_present()
    path = args.path or default_matrix_path()
    try:
        matrix = load_matrix(path)
        validate_against_schema(matrix, entity_schema())
    except ConfigurationError as e:
        _log({"event": "matrix_check", "status": "FAIL", "source": str(path), "error": str(e)})
        print(f"FAIL: {e}", file=sys.stderr)
        return 1

    _log({"event": "matrix_check", "status": "PASS", "source": matrix.source, "fields": matrix.field_count()})
    if args.table:
        print(render_table(matrix.as_table(), args.entity))
    else:
        print(f"PASS: {matrix.source}")
    return 0


if __name__ == "__main__":
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
    raise SystemExit(main())
