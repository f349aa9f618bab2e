"""
Import one scheme status report from the command line.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from app.config import get_logging_settings
from app.parsing.workbook_reader import WorkbookDecodeError
from app.services.scheme_import_service import SchemeImportPersistenceError, get_scheme_import_service
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Import a scheme status report (.xlsx or .csv).")
    parser.add_argument("path", type=Path, help="Report file to import.")
    parser.add_argument(
        "--events",
        action="store_true",
        help="Include the emitted change events in the printed summary.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=get_logging_settings().level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if not args.path.is_file():
        print(json.dumps({"error": f"File not found: {args.path}"}), file=sys.stderr)
        return 2

    service = get_scheme_import_service()
    try:
        with SessionLocal() as db:
            summary = service.import_file(
                content=args.path.read_bytes(),
                filename=args.path.name,
                db=db,
            )
    except WorkbookDecodeError as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        return 2
    except SchemeImportPersistenceError as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        return 1

    payload = summary.to_dict()
    if not args.events:
        payload["events"] = len(summary.events)
    print(json.dumps(payload, indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
