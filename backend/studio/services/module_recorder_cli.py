from __future__ import annotations

import argparse
import json
import logging

from studio.db.session import SessionLocal
from studio.models import ModuleRecorder
from studio.services.module_recorder import get_recorder, list_recorders, reset, update


def _to_payload(item: ModuleRecorder) -> dict[str, str | int | bool | None]:
    return {
        "id": item.id,
        "name": item.name,
        "last_run_ok": item.last_run_ok,
        "log_text": item.log_text,
        "auto_create": item.auto_create,
        "all_view_update": item.all_view_update,
        "updated_at": item.updated_at.isoformat() if item.updated_at else None,
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Build, deploy and record studio modules")
    subparsers = parser.add_subparsers(dest="command", required=True)

    status_parser = subparsers.add_parser("status")
    status_parser.add_argument("--recorder-id", type=int, default=None)

    update_parser = subparsers.add_parser("update")
    update_parser.add_argument("--recorder-id", type=int, required=True)

    reset_parser = subparsers.add_parser("reset")
    reset_parser.add_argument("--recorder-id", type=int, required=True)
    reset_parser.add_argument("--confirm", action="store_true", help="required: drops the metadata schema")

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    db = SessionLocal()
    try:
        if args.command == "status" and args.recorder_id is None:
            print(json.dumps([_to_payload(item) for item in list_recorders(db=db)]))
            return 0

        recorder = get_recorder(db=db, recorder_id=args.recorder_id)
        if recorder is None:
            print(json.dumps({"error": "recorder_not_found", "recorder_id": args.recorder_id}))
            return 2

        if args.command == "status":
            print(json.dumps(_to_payload(recorder)))
            return 0

        if args.command == "update":
            result = update(db=db, recorder=recorder)
            print(json.dumps(result.as_payload()))
            return 0 if result.ok else 1

        if args.command == "reset":
            if not args.confirm:
                print(json.dumps({"error": "confirmation_required"}))
                return 2
            result = reset(db=db, recorder=recorder)
            print(json.dumps(result.as_payload()))
            return 0 if result.ok else 1

        print(json.dumps({"error": "unsupported_command"}))
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
