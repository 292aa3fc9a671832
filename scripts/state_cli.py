from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from multitaskos.app_context import AppContext
from multitaskos.migrator import migrate
from multitaskos.state_store import STORAGE_KEY, LocalStateStore, StateDecodeError
from multitaskos.validators import run_validators


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Inspect and migrate the saved MultitaskOS model")
    parser.add_argument("--show", action="store_true", help="Print the saved model after migration")
    parser.add_argument("--check", action="store_true", help="Run invariant checks on the saved model")
    parser.add_argument("--migrate", type=str, metavar="PATH", help="Print a migrated copy of a JSON file")
    parser.add_argument("--import", dest="import_path", type=str, metavar="PATH", help="Import a JSON export and save it")
    parser.add_argument("--export", type=str, metavar="PATH", help="Write the migrated model to a JSON file")
    parser.add_argument("--clear", action="store_true", help="Delete the saved model (destructive)")
    parser.add_argument("--db", type=str, default="data/local_storage.db", help="Path to local_storage.db")
    parser.add_argument("--key", type=str, default=STORAGE_KEY, help="Local storage key")
    return parser.parse_args(argv)


def _read_json(path: str) -> dict:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise SystemExit(f"{path}: expected a JSON object")
    return data


def main(argv=None) -> int:
    args = parse_args(argv)

    if args.migrate:
        print(json.dumps(migrate(_read_json(args.migrate)), indent=2, ensure_ascii=False))
        return 0

    store = LocalStateStore(Path(args.db), key=args.key)
    ctx = AppContext(store)

    if args.import_path:
        saved = ctx.import_state(_read_json(args.import_path))
        print(f"Imported {len(saved['jobQueue'])} queued jobs (timestamp={saved['timestamp']}).")
        return 0

    if args.clear:
        store.clear()
        print(f"Cleared {args.key}.")
        return 0

    try:
        state = ctx.load()
    except StateDecodeError as exc:
        print(f"Saved model is unreadable: {exc}", file=sys.stderr)
        return 1
    if state is None:
        print("No saved model.")
        return 0

    if args.show:
        print(json.dumps(state, indent=2, ensure_ascii=False))
        return 0

    if args.check:
        failed = 0
        for result in run_validators(state):
            print(f"{result.validator_id}: {result.status.value} ({result.message})")
            failed += result.status.value != "ok"
        return 1 if failed else 0

    if args.export:
        Path(args.export).write_text(json.dumps(state, indent=2, ensure_ascii=False), encoding="utf-8")
        print(f"Exported to {args.export}")
        return 0

    print("No action specified. Use --help.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
