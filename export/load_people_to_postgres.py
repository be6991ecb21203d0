from __future__ import annotations

import argparse
import json
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import psycopg

from famtree.storage import JsonFileStorage, PostgresStorage
from famtree.store import RelationshipStore


def load_people(*, people_file: Path, database_url: str) -> dict[str, int]:
    """Load a JSON people document into Postgres, repairing relationship links on the way."""

    people = JsonFileStorage(people_file).load()
    store = RelationshipStore()
    repairs = store.load(people, notify=False)

    @contextmanager
    def _conn() -> Iterator[psycopg.Connection]:
        with psycopg.connect(database_url) as conn:
            conn.execute("SET statement_timeout TO '5min'")
            yield conn

    storage = PostgresStorage(_conn)
    storage.ensure_schema()
    storage.save(store.snapshot())
    return {"people": len(store), "repairs": repairs}


def main() -> int:
    parser = argparse.ArgumentParser(description="Load a JSON people document into Postgres")
    parser.add_argument("--people-file", required=True, help="JSON file with {\"people\": [...]} or a bare list")
    parser.add_argument(
        "--database-url",
        default=os.environ.get("DATABASE_URL") or "",
        help="Postgres URL (or set DATABASE_URL env var)",
    )

    args = parser.parse_args()
    if not args.database_url:
        raise SystemExit("Missing --database-url (or set DATABASE_URL)")

    people_file = Path(args.people_file)
    if not people_file.exists():
        raise SystemExit(f"People file not found: {people_file}")

    counts = load_people(people_file=people_file, database_url=args.database_url)
    print(json.dumps({"loaded": counts}, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
