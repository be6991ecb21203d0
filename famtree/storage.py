"""Durable storage for the people document.

Two adapters share the ``load()`` / ``save(people)`` shape: a JSON file (the
default) and a Postgres table holding one JSONB document per person. Both
round-trip the record shape produced by ``serialize.person_to_record``.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, ContextManager, Iterable, Protocol

import psycopg
from psycopg.types.json import Jsonb

from .db import db_conn
from .models import Person
from .serialize import person_from_record, person_to_record

log = logging.getLogger(__name__)

DEFAULT_DATA_FILE = "data.json"

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS person_record (
  id TEXT PRIMARY KEY,
  position INTEGER NOT NULL,
  data JSONB NOT NULL
)
""".strip()


class PeopleStorage(Protocol):
    def load(self) -> list[Person]: ...

    def save(self, people: Iterable[Person]) -> None: ...


def _people_from_records(records: Any) -> list[Person]:
    if not isinstance(records, list):
        return []
    out: list[Person] = []
    for r in records:
        if not isinstance(r, dict) or not r.get("id"):
            log.warning("skipping malformed person record: %r", r)
            continue
        out.append(person_from_record(r))
    return out


class JsonFileStorage:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> list[Person]:
        if not self.path.exists():
            return []
        try:
            doc = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError):
            log.exception("could not read %s; starting with no people", self.path)
            return []
        # Accept both {"people": [...]} and a bare list.
        records = doc.get("people") if isinstance(doc, dict) else doc
        return _people_from_records(records)

    def save(self, people: Iterable[Person]) -> None:
        doc = {"people": [person_to_record(p) for p in people]}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(doc, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


class PostgresStorage:
    def __init__(self, conn_factory: Callable[[], ContextManager[psycopg.Connection]] = db_conn) -> None:
        self._conn_factory = conn_factory

    def ensure_schema(self) -> None:
        with self._conn_factory() as conn:
            conn.execute(_SCHEMA_SQL)
            conn.commit()

    def load(self) -> list[Person]:
        with self._conn_factory() as conn:
            rows = conn.execute(
                """
                SELECT data
                FROM person_record
                ORDER BY position, id
                """.strip()
            ).fetchall()
        records = [r[0] if not isinstance(r[0], str) else json.loads(r[0]) for r in rows]
        return _people_from_records(records)

    def save(self, people: Iterable[Person]) -> None:
        rows = [(p.id, i, Jsonb(person_to_record(p))) for i, p in enumerate(people)]
        with self._conn_factory() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM person_record")
                if rows:
                    cur.executemany(
                        """
                        INSERT INTO person_record (id, position, data)
                        VALUES (%s, %s, %s)
                        """.strip(),
                        rows,
                    )
            conn.commit()
        log.debug("saved %d people to postgres", len(rows))


def storage_from_env() -> PeopleStorage:
    """Postgres when ``DATABASE_URL`` is set, otherwise the JSON file in ``FAMTREE_DATA_FILE``."""

    if os.environ.get("DATABASE_URL"):
        storage = PostgresStorage()
        storage.ensure_schema()
        return storage
    return JsonFileStorage(os.environ.get("FAMTREE_DATA_FILE") or DEFAULT_DATA_FILE)
