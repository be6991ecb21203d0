"""In-memory owner of people and their bidirectional relationship links.

Every mutation runs under a single lock so a relationship change, which always
touches two records, is never observed half-applied. Operations never raise on
stale or malformed references; they return a ``MutationResult`` instead.

The ``on_change`` hook runs after the lock is released, with a copy taken under
it. Saves are serialized and a copy older than one already written is dropped.
"""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Any, Callable, Iterable, Optional

from .models import (
    EDITABLE_FIELDS,
    RELATIONSHIP_FIELDS,
    MutationResult,
    Person,
    RelationshipKind,
)
from .serialize import life_events_from_records

log = logging.getLogger(__name__)

OnChange = Callable[[list[Person]], None]
_PendingSave = tuple[int, list[Person]]


def generate_id() -> str:
    return str(uuid.uuid4())


def _coerce_kind(kind: RelationshipKind | str) -> RelationshipKind | None:
    if isinstance(kind, RelationshipKind):
        return kind
    try:
        return RelationshipKind(str(kind).strip().lower())
    except ValueError:
        return None


def _append_unique(ids: list[str], value: str) -> bool:
    if value in ids:
        return False
    ids.append(value)
    return True


def _strip(ids: list[str], value: str) -> bool:
    if value not in ids:
        return False
    ids[:] = [x for x in ids if x != value]
    return True


class RelationshipStore:
    """Single source of truth for people and the relationship graph."""

    def __init__(
        self,
        people: Iterable[Person] | None = None,
        *,
        on_change: Optional[OnChange] = None,
        id_factory: Callable[[], str] = generate_id,
    ) -> None:
        self._people: dict[str, Person] = {}
        self._lock = threading.RLock()
        # Saves run outside _lock, one at a time, newest version wins.
        self._save_lock = threading.Lock()
        self._version = 0
        self._saved_version = 0
        self._id_factory = id_factory
        self.on_change = on_change
        if people is not None:
            self.load(people, notify=False)

    def __len__(self) -> int:
        with self._lock:
            return len(self._people)

    def __contains__(self, person_id: object) -> bool:
        with self._lock:
            return person_id in self._people

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def snapshot(self) -> list[Person]:
        """Return copies of every person, in insertion order."""
        with self._lock:
            return [p.copy() for p in self._people.values()]

    def get_person_by_id(self, person_id: str) -> Person | None:
        with self._lock:
            p = self._people.get(person_id)
            return p.copy() if p is not None else None

    def search_people(self, query: str) -> list[Person]:
        q = (query or "").lower()
        with self._lock:
            return [
                p.copy()
                for p in self._people.values()
                if q in (p.first_name or "").lower() or q in (p.last_name or "").lower()
            ]

    # ------------------------------------------------------------------
    # People
    # ------------------------------------------------------------------

    def add_person(self, data: dict[str, Any] | None = None) -> Person:
        fields = self._editable_fields(data)
        with self._lock:
            person_id = self._id_factory()
            while person_id in self._people:
                person_id = self._id_factory()
            person = Person(id=person_id)
            self._apply_fields(person, fields)
            self._people[person_id] = person
            created = person.copy()
            pending = self._stage()
        log.debug("added person %s", person_id)
        self._notify(pending)
        return created

    def update_person(self, person_id: str, fields: dict[str, Any]) -> MutationResult:
        editable = self._editable_fields(fields)
        with self._lock:
            person = self._people.get(person_id)
            if person is None:
                log.debug("update_person: unknown id %s", person_id)
                return MutationResult.NOT_FOUND
            self._apply_fields(person, editable)
            pending = self._stage()
        self._notify(pending)
        return MutationResult.OK

    def delete_person(self, person_id: str) -> MutationResult:
        with self._lock:
            if self._people.pop(person_id, None) is None:
                return MutationResult.NOT_FOUND
            for other in self._people.values():
                _strip(other.parent_ids, person_id)
                _strip(other.spouse_ids, person_id)
                _strip(other.children_ids, person_id)
            pending = self._stage()
        log.debug("deleted person %s", person_id)
        self._notify(pending)
        return MutationResult.OK

    def set_collapsed(self, person_id: str, collapsed: bool) -> MutationResult:
        return self.update_person(person_id, {"collapsed": bool(collapsed)})

    def toggle_collapsed(self, person_id: str) -> MutationResult:
        with self._lock:
            person = self._people.get(person_id)
            if person is None:
                return MutationResult.NOT_FOUND
            person.collapsed = not person.collapsed
            pending = self._stage()
        self._notify(pending)
        return MutationResult.OK

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    def add_relationship(
        self,
        id_a: str,
        id_b: str,
        kind: RelationshipKind | str,
    ) -> MutationResult:
        """Record that A is the ``kind`` of B, on both sides."""

        rel = _coerce_kind(kind)
        if rel is None or id_a == id_b:
            return MutationResult.INVALID_EDGE

        with self._lock:
            a = self._people.get(id_a)
            b = self._people.get(id_b)
            if a is None or b is None:
                return MutationResult.NOT_FOUND

            if rel is RelationshipKind.PARENT:
                changed_a = _append_unique(a.children_ids, id_b)
                changed_b = _append_unique(b.parent_ids, id_a)
            elif rel is RelationshipKind.CHILD:
                changed_a = _append_unique(a.parent_ids, id_b)
                changed_b = _append_unique(b.children_ids, id_a)
            else:
                changed_a = _append_unique(a.spouse_ids, id_b)
                changed_b = _append_unique(b.spouse_ids, id_a)

            if not (changed_a or changed_b):
                return MutationResult.DUPLICATE_EDGE
            pending = self._stage()

        log.debug("added %s relationship %s -> %s", rel.value, id_a, id_b)
        self._notify(pending)
        return MutationResult.OK

    def remove_relationship(self, id_a: str, id_b: str) -> MutationResult:
        with self._lock:
            a = self._people.get(id_a)
            b = self._people.get(id_b)
            if a is None and b is None:
                return MutationResult.NOT_FOUND

            changed = False
            if a is not None:
                for ids in (a.parent_ids, a.spouse_ids, a.children_ids):
                    changed = _strip(ids, id_b) or changed
            if b is not None:
                for ids in (b.parent_ids, b.spouse_ids, b.children_ids):
                    changed = _strip(ids, id_a) or changed
            if not changed:
                return MutationResult.OK
            pending = self._stage()

        log.debug("removed relationship %s <-> %s", id_a, id_b)
        self._notify(pending)
        return MutationResult.OK

    # ------------------------------------------------------------------
    # Bulk load
    # ------------------------------------------------------------------

    def load(self, people: Iterable[Person], *, notify: bool = True) -> int:
        """Replace the store contents with ``people`` and repair their links.

        Self references, dangling ids and duplicates are dropped; a link present
        on only one side gets its mirror added. Returns the number of repairs.
        """

        records: dict[str, Person] = {}
        for p in people:
            if p.id in records:
                log.warning("load: duplicate person id %s, keeping the first", p.id)
                continue
            records[p.id] = p.copy()

        repairs = 0
        for p in records.values():
            for attr in sorted(RELATIONSHIP_FIELDS):
                ids: list[str] = getattr(p, attr)
                cleaned: list[str] = []
                for rid in ids:
                    if rid == p.id or rid not in records or rid in cleaned:
                        continue
                    cleaned.append(rid)
                repairs += len(ids) - len(cleaned)
                setattr(p, attr, cleaned)

        for p in records.values():
            for cid in p.children_ids:
                repairs += _append_unique(records[cid].parent_ids, p.id)
            for pid in p.parent_ids:
                repairs += _append_unique(records[pid].children_ids, p.id)
            for sid in p.spouse_ids:
                repairs += _append_unique(records[sid].spouse_ids, p.id)

        with self._lock:
            self._people = records
            pending = self._stage() if notify else None

        if repairs:
            log.info("load: repaired %d inconsistent relationship entries", repairs)
        log.debug("loaded %d people", len(records))
        self._notify(pending)
        return repairs

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _editable_fields(fields: Any) -> dict[str, Any]:
        if not isinstance(fields, dict):
            if fields is not None:
                log.warning("ignoring person fields of type %s", type(fields).__name__)
            return {}
        out: dict[str, Any] = {}
        for key, value in fields.items():
            if key in RELATIONSHIP_FIELDS or key == "id":
                log.warning("ignoring %r: relationships change only through relationship operations", key)
                continue
            if key not in EDITABLE_FIELDS:
                log.debug("ignoring unknown person field %r", key)
                continue
            if key == "tags" and value is not None and not isinstance(value, (list, tuple)):
                log.warning("ignoring tags of type %s", type(value).__name__)
                continue
            out[key] = value
        return out

    @staticmethod
    def _apply_fields(person: Person, fields: dict[str, Any]) -> None:
        for key, value in fields.items():
            if key == "tags":
                value = [str(t) for t in value or []]
            elif key == "life_events":
                value = life_events_from_records(value)
            elif key == "collapsed":
                value = bool(value)
            setattr(person, key, value)

    def _stage(self) -> _PendingSave | None:
        """Number the current state and copy it for saving. Call under ``_lock``."""

        if self.on_change is None:
            return None
        self._version += 1
        return self._version, [p.copy() for p in self._people.values()]

    def _notify(self, pending: _PendingSave | None) -> None:
        if pending is None:
            return
        version, snap = pending
        with self._save_lock:
            # A newer state was already written while this one waited.
            if version <= self._saved_version:
                log.debug("skipping stale save %d (saved %d)", version, self._saved_version)
                return
            on_change = self.on_change
            if on_change is None:
                return
            try:
                on_change(snap)
            except Exception:
                # Persistence is fire-and-forget; in-memory state stays authoritative.
                log.exception("on_change callback failed")
                return
            self._saved_version = version
