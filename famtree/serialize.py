from __future__ import annotations

from dataclasses import replace
from typing import Any

from .models import Layout, LifeEvent, Person
from .util import _compact_json

# Wire name -> Person attribute for the optional scalar fields.
_SCALAR_FIELDS: tuple[tuple[str, str], ...] = (
    ("gender", "gender"),
    ("birthDate", "birth_date"),
    ("deathDate", "death_date"),
    ("photo", "photo"),
    ("notes", "notes"),
    ("nickname", "nickname"),
)


def _id_list(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    out: list[str] = []
    for x in value:
        if x is None:
            continue
        s = str(x)
        if s and s not in out:
            out.append(s)
    return out


def _life_event_from_record(r: Any) -> LifeEvent | None:
    if isinstance(r, LifeEvent):
        return replace(r)
    if not isinstance(r, dict) or not r.get("id"):
        return None
    return LifeEvent(
        id=str(r["id"]),
        type=str(r.get("type") or "other"),
        date=r.get("date"),
        place=r.get("place"),
        note=r.get("note"),
    )


def life_events_from_records(records: Any) -> list[LifeEvent]:
    if not isinstance(records, (list, tuple)):
        return []
    out: list[LifeEvent] = []
    for r in records:
        ev = _life_event_from_record(r)
        if ev is not None:
            out.append(ev)
    return out


def person_to_record(p: Person) -> dict[str, Any]:
    """Serialize a person to the camelCase document shape used by storage and the API.

    Relationship lists and names are always present; empty optional fields are
    dropped.
    """

    optional: dict[str, Any] = {wire: getattr(p, attr) for wire, attr in _SCALAR_FIELDS}
    optional["tags"] = list(p.tags)
    optional["lifeEvents"] = [
        {"id": e.id, "type": e.type, "date": e.date, "place": e.place, "note": e.note}
        for e in p.life_events
    ]
    if p.collapsed:
        optional["ui"] = {"collapsed": True}

    record: dict[str, Any] = {
        "id": p.id,
        "firstName": p.first_name,
        "lastName": p.last_name,
    }
    record.update(_compact_json(optional) or {})
    record["parentIds"] = list(p.parent_ids)
    record["spouseIds"] = list(p.spouse_ids)
    record["childrenIds"] = list(p.children_ids)
    return record


def person_from_record(r: dict[str, Any]) -> Person:
    ui = r.get("ui") if isinstance(r.get("ui"), dict) else {}
    tags = r.get("tags")
    p = Person(
        id=str(r["id"]),
        first_name=str(r.get("firstName") or ""),
        last_name=str(r.get("lastName") or ""),
        tags=[str(t) for t in tags] if isinstance(tags, list) else [],
        life_events=life_events_from_records(r.get("lifeEvents")),
        parent_ids=_id_list(r.get("parentIds")),
        spouse_ids=_id_list(r.get("spouseIds")),
        children_ids=_id_list(r.get("childrenIds")),
        collapsed=bool(ui.get("collapsed", False)),
    )
    for wire, attr in _SCALAR_FIELDS:
        setattr(p, attr, r.get(wire))
    return p


def layout_to_public(layout: Layout) -> dict[str, Any]:
    return {
        "nodes": [
            {
                "id": n.id,
                "generation": n.generation,
                "x": n.x,
                "y": n.y,
                "orphan": n.orphan,
            }
            for n in layout.nodes
        ],
        "edges": [
            {
                "id": e.id,
                "source": e.source,
                "target": e.target,
                "kind": e.kind.value,
            }
            for e in layout.edges
        ],
    }
