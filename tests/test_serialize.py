from __future__ import annotations

from famtree.layout import compute_layout
from famtree.models import LifeEvent, Person
from famtree.serialize import layout_to_public, person_from_record, person_to_record
from famtree.util import _compact_json


def test_record_uses_camel_case_and_drops_empty_optionals() -> None:
    p = Person(id="p1", first_name="Ada", last_name="King", birth_date="1815-12-10", children_ids=["p2"])
    rec = person_to_record(p)
    assert rec == {
        "id": "p1",
        "firstName": "Ada",
        "lastName": "King",
        "birthDate": "1815-12-10",
        "parentIds": [],
        "spouseIds": [],
        "childrenIds": ["p2"],
    }


def test_full_record_round_trips() -> None:
    rec = {
        "id": "p1",
        "firstName": "Ada",
        "lastName": "King",
        "gender": "female",
        "birthDate": "1815-12-10",
        "deathDate": "1852-11-27",
        "photo": "https://example.org/ada.png",
        "notes": "Analyst",
        "nickname": "Countess",
        "tags": ["math"],
        "lifeEvents": [{"id": "e1", "type": "marriage", "date": "1835-07-08", "place": "London"}],
        "ui": {"collapsed": True},
        "parentIds": ["p0"],
        "spouseIds": ["p9"],
        "childrenIds": ["p2", "p3"],
    }
    p = person_from_record(rec)
    assert p.collapsed is True
    assert p.life_events == [LifeEvent(id="e1", type="marriage", date="1835-07-08", place="London")]
    assert person_to_record(p) == rec


def test_partial_record_gets_empty_relationships() -> None:
    p = person_from_record({"id": "x", "firstName": "X", "parentIds": ["a", "a", None], "spouseIds": "bad"})
    assert p.parent_ids == ["a"]
    assert p.spouse_ids == []
    assert p.children_ids == []
    assert p.last_name == ""
    assert p.collapsed is False


def test_compact_json_keeps_falsey_scalars() -> None:
    assert _compact_json({"a": 0, "b": False, "c": " ", "d": [], "e": {"f": None}, "g": " x "}) == {
        "a": 0,
        "b": False,
        "g": " x ",
    }


def test_layout_payload_shape() -> None:
    people = [Person(id="a", children_ids=["b"]), Person(id="b", parent_ids=["a"])]
    payload = layout_to_public(compute_layout(people))
    assert [n["id"] for n in payload["nodes"]] == ["a", "b"]
    assert payload["nodes"][1]["generation"] == 1
    assert payload["edges"] == [{"id": "a-b", "source": "a", "target": "b", "kind": "descent"}]
