from __future__ import annotations

from datetime import date

from famtree.models import Person
from famtree.store import RelationshipStore
from famtree.views import build_forest, calculate_age, display_name, timeline


def test_calculate_age_living_and_dead(fixed_today: date) -> None:
    assert calculate_age(Person(id="a", birth_date="1990-06-15"), today=fixed_today) == 35
    assert calculate_age(Person(id="b", birth_date="1990-01-20"), today=fixed_today) == 36
    assert calculate_age(Person(id="c", birth_date="1900-05-01", death_date="1950-04-30")) == 49
    assert calculate_age(Person(id="d", birth_date="1950")) is not None
    assert calculate_age(Person(id="e")) is None
    assert calculate_age(Person(id="f", birth_date="unknown")) is None


def test_timeline_sorts_by_birth_with_undated_last() -> None:
    people = [
        Person(id="u1"),
        Person(id="late", birth_date="2001-03-04"),
        Person(id="early", birth_date="1899"),
        Person(id="u2", birth_date=""),
        Person(id="mid", birth_date="1950-07"),
    ]
    assert [p.id for p in timeline(people)] == ["early", "mid", "late", "u1", "u2"]


def test_display_name_trims() -> None:
    assert display_name(Person(id="x", first_name="Ada")) == "Ada"
    assert display_name(Person(id="y", first_name="Ada", last_name="King")) == "Ada King"


def test_build_forest_nests_children_under_roots() -> None:
    s = RelationshipStore(
        [
            Person(id="p", first_name="Parent", last_name="One"),
            Person(id="s", first_name="Spouse", last_name="One"),
            Person(id="c", first_name="Child", last_name="One"),
        ]
    )
    s.add_relationship("p", "c", "parent")
    s.add_relationship("s", "c", "parent")
    s.add_relationship("p", "s", "spouse")

    forest = build_forest(s.snapshot())
    assert [n["id"] for n in forest] == ["p", "s"]
    assert forest[0]["spouses"] == ["Spouse One"]
    assert [c["id"] for c in forest[0]["children"]] == ["c"]
    # The shared child is listed once, under the first parent visited.
    assert forest[1]["children"] == []


def test_build_forest_survives_cycles() -> None:
    s = RelationshipStore([Person(id="a"), Person(id="b")])
    s.add_relationship("a", "b", "parent")
    s.add_relationship("b", "a", "parent")

    forest = build_forest(s.snapshot())
    assert [n["id"] for n in forest] == ["a"]
    assert [c["id"] for c in forest[0]["children"]] == ["b"]
    assert forest[0]["children"][0]["children"] == []
