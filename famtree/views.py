"""Read-only views derived from a people snapshot (nested tree, timeline, ages)."""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Optional

from .models import Person
from .util import _parse_date


def display_name(p: Person) -> str:
    return f"{p.first_name} {p.last_name}".strip()


def calculate_age(p: Person, *, today: Optional[date] = None) -> int | None:
    """Whole years from birth to death, or to ``today`` for the living."""

    birth = _parse_date(p.birth_date)
    if birth is None:
        return None
    end = _parse_date(p.death_date) or today or date.today()
    years = end.year - birth.year
    if (end.month, end.day) < (birth.month, birth.day):
        years -= 1
    return max(0, years)


def timeline(people: Iterable[Person]) -> list[Person]:
    """People ordered by birth date; undated people keep their order at the end."""

    people = list(people)
    dated = [p for p in people if _parse_date(p.birth_date) is not None]
    undated = [p for p in people if _parse_date(p.birth_date) is None]
    dated.sort(key=lambda p: _parse_date(p.birth_date))
    return dated + undated


def build_forest(people: Iterable[Person]) -> list[dict[str, Any]]:
    """Nest people under their parents, starting from everyone without parents.

    A person reachable through several parents appears under the first one
    visited only; cycles are cut by the same visited set. With no parentless
    people the first person is used as the single root.
    """

    people = list(people)
    by_id = {p.id: p for p in people}
    roots = [p for p in people if not p.parent_ids] or people[:1]
    visited: set[str] = set()

    def _node(p: Person) -> dict[str, Any]:
        visited.add(p.id)
        children: list[dict[str, Any]] = []
        for cid in p.children_ids:
            child = by_id.get(cid)
            if child is None or cid in visited:
                continue
            children.append(_node(child))
        return {
            "id": p.id,
            "name": display_name(p),
            "spouses": [display_name(by_id[s]) for s in p.spouse_ids if s in by_id],
            "children": children,
        }

    forest: list[dict[str, Any]] = []
    for root in roots:
        if root.id in visited:
            continue
        forest.append(_node(root))
    return forest
