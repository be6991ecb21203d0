"""Plain records shared by the store, the layout engine and the adapters."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class RelationshipKind(str, Enum):
    PARENT = "parent"
    SPOUSE = "spouse"
    CHILD = "child"


class MutationResult(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    INVALID_EDGE = "invalid_edge"
    DUPLICATE_EDGE = "duplicate_edge"


class EdgeKind(str, Enum):
    DESCENT = "descent"
    SPOUSAL = "spousal"


# Only mutated through RelationshipStore.add_relationship/remove_relationship.
RELATIONSHIP_FIELDS = frozenset({"parent_ids", "spouse_ids", "children_ids"})


@dataclass
class LifeEvent:
    id: str
    type: str = "other"  # birth | marriage | death | other
    date: Optional[str] = None
    place: Optional[str] = None
    note: Optional[str] = None


@dataclass
class Person:
    id: str
    first_name: str = ""
    last_name: str = ""
    gender: Optional[str] = None  # male | female | other
    birth_date: Optional[str] = None  # ISO YYYY-MM-DD
    death_date: Optional[str] = None
    photo: Optional[str] = None
    notes: Optional[str] = None
    nickname: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    life_events: list[LifeEvent] = field(default_factory=list)
    parent_ids: list[str] = field(default_factory=list)
    spouse_ids: list[str] = field(default_factory=list)
    children_ids: list[str] = field(default_factory=list)
    collapsed: bool = False

    def copy(self) -> Person:
        return Person(
            id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            gender=self.gender,
            birth_date=self.birth_date,
            death_date=self.death_date,
            photo=self.photo,
            notes=self.notes,
            nickname=self.nickname,
            tags=list(self.tags),
            life_events=[
                LifeEvent(id=e.id, type=e.type, date=e.date, place=e.place, note=e.note)
                for e in self.life_events
            ],
            parent_ids=list(self.parent_ids),
            spouse_ids=list(self.spouse_ids),
            children_ids=list(self.children_ids),
            collapsed=self.collapsed,
        )


# Fields accepted by RelationshipStore.add_person/update_person.
EDITABLE_FIELDS = frozenset(
    {
        "first_name",
        "last_name",
        "gender",
        "birth_date",
        "death_date",
        "photo",
        "notes",
        "nickname",
        "tags",
        "life_events",
        "collapsed",
    }
)


@dataclass(frozen=True)
class LayoutNode:
    id: str
    generation: int
    x: float
    y: float
    orphan: bool = False


@dataclass(frozen=True)
class LayoutEdge:
    id: str
    source: str
    target: str
    kind: EdgeKind


@dataclass
class Layout:
    nodes: list[LayoutNode] = field(default_factory=list)
    edges: list[LayoutEdge] = field(default_factory=list)
