"""Typed UI commands and an explicit dispatcher to route them.

Components receive a ``Dispatcher`` instead of broadcasting on a global bus.
``apply_to_store`` subscribes handlers that turn the mutating commands into
store operations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from .models import MutationResult, RelationshipKind
from .store import RelationshipStore

log = logging.getLogger(__name__)

# UI labels -> (canonical kind, swap source/target)
_KIND_ALIASES: dict[str, tuple[RelationshipKind, bool]] = {
    "parent": (RelationshipKind.PARENT, False),
    "parent-child": (RelationshipKind.PARENT, False),
    "parent_of": (RelationshipKind.PARENT, False),
    "child": (RelationshipKind.CHILD, False),
    "child-parent": (RelationshipKind.PARENT, True),
    "child_of": (RelationshipKind.CHILD, False),
    "spouse": (RelationshipKind.SPOUSE, False),
    "spouse_of": (RelationshipKind.SPOUSE, False),
    "partner": (RelationshipKind.SPOUSE, False),
}


def normalize_relationship_kind(
    source_id: str,
    target_id: str,
    kind: str,
) -> tuple[str, str, RelationshipKind] | None:
    """Map a UI relationship label to ``(a, b, kind)`` meaning "a is the kind of b".

    Returns None for labels that are not relationships.
    """

    entry = _KIND_ALIASES.get((kind or "").strip().lower())
    if entry is None:
        return None
    rel, swap = entry
    if swap:
        return target_id, source_id, rel
    return source_id, target_id, rel


@dataclass(frozen=True)
class PersonCreateRequested:
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PersonEditRequested:
    person_id: str
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PersonDeleteRequested:
    person_id: str


@dataclass(frozen=True)
class RelationshipDefineRequested:
    source_id: str
    target_id: str
    kind: str = "parent"


@dataclass(frozen=True)
class RelationshipRemoveRequested:
    source_id: str
    target_id: str


@dataclass(frozen=True)
class CollapseToggleRequested:
    person_id: str


Handler = Callable[[Any], Any]


class Dispatcher:
    """Routes each command to the handlers subscribed for its exact type."""

    def __init__(self) -> None:
        self._handlers: dict[type, list[Handler]] = {}

    def subscribe(self, event_type: type, handler: Handler) -> Callable[[], None]:
        handlers = self._handlers.setdefault(event_type, [])
        handlers.append(handler)

        def _unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return _unsubscribe

    def dispatch(self, event: Any) -> list[Any]:
        handlers = list(self._handlers.get(type(event), []))
        if not handlers:
            log.debug("no handler for %s", type(event).__name__)
        return [h(event) for h in handlers]


def apply_to_store(dispatcher: Dispatcher, store: RelationshipStore) -> None:
    def _define(ev: RelationshipDefineRequested) -> MutationResult:
        normalized = normalize_relationship_kind(ev.source_id, ev.target_id, ev.kind)
        if normalized is None:
            log.warning("unknown relationship type %r", ev.kind)
            return MutationResult.INVALID_EDGE
        a, b, rel = normalized
        return store.add_relationship(a, b, rel)

    dispatcher.subscribe(PersonCreateRequested, lambda ev: store.add_person(ev.data))
    dispatcher.subscribe(PersonEditRequested, lambda ev: store.update_person(ev.person_id, ev.fields))
    dispatcher.subscribe(PersonDeleteRequested, lambda ev: store.delete_person(ev.person_id))
    dispatcher.subscribe(RelationshipDefineRequested, _define)
    dispatcher.subscribe(
        RelationshipRemoveRequested,
        lambda ev: store.remove_relationship(ev.source_id, ev.target_id),
    )
    dispatcher.subscribe(CollapseToggleRequested, lambda ev: store.toggle_collapsed(ev.person_id))
