from __future__ import annotations

from fastapi import HTTPException, Request

from .models import MutationResult, Person
from .store import RelationshipStore


def get_store(request: Request) -> RelationshipStore:
    """FastAPI dependency returning the store owned by the running app."""
    return request.app.state.store


def _resolve_person(store: RelationshipStore, person_id: str) -> Person:
    person = store.get_person_by_id(person_id)
    if person is None:
        raise HTTPException(status_code=404, detail=f"person not found: {person_id}")
    return person


def _raise_for_result(result: MutationResult, *, detail: str) -> None:
    if result is MutationResult.NOT_FOUND:
        raise HTTPException(status_code=404, detail=f"person not found: {detail}")
    if result is MutationResult.INVALID_EDGE:
        raise HTTPException(status_code=400, detail=f"invalid relationship: {detail}")
