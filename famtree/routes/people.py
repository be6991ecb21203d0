from __future__ import annotations

from typing import Any, Literal, Optional

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..models import MutationResult
from ..resolve import _raise_for_result, _resolve_person, get_store
from ..serialize import life_events_from_records, person_to_record
from ..store import RelationshipStore

router = APIRouter(tags=["people"])


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LifeEventIn(_CamelModel):
    id: str = Field(min_length=1)
    type: Literal["birth", "marriage", "death", "other"] = "other"
    date: Optional[str] = None
    place: Optional[str] = None
    note: Optional[str] = None


class PersonCreate(_CamelModel):
    first_name: str = Field(min_length=1, max_length=200)
    last_name: str = Field(default="", max_length=200)
    gender: Optional[Literal["male", "female", "other"]] = None
    birth_date: Optional[str] = None
    death_date: Optional[str] = None
    photo: Optional[str] = None
    notes: Optional[str] = None
    nickname: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    life_events: list[LifeEventIn] = Field(default_factory=list)
    collapsed: bool = False


class PersonUpdate(_CamelModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    last_name: Optional[str] = Field(default=None, max_length=200)
    gender: Optional[Literal["male", "female", "other"]] = None
    birth_date: Optional[str] = None
    death_date: Optional[str] = None
    photo: Optional[str] = None
    notes: Optional[str] = None
    nickname: Optional[str] = None
    tags: Optional[list[str]] = None
    life_events: Optional[list[LifeEventIn]] = None
    collapsed: Optional[bool] = None


class CollapseRequest(BaseModel):
    collapsed: Optional[bool] = None


def _fields(model: BaseModel, *, exclude_unset: bool) -> dict[str, Any]:
    fields = model.model_dump(exclude_unset=exclude_unset)
    for name in ("first_name", "last_name", "tags", "life_events", "collapsed"):
        if name in fields and fields[name] is None:
            del fields[name]
    if "life_events" in fields:
        fields["life_events"] = life_events_from_records(fields["life_events"])
    return fields


@router.get("/people")
def list_people(store: RelationshipStore = Depends(get_store)) -> dict[str, Any]:
    people = store.snapshot()
    return {"results": [person_to_record(p) for p in people], "total": len(people)}


@router.get("/people/search")
def search_people(
    q: str = Query(default="", max_length=200),
    store: RelationshipStore = Depends(get_store),
) -> dict[str, Any]:
    """Case-insensitive substring search over first and last names."""
    results = [person_to_record(p) for p in store.search_people(q)]
    return {"query": q, "results": results, "total": len(results)}


@router.get("/people/{person_id}")
def get_person(person_id: str, store: RelationshipStore = Depends(get_store)) -> dict[str, Any]:
    return person_to_record(_resolve_person(store, person_id))


@router.post("/people", status_code=201)
def create_person(body: PersonCreate, store: RelationshipStore = Depends(get_store)) -> dict[str, Any]:
    person = store.add_person(_fields(body, exclude_unset=False))
    return person_to_record(person)


@router.patch("/people/{person_id}")
def update_person(
    person_id: str,
    body: PersonUpdate,
    store: RelationshipStore = Depends(get_store),
) -> dict[str, Any]:
    result = store.update_person(person_id, _fields(body, exclude_unset=True))
    _raise_for_result(result, detail=person_id)
    return person_to_record(_resolve_person(store, person_id))


@router.delete("/people/{person_id}")
def delete_person(person_id: str, store: RelationshipStore = Depends(get_store)) -> dict[str, Any]:
    # Idempotent: deleting an unknown id is not an error.
    result = store.delete_person(person_id)
    return {"id": person_id, "deleted": result is MutationResult.OK}


@router.post("/people/{person_id}/collapse")
def collapse_person(
    person_id: str,
    body: CollapseRequest = Body(default_factory=CollapseRequest),
    store: RelationshipStore = Depends(get_store),
) -> dict[str, Any]:
    """Set the collapsed flag, or toggle it when the body omits ``collapsed``."""
    if body.collapsed is None:
        result = store.toggle_collapsed(person_id)
    else:
        result = store.set_collapsed(person_id, body.collapsed)
    _raise_for_result(result, detail=person_id)
    return {"id": person_id, "collapsed": _resolve_person(store, person_id).collapsed}
