from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..events import normalize_relationship_kind
from ..resolve import _raise_for_result, get_store
from ..store import RelationshipStore

router = APIRouter(tags=["relationships"])


class RelationshipCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    source_id: str = Field(min_length=1, max_length=64)
    target_id: str = Field(min_length=1, max_length=64)
    # "parent" means source is the parent of target; UI labels such as
    # "child-parent" are accepted too.
    type: str = Field(default="parent", min_length=1, max_length=32)


@router.post("/relationships")
def create_relationship(
    body: RelationshipCreate,
    store: RelationshipStore = Depends(get_store),
) -> dict[str, Any]:
    normalized = normalize_relationship_kind(body.source_id, body.target_id, body.type)
    if normalized is None:
        raise HTTPException(status_code=400, detail=f"unknown relationship type: {body.type}")
    a, b, kind = normalized

    result = store.add_relationship(a, b, kind)
    _raise_for_result(result, detail=f"{a} -> {b}")
    return {"source_id": a, "target_id": b, "type": kind.value, "result": result.value}


@router.delete("/relationships")
def delete_relationship(
    source_id: str = Query(min_length=1, max_length=64),
    target_id: str = Query(min_length=1, max_length=64),
    store: RelationshipStore = Depends(get_store),
) -> dict[str, Any]:
    """Remove every link between the two people, whatever its kind."""
    result = store.remove_relationship(source_id, target_id)
    return {"source_id": source_id, "target_id": target_id, "result": result.value}
