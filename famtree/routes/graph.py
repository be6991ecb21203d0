from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from ..layout import H_SPACING, V_SPACING, compute_layout
from ..resolve import get_store
from ..serialize import layout_to_public, person_to_record
from ..store import RelationshipStore
from ..views import build_forest, calculate_age, timeline

router = APIRouter(tags=["graph"])


@router.get("/graph/layout")
def graph_layout(
    focus: Optional[str] = Query(default=None, max_length=64),
    h_spacing: float = Query(default=H_SPACING, gt=0, le=2000),
    v_spacing: float = Query(default=V_SPACING, gt=0, le=2000),
    store: RelationshipStore = Depends(get_store),
) -> dict[str, Any]:
    """Return positioned nodes and edges for the renderer.

    - focus: start the generation walk from this person instead of every
      parentless person
    - descendants of collapsed people are left out
    """

    people = store.snapshot()
    layout = compute_layout(people, focus or None, h_spacing=h_spacing, v_spacing=v_spacing)
    payload = layout_to_public(layout)
    payload["focus"] = focus or None
    return payload


@router.get("/graph/tree")
def graph_tree(store: RelationshipStore = Depends(get_store)) -> list[dict[str, Any]]:
    return build_forest(store.snapshot())


@router.get("/timeline")
def people_timeline(store: RelationshipStore = Depends(get_store)) -> dict[str, Any]:
    results: list[dict[str, Any]] = []
    for p in timeline(store.snapshot()):
        rec = person_to_record(p)
        rec["age"] = calculate_age(p)
        results.append(rec)
    return {"results": results, "total": len(results)}
