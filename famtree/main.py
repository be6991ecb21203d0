"""FastAPI adapter around the relationship store.

Run with ``uvicorn famtree.main:app``. People are loaded from storage at
startup and written back after every change.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import graph as graph_routes
from .routes import people as people_routes
from .routes import relationship as relationship_routes
from .storage import PeopleStorage, storage_from_env
from .store import RelationshipStore

log = logging.getLogger(__name__)


def _configure_logging() -> None:
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _cors_origins() -> list[str]:
    raw = os.environ.get("FAMTREE_CORS_ORIGINS", "*")
    return [o.strip() for o in raw.split(",") if o.strip()]


def create_app(
    store: Optional[RelationshipStore] = None,
    storage: Optional[PeopleStorage] = None,
) -> FastAPI:
    """Build the app around *store*, persisting through *storage* when given.

    Without a store, one is created and filled from *storage*.
    """

    if store is None:
        store = RelationshipStore()
        if storage is not None:
            people = storage.load()
            store.load(people, notify=False)
            log.info("loaded %d people", len(people))

    if storage is not None:
        store.on_change = storage.save

    app = FastAPI(title="Family Tree API", version="0.1.0")
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"ok": "true"}

    app.include_router(people_routes.router)
    app.include_router(relationship_routes.router)
    app.include_router(graph_routes.router)
    return app


def _app_from_env() -> FastAPI:
    _configure_logging()
    return create_app(storage=storage_from_env())


app = _app_from_env()
