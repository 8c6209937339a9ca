"""FastAPI service for the contact book."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.dependencies import ALLOWED_ORIGINS
from api.routers import data_router, pages_router
from api.views import page_context, render_page
from contact_book.config import Settings, load_settings
from contact_book.contacts import SAMPLE_CONTACTS, ContactStore, open_store
from contact_book.logs import fetch_activity_entries
from contact_book.revalidation import InvalidationBus
from contact_book.routes import NotFound, root_loader

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[ContactStore] = None,
) -> FastAPI:
    """Build the application around an explicit store and invalidation bus."""
    settings = settings or load_settings()
    if store is None:
        store = open_store(settings)
        if settings.seed_sample_data and not store.list():
            store.seed(SAMPLE_CONTACTS)

    app = FastAPI(
        title="Contact Book",
        version="0.1.0",
        description="Contact list with search, detail, edit, favorite and delete.",
    )
    app.state.settings = settings
    app.state.store = store
    app.state.bus = InvalidationBus()

    origins = list(ALLOWED_ORIGINS)
    if settings.allowed_frontend:
        origins.append(settings.allowed_frontend)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound):
        logger.info(f"[NotFound] {request.method} {request.url.path}")
        if request.url.path.startswith("/data/"):
            return JSONResponse({"detail": exc.detail}, status_code=404)
        root = root_loader(request.app.state.store, str(request.url))
        return render_page(request, "not_found", page_context(root), status_code=404)

    @app.get("/health")
    def health_check() -> dict:
        """Health check endpoint with store configuration."""
        return {
            "status": "ok",
            "time": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
            "store": store.backend,
        }

    @app.get("/activity")
    def activity(limit: int = Query(50, ge=1, le=500)) -> dict:
        entries = fetch_activity_entries(limit)
        return {"entries": entries, "count": len(entries)}

    app.include_router(data_router, prefix="/data", tags=["data"])
    app.include_router(pages_router, tags=["pages"])

    logger.info(
        f"[App] Contact book ready (environment={settings.environment}, store={store.backend})"
    )
    return app


app = create_app()
