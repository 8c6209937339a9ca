"""Jinja2 rendering of loader data into the sidebar + detail layout."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

from contact_book.contacts import Contact
from contact_book.navigation import (
    PAGE_VIEWS,
    ClientRouter,
    HistoryMode,
    LoaderResult,
    NavigationState,
    match_route,
)
from contact_book.routes import RootData

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

VIEW_TEMPLATES = {
    "index": "index.html",
    "contact": "contact.html",
    "edit": "edit.html",
    "not_found": "not_found.html",
}


def page_context(
    root: RootData,
    *,
    contact: Optional[Contact] = None,
    searching: bool = False,
    detail_loading: bool = False,
    search_value: Optional[str] = None,
    pending_contact_id: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "contacts": root.contacts,
        "q": root.q,
        "search_value": (root.q or "") if search_value is None else search_value,
        "contact": contact,
        "searching": searching,
        "detail_loading": detail_loading,
        "pending_contact_id": pending_contact_id,
    }


def render_page(request: Request, view: str, context: Dict[str, Any], status_code: int = 200):
    """Render a full HTML document for ``view``."""
    return templates.TemplateResponse(
        request,
        VIEW_TEMPLATES[view],
        context,
        status_code=status_code,
    )


def _pending_contact_id(router: ClientRouter) -> Optional[str]:
    """Contact a pending link navigation is heading to, for the sidebar."""
    pending = router.pending
    if pending is None or pending.state is not NavigationState.LOADING:
        return None
    if pending.history_mode is HistoryMode.NONE:
        return None
    route = match_route(pending.location.pathname)
    if route.view not in PAGE_VIEWS:
        return None
    return route.params.get("contact_id")


def render_router(router: ClientRouter) -> str:
    """Render what a browser tab driven by ``router`` would currently show."""
    data: LoaderResult = router.loader_data
    view = "not_found" if data.not_found else data.view
    context = page_context(
        data.root,
        contact=data.contact,
        searching=router.searching,
        detail_loading=router.detail_loading,
        search_value=router.search_value,
        pending_contact_id=_pending_contact_id(router),
    )
    template = templates.env.get_template(VIEW_TEMPLATES[view])
    return template.render(**context)
