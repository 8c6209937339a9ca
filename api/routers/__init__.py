"""API Routers Package.

- pages.py: server-rendered HTML views and form actions (/, /contacts/*)
- data.py: the same loaders and actions as JSON for client-side navigation

Usage in main.py:
    from api.routers import pages_router, data_router

    app.include_router(data_router, prefix="/data", tags=["data"])
    app.include_router(pages_router, tags=["pages"])
"""

from .data import router as data_router
from .pages import router as pages_router

__all__ = [
    "data_router",
    "pages_router",
]
