from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from guidebook.api.endpoints import get_endpoints_router
from guidebook.api.views import get_views_router
from guidebook.rendering.renderer import SiteRenderer
from guidebook.store.base import KnowledgeStore


def create_app(*, store: KnowledgeStore, renderer: SiteRenderer) -> FastAPI:
    """Create FastAPI app."""
    app = FastAPI()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router=get_endpoints_router(store=store))
    app.include_router(router=get_views_router(store=store, renderer=renderer))

    return app
