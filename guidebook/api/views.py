"""Endpoints returning HTML pages"""

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from guidebook.domain.document import GuidelineDocument
from guidebook.rendering.renderer import TEMPLATES_DIR, SiteRenderer
from guidebook.store.base import KnowledgeStore


def _document_url(document: GuidelineDocument) -> str:
    return f"/doc/{document.id}"


def get_views_router(*, store: KnowledgeStore, renderer: SiteRenderer) -> APIRouter:
    router = APIRouter()

    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

    @router.get("/", response_class=HTMLResponse)
    async def home(request: Request):
        context = renderer.index_context(
            store.get_all_documents(),
            store.get_link_graph(),
            href_for=_document_url,
            index_href="/",
        )
        return templates.TemplateResponse(request, "index.html", context)

    @router.get("/doc/{document_id}", response_class=HTMLResponse)
    async def document(request: Request, document_id: str):
        document = store.get_document(document_id)
        if document is None:
            raise HTTPException(status_code=404, detail="Document not found")
        context = renderer.page_context(
            document, store.get_all_documents(), href_for=_document_url, index_href="/"
        )
        return templates.TemplateResponse(request, "page.html", context)

    return router
