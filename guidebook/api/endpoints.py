from fastapi import APIRouter, HTTPException, Query
from loguru import logger

from guidebook.domain.document import GuidelineDocument
from guidebook.store.base import KnowledgeStore


def _summary(document: GuidelineDocument) -> dict:
    return {
        "document_id": document.id,
        "title": document.title,
        "relative_path": document.relative_path,
        "url": f"/doc/{document.id}",
    }


def _create_documents_search_endpoint(store: KnowledgeStore):
    """Create the documents search endpoint handler."""

    async def search_documents_by_title(title: str):
        """Search for a document by title for wikilink resolution."""
        try:
            document = store.find_document_by_title(title)
            if document:
                return {**_summary(document), "exists": True}
            else:
                return {
                    "document_id": None,
                    "title": title,
                    "relative_path": None,
                    "url": None,
                    "exists": False,
                }
        except Exception as e:
            logger.error(f"Error searching for document by title '{title}': {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e

    return search_documents_by_title


def _create_search_endpoint(store: KnowledgeStore):
    """Create the full text search endpoint handler."""

    async def search(q: str, limit: int = Query(10, ge=1, le=100)):
        try:
            return {"query": q, "results": [_summary(d) for d in store.search(q, limit=limit)]}
        except Exception as e:
            logger.error(f"Error searching for '{q}': {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e

    return search


def _create_document_endpoint(store: KnowledgeStore):
    """Create the document endpoint handler."""

    async def get_document(document_id: str) -> GuidelineDocument:
        document = store.get_document(document_id)
        if document is None:
            logger.warning(f"Document not found: {document_id}")
            raise HTTPException(status_code=404, detail="Document not found")
        return document

    return get_document


def _create_related_endpoint(store: KnowledgeStore):
    """Create the related documents endpoint handler."""

    async def get_related_documents(document_id: str, depth: int = Query(2, ge=1, le=5)):
        if store.get_document(document_id) is None:
            raise HTTPException(status_code=404, detail="Document not found")
        try:
            related = store.get_related_documents(document_id, max_depth=depth)
            cluster = store.get_folder_cluster(document_id)
        except Exception as e:
            logger.error(f"Error finding documents related to {document_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e
        return {
            "document_id": document_id,
            "related": [_summary(d) for d in related],
            "folder": [_summary(d) for d in cluster],
        }

    return get_related_documents


def get_endpoints_router(*, store: KnowledgeStore) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        return {"status": "healthy"}

    router.get("/api/documents/search")(_create_documents_search_endpoint(store))
    router.get("/api/search")(_create_search_endpoint(store))
    router.get("/api/documents/{document_id}")(_create_document_endpoint(store))
    router.get("/api/documents/{document_id}/related")(_create_related_endpoint(store))

    return router
