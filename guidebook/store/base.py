from typing import List, Protocol

from guidebook.domain.document import GuidelineDocument
from guidebook.domain.links import LinkGraph


class KnowledgeStore(Protocol):
    def get_document(self, document_id: str) -> GuidelineDocument | None:
        """Get a document by its ID."""
        ...

    def search(self, query: str, limit: int = 10) -> List[GuidelineDocument]:
        """Get the documents best matching a free text query."""
        ...

    def get_related_documents(
        self, document_id: str, max_depth: int = 2
    ) -> List[GuidelineDocument]:
        """Get documents related to the given document through links."""
        ...

    def get_folder_cluster(self, document_id: str) -> List[GuidelineDocument]:
        """Get all documents in the same folder as the given document."""
        ...

    def find_path_between_documents(self, source_id: str, target_id: str) -> List[str]:
        """Find the shortest path between two documents through links."""
        ...

    def find_document_by_title(self, title: str) -> GuidelineDocument | None:
        """Find document by title, supporting fuzzy matching."""
        ...

    def get_link_graph(self) -> LinkGraph:
        """Get the link graph."""
        ...

    def get_all_documents(self) -> List[GuidelineDocument]:
        """Get every document, ordered by relative path."""
        ...

    def save(self, filepath: str | None = None) -> None:
        """Save the store to disk."""
        ...

    def update_link_graph(self, link_graph: LinkGraph) -> None:
        """Update the link graph."""
        ...

    def update_document(self, document: GuidelineDocument) -> None:
        """Add a new document or update an existing one."""
        ...

    def delete_document(self, document_id: str) -> None:
        """Delete a document."""
        ...

    def get_all_document_ids(self) -> set[str]:
        """Get all document IDs in the store."""
        ...

    def get_documents_by_ids(self, document_ids: list[str]) -> dict[str, GuidelineDocument]:
        """Get multiple documents by their IDs, returning a dictionary mapping ID to document.

        Args:
            document_ids: List of document IDs to retrieve

        Returns:
            Dictionary mapping document_id to GuidelineDocument for all found documents
        """
        ...

    def clear(self) -> None:
        """Clear all data from the store."""
        ...
