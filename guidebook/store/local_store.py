import json
import re
from collections import deque
from pathlib import Path
from typing import Dict, List

from guidebook.domain.document import GuidelineDocument
from guidebook.domain.links import LinkGraph
from guidebook.store.base import KnowledgeStore


class LocalKnowledgeStore(KnowledgeStore):
    """Local knowledge store that keeps documents and their link graph in a JSON file."""

    def __init__(self, filepath: str | Path | None = None) -> None:
        """Initialize LocalKnowledgeStore.

        Args:
            filepath: Path to store file. If provided and exists, will auto-load.
                     If provided and doesn't exist, will save to this path when save() is called.
                     If not provided, creates empty store in memory only.
        """
        self._filepath = str(filepath) if filepath else None

        if self._filepath and Path(self._filepath).exists():
            with open(self._filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._documents = {
                document_id: GuidelineDocument(**document_data)
                for document_id, document_data in data["documents"].items()
            }
            self._link_graph = LinkGraph()
            if "link_graph" in data:
                self._link_graph = LinkGraph(**data["link_graph"])
        else:
            self._documents = {}
            self._link_graph = LinkGraph()

    @classmethod
    def from_data(
        cls,
        documents: Dict[str, GuidelineDocument] | None = None,
        link_graph: LinkGraph | None = None,
    ) -> "LocalKnowledgeStore":
        """Create LocalKnowledgeStore from provided data (useful for testing).

        Args:
            documents: Documents dictionary
            link_graph: Link graph

        Returns:
            LocalKnowledgeStore instance with provided data
        """
        instance = cls(filepath=None)
        instance._documents = documents or {}
        instance._link_graph = link_graph or LinkGraph()
        return instance

    def get_document(self, document_id: str) -> GuidelineDocument | None:
        """Get a document by its ID."""
        return self._documents.get(document_id)

    def get_all_documents(self) -> List[GuidelineDocument]:
        """Get every document, ordered by relative path."""
        return sorted(self._documents.values(), key=lambda d: d.relative_path)

    def get_link_graph(self) -> LinkGraph:
        """Get the link graph."""
        return self._link_graph

    def search(self, query: str, limit: int = 10) -> List[GuidelineDocument]:
        """Rank documents by query terms found in the title, headings and body.

        A title hit weighs 3, a heading hit 2 and each body occurrence 1 (capped
        at 5 per term). The full query found in the title adds another 5.
        """
        terms = re.findall(r"\w+", query.lower())
        if not terms:
            return []

        scored = []
        for document in self._documents.values():
            title = document.title.lower()
            headings = [heading.text.lower() for heading in document.headings]
            body = document.content.lower()

            score = 5 if query.lower().strip() in title else 0
            for term in terms:
                if term in title:
                    score += 3
                score += 2 * sum(1 for heading in headings if term in heading)
                score += min(body.count(term), 5)

            if score > 0:
                scored.append((score, document))

        scored.sort(key=lambda x: (-x[0], x[1].relative_path))
        return [document for _, document in scored[:limit]]

    def get_related_documents(
        self, document_id: str, max_depth: int = 2
    ) -> List[GuidelineDocument]:
        """Get documents related to the given document through links."""
        if document_id not in self._documents:
            return []

        visited = set()
        related_documents = []
        queue = deque([(document_id, 0)])  # (document_id, depth)
        visited.add(document_id)

        while queue:
            current_id, depth = queue.popleft()

            if depth > 0:  # Don't include the source document itself
                if current_id in self._documents:
                    related_documents.append(self._documents[current_id])

            if depth < max_depth:
                current_document = self._documents.get(current_id)
                if current_document:
                    linked_ids = current_document.outbound_links + current_document.inbound_links
                    for linked_id in linked_ids:
                        if linked_id not in visited:
                            visited.add(linked_id)
                            queue.append((linked_id, depth + 1))

        return related_documents

    def get_folder_cluster(self, document_id: str) -> List[GuidelineDocument]:
        """Get all documents in the same folder as the given document."""
        document = self._documents.get(document_id)
        if not document:
            return []

        cluster_ids = self._link_graph.folder_clusters.get(document.folder_path, [])
        return [
            self._documents[did]
            for did in cluster_ids
            if did in self._documents and did != document_id
        ]

    def find_path_between_documents(self, source_id: str, target_id: str) -> List[str]:
        """Find the shortest path between two documents through links."""
        if source_id not in self._documents or target_id not in self._documents:
            return []

        if source_id == target_id:
            return [source_id]

        visited = set()
        queue = deque([(source_id, [source_id])])  # (document_id, path)
        visited.add(source_id)

        while queue:
            current_id, path = queue.popleft()
            current_document = self._documents.get(current_id)

            if current_document:
                connected_ids = current_document.outbound_links + current_document.inbound_links
                for connected_id in connected_ids:
                    if connected_id == target_id:
                        return path + [connected_id]

                    if connected_id not in visited and connected_id in self._documents:
                        visited.add(connected_id)
                        queue.append((connected_id, path + [connected_id]))

        return []  # No path found

    def find_document_by_title(self, title: str) -> GuidelineDocument | None:
        """Find document by title, supporting fuzzy matching."""
        # Try different matching strategies in order of precision
        for strategy in [
            self._match_exact_title,
            self._match_case_insensitive_title,
            self._match_normalized_title,
            self._match_stem,
            self._match_substring_title,
        ]:
            result = strategy(title)
            if result:
                return result
        return None

    def _match_exact_title(self, title: str) -> GuidelineDocument | None:
        """Match exact title including empty strings."""
        for document in self._documents.values():
            if document.title == title:
                return document
        return None

    def _match_case_insensitive_title(self, title: str) -> GuidelineDocument | None:
        """Match title case insensitively."""
        for document in self._documents.values():
            if document.title and document.title.lower() == title.lower():
                return document
        return None

    @staticmethod
    def _normalize(text: str) -> str:
        return re.sub(r"[\s_-]+", "-", text.strip().lower())

    def _match_normalized_title(self, title: str) -> GuidelineDocument | None:
        """Match title with space/underscore/hyphen normalization."""
        normalized_title = self._normalize(title)
        for document in self._documents.values():
            if document.title and self._normalize(document.title) == normalized_title:
                return document
        return None

    def _match_stem(self, title: str) -> GuidelineDocument | None:
        """Match by file stem (filename without extension)."""
        normalized_title = self._normalize(title)
        for document in self._documents.values():
            document_stem = Path(document.relative_path).stem
            if self._normalize(document_stem) == normalized_title:
                return document
        return None

    def _match_substring_title(self, title: str) -> GuidelineDocument | None:
        """Match by substring in title."""
        if not title:
            return None
        for document in self._documents.values():
            if document.title and title.lower() in document.title.lower():
                return document
        return None

    def save(self, filepath: str | None = None) -> None:
        """Save the knowledge store to a JSON file.

        Args:
            filepath: Path to save to. If not provided, uses the filepath from initialization.
        """
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )

        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "documents": {
                document_id: document.model_dump()
                for document_id, document in self._documents.items()
            },
            "link_graph": self._link_graph.model_dump(),
        }
        with open(save_path, "w", encoding="utf-8") as f:
            json.dump(data, f)

    def update_link_graph(self, link_graph: LinkGraph) -> None:
        """Update the link graph."""
        self._link_graph = link_graph

    def update_document(self, document: GuidelineDocument) -> None:
        """Add a new document or update an existing one."""
        self._documents[document.id] = document

    def delete_document(self, document_id: str) -> None:
        """Delete a document."""
        if document_id in self._documents:
            del self._documents[document_id]

    def get_all_document_ids(self) -> set[str]:
        """Get all document IDs in the store."""
        return set(self._documents.keys())

    def get_documents_by_ids(self, document_ids: list[str]) -> dict[str, GuidelineDocument]:
        """Get multiple documents by their IDs, returning a dictionary mapping ID to document.

        Args:
            document_ids: List of document IDs to retrieve

        Returns:
            Dictionary mapping document_id to GuidelineDocument for all found documents
        """
        return {
            document_id: self._documents[document_id]
            for document_id in document_ids
            if document_id in self._documents
        }

    def clear(self) -> None:
        """Clear all data from the store."""
        self._documents.clear()
        self._link_graph = LinkGraph()
