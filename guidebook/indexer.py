"""Orchestration service for indexing a knowledge base into a store."""

from pathlib import Path

from loguru import logger

from guidebook.domain.document import GuidelineDocument
from guidebook.domain.links import LinkGraph
from guidebook.linking import LinkGraphBuilder
from guidebook.loading.loader import KnowledgeBaseLoader
from guidebook.loading.path_resolver import LinkResolver
from guidebook.store.base import KnowledgeStore


class KnowledgeBaseIndexer:
    """Orchestrates the indexing pipeline from markdown files to a knowledge store."""

    def __init__(self, *, store: KnowledgeStore, loader: KnowledgeBaseLoader | None = None):
        """Initialize the indexer with required services.

        Args:
            store: Knowledge store receiving documents and the link graph
            loader: Loader parsing markdown files, a default loader if omitted
        """
        self.store = store
        self.loader = loader or KnowledgeBaseLoader()
        self.graph_builder = LinkGraphBuilder()

    def index(self, folder: Path) -> LinkGraph:
        """Index markdown files incrementally, reloading only changed files and rebuilding links.

        Args:
            folder: Knowledge base root directory

        Returns:
            The rebuilt link graph

        Raises:
            FileNotFoundError: If folder is not a directory
        """
        folder = Path(folder).resolve()
        if not folder.is_dir():
            raise FileNotFoundError(f"Knowledge base not found: {folder}")

        all_files = self.loader.get_markdown_files(folder)
        modified_files = self._get_modified_files(all_files, folder)

        logger.info(
            f"Found {len(all_files)} total files, {len(modified_files)} modified since last index"
        )

        current_document_ids = {
            self.loader.generate_document_id(f, folder) for f in all_files
        }

        existing_document_ids = self.store.get_all_document_ids()
        deleted_document_ids = existing_document_ids - current_document_ids

        if deleted_document_ids:
            logger.info(f"Deleting {len(deleted_document_ids)} removed documents...")
            for document_id in deleted_document_ids:
                self.store.delete_document(document_id)

        if modified_files:
            logger.info(f"Processing {len(modified_files)} modified files...")
            for file in modified_files:
                document = self.loader.load_file(file, folder)
                if document is not None:
                    self.store.update_document(document)

        logger.info("Rebuilding link graph...")
        all_documents = self.store.get_documents_by_ids(sorted(current_document_ids))
        link_graph = self._build_link_graph(all_documents, folder)
        self.store.update_link_graph(link_graph)

        logger.info("Indexing complete:")
        logger.info(f"  - Total files: {len(all_files)}")
        logger.info(f"  - Modified: {len(modified_files)}")
        logger.info(f"  - Deleted: {len(deleted_document_ids)}")
        logger.info(f"  - Links: {len(link_graph.links)}")
        logger.info(f"  - Orphans: {len(link_graph.orphans)}")

        self.store.save()
        return link_graph

    def _build_link_graph(
        self, documents: dict[str, GuidelineDocument], folder: Path
    ) -> LinkGraph:
        """Build the link graph and write the refreshed link lists back to the store."""
        link_graph = self.graph_builder.build(documents, LinkResolver(base_path=folder))
        for document in documents.values():
            self.store.update_document(document)
        return link_graph

    def _get_modified_files(self, all_files: list[Path], folder: Path) -> list[Path]:
        """Filter files for those not yet indexed or modified since the newest indexed document.

        Files the store does not know are always returned, whatever their mtime.

        Args:
            all_files: List of all markdown files to check
            folder: Knowledge base root the document ids are relative to

        Returns:
            List of files to reload
        """
        existing_document_ids = self.store.get_all_document_ids()
        last_modified_time = 0.0
        for document_id in existing_document_ids:
            document = self.store.get_document(document_id)
            if document and document.modified > last_modified_time:
                last_modified_time = document.modified

        return [
            f
            for f in all_files
            if self.loader.generate_document_id(f, folder) not in existing_document_ids
            or f.stat().st_mtime > last_modified_time
        ]
