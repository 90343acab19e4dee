"""Building link graphs from loaded guideline documents."""

import os
from pathlib import Path

from guidebook.domain.document import GuidelineDocument
from guidebook.domain.links import CrossReference, DocumentLink, LinkGraph
from guidebook.loading.path_resolver import LinkResolver

from . import analyzer
from .resolver import ReferenceResolver


class LinkGraphBuilder:
    """Builds link graphs from loaded documents."""

    def build(
        self,
        documents: dict[str, GuidelineDocument],
        link_resolver: LinkResolver,
        reference_resolver: ReferenceResolver | None = None,
    ) -> LinkGraph:
        """Build link graph from loaded documents.

        Fills outbound_links and inbound_links of every document as a side effect.

        Args:
            documents: Dictionary of document ID to GuidelineDocument objects
            link_resolver: Resolver for relative markdown links
            reference_resolver: Resolver for wikilinks, built from documents if omitted

        Returns:
            LinkGraph with links, folder clusters and orphans
        """
        if reference_resolver is None:
            reference_resolver = ReferenceResolver.from_documents(list(documents.values()))

        path_index = {
            os.path.normpath(document.path): document.id for document in documents.values()
        }

        links = []
        for document in documents.values():
            document.outbound_links = []
            targets: dict[str, list[CrossReference]] = {}

            for reference in document.links:
                target_id = self.resolve_target(
                    document, reference, link_resolver, reference_resolver, path_index
                )
                if target_id and target_id != document.id:
                    targets.setdefault(target_id, []).append(reference)

            for target_id, references in targets.items():
                document.outbound_links.append(target_id)
                links.append(self._build_link(document, documents[target_id], references))

        self.update_inbound_links(documents, links)

        return LinkGraph(
            links=links,
            folder_clusters=self._build_folder_clusters(documents),
            orphans=sorted(
                document.relative_path
                for document in documents.values()
                if not document.inbound_links
            ),
        )

    @staticmethod
    def resolve_target(
        document: GuidelineDocument,
        reference: CrossReference,
        link_resolver: LinkResolver,
        reference_resolver: ReferenceResolver,
        path_index: dict[str, str],
    ) -> str | None:
        """Resolve a cross-reference to the ID of a loaded document, if any."""
        if reference.kind == "image" or reference.is_external or reference.is_ignored_scheme:
            return None

        if reference.kind == "wikilink":
            return reference_resolver.resolve(reference.href)

        if reference.is_anchor_only:
            return document.id

        target = link_resolver.resolve_link_path(Path(document.path), reference.href)
        if target is None:
            return None
        return path_index.get(os.path.normpath(target))

    def update_inbound_links(
        self, documents: dict[str, GuidelineDocument], links: list[DocumentLink]
    ) -> None:
        """Update inbound_links for all documents based on links.

        Args:
            documents: Dictionary of document ID to GuidelineDocument objects
            links: List of links to process
        """
        # Clear existing inbound links
        for document in documents.values():
            document.inbound_links = []

        # Build inbound links from links
        for link in links:
            if link.target_document_id in documents:
                documents[link.target_document_id].inbound_links.append(link.source_document_id)

    @staticmethod
    def _build_link(
        source: GuidelineDocument, target: GuidelineDocument, references: list[CrossReference]
    ) -> DocumentLink:
        first = references[0]
        return DocumentLink(
            source_document_id=source.id,
            target_document_id=target.id,
            link_type=first.kind,
            anchor=first.anchor,
            context=analyzer.extract_link_context(source.content, first.start, first.end),
            strength=analyzer.calculate_link_strength(
                source.content, target.title, link_count=len(references)
            ),
        )

    def _build_folder_clusters(
        self, documents: dict[str, GuidelineDocument]
    ) -> dict[str, list[str]]:
        """Build document clusters by folder.

        Args:
            documents: Dictionary of document ID to GuidelineDocument objects

        Returns:
            Dictionary mapping folder paths to lists of document IDs
        """
        folder_clusters: dict[str, list[str]] = {}

        for document in documents.values():
            folder_clusters.setdefault(document.folder_path, []).append(document.id)

        return folder_clusters
