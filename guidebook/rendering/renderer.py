"""Rendering guideline documents to a static HTML site."""

import os
from pathlib import Path
from typing import Callable

from jinja2 import Environment, FileSystemLoader, select_autoescape
from loguru import logger
from markdown_it import MarkdownIt
from markdown_it.token import Token

from guidebook.domain.document import GuidelineDocument
from guidebook.domain.links import EXTERNAL_SCHEMES, IGNORED_SCHEMES, LinkGraph
from guidebook.loading.content_extractor import ContentExtractor
from guidebook.loading.path_resolver import LinkResolver

TEMPLATES_DIR = Path(__file__).parent / "templates"

HrefBuilder = Callable[[GuidelineDocument], str]


class SiteRenderer:
    """Renders guideline documents with markdown-it-py and wraps them in Jinja2 templates."""

    def __init__(
        self,
        *,
        base_path: Path,
        output_dir: Path = Path("site"),
        site_title: str = "Knowledge Base",
    ):
        """Initialize the renderer.

        Args:
            base_path: Knowledge base root, used to resolve links between documents
            output_dir: Directory the static site is written to
            site_title: Title shown on every page
        """
        self.link_resolver = LinkResolver(base_path=base_path)
        self.output_dir = Path(output_dir)
        self.site_title = site_title
        self.md = MarkdownIt("commonmark").enable("table")
        self.env = Environment(
            loader=FileSystemLoader(TEMPLATES_DIR), autoescape=select_autoescape(["html"])
        )

    def render_markdown(
        self,
        document: GuidelineDocument,
        documents: list[GuidelineDocument],
        href_for: HrefBuilder,
    ) -> str:
        """Convert a document body to HTML.

        Heading ids use the anchors the linter validates, and links to other
        loaded documents are rewritten with href_for, keeping their anchors.

        Args:
            document: Document to render
            documents: Every loaded document, link targets are looked up here
            href_for: Builds the href of a target document

        Returns:
            HTML fragment
        """
        tokens = self.md.parse(ContentExtractor.strip_frontmatter(document.content))
        documents_by_path = {os.path.normpath(d.path): d for d in documents}

        self._set_heading_ids(document, tokens)
        for token in tokens:
            if token.type != "inline" or not token.children:
                continue
            for child in token.children:
                if child.type == "link_open":
                    href = str(child.attrGet("href") or "")
                    child.attrSet(
                        "href", self._rewrite_href(document, href, documents_by_path, href_for)
                    )

        return self.md.renderer.render(tokens, self.md.options, {})

    @staticmethod
    def _set_heading_ids(document: GuidelineDocument, tokens: list[Token]) -> None:
        anchors_by_line = {heading.line: heading.anchor for heading in document.headings}
        used = set(anchors_by_line.values())

        for i, token in enumerate(tokens):
            if token.type != "heading_open":
                continue
            line = token.map[0] + 1 if token.map else 0
            anchor = anchors_by_line.get(line)
            if anchor is None:
                # setext headings are not part of the extracted outline
                base = ContentExtractor.slugify(tokens[i + 1].content)
                anchor, suffix = base, 0
                while anchor in used:
                    suffix += 1
                    anchor = f"{base}-{suffix}"
                used.add(anchor)
            token.attrSet("id", anchor)

    def _rewrite_href(
        self,
        document: GuidelineDocument,
        href: str,
        documents_by_path: dict[str, GuidelineDocument],
        href_for: HrefBuilder,
    ) -> str:
        if not href or href.startswith("#") or href.lower().startswith(
            EXTERNAL_SCHEMES + IGNORED_SCHEMES
        ):
            return href

        path_part, sep, anchor = href.partition("#")
        target = self.link_resolver.resolve_link_path(Path(document.path), path_part)
        if target is None:
            return href

        target_document = documents_by_path.get(os.path.normpath(target))
        if target_document is None:
            return href

        new_href = href_for(target_document)
        return f"{new_href}#{anchor}" if sep else new_href

    @staticmethod
    def static_href(source: GuidelineDocument, target: GuidelineDocument) -> str:
        """Relative href between the generated pages of two documents."""
        target_page = Path(target.relative_path).with_suffix(".html")
        return Path(os.path.relpath(target_page, Path(source.relative_path).parent)).as_posix()

    def page_context(
        self,
        document: GuidelineDocument,
        documents: list[GuidelineDocument],
        href_for: HrefBuilder,
        index_href: str,
    ) -> dict:
        """Template context of a document page."""
        documents_by_id = {d.id: d for d in documents}
        sources = [
            documents_by_id[source_id]
            for source_id in set(document.inbound_links)
            if source_id in documents_by_id
        ]
        backlinks = sorted(
            ({"title": source.title, "href": href_for(source)} for source in sources),
            key=lambda backlink: backlink["title"].lower(),
        )
        return {
            "site_title": self.site_title,
            "title": document.title,
            "relative_path": document.relative_path,
            "body": self.render_markdown(document, documents, href_for),
            "backlinks": backlinks,
            "index_href": index_href,
        }

    def index_context(
        self,
        documents: list[GuidelineDocument],
        graph: LinkGraph,
        href_for: HrefBuilder,
        index_href: str = "index.html",
    ) -> dict:
        """Template context of the index page, documents grouped by folder."""
        folders: dict[str, list[dict]] = {}
        for document in sorted(documents, key=lambda d: d.relative_path):
            folders.setdefault(document.folder_path, []).append(
                {
                    "title": document.title,
                    "href": href_for(document),
                    "relative_path": document.relative_path,
                }
            )
        return {
            "site_title": self.site_title,
            "folders": [
                {"name": name or "(root)", "documents": entries}
                for name, entries in sorted(folders.items())
            ],
            "orphans": graph.orphans,
            "index_href": index_href,
        }

    def render_document(
        self, document: GuidelineDocument, documents: list[GuidelineDocument]
    ) -> str:
        """Render a full static page for a document."""
        index_href = Path(
            os.path.relpath("index.html", Path(document.relative_path).parent)
        ).as_posix()
        context = self.page_context(
            document,
            documents,
            href_for=lambda target: self.static_href(document, target),
            index_href=index_href,
        )
        return self.env.get_template("page.html").render(**context)

    def build(self, documents: list[GuidelineDocument], graph: LinkGraph) -> list[Path]:
        """Write the static site mirroring the knowledge base layout.

        Args:
            documents: Loaded documents with inbound links filled by the graph builder
            graph: Link graph of the documents

        Returns:
            Paths of every written file, index.html last
        """
        written = []
        for document in documents:
            page = self.output_dir / Path(document.relative_path).with_suffix(".html")
            page.parent.mkdir(parents=True, exist_ok=True)
            page.write_text(self.render_document(document, documents), encoding="utf-8")
            logger.debug(f"Rendered {document.relative_path} -> {page}")
            written.append(page)

        index_context = self.index_context(
            documents,
            graph,
            href_for=lambda d: Path(d.relative_path).with_suffix(".html").as_posix(),
        )
        index = self.output_dir / "index.html"
        self.output_dir.mkdir(parents=True, exist_ok=True)
        index.write_text(
            self.env.get_template("index.html").render(**index_context), encoding="utf-8"
        )
        written.append(index)

        logger.info(f"Rendered {len(documents)} documents to {self.output_dir}")
        return written
