"""Command line interface for linting, rendering, indexing and serving a knowledge base"""

import argparse
import sys
from pathlib import Path

import uvicorn
from loguru import logger
from rich.console import Console

from guidebook.config import settings
from guidebook.indexer import KnowledgeBaseIndexer
from guidebook.linking import LinkGraphBuilder
from guidebook.linter import KnowledgeBaseLinter
from guidebook.loading.loader import KnowledgeBaseLoader
from guidebook.loading.path_resolver import LinkResolver
from guidebook.rendering.renderer import SiteRenderer
from guidebook.report_formatter import print_report, report_to_json
from guidebook.store.local_store import LocalKnowledgeStore


def lint(args: argparse.Namespace) -> int:
    run_settings = settings.model_copy(
        update={
            "strict": args.strict or settings.strict,
            "errors_path": args.errors_file or settings.errors_path,
        }
    )
    linter = KnowledgeBaseLinter(settings=run_settings)
    report = linter.lint(Path(args.root), fix=args.fix)

    if args.json:
        print(report_to_json(report))
    else:
        print_report(report, Console())
    return int(report.exit_code)


def render(args: argparse.Namespace) -> int:
    root = Path(args.root)
    loader = KnowledgeBaseLoader(excluded_dirs=settings.excluded_dirs)
    documents = loader.load(root)

    graph = LinkGraphBuilder().build(
        {document.id: document for document in documents}, LinkResolver(base_path=root)
    )
    renderer = SiteRenderer(
        base_path=root, output_dir=Path(args.out), site_title=settings.site_title
    )
    written = renderer.build(documents, graph)

    Console().print(f"Wrote {len(written)} files to {args.out}", highlight=False)
    return 0


def index(args: argparse.Namespace) -> int:
    store = LocalKnowledgeStore(filepath=args.index)
    indexer = KnowledgeBaseIndexer(
        store=store, loader=KnowledgeBaseLoader(excluded_dirs=settings.excluded_dirs)
    )
    graph = indexer.index(Path(args.root))

    Console().print(
        f"Indexed {len(store.get_all_document_ids())} documents "
        f"({len(graph.links)} links, {len(graph.orphans)} orphans) into {args.index}",
        highlight=False,
    )
    return 0


def search(args: argparse.Namespace) -> int:
    if not Path(args.index).exists():
        logger.error(f"Index not found: {args.index}, run 'guidebook index' first")
        return 2

    store = LocalKnowledgeStore(filepath=args.index)
    console = Console()
    results = store.search(args.query, limit=args.limit)
    if not results:
        console.print("No matching documents", highlight=False)
    for document in results:
        console.print(f"[bold]{document.title}[/bold]  [dim]{document.relative_path}[/dim]")
    return 0


def serve(args: argparse.Namespace) -> int:
    uvicorn.run("app:app", host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="guidebook", description="Tooling for a markdown documentation knowledge base"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    lint_parser = subparsers.add_parser("lint", help="Validate links, code blocks and headings")
    lint_parser.add_argument(
        "root", nargs="?", default=str(settings.kb_root), help="Knowledge base root"
    )
    lint_parser.add_argument(
        "--strict", action="store_true", help="Also check external http(s) links"
    )
    lint_parser.add_argument(
        "--fix", action="store_true", help="Rewrite fixable links before checking"
    )
    lint_parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    lint_parser.add_argument(
        "--errors-file", type=str, default=None, help="File receiving link errors, one per line"
    )
    lint_parser.set_defaults(func=lint)

    render_parser = subparsers.add_parser("render", help="Render the knowledge base to HTML")
    render_parser.add_argument(
        "root", nargs="?", default=str(settings.kb_root), help="Knowledge base root"
    )
    render_parser.add_argument(
        "--out", type=str, default=str(settings.site_dir), help="Output directory"
    )
    render_parser.set_defaults(func=render)

    index_parser = subparsers.add_parser("index", help="Build or update the search index")
    index_parser.add_argument(
        "root", nargs="?", default=str(settings.kb_root), help="Knowledge base root"
    )
    index_parser.add_argument(
        "--index", type=str, default=settings.index_path, help="Index file to update"
    )
    index_parser.set_defaults(func=index)

    search_parser = subparsers.add_parser("search", help="Search the index")
    search_parser.add_argument("query", type=str, help="Search terms")
    search_parser.add_argument(
        "--index", type=str, default=settings.index_path, help="Index file to search"
    )
    search_parser.add_argument("--limit", type=int, default=10, help="Maximum results")
    search_parser.set_defaults(func=search)

    serve_parser = subparsers.add_parser("serve", help="Serve the browsing API and views")
    serve_parser.add_argument("--host", type=str, default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.set_defaults(func=serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 2


if __name__ == "__main__":
    sys.exit(main())
