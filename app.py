import sys

from loguru import logger

from guidebook.api import create_app
from guidebook.config import settings
from guidebook.rendering.renderer import SiteRenderer
from guidebook.store.local_store import LocalKnowledgeStore

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

logger.info(f"Serving knowledge base index {settings.index_path} for {settings.kb_root}")

store = LocalKnowledgeStore(filepath=settings.index_path)
renderer = SiteRenderer(base_path=settings.kb_root, site_title=settings.site_title)
app = create_app(store=store, renderer=renderer)
