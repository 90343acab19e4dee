"""Link extraction module for resolving cross-references and building link graphs."""

from guidebook.linking.graph_builder import LinkGraphBuilder
from guidebook.linking.resolver import ReferenceResolver

__all__ = [
    "LinkGraphBuilder",
    "ReferenceResolver",
]
