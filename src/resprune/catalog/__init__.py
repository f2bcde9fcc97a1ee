"""Resource catalog, declarations and indexing."""

from .declarations import (
    DeclarationMatch,
    closes_on_line,
    is_self_closing_end,
    match_declarations,
)
from .discovery import DefinitionDir, find_definition_dirs, walk_files
from .indexer import ResourceIndexer, derived_resource_name
from .models import Catalog, ResourceRecord

__all__ = [
    "Catalog",
    "DeclarationMatch",
    "DefinitionDir",
    "ResourceIndexer",
    "ResourceRecord",
    "closes_on_line",
    "derived_resource_name",
    "find_definition_dirs",
    "is_self_closing_end",
    "match_declarations",
    "walk_files",
]
