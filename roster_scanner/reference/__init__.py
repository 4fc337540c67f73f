"""Reference data: known characters and template portraits."""

from .library import (
    AssetSource,
    DirectoryAssetSource,
    HttpAssetSource,
    TemplateCache,
    TemplateLibrary,
    build_library,
    load_directory_library,
    template_cache,
)
from .roster import DEFAULT_ROSTER, load_roster, roster_by_id

__all__ = [
    "AssetSource",
    "DirectoryAssetSource",
    "HttpAssetSource",
    "TemplateCache",
    "TemplateLibrary",
    "build_library",
    "load_directory_library",
    "template_cache",
    "DEFAULT_ROSTER",
    "load_roster",
    "roster_by_id",
]
