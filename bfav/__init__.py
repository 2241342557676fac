"""
bfav - Browser Favorites

Keeps browser bookmarks as categorized Markdown tables inside a note vault.

Example Usage:
    >>> from bfav import FileVault, import_bookmarks
    >>> vault = FileVault("notes")
    >>> with open("bookmarks.html", encoding="utf-8") as f:
    ...     report = import_bookmarks(vault, "Browser Favorites", f.read())
    >>> report.added
"""

__version__ = "0.3.0"
__author__ = "bfav Contributors"

# Configuration
from bfav.config import BfavConfig, get_config, init_config

# Models
from bfav.models import BookmarkRecord, CategoryResult

# Errors
from bfav.exceptions import BfavError, EmptyInputError, NoQualifyingLinksError

# Core operations
from bfav.cancellation import CancellationToken
from bfav.categorize import categorize
from bfav.dedup import deduplicate_bookmarks
from bfav.health_checker import MetaFetcher, check_accessibility
from bfav.importers import extract_links
from bfav.sync import cleanup_duplicates, import_bookmarks
from bfav.tables import format_bookmark_line, merge_bookmarks, parse_row, read_existing_urls
from bfav.tag_utils import extract_tags
from bfav.vault import FileVault, MemoryVault, Vault

__all__ = [
    # Config
    "BfavConfig",
    "get_config",
    "init_config",
    # Models
    "BookmarkRecord",
    "CategoryResult",
    # Errors
    "BfavError",
    "EmptyInputError",
    "NoQualifyingLinksError",
    # Core operations
    "CancellationToken",
    "categorize",
    "deduplicate_bookmarks",
    "MetaFetcher",
    "check_accessibility",
    "extract_links",
    "cleanup_duplicates",
    "import_bookmarks",
    "format_bookmark_line",
    "merge_bookmarks",
    "parse_row",
    "read_existing_urls",
    "extract_tags",
    # Vault
    "FileVault",
    "MemoryVault",
    "Vault",
]
