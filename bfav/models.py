"""
Data model for imported and stored bookmarks.

A bookmark lives in exactly one place: a row of a Markdown table inside the
section for its subcategory, inside the document for its category.
"""
from dataclasses import dataclass, field, replace
from typing import List, NamedTuple


DEFAULT_CATEGORY = "General"
DEFAULT_SUBCATEGORY = "General"
FALLBACK_CATEGORY = "Uncategorized"
UNTITLED = "Untitled"

LINK_ICON = "🔗"
STATUS_OK = "✅"
STATUS_FAILED = "❌"

TABLE_COLUMNS = [
    "Title",
    "URL",
    "Tags",
    "Added",
    "Description",
    "Last Check",
    "Status",
]

TABLE_HEADER_LINE = "| " + " | ".join(TABLE_COLUMNS) + " |"
TABLE_SEPARATOR_LINE = "|" + "|".join("------" for _ in TABLE_COLUMNS) + "|"
TABLE_HEADER = f"{TABLE_HEADER_LINE}\n{TABLE_SEPARATOR_LINE}\n"


class CategoryResult(NamedTuple):
    """Two-level classification of a bookmark."""
    category: str = DEFAULT_CATEGORY
    subcategory: str = ""


@dataclass
class BookmarkRecord:
    """One imported or stored favorite."""
    url: str
    title: str = UNTITLED
    tags: List[str] = field(default_factory=list)
    add_date: str = ""
    last_modified: str = ""
    description: str = ""
    category: str = ""
    subcategory: str = ""
    last_check: str = ""
    status: str = ""

    def __post_init__(self):
        if not self.title:
            self.title = UNTITLED

    @property
    def section(self) -> str:
        """Name of the section this record is stored under."""
        return self.subcategory or DEFAULT_SUBCATEGORY

    @property
    def document(self) -> str:
        """Name of the document (category) this record is stored in."""
        return self.category or FALLBACK_CATEGORY

    def copy(self, **changes) -> "BookmarkRecord":
        """Return a copy with its own tag list, applying any field changes."""
        changes.setdefault("tags", list(self.tags))
        return replace(self, **changes)
