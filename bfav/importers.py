"""
Bookmark import from browser exports.

Reads the Netscape bookmark HTML every major browser exports and turns each
http(s) anchor into a categorized, tagged BookmarkRecord.
"""
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from bs4 import BeautifulSoup

from bfav.categorize import categorize
from bfav.exceptions import EmptyInputError
from bfav.models import BookmarkRecord, UNTITLED
from bfav.tag_utils import extract_tags

logger = logging.getLogger(__name__)

URL_SCHEMES = ("http://", "https://")


def epoch_to_date(value: Optional[str]) -> str:
    """
    Convert an epoch-seconds attribute to a YYYY-MM-DD date (UTC).

    Missing or unparseable values give an empty string.

    Examples:
        >>> epoch_to_date("1609459200")
        '2021-01-01'
        >>> epoch_to_date("yesterday")
        ''
    """
    if not value:
        return ""
    try:
        return datetime.fromtimestamp(int(value.strip()), tz=timezone.utc).strftime("%Y-%m-%d")
    except (ValueError, OverflowError, OSError):
        logger.debug(f"Ignoring unparseable timestamp {value!r}")
        return ""


def extract_links(html: str) -> List[BookmarkRecord]:
    """
    Extract bookmarks from bookmark export markup.

    Every anchor is visited in document order. Anchors without an http(s)
    href are skipped; the rest become records with their category,
    subcategory and tags already assigned.

    Args:
        html: Bookmark export HTML

    Returns:
        One record per qualifying anchor (possibly none)

    Raises:
        EmptyInputError: If the markup contains no anchors at all
    """
    soup = BeautifulSoup(html, "html.parser")
    anchors = soup.find_all("a")

    if not anchors:
        raise EmptyInputError()

    bookmarks = []
    skipped = 0

    for link in anchors:
        url = (link.get("href") or "").strip()
        if not url.startswith(URL_SCHEMES):
            skipped += 1
            continue

        title = link.get_text().strip() or UNTITLED
        category, subcategory = categorize(title, url)

        bookmarks.append(BookmarkRecord(
            url=url,
            title=title,
            tags=extract_tags(title, url),
            add_date=epoch_to_date(link.get("add_date")),
            last_modified=epoch_to_date(link.get("last_modified")),
            description=(link.get("description") or "").strip(),
            category=category,
            subcategory=subcategory,
        ))

    logger.info(f"Extracted {len(bookmarks)} bookmarks from {len(anchors)} links ({skipped} skipped)")
    return bookmarks


def read_export(path: Path) -> str:
    """Read a bookmark export from disk; undecodable bytes are replaced."""
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()
