"""
Bookmark accessibility checker.

Re-fetches every stored bookmark, one at a time, to mark it reachable or
not and to fill in descriptions and keyword tags from the page's metadata.
"""
import logging
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import requests
from bs4 import BeautifulSoup

from bfav.cancellation import CancellationToken
from bfav.models import STATUS_FAILED, STATUS_OK, TABLE_COLUMNS, TABLE_HEADER_LINE
from bfav.tables import (
    format_cell,
    is_header_line,
    is_separator_line,
    join_cells,
    link_url,
    split_row_cells,
)
from bfav.tag_utils import merge_tags, normalize_tag
from bfav.vault import Vault

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; bfav/0.3)"


def _meta_content(soup: BeautifulSoup, attrs: Dict[str, str]) -> str:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return ""
    return (tag.get("content") or "").strip()


def extract_meta_info(html: bytes) -> Dict[str, Any]:
    """
    Pull description, keyword tags and title out of a page.

    The description comes from ``<meta name="description">`` with
    ``og:description`` as fallback. Keywords are split on commas and turned
    into hashtags.
    """
    soup = BeautifulSoup(html, "html.parser")

    description = (
        _meta_content(soup, {"name": "description"})
        or _meta_content(soup, {"property": "og:description"})
    )

    tags = []
    for meta in soup.find_all("meta", attrs={"name": "keywords"}):
        for keyword in (meta.get("content") or "").split(","):
            tags.append(normalize_tag(keyword))

    title_tag = soup.find("title")

    return {
        "description": description,
        "tags": merge_tags(tags),
        "title": title_tag.get_text().strip() if title_tag else "",
    }


class MetaFetcher:
    """Fetch a bookmark's page and read its metadata."""

    def __init__(self, timeout: int = 10, user_agent: Optional[str] = None,
                 verify_ssl: bool = True):
        """
        Initialize the fetcher.

        Args:
            timeout: Request timeout in seconds
            user_agent: Custom user agent string
            verify_ssl: Whether to verify TLS certificates
        """
        self.timeout = timeout
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.verify_ssl = verify_ssl
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": self.user_agent})

    def fetch(self, url: str) -> Dict[str, Any]:
        """
        Fetch a URL and extract its metadata.

        Args:
            url: The URL to fetch

        Returns:
            Dictionary containing:
                - success: bool
                - status_code: int
                - description: str
                - tags: list of hashtags from the keywords meta tag
                - title: str
                - error: str (if failed)
        """
        result = {
            "success": False,
            "status_code": 0,
            "description": "",
            "tags": [],
            "title": "",
            "error": None,
        }

        try:
            response = self.session.get(
                url, timeout=self.timeout, allow_redirects=True, verify=self.verify_ssl
            )
            result["status_code"] = response.status_code

            if 200 <= response.status_code < 300:
                result.update(extract_meta_info(response.content))
                result["success"] = True
            else:
                result["error"] = f"HTTP {response.status_code}"

        except requests.Timeout:
            result["error"] = "Request timeout"
        except requests.ConnectionError:
            result["error"] = "Connection error"
        except Exception as e:
            result["error"] = str(e) or e.__class__.__name__

        return result


@dataclass
class AccessibilityReport:
    """Outcome of an accessibility pass."""
    accessible: int = 0
    inaccessible: int = 0
    errors: List[Tuple[str, str]] = field(default_factory=list)
    files_checked: List[str] = field(default_factory=list)
    files_changed: List[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def checked(self) -> int:
        return self.accessible + self.inaccessible

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accessible": self.accessible,
            "inaccessible": self.inaccessible,
            "checked": self.checked,
            "errors": [{"url": url, "error": error} for url, error in self.errors],
            "files_checked": list(self.files_checked),
            "files_changed": list(self.files_changed),
            "cancelled": self.cancelled,
        }


def iter_bookmark_rows(lines: List[str]) -> Iterator[Tuple[int, List[str], str]]:
    """
    Yield ``(index, cells, url)`` for every checkable row.

    A row is checkable when it follows a table header, has exactly seven
    cells and a well-formed link cell. Other lines are left alone.
    """
    in_table = False
    for i, line in enumerate(lines):
        if is_header_line(line):
            in_table = True
            continue
        if not in_table or not line.startswith("|") or is_separator_line(line):
            continue

        cells = split_row_cells(line)
        if cells is None or len(cells) != len(TABLE_COLUMNS):
            logger.debug(f"Skipping malformed row: {line!r}")
            continue
        url = link_url(cells[1])
        if url is not None:
            yield i, cells, url


def count_bookmark_rows(text: str) -> int:
    """Number of checkable bookmark rows in a document."""
    return sum(1 for _ in iter_bookmark_rows(text.split("\n")))


def collect_documents(vault: Vault, folder: str) -> Dict[str, int]:
    """Map every bookmark document under ``folder`` to its row count."""
    return {path: count_bookmark_rows(vault.read(path)) for path in vault.markdown_files(folder)}


def rewrite_checked_row(cells: List[str], fetched: Dict[str, Any], today: str) -> str:
    """
    Rewrite a row after its URL was fetched.

    On failure the first five cells are kept exactly as they were; only
    Last Check and Status change. On success the fetched keyword tags join
    the existing ones and an empty description is filled in.
    """
    title, link, tags, added, description = cells[:5]

    if not fetched["success"]:
        return join_cells([title, link, tags, added, description, today, STATUS_FAILED])

    new_tags = [format_cell(tag) for tag in fetched["tags"]]
    combined = " ".join(merge_tags(tags.split(), new_tags))
    final_description = description or format_cell(fetched["description"])
    return join_cells([title, link, combined, added, final_description, today, STATUS_OK])


def check_accessibility(
    vault: Vault,
    folder: str,
    fetcher: MetaFetcher,
    token: Optional[CancellationToken] = None,
    delay: float = 1.0,
    files: Optional[List[str]] = None,
    today: Optional[date] = None,
    sleep: Callable[[float], None] = time.sleep,
    progress_callback: Optional[Callable[[str, int, int, AccessibilityReport], None]] = None,
) -> AccessibilityReport:
    """
    Check every stored bookmark for accessibility.

    Documents are processed one at a time in enumeration order and rows top
    to bottom, with ``delay`` seconds between two fetches. Each document is
    rewritten in full when any of its lines changed.

    Args:
        vault: Vault holding the documents
        folder: Output folder with the bookmark documents
        fetcher: Fetcher used for every URL
        token: Cancellation token checked before each document and row,
            after the delay and after each fetch; a result arriving after
            cancellation is dropped
        delay: Pause between two consecutive fetches, in seconds
        files: Subset of document paths to check (default: all)
        today: Date written to Last Check (default: today, UTC)
        sleep: Sleep function, replaceable in tests
        progress_callback: Optional callback(path, checked, total, report)

    Returns:
        AccessibilityReport; ``cancelled`` is set when the token fired.
        Documents finished before that point stay written.
    """
    token = token or CancellationToken()
    today_str = (today or datetime.now(timezone.utc).date()).isoformat()
    report = AccessibilityReport()

    paths = files if files is not None else vault.markdown_files(folder)
    documents = [(path, vault.read(path)) for path in paths]
    total = sum(count_bookmark_rows(content) for _, content in documents)

    for path, content in documents:
        if token.cancelled:
            report.cancelled = True
            break

        lines = [
            TABLE_HEADER_LINE if is_header_line(line) else line
            for line in content.split("\n")
        ]

        for i, cells, url in iter_bookmark_rows(lines):
            if token.cancelled:
                report.cancelled = True
                break

            if report.checked:
                sleep(delay)
                if token.cancelled:
                    report.cancelled = True
                    break

            fetched = fetcher.fetch(url)
            if token.cancelled:
                report.cancelled = True
                break

            if fetched["success"]:
                report.accessible += 1
            else:
                report.inaccessible += 1
                report.errors.append((url, fetched["error"]))
                logger.warning(f"Bookmark not accessible: {url} ({fetched['error']})")

            lines[i] = rewrite_checked_row(cells, fetched, today_str)

            if progress_callback:
                progress_callback(path, report.checked, total, report)

        report.files_checked.append(path)
        updated = "\n".join(lines)
        if updated != content:
            vault.write(path, updated)
            report.files_changed.append(path)

        if report.cancelled:
            break

    logger.info(
        f"Accessibility check {'cancelled' if report.cancelled else 'complete'}: "
        f"{report.accessible} accessible, {report.inaccessible} inaccessible"
    )
    return report
