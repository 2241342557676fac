"""
Import and cleanup workflows over the bookmark documents.

Both workflows are full read-modify-write passes: every document they touch
is read, transformed in memory and written back in one piece.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from bfav.cancellation import CancellationToken
from bfav.dedup import deduplicate_bookmarks, group_by_url, merge_group
from bfav.exceptions import NoQualifyingLinksError
from bfav.importers import extract_links
from bfav.models import BookmarkRecord
from bfav.tables import (
    SECTION_PREFIX,
    append_bookmarks,
    document_path,
    format_bookmark_line,
    parse_row,
    read_existing_urls,
    stored_url,
)
from bfav.vault import Vault, normalize_path

logger = logging.getLogger(__name__)


@dataclass
class ImportReport:
    """Outcome of an import."""
    processed: int = 0
    added: int = 0
    skipped_existing: int = 0
    files: List[str] = field(default_factory=list)
    sections: Dict[Tuple[str, str], int] = field(default_factory=dict)


@dataclass
class CleanupReport:
    """Outcome of a duplicate cleanup pass."""
    processed: int = 0
    duplicates_removed: int = 0
    files_changed: List[str] = field(default_factory=list)
    cancelled: bool = False


def group_by_section(bookmarks: List[BookmarkRecord]) -> Dict[str, Dict[str, List[BookmarkRecord]]]:
    """Group bookmarks by document (category) and section (subcategory)."""
    grouped = defaultdict(lambda: defaultdict(list))
    for bookmark in bookmarks:
        grouped[bookmark.document][bookmark.section].append(bookmark)
    return grouped


def import_bookmarks(vault: Vault, folder: str, html: str) -> ImportReport:
    """
    Import a browser bookmark export into the bookmark documents.

    The export is parsed, deduplicated and grouped per category and
    subcategory. Bookmarks whose URL is already stored in their section are
    skipped; the rest are appended sorted by title.

    Args:
        vault: Vault holding the documents
        folder: Output folder for the documents
        html: Bookmark export markup

    Returns:
        ImportReport with counts and the documents written

    Raises:
        EmptyInputError: The export contains no links at all
        NoQualifyingLinksError: None of the links is an http(s) bookmark
    """
    bookmarks = extract_links(html)
    if not bookmarks:
        raise NoQualifyingLinksError()

    unique = deduplicate_bookmarks(bookmarks)
    report = ImportReport(processed=len(unique))
    folder = normalize_path(folder)

    for category, sections in group_by_section(unique).items():
        for subcategory, section_bookmarks in sections.items():
            existing = read_existing_urls(
                vault.read_optional(document_path(folder, category)), subcategory
            )
            new_bookmarks = [b for b in section_bookmarks if stored_url(b.url) not in existing]
            report.skipped_existing += len(section_bookmarks) - len(new_bookmarks)

            if not new_bookmarks:
                logger.debug(f"Nothing new for {category} / {subcategory}")
                continue

            new_bookmarks.sort(key=lambda b: b.title.casefold())
            path = append_bookmarks(vault, folder, category, subcategory, new_bookmarks)

            report.added += len(new_bookmarks)
            report.sections[(category, subcategory)] = len(new_bookmarks)
            if path not in report.files:
                report.files.append(path)

    logger.info(
        f"Import completed: {report.processed} bookmarks processed, "
        f"{report.added} added, {report.skipped_existing} already present"
    )
    return report


def deduplicate_document(content: str) -> Tuple[str, int, int]:
    """
    Collapse duplicate rows inside every section of a document.

    The canonical row of a URL takes the place of its first occurrence;
    later occurrences are dropped. Lines that are not well-formed rows are
    kept as they are.

    Returns:
        (new content, rows seen, rows removed)
    """
    lines = content.split("\n")
    sections: List[List[int]] = [[]]

    for i, line in enumerate(lines):
        if line.startswith(SECTION_PREFIX):
            sections.append([])
        elif parse_row(line) is not None:
            sections[-1].append(i)

    seen = 0
    drop = set()
    for row_indexes in sections:
        records = [parse_row(lines[i]) for i in row_indexes]
        seen += len(records)
        first_index = {}
        for i, record in zip(row_indexes, records):
            if record.url in first_index:
                drop.add(i)
            else:
                first_index[record.url] = i
        for url, group in group_by_url(records).items():
            if len(group) > 1:
                lines[first_index[url]] = format_bookmark_line(merge_group(group)).rstrip("\n")

    updated = [line for i, line in enumerate(lines) if i not in drop]
    return "\n".join(updated), seen, len(drop)


def cleanup_duplicates(
    vault: Vault,
    folder: str,
    token: Optional[CancellationToken] = None,
    files: Optional[List[str]] = None,
    progress_callback: Optional[Callable[[str, CleanupReport], None]] = None,
) -> CleanupReport:
    """
    Remove duplicate rows from the stored bookmark documents.

    Args:
        vault: Vault holding the documents
        folder: Output folder with the bookmark documents
        token: Cancellation token, checked before each document
        files: Subset of document paths to clean (default: all)
        progress_callback: Optional callback(path, report) after each document

    Returns:
        CleanupReport; a document is never left half written
    """
    token = token or CancellationToken()
    report = CleanupReport()

    for path in files if files is not None else vault.markdown_files(folder):
        if token.cancelled:
            report.cancelled = True
            break

        content = vault.read(path)
        updated, seen, removed = deduplicate_document(content)
        report.processed += seen

        if token.cancelled:
            report.cancelled = True
            break

        if removed:
            vault.write(path, updated)
            report.duplicates_removed += removed
            report.files_changed.append(path)
            logger.info(f"Removed {removed} duplicate rows from {path}")

        if progress_callback:
            progress_callback(path, report)

    return report
