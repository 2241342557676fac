"""
Markdown bookmark tables.

Each category is stored as one document::

    # <Category> Bookmarks

    ## <Subcategory>

    | Title | URL | Tags | Added | Description | Last Check | Status |
    |------|------|------|------|------|------|------|
    | <title> | [🔗](<url>) | <tags> | <date> | <desc> | <date> | <status> |

This module owns that encoding: formatting rows, parsing them back, and
merging new rows into an existing document without touching anything else.
"""
import logging
import re
from typing import Iterable, List, Optional, Set

from bfav.models import (
    BookmarkRecord,
    DEFAULT_SUBCATEGORY,
    LINK_ICON,
    TABLE_COLUMNS,
    TABLE_HEADER,
    TABLE_HEADER_LINE,
    TABLE_SEPARATOR_LINE,
)
from bfav.tag_utils import format_tag_cell, parse_tag_cell
from bfav.vault import Vault, normalize_path

logger = logging.getLogger(__name__)

SECTION_PREFIX = "## "

_CELL_SEPARATOR = re.compile(r"(?<!\\)\|")
_LINK_CELL = re.compile(
    r"^\[" + LINK_ICON + r"\]\((?:<(https?://[^<>\r\n]+)>|(https?://\S+))\)$"
)
_URL_WHITESPACE = re.compile(r"\s")
_SECTION_BOUNDARY = re.compile(r"^(?=## )", re.MULTILINE)
_SEPARATOR_ROW = re.compile(r"^\|\s*:?-{3,}")


def format_cell(content: Optional[str]) -> str:
    """
    Make text safe for a table cell.

    Pipes are escaped, line breaks collapse to spaces and the result is
    trimmed.
    """
    if not content:
        return ""
    return (
        content.replace("|", "\\|")
        .replace("\r\n", " ")
        .replace("\r", " ")
        .replace("\n", " ")
        .strip()
    )


def unescape_cell(cell: str) -> str:
    return cell.replace("\\|", "|")


def format_link(url: str) -> str:
    """
    Render the link cell for a URL.

    Pipes are escaped like in any other cell. A URL containing whitespace
    is written as an angle-bracket destination, which Markdown allows to
    hold spaces; line breaks and angle brackets in such a URL are
    percent-encoded since they cannot appear there.

    Examples:
        >>> format_link("https://fonts.googleapis.com/css?family=Roboto|Open+Sans")
        '[🔗](https://fonts.googleapis.com/css?family=Roboto\\\\|Open+Sans)'
        >>> format_link("https://example.com/a b")
        '[🔗](<https://example.com/a b>)'
    """
    url = url.replace("|", "\\|")
    if _URL_WHITESPACE.search(url):
        url = (
            url.replace("<", "%3C")
            .replace(">", "%3E")
            .replace("\r", "%0D")
            .replace("\n", "%0A")
        )
        return f"[{LINK_ICON}](<{url}>)"
    return f"[{LINK_ICON}]({url})"


def join_cells(cells: Iterable[str]) -> str:
    """Assemble already formatted cells into a row (no trailing newline)."""
    return "| " + " | ".join(cells) + " |"


def format_bookmark_line(bookmark: BookmarkRecord) -> str:
    """Format a bookmark as one table row, newline included."""
    return join_cells([
        format_cell(bookmark.title),
        format_link(bookmark.url),
        format_cell(format_tag_cell(bookmark.tags)),
        format_cell(bookmark.add_date),
        format_cell(bookmark.description),
        format_cell(bookmark.last_check),
        format_cell(bookmark.status),
    ]) + "\n"


def is_header_line(line: str) -> bool:
    return line.startswith("| Title |")


def is_separator_line(line: str) -> bool:
    return bool(_SEPARATOR_ROW.match(line))


def split_row_cells(line: str) -> Optional[List[str]]:
    """
    Split a table row into its trimmed, still escaped cells.

    Returns None for lines that are not table rows at all.
    """
    line = line.strip()
    if len(line) < 2 or not line.startswith("|") or not line.endswith("|"):
        return None
    if line.endswith("\\|"):
        return None
    return [cell.strip() for cell in _CELL_SEPARATOR.split(line)[1:-1]]


def link_url(cell: str) -> Optional[str]:
    """URL of a well-formed link cell, otherwise None."""
    match = _LINK_CELL.match(cell)
    if not match:
        return None
    return unescape_cell(match.group(1) or match.group(2))


def stored_url(url: str) -> str:
    """The URL as it reads back from its link cell."""
    return link_url(format_link(url)) or url


def row_url(line: str) -> Optional[str]:
    """URL of a data row, even when the rest of the row is malformed."""
    cells = split_row_cells(line)
    if not cells or len(cells) < 2:
        return None
    return link_url(cells[1])


def parse_row(line: str) -> Optional[BookmarkRecord]:
    """
    Parse a data row back into a bookmark.

    Rows that do not have exactly seven cells or lack a well-formed link
    cell give None and are meant to be skipped, not repaired.
    """
    cells = split_row_cells(line)
    if cells is None or len(cells) != len(TABLE_COLUMNS):
        return None
    url = link_url(cells[1])
    if url is None:
        return None
    title, _, tags, added, description, last_check, status = (unescape_cell(c) for c in cells)
    return BookmarkRecord(
        url=url,
        title=title,
        tags=parse_tag_cell(tags),
        add_date=added,
        description=description,
        last_check=last_check,
        status=status,
    )


def split_sections(text: str) -> List[str]:
    """
    Split a document into section units.

    The first unit holds everything before the first ``## `` heading (it may
    be empty); every other unit runs from a heading to the next one.
    Joining the units gives back the original text.
    """
    return _SECTION_BOUNDARY.split(text)


def section_name(unit: str) -> Optional[str]:
    """Subcategory name of a section unit, None for the preamble."""
    if not unit.startswith(SECTION_PREFIX):
        return None
    return unit.split("\n", 1)[0][len(SECTION_PREFIX):].strip()


def read_existing_urls(text: Optional[str], subcategory: str) -> Set[str]:
    """
    URLs already stored in one section of a document.

    Args:
        text: Document text (None when the document does not exist)
        subcategory: Section to scan; empty means the "General" section

    Returns:
        Set of URLs found in that section
    """
    section = subcategory or DEFAULT_SUBCATEGORY
    urls = set()
    if not text:
        return urls

    current = None
    for line in text.split("\n"):
        if line.startswith(SECTION_PREFIX):
            current = line[len(SECTION_PREFIX):].strip()
            continue
        if current == section:
            url = row_url(line)
            if url:
                urls.add(url)
    return urls


def _table_indexes(lines: List[str]) -> List[int]:
    return [i for i, line in enumerate(lines) if line.startswith("|")]


def ensure_table_header(lines: List[str]) -> List[str]:
    """
    Make sure a section body has a header and separator row.

    ``lines`` is the section body without its heading and without trailing
    blank lines. A missing header is inserted above the first table row, or
    after a blank line at the end when the section has no table yet.
    """
    lines = list(lines)
    table = _table_indexes(lines)
    header = next((i for i in table if is_header_line(lines[i])), None)

    if header is None:
        if table:
            lines[table[0]:table[0]] = [TABLE_HEADER_LINE, TABLE_SEPARATOR_LINE]
        else:
            lines += ["", TABLE_HEADER_LINE, TABLE_SEPARATOR_LINE]
    elif header + 1 >= len(lines) or not is_separator_line(lines[header + 1]):
        lines.insert(header + 1, TABLE_SEPARATOR_LINE)

    return lines


def append_rows_to_section(unit: str, rows: List[str]) -> str:
    """Append rows after the last table row of a section unit."""
    stripped = unit.rstrip("\n")
    tail = unit[len(stripped):] or "\n"
    heading, *body = stripped.split("\n")

    body = ensure_table_header(body)
    last_row = _table_indexes(body)[-1]
    body[last_row + 1:last_row + 1] = rows

    return "\n".join([heading] + body) + tail


def new_document(category: str, subcategory: str, rows: str) -> str:
    return f"# {category} Bookmarks\n\n{SECTION_PREFIX}{subcategory}\n\n{TABLE_HEADER}{rows}"


def merge_bookmarks(text: Optional[str], category: str, subcategory: str,
                    bookmarks: List[BookmarkRecord]) -> str:
    """
    Merge new bookmarks into a document's text.

    Rows are appended to the section in the order given. The caller is
    responsible for leaving out bookmarks whose URL the section already
    holds (see read_existing_urls); no check is made here.

    Args:
        text: Current document text, None if the document does not exist
        category: Category the document belongs to
        subcategory: Target section; empty means "General"
        bookmarks: New bookmarks

    Returns:
        The complete new document text
    """
    section = subcategory or DEFAULT_SUBCATEGORY
    lines = [format_bookmark_line(bookmark) for bookmark in bookmarks]

    if text is None or not text.strip():
        return new_document(category, section, "".join(lines))

    units = split_sections(text)
    for i, unit in enumerate(units):
        if section_name(unit) == section:
            units[i] = append_rows_to_section(unit, [line.rstrip("\n") for line in lines])
            return "".join(units)

    return f"{text.rstrip()}\n\n{SECTION_PREFIX}{section}\n\n{TABLE_HEADER}" + "".join(lines)


def document_path(folder: str, category: str) -> str:
    """Vault path of the document for a category."""
    return normalize_path(f"{folder}/{category}.md")


def append_bookmarks(vault: Vault, folder: str, category: str, subcategory: str,
                     bookmarks: List[BookmarkRecord]) -> str:
    """
    Append bookmarks to the stored document of a category.

    Reads the document, merges the new rows and overwrites the whole file.
    The output folder is created when missing.

    Returns:
        Path of the written document
    """
    folder = normalize_path(folder)
    if folder and not vault.exists(folder):
        vault.create_folder(folder)

    path = document_path(folder, category)
    content = merge_bookmarks(vault.read_optional(path), category, subcategory, bookmarks)
    vault.write(path, content)

    logger.info(f"Added {len(bookmarks)} bookmarks to {path} ({subcategory or DEFAULT_SUBCATEGORY})")
    return path
