import pytest

from bfav.models import BookmarkRecord, TABLE_HEADER
from bfav.vault import MemoryVault


SAMPLE_EXPORT = """<!DOCTYPE NETSCAPE-Bookmark-file-1>
<META HTTP-EQUIV="Content-Type" CONTENT="text/html; charset=UTF-8">
<TITLE>Bookmarks</TITLE>
<H1>Bookmarks</H1>
<DL><p>
    <DT><H3 ADD_DATE="1600000000">Bookmarks bar</H3>
    <DL><p>
        <DT><A HREF="https://example.com/news/tech" ADD_DATE="1609459200">Tech News Today</A>
        <DT><A HREF="https://docs.python.org/3/" ADD_DATE="1577836800" LAST_MODIFIED="1609459200">Python API documentation</A>
        <DT><A HREF="https://en.wikipedia.org/wiki/Category:Machine_learning">ML category</A>
        <DT><A HREF="ftp://files.example.com/pub">FTP mirror</A>
        <DT><A HREF="javascript:void(0)">Bookmarklet</A>
        <DT><A HREF="https://example.com/news/tech" ADD_DATE="1640995200">Tech News Today (again)</A>
    </DL><p>
</DL><p>
"""


@pytest.fixture
def sample_export():
    """A small Netscape bookmark export."""
    return SAMPLE_EXPORT


@pytest.fixture
def vault():
    """An empty in-memory vault."""
    return MemoryVault()


@pytest.fixture
def news_document():
    """A stored News document with two sections."""
    return (
        "# News Bookmarks\n"
        "\n"
        "## Technology\n"
        "\n"
        + TABLE_HEADER +
        "| Tech News | [🔗](https://tech.example.com) | #example #news | 2021-01-01 |  |  |  |\n"
        "\n"
        "## Sports\n"
        "\n"
        + TABLE_HEADER +
        "| Sports Daily | [🔗](https://sports.example.org) | #example | 2020-05-01 | Scores | 2024-01-01 | ✅ |\n"
    )


@pytest.fixture
def sample_records():
    """A few records as produced by the link extractor."""
    return [
        BookmarkRecord(url="https://b.example.com", title="Beta", tags=["#example"], add_date="2021-03-01"),
        BookmarkRecord(url="https://a.example.com", title="alpha", tags=["#example", "#guide"]),
    ]
