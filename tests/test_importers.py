"""
Tests for bfav/importers.py

Covers link extraction from browser bookmark exports:
- http(s) filtering
- title and date handling
- categorization and tagging during extraction
- empty input detection
"""
import pytest

from bfav.exceptions import EmptyInputError
from bfav.importers import epoch_to_date, extract_links, read_export


class TestEpochToDate:
    """Test conversion of export timestamps."""

    def test_epoch_seconds(self):
        """Epoch seconds should become an ISO date."""
        assert epoch_to_date("1609459200") == "2021-01-01"

    def test_surrounding_whitespace(self):
        """Whitespace around the number is ignored."""
        assert epoch_to_date(" 1577836800 ") == "2020-01-01"

    def test_missing_value(self):
        """Missing values give an empty string."""
        assert epoch_to_date(None) == ""
        assert epoch_to_date("") == ""

    def test_unparseable_value(self):
        """Garbage gives an empty string instead of an error."""
        assert epoch_to_date("not-a-date") == ""

    def test_out_of_range_value(self):
        """Absurdly large timestamps are treated as missing."""
        assert epoch_to_date("9" * 30) == ""


class TestExtractLinks:
    """Test extract_links on bookmark markup."""

    def test_includes_http_and_https(self):
        """Both http and https anchors are extracted."""
        html = '<a href="https://a.com">A</a><a href="http://b.com">B</a>'
        urls = [b.url for b in extract_links(html)]
        assert urls == ["https://a.com", "http://b.com"]

    def test_excludes_other_schemes(self):
        """ftp, javascript, mailto and relative links are skipped silently."""
        html = (
            '<a href="ftp://x">FTP</a>'
            '<a href="javascript:void(0)">JS</a>'
            '<a href="mailto:me@example.com">Mail</a>'
            '<a href="/relative">Relative</a>'
            '<a>No href</a>'
            '<a href="https://a.com">A</a>'
        )
        bookmarks = extract_links(html)
        assert [b.url for b in bookmarks] == ["https://a.com"]

    def test_no_qualifying_links_is_not_an_error(self):
        """Anchors without a valid href give an empty list."""
        assert extract_links('<a href="ftp://x">FTP</a>') == []

    def test_no_anchors_raises(self):
        """Markup without any anchor is reported as empty input."""
        with pytest.raises(EmptyInputError):
            extract_links("<html><body><p>Nothing here</p></body></html>")

    def test_empty_string_raises(self):
        """An empty file is empty input."""
        with pytest.raises(EmptyInputError):
            extract_links("")

    def test_empty_title_becomes_untitled(self):
        """Anchors without text are titled 'Untitled'."""
        bookmarks = extract_links('<a href="https://a.com">   </a>')
        assert bookmarks[0].title == "Untitled"

    def test_title_is_trimmed(self):
        """Title text is stripped."""
        bookmarks = extract_links('<a href="https://a.com">\n  Hello  \n</a>')
        assert bookmarks[0].title == "Hello"

    def test_dates_are_converted(self):
        """add_date and last_modified become ISO dates."""
        html = '<a href="https://a.com" add_date="1577836800" last_modified="1609459200">A</a>'
        bookmark = extract_links(html)[0]
        assert bookmark.add_date == "2020-01-01"
        assert bookmark.last_modified == "2021-01-01"

    def test_missing_dates_are_empty(self):
        """Anchors without date attributes get empty dates."""
        bookmark = extract_links('<a href="https://a.com">A</a>')[0]
        assert bookmark.add_date == ""
        assert bookmark.last_modified == ""

    def test_description_attribute(self):
        """The description attribute is carried over."""
        bookmark = extract_links('<a href="https://a.com" description="Nice site">A</a>')[0]
        assert bookmark.description == "Nice site"

    def test_records_are_categorized_and_tagged(self):
        """Extraction assigns category, subcategory and tags."""
        bookmark = extract_links('<a href="https://example.com/news/tech">Tech News Today</a>')[0]
        assert bookmark.category == "News"
        assert bookmark.subcategory == "Technology"
        assert bookmark.tags == ["#example", "#news"]

    def test_netscape_export(self, sample_export):
        """A browser export yields one record per http(s) bookmark, in order."""
        bookmarks = extract_links(sample_export)

        assert [b.url for b in bookmarks] == [
            "https://example.com/news/tech",
            "https://docs.python.org/3/",
            "https://en.wikipedia.org/wiki/Category:Machine_learning",
            "https://example.com/news/tech",
        ]
        assert bookmarks[2].category == "Reference"
        assert bookmarks[2].subcategory == "Machine learning"
        assert bookmarks[1].category == "General"
        assert bookmarks[1].subcategory == ""


class TestReadExport:
    """Test reading an export from disk."""

    def test_reads_utf8(self, tmp_path):
        """The file content is returned as text."""
        path = tmp_path / "bookmarks.html"
        path.write_text('<a href="https://a.com">Café</a>', encoding="utf-8")
        assert "Café" in read_export(path)

    def test_replaces_invalid_bytes(self, tmp_path):
        """Undecodable bytes do not abort the import."""
        path = tmp_path / "bookmarks.html"
        path.write_bytes(b'<a href="https://a.com">\xff</a>')
        bookmarks = extract_links(read_export(path))
        assert len(bookmarks) == 1
