"""
Bookmark deduplication.

Bookmarks are identical when their URLs are identical: no trailing slash,
case or query string normalization is applied.
"""
from collections import defaultdict
from typing import Dict, List

from bfav.models import BookmarkRecord
from bfav.tag_utils import merge_tags


def group_by_url(bookmarks: List[BookmarkRecord]) -> Dict[str, List[BookmarkRecord]]:
    """Group bookmarks by URL, keeping first-encounter order."""
    groups = defaultdict(list)
    for bookmark in bookmarks:
        groups[bookmark.url].append(bookmark)
    return dict(groups)


def find_duplicates(bookmarks: List[BookmarkRecord]) -> Dict[str, List[BookmarkRecord]]:
    """
    Find bookmarks sharing a URL.

    Args:
        bookmarks: Bookmarks to inspect

    Returns:
        Dictionary mapping each duplicated URL to all of its bookmarks
    """
    return {url: group for url, group in group_by_url(bookmarks).items() if len(group) > 1}


def elect_newest(group: List[BookmarkRecord]) -> BookmarkRecord:
    """
    Pick the bookmark added most recently.

    Dates are YYYY-MM-DD strings, so they compare chronologically as text.
    An empty date is older than any date and ties go to the earlier record.
    """
    newest = group[0]
    for bookmark in group[1:]:
        if bookmark.add_date > newest.add_date:
            newest = bookmark
    return newest


def merge_group(group: List[BookmarkRecord]) -> BookmarkRecord:
    """Collapse a group of same-URL bookmarks into its canonical record."""
    newest = elect_newest(group)
    return newest.copy(tags=merge_tags(*(bookmark.tags for bookmark in group)))


def deduplicate_bookmarks(bookmarks: List[BookmarkRecord]) -> List[BookmarkRecord]:
    """
    Deduplicate bookmarks by URL.

    The newest bookmark of every group survives and receives the union of
    the group's tags. The input records are left unchanged.

    Example:
        >>> a = BookmarkRecord(url="https://x.com", add_date="2020-01-01", tags=["#a"])
        >>> b = BookmarkRecord(url="https://x.com", add_date="2021-01-01", tags=["#b"])
        >>> [(r.add_date, r.tags) for r in deduplicate_bookmarks([a, b])]
        [('2021-01-01', ['#a', '#b'])]
    """
    return [merge_group(group) for group in group_by_url(bookmarks).values()]


def get_duplicate_stats(bookmarks: List[BookmarkRecord]) -> Dict[str, int]:
    """
    Get statistics about duplicates in a bookmark collection.

    Returns:
        Dictionary with total, unique, duplicate URL and removable counts
    """
    groups = group_by_url(bookmarks)
    duplicated = [group for group in groups.values() if len(group) > 1]
    return {
        'total_bookmarks': len(bookmarks),
        'unique_urls': len(groups),
        'duplicate_urls': len(duplicated),
        'duplicates_to_remove': sum(len(group) - 1 for group in duplicated),
    }
