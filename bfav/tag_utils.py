"""
Tag utilities for hashtag style bookmark labels.

Tags are stored with a leading '#' and written to a table cell separated by
single spaces, so a tag never contains whitespace.
"""
import logging
import re
from typing import Iterable, List
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

COMMON_KEYWORDS = [
    'tutorial', 'guide', 'review', 'documentation', 'api', 'tool',
    'news', 'update', 'tips', 'tricks', 'how-to', 'reference',
    'blog', 'opinion', 'article', 'resource', 'project', 'code',
]

_WHITESPACE = re.compile(r"\s+")


def normalize_tag(text: str) -> str:
    """
    Turn free text into a single hashtag.

    Returns an empty string when nothing is left after trimming.

    Examples:
        >>> normalize_tag(" machine learning ")
        '#machine-learning'
        >>> normalize_tag("#python")
        '#python'
    """
    text = _WHITESPACE.sub("-", text.strip())
    if not text or text == "#":
        return ""
    return text if text.startswith("#") else f"#{text}"


def merge_tags(*groups: Iterable[str]) -> List[str]:
    """
    Ordered union of several tag collections.

    The first occurrence of a tag decides its position; empty entries are
    dropped.
    """
    merged = []
    seen = set()
    for group in groups:
        for tag in group:
            if tag and tag not in seen:
                seen.add(tag)
                merged.append(tag)
    return merged


def parse_tag_cell(cell: str) -> List[str]:
    """Split a Tags cell into its tags."""
    return merge_tags(cell.split())


def format_tag_cell(tags: Iterable[str]) -> str:
    """Join tags for a Tags cell."""
    return " ".join(merge_tags(tags))


def domain_tag(url: str) -> str:
    """
    Tag derived from the second-to-last label of the URL's host.

    Returns an empty string for malformed URLs and single-label hosts.

    Examples:
        >>> domain_tag("https://sub.example.com/page")
        '#example'
        >>> domain_tag("http://localhost:8000")
        ''
    """
    try:
        host = urlparse(url).hostname
    except ValueError as e:
        logger.debug(f"Could not parse URL {url!r}: {e}")
        return ""
    if not host:
        return ""
    labels = host.split(".")
    if len(labels) < 2 or not labels[-2]:
        return ""
    return f"#{labels[-2].lower()}"


def extract_tags(title: str, url: str) -> List[str]:
    """
    Derive tags from a bookmark's domain and title keywords.

    Args:
        title: Bookmark title
        url: Bookmark URL

    Returns:
        Ordered list of unique tags, domain tag first

    Example:
        >>> extract_tags("How-to guide", "https://sub.example.com")
        ['#example', '#guide', '#how-to']
    """
    tags = []

    if url:
        tags.append(domain_tag(url))

    if title:
        lower_title = title.lower()
        tags.extend(f"#{keyword}" for keyword in COMMON_KEYWORDS if keyword in lower_title)

    return merge_tags(tags)
