"""
Keyword based categorization of bookmarks.

Categories are decided by an ordered rule table. The first rule whose
keywords appear in the title or the URL wins, so the order of
``CATEGORY_RULES`` is part of the behavior.
"""
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from bfav.models import CategoryResult, DEFAULT_CATEGORY


WIKI_CATEGORY_PATTERN = re.compile(r"wikipedia\.org/wiki/category:(.+)", re.IGNORECASE)


def extract_wiki_category(url: str) -> str:
    """
    Derive a subcategory from a Wikipedia category URL.

    Examples:
        >>> extract_wiki_category("https://en.wikipedia.org/wiki/Category:Machine_learning")
        'Machine learning'
        >>> extract_wiki_category("https://en.wikipedia.org/wiki/Python")
        ''
    """
    match = WIKI_CATEGORY_PATTERN.search(url)
    if not match:
        return ""
    return match.group(1).replace("_", " ").split("/")[0]


@dataclass
class CategoryRule:
    """One row of the categorization table."""
    category: str
    keywords: List[str]
    subcategories: Dict[str, List[str]] = field(default_factory=dict)
    extract_subcategory: Optional[Callable[[str], str]] = None

    def matches(self, *texts: str) -> bool:
        return any(_contains_any(text, self.keywords) for text in texts)

    def subcategory_for(self, lower_title: str, lower_url: str, url: str) -> str:
        for name, keywords in self.subcategories.items():
            if _contains_any(lower_title, keywords) or _contains_any(lower_url, keywords):
                return name
        if self.extract_subcategory is not None:
            return self.extract_subcategory(url)
        return ""


def _contains_any(text: str, keywords: List[str]) -> bool:
    return any(keyword in text for keyword in keywords)


CATEGORY_RULES: List[CategoryRule] = [
    CategoryRule(
        category="News",
        keywords=["news"],
        subcategories={
            "Technology": ["tech"],
            "Business": ["business"],
            "Sports": ["sports", "sport"],
            "Politics": ["politics", "government"],
        },
    ),
    CategoryRule(
        category="Reference",
        keywords=["wiki", "wikipedia"],
        extract_subcategory=extract_wiki_category,
    ),
    CategoryRule(
        category="Blogs",
        keywords=["blog"],
        subcategories={
            "Technology": ["tech", "programming"],
            "Business": ["business", "economics"],
            "Sports": ["sports", "sport"],
            "Politics": ["politics", "government"],
        },
    ),
    CategoryRule(
        category="Social Media",
        keywords=["social", "media"],
        subcategories={
            "Social": ["social", "community"],
            "Media": ["media", "news"],
        },
    ),
    CategoryRule(
        category="Travel",
        keywords=["travel", "tourism"],
        subcategories={
            "Food": ["food", "recipes"],
            "Travel": ["travel", "tourism"],
        },
    ),
    CategoryRule(
        category="Entertainment",
        keywords=["movies", "music", "games"],
        subcategories={
            "Movies": ["movies", "films", "cinema"],
            "Music": ["music", "songs"],
            "Gaming": ["games", "gaming"],
        },
    ),
    CategoryRule(
        category="Health & Wellness",
        keywords=["health", "wellness", "fitness", "medicine"],
        subcategories={
            "Fitness": ["fitness", "exercise", "workout"],
            "Medicine": ["medicine", "medical"],
            "Nutrition": ["nutrition", "diet"],
        },
    ),
    CategoryRule(
        category="Education",
        keywords=["learn", "education", "tutorials"],
        subcategories={
            "Tutorials": ["tutorial", "how-to"],
            "Courses": ["course", "class"],
        },
    ),
]


def categorize(title: str, url: str, rules: Optional[List[CategoryRule]] = None) -> CategoryResult:
    """
    Assign a category and subcategory to a bookmark.

    Args:
        title: Bookmark title
        url: Bookmark URL
        rules: Rule table to use (defaults to CATEGORY_RULES)

    Returns:
        CategoryResult; ("General", "") when no rule matches. An empty
        subcategory means the bookmark belongs in the "General" section.

    Example:
        >>> categorize("Tech News Today", "https://example.com/news/tech")
        CategoryResult(category='News', subcategory='Technology')
    """
    lower_title = (title or "").lower()
    lower_url = (url or "").lower()

    for rule in rules if rules is not None else CATEGORY_RULES:
        if rule.matches(lower_title, lower_url):
            return CategoryResult(
                category=rule.category,
                subcategory=rule.subcategory_for(lower_title, lower_url, url or ""),
            )

    return CategoryResult(category=DEFAULT_CATEGORY, subcategory="")
