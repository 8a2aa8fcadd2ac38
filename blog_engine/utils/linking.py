"""
Related Link Ranking Module.
Orders static branding links by how closely they relate to the focus keyword.
"""

import re
import logging
from typing import List
from difflib import SequenceMatcher

from ..schemas import RelatedLink

logger = logging.getLogger(__name__)


def normalize_text(text: str) -> str:
    """Normalize text for comparison (lowercase, remove special chars, extra spaces)."""
    text = text.lower()
    text = re.sub(r'[^\w\s]', '', text)
    text = re.sub(r'\s+', ' ', text)
    return text.strip()


def calculate_similarity(text1: str, text2: str) -> float:
    """Calculate similarity ratio between two texts."""
    norm1 = normalize_text(text1)
    norm2 = normalize_text(text2)
    return SequenceMatcher(None, norm1, norm2).ratio()


def score_link_relevance(keyword: str, link: RelatedLink) -> float:
    """
    Relevance of a link to the keyword, between 0 and 1.

    Strategies, strongest first:
    1. Exact title match (case insensitive)
    2. Contains match (keyword in title/description or title in keyword)
    3. Word overlap between keyword and title + description
    4. Fuzzy similarity against the title
    """
    title = link.title or ""
    haystack = f"{title} {link.description or ''}"

    if keyword.lower() == title.lower():
        return 1.0

    if keyword.lower() in haystack.lower() or (title and title.lower() in keyword.lower()):
        return 0.9

    keyword_words = set(normalize_text(keyword).split())
    link_words = set(normalize_text(haystack).split())
    overlap = keyword_words & link_words
    if overlap:
        return 0.5 + 0.3 * len(overlap) / max(len(keyword_words), 1)

    return 0.5 * calculate_similarity(keyword, title)


def rank_related_links(keyword: str, links: List[RelatedLink], limit: int = 0) -> List[RelatedLink]:
    """
    Links ordered by relevance to the keyword.

    Ties keep their original order, so the result is a pure function of
    the keyword and the link list. ``limit`` of 0 keeps every link.
    """
    if not links:
        return []

    scored = [(score_link_relevance(keyword, link), index, link) for index, link in enumerate(links)]
    scored.sort(key=lambda item: (-item[0], item[1]))
    ranked = [link for _, _, link in scored]

    if scored and scored[0][0] >= 0.9:
        logger.debug(f"🔗 Strong related-link match for '{keyword}': '{ranked[0].title}'")

    return ranked[:limit] if limit else ranked
