"""
Text utilities for the SEO Blog Engine.
"""

import re
from typing import List

# ---------------------------------------------------------------------------
# Field alias mapping: common AI-generated key names → canonical snake_case
# field names expected by the meta response schema.
#
# After converting raw AI keys to snake_case we apply these aliases so that,
# e.g., a model that returns "optimizedMetaTitle" (→ "optimized_meta_title")
# is mapped to the canonical "meta_title" field name.
# ---------------------------------------------------------------------------
FIELD_ALIASES: dict = {
    # h1
    "optimized_h1": "h1",
    "h1_title": "h1",
    "heading": "h1",
    "headline": "h1",
    # meta_title
    "optimized_meta_title": "meta_title",
    "title": "meta_title",
    "seo_title": "meta_title",
    "page_title": "meta_title",
    # meta_description
    "optimized_meta_description": "meta_description",
    "description": "meta_description",
    "seo_description": "meta_description",
    "meta_desc": "meta_description",
    # slug
    "optimized_slug": "slug",
    "url_slug": "slug",
    "post_slug": "slug",
    # focus_keyword
    "keyword": "focus_keyword",
    "primary_keyword": "focus_keyword",
    "target_keyword": "focus_keyword",
}


def normalize_dict_keys(data: dict) -> dict:
    """
    Normalize dictionary keys to snake_case for Pydantic validation,
    then apply :data:`FIELD_ALIASES` to map common AI-generated key names to
    their canonical field names.

    Examples:
        'optimizedH1'           → 'h1'
        'optimizedMetaTitle'    → 'meta_title'
        'META_DESCRIPTION'      → 'meta_description'
        'slug'                  → 'slug'

    Returns the input unchanged if it is not a dict.
    """
    if not isinstance(data, dict):
        return data

    normalized = {}
    for key, value in data.items():
        # "ABCDef" → "ABC_Def"
        s1 = re.sub(r'([A-Z]+)([A-Z][a-z])', r'\1_\2', str(key))
        # "camelCase" → "camel_Case"
        s2 = re.sub(r'([a-z0-9])([A-Z])', r'\1_\2', s1)
        snake_key = s2.lower()
        canonical_key = FIELD_ALIASES.get(snake_key, snake_key)
        normalized[canonical_key] = value

    return normalized


def generate_slug(text: str, max_length: int = 50) -> str:
    """Lowercase, hyphenated URL slug capped at ``max_length`` characters."""
    slug = (text or "").lower()
    slug = re.sub(r'[^a-z0-9\s-]', '', slug)
    slug = re.sub(r'\s+', '-', slug)
    slug = re.sub(r'-+', '-', slug)
    slug = slug.strip('-')
    return slug[:max_length].strip('-')


def tokenize_words(text: str) -> List[str]:
    """Whitespace-delimited tokens."""
    return (text or "").split()


def count_words(text: str) -> int:
    return len(tokenize_words(text))


def count_keyword_occurrences(text: str, keyword: str) -> int:
    """Case-insensitive literal phrase count (no stemming)."""
    keyword = (keyword or "").strip()
    if not keyword or not text:
        return 0
    return len(re.findall(re.escape(keyword), text, flags=re.IGNORECASE))


def contains_keyword(text: str, keyword: str) -> bool:
    keyword = (keyword or "").strip()
    if not keyword:
        return False
    return keyword.lower() in (text or "").lower()


def strip_code_fences(text: str) -> str:
    """Remove ```json ... ``` style fences that models wrap around output."""
    cleaned = (text or "").strip()
    cleaned = re.sub(r'^```[a-zA-Z]*\s*', '', cleaned)
    cleaned = re.sub(r'\s*```$', '', cleaned)
    return cleaned.strip()


def strip_html(html: str) -> str:
    text = re.sub(r'<[^>]+>', ' ', html or "")
    return re.sub(r'\s+', ' ', text).strip()


def generate_excerpt(html: str, max_length: int = 160) -> str:
    """Plain-text excerpt cut at the last word boundary before ``max_length``."""
    text = strip_html(html)
    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    last_space = truncated.rfind(' ')
    if last_space > 0:
        truncated = truncated[:last_space]
    return truncated.rstrip(' ,.;:') + '...'
