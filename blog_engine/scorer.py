"""
SEO Compliance Scorer.

Scores assembled content blocks and meta fields against a fixed RankMath-style
rubric. Pure: no I/O, no external calls, no hidden state.
"""

from dataclasses import dataclass
from typing import Dict, List

from .schemas import ContentBlock, MetaData, Paragraph, SEOValidationResult
from .utils import (
    contains_keyword,
    count_keyword_occurrences,
    generate_slug,
    tokenize_words,
)

MAX_SCORE = 100
MIN_CONTENT_WORDS = 1102
MAX_TITLE_LENGTH = 60
META_DESCRIPTION_RANGE = (140, 160)
KEYWORD_DENSITY_RANGE = (0.5, 2.5)
INTRODUCTION_WORDS = 100


@dataclass(frozen=True)
class RubricRule:
    name: str
    weight: int
    description: str


RUBRIC = (
    RubricRule("keyword_in_title", 15, "Focus keyword appears in the H1"),
    RubricRule("keyword_in_meta_description", 10, "Focus keyword appears in the meta description"),
    RubricRule("keyword_in_slug", 10, "URL slug contains the hyphenated keyword"),
    RubricRule("keyword_in_introduction", 15, "Focus keyword appears in the first 100 words"),
    RubricRule("keyword_in_content", 10, "Focus keyword appears in the content"),
    RubricRule("content_length", 10, f"Content has at least {MIN_CONTENT_WORDS} words"),
    RubricRule("title_length", 10, f"H1 is at most {MAX_TITLE_LENGTH} characters"),
    # No readability metric is computed; the points are always granted.
    RubricRule("content_readability", 10, "Content readability"),
    RubricRule("meta_description_length", 5, "Meta description is 140-160 characters"),
    RubricRule("keyword_density", 5, "Keyword density is 0.5-2.5%"),
)


def body_text(blocks: List[ContentBlock]) -> str:
    """Paragraph text joined in document order."""
    return " ".join(block.text for block in blocks if isinstance(block, Paragraph))


def _recommendation(rule: str, *, word_count: int, title_length: int,
                    description_length: int, density: float) -> str:
    messages = {
        "keyword_in_title": "Include focus keyword in H1 title",
        "keyword_in_meta_description": "Include focus keyword in meta description",
        "keyword_in_slug": "Include focus keyword in URL slug",
        "keyword_in_introduction": "Include focus keyword in the first 100 words of content",
        "keyword_in_content": "Include focus keyword in content",
        "content_length": f"Increase content length to at least {MIN_CONTENT_WORDS} words (current: {word_count})",
        "title_length": f"Keep title under {MAX_TITLE_LENGTH} characters (current: {title_length})",
        "content_readability": "Improve content readability",
        "meta_description_length": f"Meta description should be 140-160 characters (current: {description_length})",
        "keyword_density": f"Adjust keyword density to 0.5-2.5% (current: {density:.2f}%)",
    }
    return messages[rule]


def score(blocks: List[ContentBlock], meta: MetaData, keyword: str) -> SEOValidationResult:
    """
    Score content against the rubric.

    The score is the sum of weights of passed rules, capped at 100. Every
    failed rule contributes one recommendation, in rubric order.
    """
    text = body_text(blocks)
    words = tokenize_words(text)
    word_count = len(words)
    keyword_count = count_keyword_occurrences(text, keyword)
    density = (keyword_count / word_count * 100) if word_count else 0.0
    keyword_slug = generate_slug(keyword)
    introduction = " ".join(words[:INTRODUCTION_WORDS])

    checks: Dict[str, bool] = {
        "keyword_in_title": contains_keyword(meta.h1, keyword),
        "keyword_in_meta_description": contains_keyword(meta.meta_description, keyword),
        "keyword_in_slug": bool(keyword_slug) and keyword_slug in (meta.slug or "").lower(),
        "keyword_in_introduction": contains_keyword(introduction, keyword),
        "keyword_in_content": keyword_count > 0,
        "content_length": word_count >= MIN_CONTENT_WORDS,
        "title_length": len(meta.h1) <= MAX_TITLE_LENGTH,
        "content_readability": True,
        "meta_description_length": META_DESCRIPTION_RANGE[0] <= len(meta.meta_description) <= META_DESCRIPTION_RANGE[1],
        "keyword_density": KEYWORD_DENSITY_RANGE[0] <= density <= KEYWORD_DENSITY_RANGE[1],
    }

    total = 0
    recommendations = []
    for rule in RUBRIC:
        if checks[rule.name]:
            total += rule.weight
        else:
            recommendations.append(_recommendation(
                rule.name,
                word_count=word_count,
                title_length=len(meta.h1),
                description_length=len(meta.meta_description),
                density=density,
            ))

    return SEOValidationResult(
        score=min(total, MAX_SCORE),
        checks=checks,
        recommendations=recommendations,
        word_count=word_count,
        keyword_density=round(density, 2),
        keyword_count=keyword_count,
    )


def seo_grade(value: int) -> str:
    """Letter grade for a score."""
    if value >= 90:
        return "A+"
    elif value >= 80:
        return "A"
    elif value >= 70:
        return "B"
    elif value >= 60:
        return "C"
    elif value >= 50:
        return "D"
    return "F"
