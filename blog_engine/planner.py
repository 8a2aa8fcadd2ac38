"""
Word-Budget Planner.
Splits a target word count across introduction, body sections and conclusion
using fixed shares from the configuration.
"""

from typing import List

from .config import INTRO_SHARE, CONCLUSION_SHARE
from .schemas import SectionPlan

BODY_HEADING_TEMPLATES = [
    "What is {kw}?",
    "Benefits of {kw}",
    "How {kw} Works",
    "{kw} Cost and ROI",
    "Best Practices for {kw}",
    "Common {kw} Mistakes to Avoid",
]
EXTRA_HEADING_TEMPLATE = "{kw}: Key Consideration {n}"

INTRO_REQUIREMENT = "Must include focus keyword in first 100 words"
CONCLUSION_REQUIREMENT = "Include keyword and call-to-action"
BODY_REQUIREMENTS = [
    "Include keyword 2-3 times naturally",
    "Include keyword variations",
    "Include keyword in subheadings",
    "Include keyword with cost-related terms",
]


def _display_keyword(keyword: str) -> str:
    """Title-case each word, leaving words with existing capitals (acronyms) alone."""
    words = keyword.strip().split()
    return " ".join(w if any(c.isupper() for c in w) else w.capitalize() for w in words)


def body_heading(keyword: str, index: int) -> str:
    """Heading for the body section at ``index`` (0-based)."""
    kw = _display_keyword(keyword) if keyword.strip() else "This Topic"
    if index < len(BODY_HEADING_TEMPLATES):
        return BODY_HEADING_TEMPLATES[index].format(kw=kw)
    return EXTRA_HEADING_TEMPLATE.format(kw=kw, n=index + 1)


def plan(total_word_count: int, num_body_sections: int, keyword: str = "") -> List[SectionPlan]:
    """
    Build the ordered section plan for a post.

    Introduction and conclusion take fixed shares of the total; the remainder
    is split evenly across body sections, with rounding leftovers going to the
    first sections so the plan sums to ``total_word_count`` exactly.

    The exact sum takes precedence over a round per-section figure: 2500 words
    over 4 body sections plans 200 / 513 / 513 / 512 / 512 / 250, not ~450
    per body section.
    """
    if total_word_count <= 0:
        raise ValueError(f"total_word_count must be positive, got {total_word_count}")
    if num_body_sections < 1:
        raise ValueError(f"num_body_sections must be at least 1, got {num_body_sections}")

    intro_words = round(total_word_count * INTRO_SHARE)
    conclusion_words = round(total_word_count * CONCLUSION_SHARE)
    body_total = max(total_word_count - intro_words - conclusion_words, 0)
    base, leftover = divmod(body_total, num_body_sections)

    sections = [SectionPlan(
        role="intro",
        heading_text="",
        target_word_count=intro_words,
        keyword_requirement=INTRO_REQUIREMENT,
    )]

    for index in range(num_body_sections):
        sections.append(SectionPlan(
            role="body",
            heading_text=body_heading(keyword, index),
            target_word_count=base + (1 if index < leftover else 0),
            keyword_requirement=BODY_REQUIREMENTS[index % len(BODY_REQUIREMENTS)],
        ))

    sections.append(SectionPlan(
        role="conclusion",
        heading_text="",
        target_word_count=conclusion_words,
        keyword_requirement=CONCLUSION_REQUIREMENT,
    ))
    return sections
