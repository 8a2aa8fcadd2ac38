"""
Publication Adapter.
Renders content blocks to styled HTML and maps meta data onto the field
namespaces of the supported WordPress SEO plugins.
"""

import html
import logging
import re
from typing import Callable, Dict, List, Optional

from .config import BRAND_STYLES
from .schemas import (
    Branding,
    ContentBlock,
    Heading,
    ImageAsset,
    ImagePlaceholder,
    MetaData,
    Paragraph,
    PublishPayload,
    RelatedLink,
    SEOValidationResult,
)
from .utils import generate_excerpt
from .utils.linking import rank_related_links

logger = logging.getLogger(__name__)

RELATED_LINKS_MARKER = "<!-- related-links -->"
RELATED_CONTENT_MARKER = "<!-- related-content -->"


def _style(*parts: str) -> str:
    return " ".join(p.strip() for p in parts if p)


def _markdown_link(match: re.Match) -> str:
    url = match.group(2).replace('"', '&quot;')
    return f'<a href="{url}" style="color: {BRAND_STYLES["accent_color"]};">{match.group(1)}</a>'


def _inline_markdown(text: str) -> str:
    """Escape text, then convert **bold**, *italic* and [label](url)."""
    escaped = html.escape(text, quote=False)
    escaped = re.sub(r'\[([^\]]+)\]\((https?://[^)\s]+)\)', _markdown_link, escaped)
    escaped = re.sub(r'\*\*(.+?)\*\*', r'<strong>\1</strong>', escaped)
    escaped = re.sub(r'(?<!\*)\*(?!\s)(.+?)(?<!\s)\*(?!\*)', r'<em>\1</em>', escaped)
    return escaped


def render_heading(block: Heading, uploaded_images: Dict[str, ImageAsset]) -> str:
    tag = f"h{block.level}"
    color = BRAND_STYLES["h2_color"] if block.level == 2 else BRAND_STYLES["heading_color"]
    style = _style(f"font-family: {BRAND_STYLES['primary_font']};", f"color: {color};", BRAND_STYLES[tag])
    return f'<{tag} style="{style}">{html.escape(block.text, quote=False)}</{tag}>'


def render_paragraph(block: Paragraph, uploaded_images: Dict[str, ImageAsset]) -> str:
    style = _style(f"font-family: {BRAND_STYLES['primary_font']};",
                   f"color: {BRAND_STYLES['text_color']};", BRAND_STYLES["p"])
    chunks = [c.strip() for c in re.split(r'\n\s*\n', block.text) if c.strip()]
    return "\n".join(
        f'<p style="{style}">{_inline_markdown(" ".join(chunk.split()))}</p>' for chunk in chunks
    )


def render_image(block: ImagePlaceholder, uploaded_images: Dict[str, ImageAsset]) -> str:
    """Inline figure for an uploaded image; nothing when absent or when it is the feature image."""
    asset = uploaded_images.get(block.id)
    if block.role == "feature" or asset is None or not asset.url:
        return ""
    alt = html.escape(block.alt_text)
    return (
        f'<figure style="{BRAND_STYLES["figure"]}">'
        f'<img src="{html.escape(asset.url)}" alt="{alt}" style="{BRAND_STYLES["img"]}" loading="lazy" />'
        f'</figure>'
    )


RENDERERS: Dict[str, Callable[..., str]] = {
    "heading": render_heading,
    "paragraph": render_paragraph,
    "image": render_image,
}


def render_blocks(blocks: List[ContentBlock], uploaded_images: Optional[Dict[str, ImageAsset]] = None) -> str:
    uploaded_images = uploaded_images or {}
    fragments = [RENDERERS[block.type](block, uploaded_images) for block in blocks]
    return "\n".join(f for f in fragments if f)


def _link_box(title: str, links: List[RelatedLink]) -> str:
    box_style = _style(BRAND_STYLES["box"], f"background: {BRAND_STYLES['background_color']};",
                       f"font-family: {BRAND_STYLES['primary_font']};")
    card_style = _style(BRAND_STYLES["card"], f"border-color: {BRAND_STYLES['accent_color']};")
    cards = []
    for link in links:
        description = (
            f'<span style="display: block; color: {BRAND_STYLES["text_color"]}; font-size: 14px;">'
            f'{html.escape(link.description, quote=False)}</span>'
            if link.description else ""
        )
        cards.append(
            f'<a href="{html.escape(link.url)}" style="{card_style}">'
            f'<strong style="color: {BRAND_STYLES["heading_color"]};">{html.escape(link.title, quote=False)}</strong>'
            f'{description}</a>'
        )
    return (
        f'<div style="{box_style}">'
        f'<h3 style="color: {BRAND_STYLES["heading_color"]}; {BRAND_STYLES["h3"]}">{html.escape(title, quote=False)}</h3>'
        + "".join(cards)
        + '</div>'
    )


def related_links_section(keyword: str, branding: Branding) -> str:
    links = rank_related_links(keyword, branding.related_links)
    if not links:
        return ""
    return RELATED_LINKS_MARKER + _link_box(f"Learn More About {keyword.strip().title()}", links)


def related_content_section(keyword: str, branding: Branding) -> str:
    if not branding.related_articles:
        return ""
    return RELATED_CONTENT_MARKER + _link_box("⚡ You May Also Like", branding.related_articles)


def append_related_sections(body: str, keyword: str, branding: Branding) -> str:
    """Append the related-links and related-content sections once each."""
    if RELATED_LINKS_MARKER not in body:
        section = related_links_section(keyword, branding)
        if section:
            body = f"{body}\n{section}"
    if RELATED_CONTENT_MARKER not in body:
        section = related_content_section(keyword, branding)
        if section:
            body = f"{body}\n{section}"
    return body


def build_meta_fields(meta: MetaData, keyword: str,
                      validation: Optional[SEOValidationResult] = None) -> Dict[str, str]:
    """Meta fields for Yoast, RankMath, All in One SEO and SEOPress."""
    fields = {
        # Yoast SEO
        "_yoast_wpseo_title": meta.meta_title,
        "_yoast_wpseo_metadesc": meta.meta_description,
        "_yoast_wpseo_focuskw": keyword,
        "_yoast_wpseo_meta-robots-noindex": "0",
        "_yoast_wpseo_meta-robots-nofollow": "0",
        # RankMath
        "rank_math_title": meta.meta_title,
        "rank_math_description": meta.meta_description,
        "rank_math_focus_keyword": keyword,
        "rank_math_robots": "index,follow",
        "rank_math_facebook_title": meta.meta_title,
        "rank_math_facebook_description": meta.meta_description,
        "rank_math_twitter_title": meta.meta_title,
        "rank_math_twitter_description": meta.meta_description,
        "rank_math_twitter_card_type": "summary_large_image",
        # All in One SEO
        "_aioseop_title": meta.meta_title,
        "_aioseop_description": meta.meta_description,
        "_aioseop_keywords": keyword,
        # SEOPress
        "_seopress_titles_title": meta.meta_title,
        "_seopress_titles_desc": meta.meta_description,
        "_seopress_analysis_target_kw": keyword,
    }
    if validation is not None:
        fields["rank_math_seo_score"] = str(validation.score)
    return fields


def to_publish_payload(blocks: List[ContentBlock], meta: MetaData, branding: Branding, keyword: str,
                       uploaded_images: Optional[Dict[str, ImageAsset]] = None,
                       validation: Optional[SEOValidationResult] = None) -> PublishPayload:
    """Map blocks, meta and branding onto the publishing service's document shape."""
    uploaded_images = uploaded_images or {}
    html_body = append_related_sections(render_blocks(blocks, uploaded_images), keyword, branding)

    featured = None
    for block in blocks:
        if isinstance(block, ImagePlaceholder) and block.role == "feature":
            featured = uploaded_images.get(block.id)
            break

    excerpt = meta.meta_description or generate_excerpt(html_body, 160)
    logger.info(f"📦 Payload ready: '{meta.h1}' ({len(html_body)} chars, featured image: {'yes' if featured else 'no'})")

    return PublishPayload(
        title=meta.h1,
        html_body=html_body,
        excerpt=excerpt,
        slug=meta.slug,
        meta_fields=build_meta_fields(meta, keyword, validation),
        featured_image_ref=featured,
    )
