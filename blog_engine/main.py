"""
SEO Blog Engine - Command Line Interface.
Key Features: Word-budgeted section generation, RankMath-style scoring,
single-block regeneration, image production and WordPress draft publishing.
"""

import asyncio
import logging
import sys
from typing import Dict

from .config import (
    DEFAULT_BODY_SECTIONS,
    DEFAULT_TOTAL_WORDS,
    DRAFT_DB_PATH,
    GEMINI_API_KEY,
    IMAGE_GENERATION_ENABLED,
    OPENAI_API_KEY,
    OPENROUTER_API_KEY,
    WP_APP_PASSWORD,
    WP_URL,
    WP_USER,
    build_branding,
    build_company_context,
)
from .clients.gemini import GeminiClient
from .clients.wordpress import WordPressClient
from .draft_store import DraftStore
from .errors import ConfigurationError
from .image_generator import ImageGenerator
from .pipeline import BlogPipeline
from .schemas import Draft
from .scorer import seo_grade

# Set up logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


# --- INITIALIZATION ---
def initialize_system() -> Dict:
    """Initialize all clients and the pipeline."""
    if not any([GEMINI_API_KEY, OPENROUTER_API_KEY]):
        logger.warning("No text-generation credentials set; generation commands will fail.")
    if not all([WP_URL, WP_USER, WP_APP_PASSWORD]):
        logger.warning("WordPress settings incomplete; publishing commands will fail.")

    # 1. Clients
    gemini_client = GeminiClient(GEMINI_API_KEY, openrouter_api_key=OPENROUTER_API_KEY)
    wp_client = WordPressClient(WP_URL, WP_USER, WP_APP_PASSWORD)
    store = DraftStore(DRAFT_DB_PATH)

    # 2. Images (optional)
    image_gen = None
    if IMAGE_GENERATION_ENABLED:
        image_gen = ImageGenerator(gemini_client, wp_client, openai_api_key=OPENAI_API_KEY)
        logger.info("🖼️ Image generation enabled")
    else:
        logger.info("🖼️ Image generation disabled")

    company = build_company_context()
    pipeline = BlogPipeline(
        gemini_client, store,
        wp_client=wp_client,
        image_generator=image_gen,
        branding=build_branding(company.name),
    )

    return {
        "gemini": gemini_client,
        "wp": wp_client,
        "store": store,
        "image": image_gen,
        "company": company,
        "pipeline": pipeline,
    }


# --- REPORTING ---
def print_report(draft: Draft):
    result = draft.validation
    print(f"\nDraft: {draft.id} ({draft.status})")
    print(f"Keyword: {draft.keyword}")
    print(f"H1: {draft.meta.h1}")
    print(f"Meta title: {draft.meta.meta_title}")
    print(f"Meta description ({len(draft.meta.meta_description)} chars): {draft.meta.meta_description}")
    print(f"Slug: {draft.meta.slug}")
    print(f"SEO score: {result.score}/100 ({seo_grade(result.score)})")
    print(f"Words: {result.word_count}, keyword density: {result.keyword_density:.2f}%")
    for rule, passed in result.checks.items():
        print(f"  {'✅' if passed else '❌'} {rule}")
    for recommendation in result.recommendations:
        print(f"  → {recommendation}")
    print("Blocks:")
    for block in draft.blocks:
        label = getattr(block, "text", None) or getattr(block, "prompt", "")
        print(f"  [{block.id}] {block.type}: {label[:70]}")


# --- PROCESSES ---
async def run_generation(components: Dict, keyword: str, total_words: int = DEFAULT_TOTAL_WORDS,
                         sections: int = DEFAULT_BODY_SECTIONS):
    pipeline = components["pipeline"]
    draft = await pipeline.generate_draft(
        keyword, components["company"],
        total_word_count=total_words, num_body_sections=sections
    )
    print_report(draft)


async def run_show(components: Dict, draft_id: str):
    print_report(await components["pipeline"].load_draft(draft_id))


async def run_regenerate(components: Dict, draft_id: str, block_id: str, custom_prompt: str = None):
    draft = await components["pipeline"].regenerate_block(draft_id, block_id, custom_prompt=custom_prompt)
    print_report(draft)


async def run_images(components: Dict, draft_id: str):
    draft = await components["pipeline"].attach_images(draft_id)
    for block_id, asset in draft.uploaded_images.items():
        marker = "placeholder" if asset.is_placeholder else f"media {asset.media_id}"
        print(f"  [{block_id}] {asset.url} ({marker})")


async def run_publish(components: Dict, draft_id: str):
    result = await components["pipeline"].publish(draft_id)
    if result.success:
        logger.info(f"🚀 Published Post ID: {result.post_id}")
        print(f"Edit: {result.edit_url}")
        if result.preview_url:
            print(f"Preview: {result.preview_url}")
    else:
        logger.error(f"Publishing failed ({result.reason}): {result.error}")


async def run_check_wp(components: Dict):
    status = await components["wp"].check_connection()
    if status["success"]:
        logger.info(f"✅ {status['message']}")
    else:
        logger.error(f"❌ {status['message']}")


def show_help():
    """Display usage information."""
    help_text = f"""
SEO Blog Engine - Usage Guide

Commands:
  python main.py generate "keyword" [WORDS] [SECTIONS]
                                        Generate and score a draft (default: {DEFAULT_TOTAL_WORDS} words, {DEFAULT_BODY_SECTIONS} sections)
  python main.py show DRAFT_ID          Show a stored draft and its SEO report
  python main.py regenerate DRAFT_ID BLOCK_ID ["instruction"]
                                        Regenerate one content block
  python main.py images DRAFT_ID        Generate and upload images for a draft
  python main.py publish DRAFT_ID       Create a WordPress draft post
  python main.py check-wp               Verify WordPress credentials
  python main.py help                   Show this help message

Environment Variables (Required):
  GEMINI_API_KEY or OPENROUTER_API_KEY  Text generation
  WP_URL, WP_USER, WP_APP_PASSWORD      Publishing

Environment Variables (Optional):
  OPENAI_API_KEY            DALL-E 3 image fallback
  COMPANY_NAME, COMPANY_SERVICES, COMPANY_OVERVIEW, COMPANY_ABOUT,
  COMPANY_TONE, COMPANY_BRAND_VOICE, COMPANY_AUDIENCE
  DRAFT_DB_PATH             Draft store location (default: drafts.db)
  IMAGE_GENERATION_ENABLED  Enable/disable image generation (default: true)

Examples:
  python main.py generate "solar panel installation" 2500 4
  python main.py regenerate 3f2a... section-2 "Add a cost comparison table"
  python main.py publish 3f2a...
"""
    print(help_text)


def main(argv=None):
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0].lower() in ["help", "-h", "--help"]:
        show_help()
        return

    command = argv[0].lower()
    system = initialize_system()

    try:
        if command == "generate" and len(argv) > 1:
            total = int(argv[2]) if len(argv) > 2 else DEFAULT_TOTAL_WORDS
            sections = int(argv[3]) if len(argv) > 3 else DEFAULT_BODY_SECTIONS
            asyncio.run(run_generation(system, argv[1], total, sections))
        elif command == "show" and len(argv) > 1:
            asyncio.run(run_show(system, argv[1]))
        elif command == "regenerate" and len(argv) > 2:
            asyncio.run(run_regenerate(system, argv[1], argv[2], argv[3] if len(argv) > 3 else None))
        elif command == "images" and len(argv) > 1:
            asyncio.run(run_images(system, argv[1]))
        elif command == "publish" and len(argv) > 1:
            asyncio.run(run_publish(system, argv[1]))
        elif command == "check-wp":
            asyncio.run(run_check_wp(system))
        else:
            show_help()
    except ConfigurationError as e:
        logger.error(f"❌ Configuration error: {e}")
    except KeyError as e:
        logger.error(f"❌ {e.args[0] if e.args else e}")


if __name__ == "__main__":
    main()
