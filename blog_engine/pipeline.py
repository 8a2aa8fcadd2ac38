"""
Blog Pipeline.
Runs keyword → plan → assemble → meta → score, persists the draft snapshot and
handles block regeneration, image production and publishing for stored drafts.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from .assembler import ContentAssembler, H1_ID
from .clients.gemini import GeminiClient
from .clients.wordpress import WordPressClient
from .config import DEFAULT_BODY_SECTIONS, DEFAULT_TOTAL_WORDS, build_branding
from .draft_store import DraftStore
from .errors import PublishError
from .image_generator import ImageGenerator
from .meta_optimizer import MetaOptimizer, default_meta_drafts
from .planner import plan
from .publisher import to_publish_payload
from .schemas import (
    Branding,
    CompanyContext,
    Draft,
    Heading,
    ImagePlaceholder,
    MetaData,
    PublishResult,
)
from .scorer import score, seo_grade
from .utils import generate_slug

logger = logging.getLogger(__name__)


class BlogPipeline:
    def __init__(self, gateway: GeminiClient, store: DraftStore,
                 wp_client: Optional[WordPressClient] = None,
                 image_generator: Optional[ImageGenerator] = None,
                 branding: Optional[Branding] = None):
        self.gateway = gateway
        self.store = store
        self.wp_client = wp_client
        self.image_generator = image_generator
        self.branding = branding
        self.assembler = ContentAssembler(gateway)
        self.meta_optimizer = MetaOptimizer(gateway)

    async def _save(self, draft: Draft) -> Draft:
        draft.updated_at = datetime.now(timezone.utc)
        await self.store.set(draft.id, draft.model_dump(mode="json"))
        return draft

    async def generate_draft(self, keyword: str, company: CompanyContext,
                             h1: Optional[str] = None, meta_title: Optional[str] = None,
                             meta_description: Optional[str] = None,
                             total_word_count: int = DEFAULT_TOTAL_WORDS,
                             num_body_sections: int = DEFAULT_BODY_SECTIONS) -> Draft:
        """Generate, score and persist a complete draft for a keyword."""
        keyword = keyword.strip()
        company = company.validated()
        logger.info(f"🚀 Generating draft for '{keyword}' ({total_word_count} words, {num_body_sections} sections)")

        drafts = default_meta_drafts(keyword, company.name)
        draft_h1 = h1 or drafts.h1
        draft_meta_title = meta_title or drafts.meta_title
        draft_meta_description = meta_description or drafts.meta_description

        section_plan = plan(total_word_count, num_body_sections, keyword)
        blocks = await self.assembler.assemble(keyword, section_plan, company, h1=draft_h1)
        meta = await self.meta_optimizer.optimize(
            keyword, draft_h1, draft_meta_title, draft_meta_description, company.name
        )

        blocks = [
            block.model_copy(update={"text": meta.h1}) if block.id == H1_ID else block
            for block in blocks
        ]
        validation = score(blocks, meta, keyword)

        draft = Draft(
            keyword=keyword,
            company=company,
            blocks=blocks,
            meta=meta,
            validation=validation,
        )
        await self._save(draft)
        logger.info(
            f"✅ Draft {draft.id} ready: score {validation.score}/100 ({seo_grade(validation.score)}), "
            f"{validation.word_count} words"
        )
        return draft

    async def load_draft(self, draft_id: str) -> Draft:
        """
        Raises:
            KeyError: The draft does not exist
        """
        data = await self.store.get(draft_id)
        if data is None:
            raise KeyError(f"Draft not found: {draft_id}")
        return Draft.model_validate(data)

    async def regenerate_block(self, draft_id: str, block_id: str, custom_prompt: Optional[str] = None,
                               new_text: Optional[str] = None) -> Draft:
        """Replace one block of a stored draft, rescore it and save it."""
        draft = await self.load_draft(draft_id)
        blocks = await self.assembler.regenerate_block(
            draft.blocks, block_id, draft.keyword, draft.company,
            custom_prompt=custom_prompt, new_text=new_text
        )
        meta = draft.meta
        for block in blocks:
            if isinstance(block, Heading) and block.id == H1_ID and block.text != meta.h1:
                meta = meta.model_copy(update={"h1": block.text})

        validation = score(blocks, meta, draft.keyword)
        await self.store.update(
            draft_id,
            blocks=[block.model_dump(mode="json") for block in blocks],
            meta=meta.model_dump(mode="json"),
            validation=validation.model_dump(mode="json"),
            updated_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info(f"✅ Block '{block_id}' regenerated, score now {validation.score}/100")
        return await self.load_draft(draft_id)

    async def update_meta(self, draft_id: str, **fields) -> Draft:
        """Overwrite meta fields of a stored draft and rescore it."""
        draft = await self.load_draft(draft_id)
        if "slug" in fields:
            fields["slug"] = generate_slug(fields["slug"]) or generate_slug(draft.keyword)
        meta = MetaData(**{**draft.meta.model_dump(), **fields})

        blocks = [
            block.model_copy(update={"text": meta.h1}) if block.id == H1_ID else block
            for block in draft.blocks
        ]
        validation = score(blocks, meta, draft.keyword)
        await self.store.update(
            draft_id,
            blocks=[block.model_dump(mode="json") for block in blocks],
            meta=meta.model_dump(mode="json"),
            validation=validation.model_dump(mode="json"),
            updated_at=datetime.now(timezone.utc).isoformat(),
        )
        return await self.load_draft(draft_id)

    async def attach_images(self, draft_id: str) -> Draft:
        """Produce an asset for each image placeholder and record it against the block id."""
        draft = await self.load_draft(draft_id)
        if not self.image_generator:
            logger.info("🖼️ Image generation disabled")
            return draft

        uploaded = dict(draft.uploaded_images)
        for block in draft.blocks:
            if not isinstance(block, ImagePlaceholder) or block.id in uploaded:
                continue
            logger.info(f"🎨 Producing {block.role} image for block '{block.id}'")
            asset = await self.image_generator.produce_image(block.prompt, block.alt_text, draft.meta.h1)
            uploaded[block.id] = asset

        await self.store.update(
            draft_id,
            uploaded_images={key: asset.model_dump(mode="json") for key, asset in uploaded.items()},
            updated_at=datetime.now(timezone.utc).isoformat(),
        )
        return await self.load_draft(draft_id)

    async def publish(self, draft_id: str) -> PublishResult:
        """
        Publish a stored draft to WordPress as a draft post.

        Publish failures are returned as ``PublishResult(success=False, ...)``.
        """
        draft = await self.load_draft(draft_id)
        if not self.wp_client:
            return PublishResult(success=False, error="No publishing client configured", reason="unknown")

        branding = self.branding or build_branding(draft.company.name)
        validation = score(draft.blocks, draft.meta, draft.keyword)
        payload = to_publish_payload(
            draft.blocks, draft.meta, branding, draft.keyword,
            uploaded_images=draft.uploaded_images, validation=validation
        )

        try:
            document = await self.wp_client.create_draft_document(payload)
        except PublishError as e:
            logger.error(f"❌ Publishing draft {draft_id} failed ({e.reason}): {e}")
            return PublishResult(success=False, error=str(e), reason=e.reason)

        await self.store.update(
            draft_id,
            status="published",
            wordpress=document.model_dump(mode="json"),
            updated_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info(f"✅ Published draft {draft_id} as post {document.id}: {document.edit_url}")
        return PublishResult(
            success=True,
            post_id=document.id,
            edit_url=document.edit_url,
            preview_url=document.preview_url,
        )
