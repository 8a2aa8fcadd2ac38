"""
Content Block Assembler.
Drives the text-generation gateway once per planned section and collects the
results into ordered, typed content blocks.
"""

import logging
from typing import List, Optional

from .clients.gemini import GeminiClient
from .errors import GenerationError
from .planner import BODY_REQUIREMENTS, CONCLUSION_REQUIREMENT, INTRO_REQUIREMENT, body_heading
from .prompt_builder import SEOPromptBuilder
from .schemas import (
    CompanyContext,
    ContentBlock,
    Heading,
    ImagePlaceholder,
    Paragraph,
    SectionPlan,
)

logger = logging.getLogger(__name__)

FEATURE_IMAGE_ID = "feature-image"
INLINE_IMAGE_ID = "inline-image"
H1_ID = "h1"
INTRO_ID = "intro"
CONCLUSION_ID = "conclusion"

# Inline image goes after this many body sections.
INLINE_IMAGE_AFTER_SECTION = 2


def default_h1(keyword: str) -> str:
    kw = keyword.strip()
    return f"{kw[:1].upper()}{kw[1:]}: Complete Guide"


class ContentAssembler:
    def __init__(self, gateway: GeminiClient, prompt_builder: Optional[SEOPromptBuilder] = None):
        self.gateway = gateway
        self.prompt_builder = prompt_builder or SEOPromptBuilder()

    async def _generate_section_text(self, prompt: str, keyword: str, section: SectionPlan,
                                     company: CompanyContext) -> str:
        """Section text from the gateway, or the template paragraph if generation fails."""
        try:
            result = await self.gateway.generate(prompt, company)
        except GenerationError as e:
            logger.warning(f"⚠️ Section '{section.role}' generation failed, using template: {e}")
            return self.prompt_builder.fallback_section_text(keyword, section, company)
        return result.text

    def _image_placeholder(self, block_id: str, keyword: str, title: str,
                           company: CompanyContext, role: str) -> ImagePlaceholder:
        return ImagePlaceholder(
            id=block_id,
            prompt=self.prompt_builder.build_image_prompt(keyword, title, company.name, role),
            alt_text=self.prompt_builder.build_alt_text(keyword, title),
            role=role,
        )

    async def assemble(self, keyword: str, section_plan: List[SectionPlan], company: CompanyContext,
                       h1: Optional[str] = None) -> List[ContentBlock]:
        """
        Generate every planned section in order and return the document blocks.

        Layout: feature image, H1, introduction, (H2 + paragraph) per body
        section with the inline image after the second one, conclusion.
        """
        company = company.validated()
        title = h1 or default_h1(keyword)
        logger.info(f"📝 Assembling {len(section_plan)} sections for '{keyword}'")

        blocks: List[ContentBlock] = [
            self._image_placeholder(FEATURE_IMAGE_ID, keyword, title, company, "feature"),
            Heading(id=H1_ID, level=1, text=title),
        ]

        body_index = 0
        for section in section_plan:
            prompt = self.prompt_builder.build_section_prompt(keyword, section, company)
            text = await self._generate_section_text(prompt, keyword, section, company)

            if section.role == "intro":
                blocks.append(Paragraph(id=INTRO_ID, text=text, section_role="intro"))
            elif section.role == "conclusion":
                blocks.append(Paragraph(id=CONCLUSION_ID, text=text, section_role="conclusion"))
            else:
                body_index += 1
                heading_text = section.heading_text or body_heading(keyword, body_index - 1)
                blocks.append(Heading(id=f"h2-{body_index}", level=2, text=heading_text))
                blocks.append(Paragraph(id=f"section-{body_index}", text=text, section_role="body"))
                if body_index == INLINE_IMAGE_AFTER_SECTION:
                    blocks.append(self._image_placeholder(INLINE_IMAGE_ID, keyword, title, company, "inline"))

        logger.info(f"✅ Assembled {len(blocks)} blocks ({body_index} body sections)")
        return blocks

    def _section_for_block(self, blocks: List[ContentBlock], block: Paragraph, keyword: str) -> SectionPlan:
        """Rebuild the section plan entry a paragraph was generated from."""
        target = max(len(block.text.split()), 50)
        if block.section_role == "intro":
            return SectionPlan(role="intro", target_word_count=target,
                               keyword_requirement=INTRO_REQUIREMENT)
        if block.section_role == "conclusion":
            return SectionPlan(role="conclusion", target_word_count=target,
                               keyword_requirement=CONCLUSION_REQUIREMENT)

        heading_text = ""
        index = next(i for i, b in enumerate(blocks) if b.id == block.id)
        if index > 0 and isinstance(blocks[index - 1], Heading):
            heading_text = blocks[index - 1].text
        return SectionPlan(role="body", heading_text=heading_text, target_word_count=target,
                           keyword_requirement=BODY_REQUIREMENTS[0])

    async def regenerate_block(self, blocks: List[ContentBlock], block_id: str, keyword: str,
                               company: CompanyContext, custom_prompt: Optional[str] = None,
                               new_text: Optional[str] = None) -> List[ContentBlock]:
        """
        Return a copy of ``blocks`` with the block ``block_id`` replaced.

        ``new_text`` replaces the block content directly; otherwise paragraphs
        and headings are regenerated through the gateway. Image placeholders
        only accept manual updates. Every other block is left untouched.

        Raises:
            KeyError: No block has that id
        """
        index = next((i for i, b in enumerate(blocks) if b.id == block_id), None)
        if index is None:
            raise KeyError(f"Block not found: {block_id}")

        block = blocks[index]
        company = company.validated()

        if new_text is not None:
            if isinstance(block, ImagePlaceholder):
                replacement = block.model_copy(update={"prompt": new_text})
            else:
                replacement = block.model_copy(update={"text": new_text})
        elif isinstance(block, Paragraph):
            section = self._section_for_block(blocks, block, keyword)
            prompt = self.prompt_builder.build_regeneration_prompt(
                keyword, section, company, block.text, custom_prompt
            )
            text = await self._generate_section_text(prompt, keyword, section, company)
            replacement = block.model_copy(update={"text": text})
        elif isinstance(block, Heading):
            prompt = custom_prompt or self.prompt_builder.build_heading_prompt(keyword, block.text)
            try:
                result = await self.gateway.generate(prompt, company)
                lines = result.text.strip().strip('"').splitlines()
                text = lines[0].strip().strip('"').strip() if lines else ""
            except GenerationError as e:
                logger.warning(f"⚠️ Heading regeneration failed, keeping current text: {e}")
                text = block.text
            replacement = block.model_copy(update={"text": text or block.text})
        else:
            logger.warning(f"⚠️ Image block '{block_id}' needs new_text to be updated")
            return list(blocks)

        updated = list(blocks)
        updated[index] = replacement
        logger.info(f"✅ Regenerated block '{block_id}'")
        return updated
