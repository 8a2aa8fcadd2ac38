"""
Meta Optimizer.
Asks the gateway for an SEO-tuned H1, meta title, description and slug, parses
the answer strictly and falls back to the drafts plus a rule-derived slug.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Optional, Union
from pydantic import BaseModel, Field, ValidationError

from .clients.gemini import GeminiClient
from .errors import GenerationError
from .prompt_builder import SEOPromptBuilder
from .schemas import MetaData
from .utils import generate_slug, normalize_dict_keys, strip_code_fences

logger = logging.getLogger(__name__)


class OptimizedMeta(BaseModel):
    """Shape expected from the model after key normalization."""
    h1: str = Field(min_length=1, description="Keyword-first H1, 50-60 characters")
    meta_title: str = Field(min_length=1, description="Keyword-first meta title, 50-60 characters")
    meta_description: str = Field(min_length=1, description="Meta description, 140-160 characters")
    slug: Optional[str] = Field(default=None, description="Lowercase hyphenated slug under 50 characters")


@dataclass(frozen=True)
class MetaOk:
    meta: MetaData


@dataclass(frozen=True)
class ParseError:
    reason: str
    raw: str = ""


def _decode_json_object(text: str) -> dict:
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        # Models sometimes wrap the object in prose.
        match = re.search(r'\{.*\}', cleaned, re.DOTALL)
        if not match:
            raise
        return json.loads(match.group(0))


def parse_meta_response(text: str, keyword: str) -> Union[MetaOk, ParseError]:
    """Strictly parse a model response into MetaData, or describe why it could not be parsed."""
    if not text or not text.strip():
        return ParseError("empty response", text or "")

    try:
        data = _decode_json_object(text)
    except json.JSONDecodeError as e:
        return ParseError(f"invalid JSON: {e.msg}", text)

    if not isinstance(data, dict):
        return ParseError(f"expected a JSON object, got {type(data).__name__}", text)

    try:
        parsed = OptimizedMeta.model_validate(normalize_dict_keys(data))
    except ValidationError as e:
        missing = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        return ParseError(f"missing or invalid fields: {missing}", text)

    slug = generate_slug(parsed.slug or "") or generate_slug(keyword)
    return MetaOk(MetaData(
        h1=parsed.h1.strip(),
        meta_title=parsed.meta_title.strip(),
        meta_description=parsed.meta_description.strip(),
        slug=slug,
    ))


def default_meta_drafts(keyword: str, company_name: str) -> MetaData:
    """Template drafts used when the caller supplies none."""
    kw = keyword.strip()
    display = f"{kw[:1].upper()}{kw[1:]}"
    return MetaData(
        h1=f"{display}: Complete Guide",
        meta_title=f"{display} | {company_name}",
        meta_description=(
            f"Learn everything about {kw} with {company_name}. Expert insights, practical tips "
            f"and proven strategies. Contact us today for a free consultation."
        ),
        slug=generate_slug(kw),
    )


class MetaOptimizer:
    def __init__(self, gateway: GeminiClient, prompt_builder: Optional[SEOPromptBuilder] = None):
        self.gateway = gateway
        self.prompt_builder = prompt_builder or SEOPromptBuilder()

    async def optimize(self, keyword: str, draft_h1: str, draft_meta_title: str,
                       draft_meta_description: str, company_name: str) -> MetaData:
        """
        Optimize meta fields for the keyword.

        Falls back to the drafts untouched plus ``generate_slug(keyword)`` when
        the gateway fails or its answer does not parse.
        """
        fallback = MetaData(
            h1=draft_h1,
            meta_title=draft_meta_title,
            meta_description=draft_meta_description,
            slug=generate_slug(keyword),
        )
        prompt = self.prompt_builder.build_meta_prompt(
            keyword, draft_h1, draft_meta_title, draft_meta_description, company_name
        )

        try:
            result = await self.gateway.generate(prompt)
        except GenerationError as e:
            logger.warning(f"⚠️ Meta optimization failed, keeping drafts: {e}")
            return fallback

        parsed = parse_meta_response(result.text, keyword)
        if isinstance(parsed, ParseError):
            logger.warning(f"⚠️ Meta response could not be parsed ({parsed.reason}), keeping drafts")
            return fallback

        logger.info(f"✅ Meta optimized: '{parsed.meta.meta_title}' ({len(parsed.meta.meta_description)} char description)")
        return parsed.meta
