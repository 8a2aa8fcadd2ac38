"""
Pydantic models shared across the engine: content blocks, meta data,
validation results, publishing payloads and persisted drafts.
"""

import uuid
from datetime import datetime, timezone
from typing import Annotated, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field

from .config import DEFAULT_COMPANY


SectionRole = Literal["intro", "body", "conclusion"]
ImageRole = Literal["feature", "inline"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Heading(BaseModel):
    type: Literal["heading"] = "heading"
    id: str
    level: Literal[1, 2, 3]
    text: str


class Paragraph(BaseModel):
    type: Literal["paragraph"] = "paragraph"
    id: str
    text: str
    section_role: SectionRole


class ImagePlaceholder(BaseModel):
    type: Literal["image"] = "image"
    id: str
    prompt: str
    alt_text: str
    role: ImageRole


ContentBlock = Annotated[Union[Heading, Paragraph, ImagePlaceholder], Field(discriminator="type")]


class SectionPlan(BaseModel):
    role: SectionRole
    heading_text: str = ""
    target_word_count: int
    keyword_requirement: str


class MetaData(BaseModel):
    h1: str
    meta_title: str
    meta_description: str
    slug: str


class SEOValidationResult(BaseModel):
    score: int = Field(ge=0, le=100)
    checks: Dict[str, bool]
    recommendations: List[str] = Field(default_factory=list)
    word_count: int = 0
    keyword_density: float = 0.0
    keyword_count: int = 0


class CompanyContext(BaseModel):
    name: str = ""
    services_offered: str = ""
    service_overview: str = ""
    about_the_company: str = ""
    tone: str = ""
    brand_voice: str = ""
    target_audience: str = ""

    def validated(self) -> "CompanyContext":
        """Copy with blank fields replaced by defaults so prompts never carry placeholders."""
        filled = {
            field: (getattr(self, field) or "").strip() or DEFAULT_COMPANY[field]
            for field in DEFAULT_COMPANY
        }
        return CompanyContext(**filled)


class RelatedLink(BaseModel):
    title: str
    url: str
    description: str = ""


class Branding(BaseModel):
    company_name: str
    related_links: List[RelatedLink] = Field(default_factory=list)
    related_articles: List[RelatedLink] = Field(default_factory=list)


class GenerationResult(BaseModel):
    text: str
    word_count: int
    model: Optional[str] = None
    is_fallback: bool = False


class ImageAsset(BaseModel):
    url: str
    media_id: Optional[int] = None
    is_placeholder: bool = False


class PublishPayload(BaseModel):
    title: str
    html_body: str
    excerpt: str
    slug: str
    meta_fields: Dict[str, str]
    featured_image_ref: Optional[ImageAsset] = None


class PublishedDocument(BaseModel):
    id: int
    edit_url: str
    preview_url: Optional[str] = None


class PublishResult(BaseModel):
    success: bool
    error: Optional[str] = None
    reason: Optional[Literal["auth", "not_found", "forbidden", "unknown"]] = None
    post_id: Optional[int] = None
    edit_url: Optional[str] = None
    preview_url: Optional[str] = None


class Draft(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    keyword: str
    company: CompanyContext
    blocks: List[ContentBlock]
    meta: MetaData
    validation: SEOValidationResult
    uploaded_images: Dict[str, ImageAsset] = Field(default_factory=dict)
    status: Literal["draft", "published"] = "draft"
    wordpress: Optional[PublishedDocument] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
