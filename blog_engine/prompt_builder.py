"""
SEO Prompt Builder for the SEO Blog Engine.

This module provides:
- Company-aware context prefixes for every generation call
- Section prompts encoding the keyword-placement rules
- The meta optimization prompt
- Deterministic template text used when generation fails
- Image prompts for feature and inline placeholders
"""

import logging
from typing import Optional

from .schemas import CompanyContext, SectionPlan

logger = logging.getLogger(__name__)


IMAGE_CATEGORIES = {
    "solar": "solar energy installation, photovoltaic panels on a modern rooftop, clean energy",
    "roof": "residential roofing work, modern home exterior, skilled contractors",
    "marketing": "digital marketing workspace, analytics dashboards, creative team",
    "software": "software development team, clean code on monitors, modern office",
    "finance": "financial planning meeting, charts and documents, professional advisors",
    "health": "modern healthcare setting, caring professionals, bright clinical space",
    "real estate": "modern residential property, bright interior, welcoming home",
}
DEFAULT_IMAGE_CATEGORY = "professional business environment, modern office, expert team at work"

IMAGE_ROLE_VARIATIONS = {
    "feature": "hero shot, wide angle, professional composition",
    "inline": "detailed view, technical focus, educational perspective",
}


class SEOPromptBuilder:
    """Builds SEO-optimized prompts for section, meta and image generation."""

    def build_contextual_prompt(self, prompt: str, company: Optional[CompanyContext]) -> str:
        """Prefix a prompt with company context and the content rules shared by every call."""
        if company is None:
            return prompt

        company = company.validated()
        return f"""
Company: {company.name}
Tone: {company.tone}
Brand Voice: {company.brand_voice}
Services: {company.services_offered}
Service Overview: {company.service_overview}
About: {company.about_the_company}
Target Audience: {company.target_audience}

CONTENT REQUIREMENTS:
- Write original, accurate and helpful content for {company.target_audience}
- Mention {company.name} naturally 2-3 times and reference its services where relevant
- Never use placeholders such as [Company Name] or [Service]
- Return plain text paragraphs only, without markdown headings or code fences

{prompt}
""".strip()

    def build_section_prompt(self, keyword: str, section: SectionPlan, company: CompanyContext) -> str:
        """Prompt for one planned section; the keyword-placement rule depends on the role."""
        company = company.validated()

        if section.role == "intro":
            return f"""
Write an engaging introduction for a blog post about "{keyword}".

Requirements:
- Exactly {section.target_word_count} words
- Include the exact phrase "{keyword}" within the first 100 words, ideally in the first sentence
- Hook the reader with a clear problem or opportunity
- Introduce {company.name} as an expert in {company.services_offered}
- {section.keyword_requirement}
""".strip()

        if section.role == "conclusion":
            return f"""
Write a conclusion for a blog post about "{keyword}".

Requirements:
- Exactly {section.target_word_count} words
- Include the exact phrase "{keyword}" naturally
- End with a clear call-to-action to contact {company.name} for {company.services_offered}
- Summarize the key takeaways without repeating whole sentences
- {section.keyword_requirement}
""".strip()

        return f"""
Write the body section titled "{section.heading_text}" for a blog post about "{keyword}".

Requirements:
- Exactly {section.target_word_count} words
- {section.keyword_requirement}; use the exact phrase "{keyword}"
- Keep keyword density between 0.5% and 2.5%
- Use short paragraphs and, where useful, bullet points for scannability
- Reference how {company.name} helps with {company.services_offered}
""".strip()

    def build_heading_prompt(self, keyword: str, current_heading: str) -> str:
        return f"""
Rewrite this blog section heading so it includes the phrase "{keyword}" and stays under 70 characters:
"{current_heading}"

Return only the heading text.
""".strip()

    def build_meta_prompt(self, keyword: str, draft_h1: str, draft_meta_title: str,
                          draft_meta_description: str, company_name: str) -> str:
        """Meta optimization prompt with exact length targets and placement rules."""
        return f"""
You are an SEO specialist optimizing a blog post for RankMath.

Focus keyword: "{keyword}"
Company: {company_name}

Current drafts:
- H1: {draft_h1}
- Meta title: {draft_meta_title}
- Meta description: {draft_meta_description}

Rules:
1. H1 must start with the focus keyword and be 50-60 characters
2. Meta title must place the focus keyword first, include "{company_name}" and be 50-60 characters
3. Meta description must contain the focus keyword within the first 120 characters,
   include a call-to-action and be 140-160 characters
4. Slug must be lowercase, hyphenated, contain the focus keyword and be under 50 characters

Return ONLY a JSON object with these keys:
{{
  "optimizedH1": "...",
  "optimizedMetaTitle": "...",
  "optimizedMetaDescription": "...",
  "optimizedSlug": "...",
  "keywordPlacement": "...",
  "estimatedScore": 0
}}
""".strip()

    def build_regeneration_prompt(self, keyword: str, section: SectionPlan, company: CompanyContext,
                                  current_text: str, custom_prompt: Optional[str] = None) -> str:
        """Prompt for regenerating a single paragraph in place."""
        base = self.build_section_prompt(keyword, section, company)
        instruction = custom_prompt or "Improve clarity and SEO while keeping the same intent."
        return f"""
{base}

Current version:
{current_text}

Additional instruction: {instruction}
""".strip()

    def fallback_section_text(self, keyword: str, section: SectionPlan, company: CompanyContext) -> str:
        """Deterministic canned paragraph for a section whose generation failed."""
        company = company.validated()

        if section.role == "intro":
            return (
                f"{keyword.capitalize()} is one of the most important decisions you can make for your property "
                f"or business. Understanding {keyword} helps you compare options, set a realistic budget and "
                f"avoid costly mistakes. At {company.name}, we specialize in {company.services_offered} and have "
                f"helped many clients navigate {keyword} with confidence. {company.service_overview}. In this "
                f"guide we explain what {keyword} involves, the benefits you can expect, how the process works "
                f"and what it costs, so you can move forward with a clear plan."
            )

        if section.role == "conclusion":
            return (
                f"Choosing the right approach to {keyword} pays off for years to come. With careful planning, "
                f"the right partner and clear expectations, you can get the full value of your investment. "
                f"{company.name} combines {company.services_offered} with hands-on experience to deliver "
                f"results you can measure. Contact {company.name} today to discuss your {keyword} project and "
                f"get a personalized recommendation from our team."
            )

        return (
            f"{section.heading_text} is a question many people ask when they start researching {keyword}. "
            f"The answer depends on your goals, your budget and the specific requirements of your project. "
            f"Working with an experienced provider makes {keyword} simpler, because every step is planned, "
            f"documented and reviewed. {company.name} offers {company.services_offered} and guides clients "
            f"through each stage, from the first assessment to the final result. {company.about_the_company}."
        )

    def build_image_prompt(self, keyword: str, title: str, company_name: str, role: str = "feature") -> str:
        """Deterministic image prompt built from the keyword's industry category and the image role."""
        keyword_lower = keyword.lower()
        category = DEFAULT_IMAGE_CATEGORY
        for marker, scene in IMAGE_CATEGORIES.items():
            if marker in keyword_lower:
                category = scene
                break

        variation = IMAGE_ROLE_VARIATIONS.get(role, IMAGE_ROLE_VARIATIONS["inline"])
        return (
            f"Professional photograph illustrating {keyword} for an article titled \"{title}\" "
            f"by {company_name}. Scene: {category}. Style: {variation}, natural lighting, "
            f"high resolution, no text, no watermarks."
        )

    @staticmethod
    def build_alt_text(keyword: str, title: str, max_length: int = 125) -> str:
        alt_text = f"{keyword} - {title}" if title else keyword
        return alt_text[:max_length].rstrip()
