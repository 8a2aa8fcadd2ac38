"""
Configuration for the SEO Blog Engine.
Environment-driven settings plus the static tables used by the planner,
the gateway and the HTML renderer.
"""

import os
from dotenv import load_dotenv

load_dotenv(override=True)

# --- CREDENTIALS ---
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY")
OPENROUTER_API_KEY = os.environ.get("OPENROUTER_API_KEY")
OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")
WP_URL = os.environ.get("WP_URL")
WP_USER = os.environ.get("WP_USER")
WP_APP_PASSWORD = os.environ.get("WP_APP_PASSWORD")

# --- SITE ---
SITE_URL = os.environ.get("SITE_URL", "https://example.com")
SITE_NAME = os.environ.get("SITE_NAME", "SEO Blog Engine")
DRAFT_DB_PATH = os.environ.get("DRAFT_DB_PATH", "drafts.db")
IMAGE_GENERATION_ENABLED = os.environ.get("IMAGE_GENERATION_ENABLED", "true").lower() == "true"

# --- TEXT GENERATION ---
# Tried in order; once the list is exhausted the caller's fallback takes over.
TEXT_MODELS = [
    "gemini-2.0-flash",
    "gemini-1.5-pro",
    "gemini-1.5-flash",
]
GENERATION_TIMEOUT = 30.0
GENERATION_CONFIG = {
    "temperature": 0.7,
    "top_k": 40,
    "top_p": 0.95,
    "max_output_tokens": 8192,
}
IMAGE_MODEL = "imagen-3.0-generate-002"

# --- WORD BUDGET ---
INTRO_SHARE = 0.08
CONCLUSION_SHARE = 0.10
DEFAULT_TOTAL_WORDS = 2500
DEFAULT_BODY_SECTIONS = 4

# --- IMAGES ---
PLACEHOLDER_IMAGE_URL = "https://images.unsplash.com/photo-1509391366360-2e959784a276?w=1024&h=1024&fit=crop"

# --- COMPANY ---
DEFAULT_COMPANY = {
    "name": "Our Company",
    "services_offered": "Professional Services",
    "service_overview": "Industry-leading solutions",
    "about_the_company": "A trusted partner delivering measurable results",
    "tone": "Professional",
    "brand_voice": "Informative and approachable",
    "target_audience": "Business owners and decision makers",
}

# --- HTML STYLES ---
# Every inline style the renderer emits comes from this table.
BRAND_STYLES = {
    "primary_font": "'Roboto', 'Arial', sans-serif",
    "heading_color": "#1A202C",
    "h2_color": "#FBD46F",
    "text_color": "#4A5568",
    "accent_color": "#FBD46F",
    "background_color": "#FFF8E1",
    "h1": "font-size: 42px; font-weight: 800; line-height: 1.2; margin: 0 0 24px 0;",
    "h2": "font-size: 32px; font-weight: 600; line-height: 1.3; margin: 40px 0 16px 0;",
    "h3": "font-size: 24px; font-weight: 700; line-height: 1.4; margin: 32px 0 12px 0;",
    "p": "font-size: 16px; line-height: 1.7; margin: 0 0 20px 0;",
    "figure": "margin: 32px 0; text-align: center;",
    "img": "max-width: 100%; height: auto; border-radius: 8px;",
    "box": "margin: 40px 0; padding: 24px; border-radius: 12px;",
    "card": "display: block; margin: 12px 0; padding: 16px; background: #FFFFFF; border-left: 4px solid; border-radius: 8px; text-decoration: none;",
}


def build_company_context():
    """Company context assembled from the environment."""
    from .schemas import CompanyContext

    return CompanyContext(
        name=os.environ.get("COMPANY_NAME", DEFAULT_COMPANY["name"]),
        services_offered=os.environ.get("COMPANY_SERVICES", DEFAULT_COMPANY["services_offered"]),
        service_overview=os.environ.get("COMPANY_OVERVIEW", DEFAULT_COMPANY["service_overview"]),
        about_the_company=os.environ.get("COMPANY_ABOUT", DEFAULT_COMPANY["about_the_company"]),
        tone=os.environ.get("COMPANY_TONE", DEFAULT_COMPANY["tone"]),
        brand_voice=os.environ.get("COMPANY_BRAND_VOICE", DEFAULT_COMPANY["brand_voice"]),
        target_audience=os.environ.get("COMPANY_AUDIENCE", DEFAULT_COMPANY["target_audience"]),
    ).validated()


def build_branding(company_name: str):
    """Static branding data used for the related-links and related-content sections."""
    from .schemas import Branding, RelatedLink

    base = SITE_URL.rstrip('/')
    return Branding(
        company_name=company_name,
        related_links=[
            RelatedLink(title=f"{company_name} Services", url=f"{base}/services/",
                        description=f"Explore the full range of services offered by {company_name}."),
            RelatedLink(title="Get a Free Consultation", url=f"{base}/contact/",
                        description="Talk to an expert about your project."),
            RelatedLink(title=f"About {company_name}", url=f"{base}/about/",
                        description="Learn who we are and how we work."),
        ],
        related_articles=[
            RelatedLink(title="Latest Articles", url=f"{base}/blog/",
                        description="Guides, tips and industry news from our team."),
            RelatedLink(title="Case Studies", url=f"{base}/case-studies/",
                        description="Real projects and measurable results."),
        ],
    )
