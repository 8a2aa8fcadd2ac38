"""
Image Generator Module.
Produces feature and inline images with Imagen (via the shared Gemini client)
and DALL-E 3 as a fallback, uploads them to the WordPress media library and
degrades to a static placeholder whenever anything fails.
"""

import asyncio
import base64
import logging
import os
from datetime import datetime
from typing import Optional

from google.genai import types
from openai import AsyncOpenAI, OpenAIError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from .clients.gemini import GeminiClient
from .clients.wordpress import WordPressClient
from .config import IMAGE_MODEL, PLACEHOLDER_IMAGE_URL
from .errors import ConfigurationError
from .schemas import ImageAsset

logger = logging.getLogger(__name__)

IMAGE_TIMEOUT = 120.0


class ImageGenerator:
    def __init__(self, gemini_client: Optional[GeminiClient] = None,
                 wp_client: Optional[WordPressClient] = None,
                 openai_api_key: Optional[str] = None,
                 placeholder_url: str = PLACEHOLDER_IMAGE_URL):
        self.gemini_client = gemini_client
        self.wp_client = wp_client
        self.openai_api_key = openai_api_key or os.environ.get("OPENAI_API_KEY")
        self.placeholder_url = placeholder_url

    def placeholder(self) -> ImageAsset:
        return ImageAsset(url=self.placeholder_url, is_placeholder=True)

    async def generate_image_imagen(self, prompt: str) -> Optional[bytes]:
        if not self.gemini_client or not self.gemini_client.client:
            return None

        logger.info(f"🎨 Generating with Imagen ({IMAGE_MODEL})...")
        response = await asyncio.wait_for(
            self.gemini_client.client.aio.models.generate_images(
                model=IMAGE_MODEL,
                prompt=prompt,
                config=types.GenerateImagesConfig(number_of_images=1, aspect_ratio="16:9"),
            ),
            timeout=IMAGE_TIMEOUT,
        )
        if response.generated_images:
            return response.generated_images[0].image.image_bytes
        return None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=2, min=2, max=30),
        retry=retry_if_exception_type(OpenAIError),
        reraise=True
    )
    async def generate_image_dalle(self, prompt: str) -> Optional[bytes]:
        if not self.openai_api_key:
            return None

        logger.info("🎨 Generating with DALL-E 3...")
        client = AsyncOpenAI(api_key=self.openai_api_key)
        response = await client.images.generate(
            model="dall-e-3",
            prompt=prompt,
            n=1,
            size="1792x1024",
            response_format="b64_json"
        )
        return base64.b64decode(response.data[0].b64_json)

    async def generate_image(self, prompt: str) -> Optional[bytes]:
        """Image bytes from the first provider that succeeds, or None."""
        providers = [
            ("Imagen", self.generate_image_imagen),
            ("DALL-E 3", self.generate_image_dalle),
        ]
        for name, provider in providers:
            try:
                image_bytes = await provider(prompt)
            except Exception as e:
                # Any provider failure moves on to the next provider.
                logger.warning(f"⚠️ {name} image generation failed: {e}")
                continue
            if image_bytes:
                logger.info(f"✅ Image generated with {name}")
                return image_bytes

        logger.warning("⚠️ All image providers failed")
        return None

    async def produce_image(self, prompt: str, alt_text: str, title: str = "") -> ImageAsset:
        """Generate and upload an image. Never raises; failures yield the placeholder asset."""
        image_bytes = await self.generate_image(prompt)
        if not image_bytes:
            return self.placeholder()

        if not self.wp_client:
            logger.warning("⚠️ No WordPress client for image upload, using placeholder")
            return self.placeholder()

        filename = f"blog_image_{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}.png"
        try:
            media_id, source_url = await self.wp_client.upload_media(image_bytes, filename, alt_text, title)
        except ConfigurationError as e:
            logger.warning(f"⚠️ Image upload skipped: {e}")
            return self.placeholder()

        if not media_id or not source_url:
            return self.placeholder()
        return ImageAsset(url=source_url, media_id=media_id)
