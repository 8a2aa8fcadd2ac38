import asyncio
import logging
import os
from typing import Callable, List, Optional
import httpx
from google import genai
from google.genai import types
from google.genai.errors import APIError, ServerError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from ..config import (
    GENERATION_CONFIG,
    GENERATION_TIMEOUT,
    SITE_NAME,
    SITE_URL,
    TEXT_MODELS,
)
from ..errors import ConfigurationError, GenerationError
from ..prompt_builder import SEOPromptBuilder
from ..schemas import CompanyContext, GenerationResult
from ..utils import count_words, strip_code_fences

logger = logging.getLogger(__name__)


# OpenRouter Model Mapping
OPENROUTER_MODEL_MAP = {
    "gemini-2.0-flash": "google/gemini-2.0-flash-001",
    "gemini-1.5-pro": "google/gemini-pro-1.5",
    "gemini-1.5-flash": "google/gemini-flash-1.5",
}


class GeminiClient:
    """Text-generation gateway backed by Gemini.

    Supports:
    - Google AI API (API key)
    - OpenRouter API (alternative backend)

    Each call walks an ordered model list once. A model that times out,
    errors or returns empty text is skipped; when the list is exhausted the
    caller's fallback is used, or GenerationError is raised.
    """

    OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

    def __init__(self, api_key: Optional[str] = None, models: Optional[List[str]] = None,
                 timeout: float = GENERATION_TIMEOUT, openrouter_api_key: Optional[str] = None,
                 prompt_builder: Optional[SEOPromptBuilder] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY")
        self.openrouter_api_key = openrouter_api_key or os.environ.get("OPENROUTER_API_KEY")
        self.models = list(models or TEXT_MODELS)
        self.timeout = timeout
        self.prompt_builder = prompt_builder or SEOPromptBuilder()
        self._transport = transport
        self._using_openrouter = False
        self.client = self._initialize_client()

    def _initialize_client(self) -> Optional[genai.Client]:
        """Initialize the GenAI client with preferred authentication.

        Priority:
        1. OpenRouter (if OPENROUTER_API_KEY is set)
        2. Google AI API (if GEMINI_API_KEY is set)
        """
        if self.openrouter_api_key:
            logger.info("Initializing Gemini with OpenRouter backend")
            self._using_openrouter = True
            return None

        if self.api_key:
            logger.info("Initializing Gemini with API key")
            return genai.Client(api_key=self.api_key)

        logger.warning("No Gemini credentials found; generation will fail on first use")
        return None

    def is_configured(self) -> bool:
        return self._using_openrouter or self.client is not None

    def is_using_openrouter(self) -> bool:
        """Check if the client is using OpenRouter backend."""
        return self._using_openrouter

    def _require_configuration(self):
        if not self.is_configured():
            raise ConfigurationError("Set GEMINI_API_KEY or OPENROUTER_API_KEY before generating content")

    def _map_model_to_openrouter(self, model: str) -> str:
        """Map a Gemini model name to its OpenRouter equivalent."""
        return OPENROUTER_MODEL_MAP.get(model, f"google/{model}")

    async def _generate_openrouter_text(self, model: str, prompt: str) -> str:
        openrouter_model = self._map_model_to_openrouter(model)
        payload = {
            "model": openrouter_model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": GENERATION_CONFIG["temperature"],
            "top_p": GENERATION_CONFIG["top_p"],
            "top_k": GENERATION_CONFIG["top_k"],
            "max_tokens": GENERATION_CONFIG["max_output_tokens"],
        }
        headers = {
            "Authorization": f"Bearer {self.openrouter_api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": SITE_URL,
            "X-Title": SITE_NAME,
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as http_client:
            response = await http_client.post(
                f"{self.OPENROUTER_BASE_URL}/chat/completions",
                headers=headers,
                json=payload
            )
            response.raise_for_status()
            data = response.json()

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ValueError(f"Malformed OpenRouter response: {e!r}") from e
        if content is None:
            return ""
        if not isinstance(content, str):
            raise ValueError(f"Malformed OpenRouter response: content is {type(content).__name__}")
        return content

    async def _generate_gemini_text(self, model: str, prompt: str) -> str:
        config = types.GenerateContentConfig(
            temperature=GENERATION_CONFIG["temperature"],
            top_k=GENERATION_CONFIG["top_k"],
            top_p=GENERATION_CONFIG["top_p"],
            max_output_tokens=GENERATION_CONFIG["max_output_tokens"],
        )
        response = await self.client.aio.models.generate_content(
            model=model,
            contents=prompt,
            config=config
        )
        return response.text or ""

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        retry=retry_if_exception_type((ServerError, httpx.HTTPStatusError, httpx.TransportError)),
        reraise=True
    )
    async def generate_content(self, model: str, prompt: str) -> str:
        """One model call bounded by the per-call timeout, with a short retry for transient errors."""
        if self._using_openrouter:
            call = self._generate_openrouter_text(model, prompt)
        else:
            call = self._generate_gemini_text(model, prompt)

        logger.info(f"Calling text model (Model: {model})")
        return await asyncio.wait_for(call, timeout=self.timeout)

    async def generate(self, prompt: str, context: Optional[CompanyContext] = None,
                       fallback: Optional[Callable[[], str]] = None) -> GenerationResult:
        """
        Generate text for a prompt, trying each configured model in order.

        Args:
            prompt: The task prompt
            context: Company context prefixed to the prompt
            fallback: Terminal fallback producing template text once every model failed

        Returns:
            GenerationResult with the text and its word count

        Raises:
            ConfigurationError: No credentials are configured
            GenerationError: Every model failed and no fallback was supplied
        """
        self._require_configuration()
        full_prompt = self.prompt_builder.build_contextual_prompt(prompt, context)

        failures = []
        for model in self.models:
            try:
                text = strip_code_fences(await self.generate_content(model, full_prompt))
            except asyncio.TimeoutError:
                logger.warning(f"⚠️ Model {model} timed out after {self.timeout:.0f}s")
                failures.append(f"{model}: timeout")
                continue
            except (APIError, httpx.HTTPError, ValueError, RuntimeError) as e:
                logger.warning(f"⚠️ Model {model} failed: {e}")
                failures.append(f"{model}: {e}")
                continue

            if not text:
                logger.warning(f"⚠️ Model {model} returned an empty response")
                failures.append(f"{model}: empty response")
                continue

            logger.info(f"✅ Generated {count_words(text)} words with model: {model}")
            return GenerationResult(text=text, word_count=count_words(text), model=model)

        if fallback is not None:
            logger.warning(f"⚠️ All {len(self.models)} models failed, using fallback template")
            text = fallback()
            return GenerationResult(text=text, word_count=count_words(text), is_fallback=True)

        logger.error("❌ All models failed for text generation")
        raise GenerationError("; ".join(failures) or "no models configured")
