"""
End-to-end tests for the blog pipeline with a scripted generation gateway,
a temporary draft store and an in-process WordPress transport.
"""

import json
import os
import re
import tempfile
import unittest
from unittest.mock import AsyncMock, MagicMock

import httpx

from blog_engine.clients.gemini import GeminiClient
from blog_engine.clients.wordpress import WordPressClient
from blog_engine.draft_store import DraftStore
from blog_engine.errors import GenerationError
from blog_engine.image_generator import ImageGenerator
from blog_engine.pipeline import BlogPipeline
from blog_engine.schemas import Branding, CompanyContext, GenerationResult, ImageAsset

KEYWORD = "solar panel installation"

META_RESPONSE = {
    "optimizedH1": "Solar Panel Installation: Complete Homeowner Guide",
    "optimizedMetaTitle": "Solar Panel Installation | Acme Solar",
    "optimizedMetaDescription": (
        "Solar panel installation from certified Acme Solar experts. Compare costs, incentives and "
        "timelines, then book your free home energy consultation today!"
    ),
    "optimizedSlug": "solar-panel-installation",
}


def sized_text(word_count: int) -> str:
    """Text of ``word_count`` words with the keyword at the start and once every 60 words."""
    tokens = []
    while len(tokens) < word_count:
        tokens += KEYWORD.split() + ["energy"] * 57
    return " ".join(tokens[:word_count])


async def scripted_generate(prompt, context=None, fallback=None):
    if "Return ONLY a JSON object" in prompt:
        text = json.dumps(META_RESPONSE)
    else:
        match = re.search(r"Exactly (\d+) words", prompt)
        text = sized_text(int(match.group(1)) if match else 60)
    return GenerationResult(text=text, word_count=len(text.split()), model="model-a")


def make_gateway(side_effect=scripted_generate):
    gateway = MagicMock(spec=GeminiClient)
    gateway.generate = AsyncMock(side_effect=side_effect)
    return gateway


class PipelineFixture(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = DraftStore(os.path.join(self.tmp.name, "drafts.db"))
        self.company = CompanyContext(name="Acme Solar", services_offered="residential solar installs")
        self.branding = Branding(company_name="Acme Solar")

    def tearDown(self):
        self.tmp.cleanup()

    def make_pipeline(self, gateway=None, **kwargs):
        kwargs.setdefault("branding", self.branding)
        return BlogPipeline(gateway or make_gateway(), self.store, **kwargs)


class TestGenerateDraft(PipelineFixture):

    async def test_end_to_end_scores_well(self):
        pipeline = self.make_pipeline()

        draft = await pipeline.generate_draft(KEYWORD, self.company, total_word_count=2500, num_body_sections=4)

        self.assertGreaterEqual(draft.validation.score, 85)
        self.assertEqual(draft.validation.word_count, 2500)
        self.assertEqual(draft.meta.h1, META_RESPONSE["optimizedH1"])
        self.assertEqual(draft.meta.slug, "solar-panel-installation")
        self.assertEqual(draft.blocks[1].text, draft.meta.h1)
        self.assertEqual(draft.status, "draft")

        stored = await pipeline.load_draft(draft.id)
        self.assertEqual(stored.blocks, draft.blocks)
        self.assertEqual(stored.meta, draft.meta)

    async def test_generation_outage_still_produces_draft(self):
        pipeline = self.make_pipeline(make_gateway(side_effect=GenerationError("all models down")))

        draft = await pipeline.generate_draft(KEYWORD, self.company)

        self.assertEqual(draft.meta.slug, "solar-panel-installation")
        self.assertIn("Acme Solar", draft.meta.meta_title)
        self.assertTrue(all(getattr(b, "text", "x") for b in draft.blocks))
        self.assertTrue(draft.validation.checks["keyword_in_slug"])

    async def test_load_missing_draft(self):
        with self.assertRaises(KeyError):
            await self.make_pipeline().load_draft("missing")


class TestEditDraft(PipelineFixture):

    async def asyncSetUp(self):
        self.pipeline = self.make_pipeline()
        self.draft = await self.pipeline.generate_draft(KEYWORD, self.company)

    async def test_regenerate_block_rescores(self):
        updated = await self.pipeline.regenerate_block(self.draft.id, "section-1", new_text="Short replacement.")

        by_id = {b.id: b for b in updated.blocks}
        self.assertEqual(by_id["section-1"].text, "Short replacement.")
        self.assertLess(updated.validation.word_count, self.draft.validation.word_count)
        self.assertEqual([b.id for b in updated.blocks], [b.id for b in self.draft.blocks])

    async def test_editing_h1_block_syncs_meta(self):
        updated = await self.pipeline.regenerate_block(self.draft.id, "h1", new_text="Solar Panel Installation Costs")
        self.assertEqual(updated.meta.h1, "Solar Panel Installation Costs")

    async def test_update_meta_slugifies_and_rescores(self):
        updated = await self.pipeline.update_meta(self.draft.id, slug="Rooftop Guide!")

        self.assertEqual(updated.meta.slug, "rooftop-guide")
        self.assertFalse(updated.validation.checks["keyword_in_slug"])
        self.assertEqual(updated.validation.score, self.draft.validation.score - 10)

    async def test_attach_images_once_per_placeholder(self):
        generator = MagicMock(spec=ImageGenerator)
        generator.produce_image = AsyncMock(return_value=ImageAsset(url="https://blog.example.com/a.png", media_id=3))
        pipeline = self.make_pipeline(image_generator=generator)

        updated = await pipeline.attach_images(self.draft.id)
        await pipeline.attach_images(self.draft.id)

        self.assertEqual(set(updated.uploaded_images), {"feature-image", "inline-image"})
        self.assertEqual(generator.produce_image.await_count, 2)


class TestPublish(PipelineFixture):

    async def asyncSetUp(self):
        self.draft = await self.make_pipeline().generate_draft(KEYWORD, self.company)

    def wp_client(self, handler):
        return WordPressClient("https://blog.example.com", "editor", "app pass",
                               transport=httpx.MockTransport(handler))

    async def test_publish_success_marks_draft(self):
        def handler(request):
            if request.url.path == "/wp-json/wp/v2/posts":
                return httpx.Response(201, json={"id": 42, "link": "https://blog.example.com/?p=42"})
            return httpx.Response(200, json={"id": 42})

        pipeline = self.make_pipeline(wp_client=self.wp_client(handler))

        result = await pipeline.publish(self.draft.id)

        self.assertTrue(result.success)
        self.assertEqual(result.post_id, 42)
        stored = await pipeline.load_draft(self.draft.id)
        self.assertEqual(stored.status, "published")
        self.assertEqual(stored.wordpress.id, 42)

    async def test_publish_rejected_credentials(self):
        pipeline = self.make_pipeline(wp_client=self.wp_client(lambda request: httpx.Response(401)))

        result = await pipeline.publish(self.draft.id)

        self.assertFalse(result.success)
        self.assertEqual(result.reason, "auth")
        self.assertEqual((await pipeline.load_draft(self.draft.id)).status, "draft")

    async def test_publish_without_client(self):
        result = await self.make_pipeline().publish(self.draft.id)
        self.assertFalse(result.success)
        self.assertEqual(result.reason, "unknown")


if __name__ == '__main__':
    unittest.main()
