"""
Tests for the content block assembler.
"""

import unittest
from unittest.mock import AsyncMock, MagicMock

from blog_engine.assembler import ContentAssembler
from blog_engine.clients.gemini import GeminiClient
from blog_engine.errors import ConfigurationError, GenerationError
from blog_engine.planner import plan
from blog_engine.schemas import (
    CompanyContext,
    GenerationResult,
    Heading,
    ImagePlaceholder,
    Paragraph,
)

KEYWORD = "solar panel installation"


def result(text):
    return GenerationResult(text=text, word_count=len(text.split()), model="model-a")


def make_gateway(side_effect=None):
    gateway = MagicMock(spec=GeminiClient)
    if side_effect is None:
        side_effect = lambda prompt, context=None, fallback=None: result(f"Generated text about {KEYWORD}.")
    gateway.generate = AsyncMock(side_effect=side_effect)
    return gateway


class TestAssembleLayout(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.company = CompanyContext(name="Acme Solar", services_offered="residential solar installs")

    async def test_block_order_for_four_sections(self):
        gateway = make_gateway()
        assembler = ContentAssembler(gateway)

        blocks = await assembler.assemble(KEYWORD, plan(2500, 4, KEYWORD), self.company, h1="Solar Panel Installation Guide")

        self.assertEqual([b.id for b in blocks], [
            "feature-image", "h1", "intro",
            "h2-1", "section-1", "h2-2", "section-2", "inline-image",
            "h2-3", "section-3", "h2-4", "section-4",
            "conclusion",
        ])
        self.assertEqual(gateway.generate.call_count, 6)
        self.assertEqual(blocks[1].text, "Solar Panel Installation Guide")
        self.assertEqual(blocks[3].text, "What is Solar Panel Installation?")

    async def test_heading_precedes_every_body_paragraph(self):
        blocks = await ContentAssembler(make_gateway()).assemble(KEYWORD, plan(2000, 5, KEYWORD), self.company)

        for index, block in enumerate(blocks):
            if isinstance(block, Paragraph) and block.section_role == "body":
                self.assertIsInstance(blocks[index - 1], Heading)
                self.assertEqual(blocks[index - 1].level, 2)

    async def test_image_placeholders(self):
        blocks = await ContentAssembler(make_gateway()).assemble(KEYWORD, plan(2500, 4, KEYWORD), self.company)

        images = [b for b in blocks if isinstance(b, ImagePlaceholder)]
        self.assertEqual([i.role for i in images], ["feature", "inline"])
        self.assertIsInstance(blocks[0], ImagePlaceholder)
        self.assertIn("hero shot", images[0].prompt)
        self.assertIn("solar", images[0].prompt.lower())
        self.assertTrue(images[0].alt_text.startswith(KEYWORD))

    async def test_single_body_section_has_no_inline_image(self):
        blocks = await ContentAssembler(make_gateway()).assemble(KEYWORD, plan(1000, 1, KEYWORD), self.company)

        roles = [b.role for b in blocks if isinstance(b, ImagePlaceholder)]
        self.assertEqual(roles, ["feature"])

    async def test_section_prompts_carry_placement_rules(self):
        gateway = make_gateway()
        await ContentAssembler(gateway).assemble(KEYWORD, plan(2500, 4, KEYWORD), self.company)

        prompts = [call.args[0] for call in gateway.generate.call_args_list]
        self.assertIn("first 100 words", prompts[0])
        self.assertIn("Exactly 200 words", prompts[0])
        self.assertIn("call-to-action", prompts[-1])
        self.assertIn("Acme Solar", prompts[-1])
        self.assertIn("What is Solar Panel Installation?", prompts[1])


class TestAssembleFallback(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.company = CompanyContext(name="Acme Solar", services_offered="residential solar installs")

    async def test_gateway_always_failing_still_completes(self):
        gateway = make_gateway(side_effect=GenerationError("all models down"))
        section_plan = plan(2500, 4, KEYWORD)

        blocks = await ContentAssembler(gateway).assemble(KEYWORD, section_plan, self.company)

        paragraphs = [b for b in blocks if isinstance(b, Paragraph)]
        self.assertEqual(len(paragraphs), len(section_plan))
        self.assertEqual([p.section_role for p in paragraphs], [s.role for s in section_plan])
        for paragraph in paragraphs:
            self.assertTrue(paragraph.text)
            self.assertIn(KEYWORD, paragraph.text.lower())
            self.assertIn("Acme Solar", paragraph.text)

    async def test_fallback_is_deterministic(self):
        gateway = make_gateway(side_effect=GenerationError("down"))
        assembler = ContentAssembler(gateway)

        first = await assembler.assemble(KEYWORD, plan(2500, 4, KEYWORD), self.company)
        second = await assembler.assemble(KEYWORD, plan(2500, 4, KEYWORD), self.company)

        self.assertEqual(first, second)

    async def test_failure_is_section_local(self):
        responses = [
            result("Intro text."),
            GenerationError("timeout"),
            result("Section two text."),
            result("Conclusion text."),
        ]
        gateway = make_gateway(side_effect=responses)

        blocks = await ContentAssembler(gateway).assemble(KEYWORD, plan(1500, 2, KEYWORD), self.company)
        by_id = {b.id: b for b in blocks}

        self.assertEqual(by_id["intro"].text, "Intro text.")
        self.assertIn("Acme Solar", by_id["section-1"].text)
        self.assertEqual(by_id["section-2"].text, "Section two text.")
        self.assertEqual(by_id["conclusion"].text, "Conclusion text.")

    async def test_configuration_error_propagates(self):
        gateway = make_gateway(side_effect=ConfigurationError("no key"))

        with self.assertRaises(ConfigurationError):
            await ContentAssembler(gateway).assemble(KEYWORD, plan(2500, 4, KEYWORD), self.company)


class TestRegenerateBlock(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.company = CompanyContext(name="Acme Solar")
        self.blocks = await ContentAssembler(make_gateway()).assemble(KEYWORD, plan(2500, 4, KEYWORD), self.company)

    async def test_manual_text_replaces_only_one_block(self):
        assembler = ContentAssembler(make_gateway())

        updated = await assembler.regenerate_block(self.blocks, "section-2", KEYWORD, self.company,
                                                   new_text="Hand-written section.")

        changed = [b.id for old, b in zip(self.blocks, updated) if old != b]
        self.assertEqual(changed, ["section-2"])
        self.assertEqual(len(updated), len(self.blocks))
        self.assertEqual(updated[6].text, "Hand-written section.")
        self.assertNotEqual(self.blocks[6].text, "Hand-written section.")

    async def test_paragraph_regenerated_through_gateway(self):
        gateway = make_gateway(side_effect=[result("Fresh section about solar panel installation.")])
        assembler = ContentAssembler(gateway)

        updated = await assembler.regenerate_block(self.blocks, "section-1", KEYWORD, self.company,
                                                   custom_prompt="Add a cost comparison")

        prompt = gateway.generate.call_args.args[0]
        self.assertIn("Add a cost comparison", prompt)
        self.assertIn("What is Solar Panel Installation?", prompt)
        self.assertEqual(updated[4].text, "Fresh section about solar panel installation.")
        self.assertEqual(updated[4].section_role, "body")

    async def test_heading_regeneration_keeps_text_on_failure(self):
        gateway = make_gateway(side_effect=GenerationError("down"))

        updated = await ContentAssembler(gateway).regenerate_block(self.blocks, "h2-1", KEYWORD, self.company)

        self.assertEqual(updated, self.blocks)

    async def test_heading_regeneration_keeps_text_on_blank_answer(self):
        for answer in ['""', '   "  "  ']:
            with self.subTest(answer=answer):
                gateway = make_gateway(side_effect=[result(answer)])

                updated = await ContentAssembler(gateway).regenerate_block(self.blocks, "h2-1", KEYWORD, self.company)

                self.assertEqual(updated[3].text, self.blocks[3].text)

    async def test_heading_regeneration_uses_first_line(self):
        gateway = make_gateway(side_effect=[result('"Solar Panel Installation Costs Explained"\nExtra notes')])

        updated = await ContentAssembler(gateway).regenerate_block(self.blocks, "h2-1", KEYWORD, self.company)

        self.assertEqual(updated[3].text, "Solar Panel Installation Costs Explained")

    async def test_image_prompt_manual_update(self):
        updated = await ContentAssembler(make_gateway()).regenerate_block(
            self.blocks, "inline-image", KEYWORD, self.company, new_text="Close-up of panel wiring"
        )
        self.assertEqual(updated[7].prompt, "Close-up of panel wiring")

    async def test_unknown_block_raises(self):
        with self.assertRaises(KeyError):
            await ContentAssembler(make_gateway()).regenerate_block(self.blocks, "missing", KEYWORD, self.company)


if __name__ == '__main__':
    unittest.main()
