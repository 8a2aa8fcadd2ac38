"""
Tests for the SEO compliance scorer.

Covers the rubric table, determinism, monotonicity, the score cap and the
solar panel installation end-to-end scenario.
"""

import unittest

from blog_engine.schemas import Heading, ImagePlaceholder, MetaData, Paragraph
from blog_engine.scorer import MAX_SCORE, RUBRIC, body_text, score, seo_grade

KEYWORD = "solar panel installation"


def build_text(total_words: int, keyword: str, occurrences: int, filler: str = "energy") -> str:
    """Text of exactly ``total_words`` tokens that starts with the keyword."""
    keyword_tokens = len(keyword.split())
    filler_words = total_words - occurrences * keyword_tokens
    chunk, remaining = divmod(filler_words, occurrences)
    parts = []
    for _ in range(occurrences):
        parts.append(keyword)
        parts.append(" ".join([filler] * chunk))
    parts.append(" ".join([filler] * remaining))
    return " ".join(p for p in parts if p)


def make_description(text: str, length: int = 150) -> str:
    padding = " Trusted installers, transparent pricing, fast permits and lasting warranties for every home."
    return (text + padding * 3)[:length]


class ScorerFixture(unittest.TestCase):

    def well_formed(self):
        blocks = [
            ImagePlaceholder(id="feature-image", prompt="p", alt_text="a", role="feature"),
            Heading(id="h1", level=1, text="Solar Panel Installation: Complete Guide for Homeowners"),
            Paragraph(id="intro", text=build_text(200, KEYWORD, 3), section_role="intro"),
            Heading(id="h2-1", level=2, text="What is Solar Panel Installation?"),
            Paragraph(id="section-1", text=build_text(400, "solar panel installation", 5), section_role="body"),
            Heading(id="h2-2", level=2, text="Benefits of Solar Panel Installation"),
            Paragraph(id="section-2", text=build_text(400, "solar panel installation", 5), section_role="body"),
            Paragraph(id="conclusion", text=build_text(250, KEYWORD, 2), section_role="conclusion"),
        ]
        meta = MetaData(
            h1="Solar Panel Installation: Complete Guide for Homeowners",
            meta_title="Solar Panel Installation | Acme Solar",
            meta_description=make_description("Solar panel installation made simple with Acme Solar. Book a free consultation today."),
            slug="solar-panel-installation",
        )
        return blocks, meta


class TestRubric(unittest.TestCase):

    def test_weights_sum_to_100(self):
        self.assertEqual(sum(rule.weight for rule in RUBRIC), 100)
        self.assertEqual(MAX_SCORE, 100)

    def test_rule_names_unique(self):
        names = [rule.name for rule in RUBRIC]
        self.assertEqual(len(names), len(set(names)))
        self.assertEqual(len(names), 10)

    def test_readability_always_granted(self):
        result = score([], MetaData(h1="", meta_title="", meta_description="", slug=""), KEYWORD)
        self.assertTrue(result.checks["content_readability"])


class TestWellFormedScenario(ScorerFixture):
    """Keyword in h1, 150-char description, keyword slug, 1250 words, 1.2% density."""

    def test_scores_at_least_85(self):
        blocks, meta = self.well_formed()
        self.assertEqual(len(meta.meta_description), 150)

        result = score(blocks, meta, KEYWORD)

        self.assertEqual(result.word_count, 1250)
        self.assertEqual(result.keyword_count, 15)
        self.assertAlmostEqual(result.keyword_density, 1.2)
        self.assertGreaterEqual(result.score, 85)
        self.assertLessEqual(len(result.recommendations), 1)
        self.assertEqual(result.score, 100)
        self.assertTrue(all(result.checks.values()))

    def test_headings_and_images_do_not_count_as_words(self):
        blocks, _ = self.well_formed()
        self.assertNotIn("What is", body_text(blocks))


class TestDeterminismAndMonotonicity(ScorerFixture):

    def test_same_input_same_result(self):
        blocks, meta = self.well_formed()
        self.assertEqual(score(blocks, meta, KEYWORD), score(blocks, meta, KEYWORD))

    def test_adding_keyword_to_description_never_lowers_score(self):
        blocks, meta = self.well_formed()
        without = meta.model_copy(update={
            "meta_description": make_description("Rooftop energy made simple with Acme Solar. Book a free consultation today."),
        })
        with_keyword = meta.model_copy(update={
            "meta_description": make_description("Solar panel installation made simple with Acme Solar. Book a free consultation today."),
        })

        before = score(blocks, without, KEYWORD)
        after = score(blocks, with_keyword, KEYWORD)

        self.assertFalse(before.checks["keyword_in_meta_description"])
        self.assertTrue(after.checks["keyword_in_meta_description"])
        self.assertGreaterEqual(after.score, before.score)
        self.assertEqual(after.score - before.score, 10)

    def test_adding_keyword_to_slug_never_lowers_score(self):
        blocks, meta = self.well_formed()
        before = score(blocks, meta.model_copy(update={"slug": "rooftop-guide"}), KEYWORD)
        after = score(blocks, meta, KEYWORD)
        self.assertGreaterEqual(after.score, before.score)


class TestFailedRules(ScorerFixture):

    def test_short_content_recommendation(self):
        blocks = [Paragraph(id="intro", text=build_text(300, KEYWORD, 3), section_role="intro")]
        _, meta = self.well_formed()

        result = score(blocks, meta, KEYWORD)

        self.assertFalse(result.checks["content_length"])
        self.assertIn("Increase content length to at least 1102 words (current: 300)", result.recommendations)
        self.assertEqual(result.score, 90)

    def test_keyword_outside_first_100_words(self):
        text = " ".join(["energy"] * 150) + " " + KEYWORD
        blocks = [Paragraph(id="intro", text=text, section_role="intro")]
        _, meta = self.well_formed()

        result = score(blocks, meta, KEYWORD)

        self.assertFalse(result.checks["keyword_in_introduction"])
        self.assertTrue(result.checks["keyword_in_content"])

    def test_density_out_of_range(self):
        blocks = [Paragraph(id="intro", text=" ".join([KEYWORD] * 50), section_role="intro")]
        _, meta = self.well_formed()

        result = score(blocks, meta, KEYWORD)

        self.assertFalse(result.checks["keyword_density"])
        self.assertIn("Adjust keyword density to 0.5-2.5% (current: 33.33%)", result.recommendations)

    def test_long_title_and_bad_description(self):
        blocks, meta = self.well_formed()
        meta = meta.model_copy(update={
            "h1": "Solar Panel Installation: The Complete and Definitive Guide for Every Homeowner",
            "meta_description": "Solar panel installation guide.",
        })

        result = score(blocks, meta, KEYWORD)

        self.assertFalse(result.checks["title_length"])
        self.assertFalse(result.checks["meta_description_length"])
        self.assertEqual(result.score, 85)
        self.assertIn("Meta description should be 140-160 characters (current: 31)", result.recommendations)

    def test_empty_content(self):
        _, meta = self.well_formed()
        result = score([], meta, KEYWORD)
        self.assertEqual(result.word_count, 0)
        self.assertEqual(result.keyword_density, 0.0)
        self.assertLessEqual(result.score, MAX_SCORE)

    def test_empty_keyword_fails_keyword_rules(self):
        blocks, meta = self.well_formed()
        result = score(blocks, meta, "")
        for rule in ("keyword_in_title", "keyword_in_meta_description", "keyword_in_slug",
                     "keyword_in_introduction", "keyword_in_content", "keyword_density"):
            self.assertFalse(result.checks[rule], rule)


class TestGrade(unittest.TestCase):

    def test_grade_boundaries(self):
        self.assertEqual(seo_grade(100), "A+")
        self.assertEqual(seo_grade(90), "A+")
        self.assertEqual(seo_grade(85), "A")
        self.assertEqual(seo_grade(70), "B")
        self.assertEqual(seo_grade(60), "C")
        self.assertEqual(seo_grade(50), "D")
        self.assertEqual(seo_grade(49), "F")


if __name__ == '__main__':
    unittest.main()
