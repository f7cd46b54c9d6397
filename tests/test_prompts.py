import unittest
import sys
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from xcribe.core.models import (
    TranscriptionSettings, StructureSection, StructureType, DetailLevel, OutputStyle, RenderingMode
)
from xcribe.prompts import (
    build_prompt, STRUCTURE_CLAUSES, DETAIL_CLAUSES, STYLE_CLAUSES,
    CUSTOM_SECTIONS_INTRO, CUSTOM_WITHOUT_SECTIONS,
)

LEGAL_SECTIONS = (
    StructureSection(id="1", title="Partijen", instruction="Who is present and what is their role?"),
    StructureSection(id="2", title="Feiten", instruction="Which undisputed facts were discussed?"),
)


class TestBuildPrompt(unittest.TestCase):

    def test_opening_sentence_interpolates_language_verbatim(self):
        prompt = build_prompt(TranscriptionSettings(language="Nederlands"))
        self.assertTrue(prompt.startswith("Transcribe the following audio into text in language: Nederlands."))

    def test_empty_language_is_passed_through(self):
        prompt = build_prompt(TranscriptionSettings(language=""))
        self.assertTrue(prompt.startswith("Transcribe the following audio into text in language: ."))

    def test_each_fixed_structure_has_exactly_one_clause(self):
        for structure, clause in STRUCTURE_CLAUSES.items():
            with self.subTest(structure=structure):
                prompt = build_prompt(TranscriptionSettings(structure=structure))
                self.assertEqual(prompt.count(clause), 1)
                others = [c for s, c in STRUCTURE_CLAUSES.items() if s is not structure]
                for other in others:
                    self.assertNotIn(other, prompt)

    def test_prompt_is_deterministic(self):
        settings = TranscriptionSettings(
            structure=StructureType.MINUTES,
            detail_level=DetailLevel.EDITED,
            output_style=OutputStyle.BUSINESS,
            language="English",
        )
        self.assertEqual(build_prompt(settings), build_prompt(settings))
        self.assertEqual(build_prompt(settings), build_prompt(settings.model_copy()))

    def test_clause_order_and_blank_line_separation(self):
        settings = TranscriptionSettings(
            structure=StructureType.SUMMARY,
            detail_level=DetailLevel.CLEANED,
            output_style=OutputStyle.INFORMAL,
            language="English",
        )
        blocks = build_prompt(settings).split("\n\n")
        self.assertEqual(blocks[1], STRUCTURE_CLAUSES[StructureType.SUMMARY])
        self.assertEqual(blocks[2], DETAIL_CLAUSES[DetailLevel.CLEANED])
        self.assertEqual(blocks[3], STYLE_CLAUSES[OutputStyle.INFORMAL])
        self.assertEqual(len(blocks), 4)

    def test_custom_sections_in_order_with_instructions(self):
        settings = TranscriptionSettings(structure=StructureType.CUSTOM, sections=LEGAL_SECTIONS)
        prompt = build_prompt(settings)

        self.assertIn(CUSTOM_SECTIONS_INTRO, prompt)
        self.assertIn("## Partijen\nWho is present and what is their role?", prompt)
        self.assertIn("## Feiten\nWhich undisputed facts were discussed?", prompt)
        self.assertLess(prompt.index("## Partijen"), prompt.index("## Feiten"))

    def test_custom_without_sections_uses_fallback(self):
        prompt = build_prompt(TranscriptionSettings(structure=StructureType.CUSTOM, sections=()))
        self.assertIn(CUSTOM_WITHOUT_SECTIONS, prompt)
        self.assertNotIn("## ", prompt)

    def test_detail_and_style_present_once_for_every_structure(self):
        for structure in StructureType:
            for detail in DetailLevel:
                for style in OutputStyle:
                    settings = TranscriptionSettings(
                        structure=structure, detail_level=detail, output_style=style,
                        sections=LEGAL_SECTIONS,
                    )
                    prompt = build_prompt(settings)
                    with self.subTest(structure=structure, detail=detail, style=style):
                        self.assertEqual(prompt.count(DETAIL_CLAUSES[detail]), 1)
                        self.assertEqual(prompt.count(STYLE_CLAUSES[style]), 1)

    def test_rendering_mode_does_not_change_prompt(self):
        fast = TranscriptionSettings(rendering_mode=RenderingMode.FAST)
        quality = TranscriptionSettings(rendering_mode=RenderingMode.QUALITY)
        self.assertEqual(build_prompt(fast), build_prompt(quality))

    def test_sections_ignored_for_non_custom_structure(self):
        settings = TranscriptionSettings(structure=StructureType.STRUCTURED, sections=LEGAL_SECTIONS)
        self.assertEqual(settings.sections, ())
        self.assertNotIn("Partijen", build_prompt(settings))


if __name__ == '__main__':
    unittest.main()
