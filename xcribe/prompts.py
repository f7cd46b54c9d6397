"""Turns a settings snapshot into the instruction prompt sent with the audio.

Everything here is pure: the same settings always render to the same text.
"""

from typing import List

from .core.models import (
    TranscriptionSettings, StructureType, DetailLevel, OutputStyle, StructureSection
)

CLAUSE_SEPARATOR = "\n\n"

OPENING_TEMPLATE = "Transcribe the following audio into text in language: {language}."

STRUCTURE_CLAUSES = {
    StructureType.WORD_FOR_WORD: "Render a fully verbatim transcript, exactly as spoken.",
    StructureType.SUMMARY: "Write a concise summary of the main points.",
    StructureType.STRUCTURED: "Write a structured report with clear headings and paragraphs.",
    StructureType.INTERVIEW: 'Transcribe in interview form, labelling each turn as "Speaker 1:", "Speaker 2:", and so on.',
    StructureType.MINUTES: "Write professional meeting minutes covering the agenda, decisions and action items.",
}

CUSTOM_SECTIONS_INTRO = (
    "Structure the transcript into the following sections, "
    "using each title as a heading in exactly this order:"
)
CUSTOM_WITHOUT_SECTIONS = (
    "Structure the transcript into logical sections under clear headings of your own choosing."
)
SECTION_HEADING_MARKER = "## "

DETAIL_CLAUSES = {
    DetailLevel.LITERAL: "Keep every repetition, filler word and hesitation exactly as spoken.",
    DetailLevel.CLEANED: "Remove repetitions and unnecessary filler words, but preserve the meaning.",
    DetailLevel.EDITED: "Edit the text into polished, fluent professional sentences.",
}

STYLE_CLAUSES = {
    OutputStyle.RAW: "Render the spoken text directly, without changing its tone.",
    OutputStyle.PROFESSIONAL: "Use a professional, businesslike tone.",
    OutputStyle.BUSINESS: "Use a formal, business writing style.",
    OutputStyle.INFORMAL: "Use an informal, accessible style.",
}


def render_sections(sections: List[StructureSection]) -> str:
    """Render custom sections as ordered headings, each followed by its instruction."""
    if not sections:
        return CUSTOM_WITHOUT_SECTIONS

    blocks = [CUSTOM_SECTIONS_INTRO]
    for section in sections:
        blocks.append(f"{SECTION_HEADING_MARKER}{section.title}\n{section.instruction}")
    return CLAUSE_SEPARATOR.join(blocks)


def structure_clause(settings: TranscriptionSettings) -> str:
    if settings.structure is StructureType.CUSTOM:
        return render_sections(list(settings.sections))
    return STRUCTURE_CLAUSES[settings.structure]


def build_prompt(settings: TranscriptionSettings) -> str:
    """
    Render the user prompt for a transcription request.

    Clauses appear in a fixed order, separated by a blank line:
    opening (target language), structure, detail level, output style.
    The language is interpolated verbatim, even when empty.
    """
    clauses = [
        OPENING_TEMPLATE.format(language=settings.language),
        structure_clause(settings),
        DETAIL_CLAUSES[settings.detail_level],
        STYLE_CLAUSES[settings.output_style],
    ]
    return CLAUSE_SEPARATOR.join(clauses)
