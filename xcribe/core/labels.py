"""Display labels for the settings vocabulary.

Labels are for people only. Code branches on the enum members, never on these strings.
"""

from enum import Enum
from typing import Dict

from .models import StructureType, DetailLevel, OutputStyle, RenderingMode

STRUCTURE_LABELS: Dict[StructureType, str] = {
    StructureType.WORD_FOR_WORD: "Pure verbatim text",
    StructureType.SUMMARY: "Summary",
    StructureType.STRUCTURED: "Structured report (default)",
    StructureType.INTERVIEW: "Interview form (speaker by speaker)",
    StructureType.MINUTES: "Minutes / meeting notes",
    StructureType.CUSTOM: "Custom modular structure (build your own)",
}

DETAIL_LABELS: Dict[DetailLevel, str] = {
    DetailLevel.LITERAL: "Fully verbatim (everything literal)",
    DetailLevel.CLEANED: "Lightly cleaned (no filler words or repetitions)",
    DetailLevel.EDITED: "Heavily edited (content-focused, professional)",
}

STYLE_LABELS: Dict[OutputStyle, str] = {
    OutputStyle.RAW: "Raw transcription",
    OutputStyle.PROFESSIONAL: "Professional report",
    OutputStyle.BUSINESS: "Business / formal",
    OutputStyle.INFORMAL: "Informal / creative",
}

RENDERING_LABELS: Dict[RenderingMode, str] = {
    RenderingMode.FAST: "Fast rendering (priority: speed)",
    RenderingMode.QUALITY: "Quality rendering (priority: accuracy)",
}

_ALL_LABELS = {
    StructureType: STRUCTURE_LABELS,
    DetailLevel: DETAIL_LABELS,
    OutputStyle: STYLE_LABELS,
    RenderingMode: RENDERING_LABELS,
}


def label_for(value: Enum) -> str:
    """Human-readable label for any settings enum member."""
    return _ALL_LABELS[type(value)][value]
