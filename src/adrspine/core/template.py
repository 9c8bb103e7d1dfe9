"""Initial section skeleton for new decisions."""

from __future__ import annotations

from adrspine.core.models import SECTION_NAMES, Section

_PROMPTS = {
    "Problem": "What forces and constraints make this decision necessary?",
    "Decision": "State the decision in one or two sentences.",
    "Rationale": "Why this option over the alternatives?",
    "Enforcement": "How is the decision checked (lint rule, review checklist, test)?",
    "References": "Related ADRs, issues and external documents.",
}


def skeleton_sections(title: str = "") -> tuple[Section, ...]:
    """One prompt-filled section per canonical section name."""
    sections = []
    for name in SECTION_NAMES:
        text = f"_{_PROMPTS[name]}_"
        if name == "Problem" and title:
            text = f"_{title}: {_PROMPTS[name][0].lower()}{_PROMPTS[name][1:]}_"
        sections.append(Section(name, text))
    return tuple(sections)


__all__ = ["skeleton_sections"]
