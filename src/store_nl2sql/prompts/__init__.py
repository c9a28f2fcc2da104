"""Prompt assembly: schema text, store metadata, rules and few-shot examples."""

from __future__ import annotations

from .examples import FewShotExample, format_few_shot_examples, get_few_shot_examples
from .system import PROMPT_VERSION, build_metadata_section, build_system_prompt

__all__ = [
    "PROMPT_VERSION",
    "FewShotExample",
    "build_metadata_section",
    "build_system_prompt",
    "format_few_shot_examples",
    "get_few_shot_examples",
]
