"""Prompt Building Package"""

from work_facilitator.prompts.builder import PromptBuilder, PromptStyle, build_prompt

__all__ = [
    "PromptBuilder",
    "PromptStyle",
    "build_prompt",
]
