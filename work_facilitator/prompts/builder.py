"""Prompt Builder - Construct LLM prompts for commit message generation."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from work_facilitator.ai.base import GenerateOptions


class PromptStyle(str, Enum):
    """Output-format policy applied to the generated prompt."""
    STRICT = "strict"
    CONVENTIONAL = "conventional"


_STRICT_CONSTRAINTS = """\
Task: Generate a git commit message for the provided diff.

Strict Constraints:
1. Output ONLY the raw message. No markdown, no quotes, no conversational filler.
2. Format: Single line, under 72 characters.
3. Content: Start directly with the action verb (e.g., 'update', 'fix', 'add').
4. FORBIDDEN: Do NOT use prefixes like 'feat:', 'fix:', 'docs:', or 'refactor(scope):'.
5. Character Set: Alphanumeric and spaces ONLY. Absolutely NO punctuation (no periods, no colons, no hyphens, no parentheses) and NO special symbols.
"""

_CONVENTIONAL_HEADER = "Generate a concise git commit message for the following changes:"

_CONVENTIONAL_REQUIREMENTS = """\
IMPORTANT FORMATTING REQUIREMENTS:
- Provide ONLY the commit message as a single line of plain text
- Do NOT use any prefixes like 'feat:', 'fix:', 'refactor:', 'chore:', etc.
- Do NOT use backticks, quotes, asterisks, or any markdown formatting
- Do NOT use special characters like colons, parentheses, brackets, or emojis
- Do NOT include any explanation, context, or additional text
- Start directly with the action verb (e.g., 'Add', 'Update', 'Remove', 'Fix', 'Enhance')
- Keep it simple and descriptive

Example of CORRECT format: 'Add user authentication to login page'
Example of INCORRECT format: 'feat: Add user authentication to login page'
Example of INCORRECT format: 'Add `user authentication` to login page'
"""


class PromptBuilder:
    """Constructs prompts for single-line commit message generation."""

    def __init__(self, style: PromptStyle | str = PromptStyle.STRICT):
        self.style = PromptStyle(style)

    def build(self, diff: str, options: GenerateOptions) -> str:
        if self.style is PromptStyle.CONVENTIONAL:
            sections = [
                _CONVENTIONAL_HEADER,
                self._build_diff_section(diff),
                self._build_context_section(options),
                self._build_standard_section(options),
                _CONVENTIONAL_REQUIREMENTS,
            ]
        else:
            sections = [
                _STRICT_CONSTRAINTS,
                "Input Diff:\n" + self._build_diff_section(diff),
                self._build_context_section(options),
            ]
        return "\n".join(filter(None, sections))

    def _build_diff_section(self, diff: str) -> str:
        return f"```diff\n{diff}\n```\n"

    def _build_context_section(self, options: GenerateOptions) -> str:
        lines = []
        if options.branch_name:
            lines.append(f"Current branch: {options.branch_name}")
        if options.additional_context:
            lines.append(f"Additional context: {options.additional_context}")
        return "\n".join(lines) + "\n" if lines else ""

    def _build_standard_section(self, options: GenerateOptions) -> str:
        if not options.commit_standard:
            return ""
        return (
            "The message will be prefixed automatically to satisfy this commit standard "
            f"(regex): {options.commit_standard}\n"
            "Write only the part that follows the prefix.\n"
        )


def build_prompt(diff: str, options: GenerateOptions,
                 style: PromptStyle | str = PromptStyle.STRICT) -> str:
    """Render the prompt for any provider. Pure and deterministic."""
    return PromptBuilder(style).build(diff, options)
