"""Markdown rendering for question prompts shown in the student window.

Prompts are authored as CommonMark (tables and strikethrough enabled) and
rendered to the HTML subset a Qt rich-text label understands.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import html

from markdown_it import MarkdownIt

_EMPTY_PROMPT_HTML = "<p><em>No question text.</em></p>"


@dataclass(slots=True)
class MarkdownRenderer:
    """Turns question markdown into HTML fragments."""

    allow_raw_html: bool = False
    _parser: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._parser = MarkdownIt("commonmark", {"html": self.allow_raw_html}).enable(
            ["table", "strikethrough"]
        )

    def render_fragment(self, markdown_text: str) -> str:
        text = markdown_text.strip()
        if not text:
            return _EMPTY_PROMPT_HTML
        return self._parser.render(text)

    def render_question(self, prompt: str, marks: int) -> str:
        """Render a prompt followed by its mark weighting."""
        unit = "mark" if marks == 1 else "marks"
        footer = f'<p style="color: #6b7280;">{html.escape(f"{marks} {unit}")}</p>'
        return self.render_fragment(prompt) + footer


renderer = MarkdownRenderer()
