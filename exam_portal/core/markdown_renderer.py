"""Markdown + LaTeX rendering of question, option and passage text.

The server turns the stored markup into HTML fragments and the browser
typesets any ``$...$`` math with MathJax, so the same source renders the
same way on the exam and result pages. Raw HTML in question banks is not
passed through.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from markdown_it import MarkdownIt

MATHJAX_SCRIPT_URL = "https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-mml-chtml.js"


@dataclass(slots=True)
class MarkdownMathRenderer:
    """Converts markdown-with-math into HTML fragments."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)
    _inline: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html})
            .enable("table")
            .enable("strikethrough")
        )
        self._inline = MarkdownIt("commonmark", {"html": self.enable_html})

    def render_fragment(self, markdown_text: str | None) -> str:
        """Render a markdown string into a block-level HTML fragment."""

        sanitized = (markdown_text or "").strip()
        if not sanitized:
            return "<p><em>No content provided.</em></p>"
        return self._markdown.render(sanitized)

    def render_inline(self, markdown_text: str | None) -> str:
        """Render short text such as an option label without wrapping paragraphs."""

        sanitized = (markdown_text or "").strip()
        if not sanitized:
            return ""
        return self._inline.renderInline(sanitized)


renderer = MarkdownMathRenderer()
