"""Markdown to HTML rendering with markdown-it-py."""

from __future__ import annotations

import asyncio
from pathlib import Path

from markdown_it import MarkdownIt

from file_converter.application.cancellation import CancellationToken
from file_converter.application.parameters import ConversionParameters
from file_converter.application.progress import ProgressReporter
from file_converter.converters.base import BaseConverter, read_text, write_text
from file_converter.converters.text import DEFAULT_TITLE, render_html_document
from file_converter.formats import FileFormat

ADVANCED_RULES = ("table", "strikethrough")

MARKDOWN_CSS = """
    body {
        font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', sans-serif;
        line-height: 1.6;
        padding: 20px;
        color: #333;
        max-width: 800px;
        margin: 0 auto;
    }
    .content {
        background-color: #fff;
        padding: 20px;
        border-radius: 5px;
        box-shadow: 0 2px 5px rgba(0,0,0,0.1);
    }
    h1, h2, h3, h4, h5, h6 { margin-top: 1.5em; margin-bottom: 0.5em; font-weight: 600; }
    code {
        background-color: #f5f5f5;
        padding: 0.2em 0.4em;
        border-radius: 3px;
        font-family: Consolas, Monaco, 'Ubuntu Mono', monospace;
        font-size: 85%;
    }
    pre { background-color: #f5f5f5; padding: 1em; border-radius: 5px; overflow-x: auto; }
    pre code { background-color: transparent; padding: 0; }
    blockquote { border-left: 4px solid #ddd; padding-left: 1em; margin-left: 0; color: #666; }
    table { border-collapse: collapse; width: 100%; margin: 1em 0; }
    table, th, td { border: 1px solid #ddd; }
    th, td { padding: 0.5em; text-align: left; }
    th { background-color: #f5f5f5; }
    img { max-width: 100%; height: auto; }
"""


def build_markdown_it(advanced: bool = True) -> MarkdownIt:
    """Return a CommonMark renderer, with GFM tables and strikethrough if ``advanced``."""
    md = MarkdownIt("commonmark", {"html": True})
    if advanced:
        md.enable(list(ADVANCED_RULES))
    return md


def render_markdown(text: str, advanced: bool = True) -> str:
    return build_markdown_it(advanced).render(text)


class MarkdownToHtmlConverter(BaseConverter):
    """Render Markdown as a standalone HTML page.

    Parameters read: ``title``, ``css`` and ``useAdvancedExtensions``
    (default true).
    """

    input_format = FileFormat.MD
    output_format = FileFormat.HTML
    description = "Markdown to HTML"

    async def run(
        self,
        input_path: Path,
        output_path: Path,
        parameters: ConversionParameters,
        reporter: ProgressReporter,
        cancel_token: CancellationToken,
    ) -> None:
        reporter.report(20, "Reading Markdown file...")
        content = await read_text(input_path)
        cancel_token.raise_if_cancelled()

        reporter.report(50, "Converting to HTML format...")
        body = await asyncio.to_thread(
            render_markdown,
            content,
            parameters.get_parameter("useAdvancedExtensions", True),
        )
        document = render_html_document(
            parameters.get_parameter("title", DEFAULT_TITLE),
            parameters.get_parameter("css", MARKDOWN_CSS),
            body,
        )
        cancel_token.raise_if_cancelled()

        reporter.report(80, "Writing HTML file...")
        await write_text(output_path, document, cancel_token)
