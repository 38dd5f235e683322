"""Markdown to HTML conversion.

Thin wrapper around mistune. Only CommonMark core syntax is enabled; raw HTML
in documents is escaped.
"""

import logging

import mistune

from mdserve.errors import ConversionError

logger = logging.getLogger(__name__)


class MarkdownConverter:
    """Convert markdown source bytes to an HTML fragment."""

    def __init__(self) -> None:
        self.markdown = mistune.create_markdown(escape=True, renderer="html", plugins=[])

    def convert(self, source: bytes) -> str:
        """Convert markdown bytes to HTML.

        Args:
            source: UTF-8 encoded markdown

        Returns:
            HTML fragment

        Raises:
            ConversionError: If the source is not valid UTF-8 or cannot be parsed
        """
        try:
            markdown_text = source.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ConversionError(f"Markdown is not valid UTF-8: {e}") from e

        logger.debug(f"Converting {len(markdown_text)} characters of markdown")
        try:
            html = self.markdown(markdown_text)
        except Exception as e:
            raise ConversionError(f"Markdown conversion failed: {e}") from e
        logger.debug(f"Converted to {len(html)} characters of HTML")
        return html
