"""Markdown page rendering.

Reads a markdown document, converts it to HTML and wraps the result in the
page template together with the configured stylesheet and script references.
"""

from dataclasses import dataclass
from pathlib import Path

import jinja2
from markupsafe import Markup

from mdserve.core.converter import MarkdownConverter
from mdserve.errors import ConversionError, ReadError, TemplateError

DEFAULT_TITLE = "Document"
TITLE_MARKER = "# "
TEMPLATE_NAME = "page.html"


@dataclass(frozen=True)
class PageData:
    """Values injected into the page template."""

    title: str
    stylesheets: tuple[str, ...]
    scripts: tuple[str, ...]
    content: Markup


def extract_title(source: bytes) -> str:
    """Return the text of the first level-1 heading line.

    Lines are trimmed before matching. Falls back to DEFAULT_TITLE when no
    line starts with "# ".
    """
    for raw_line in source.split(b"\n"):
        line = raw_line.decode("utf-8", errors="replace").strip()
        if line.startswith(TITLE_MARKER):
            return line[len(TITLE_MARKER) :]
    return DEFAULT_TITLE


class PageRenderer:
    """Renders markdown documents into complete HTML pages.

    The template is compiled once at construction and shared by every request.
    Rendering holds no state between calls, so the same file content always
    produces the same page.
    """

    def __init__(
        self,
        *,
        stylesheets: tuple[str, ...] = (),
        scripts: tuple[str, ...] = (),
        converter: MarkdownConverter | None = None,
        environment: jinja2.Environment | None = None,
    ) -> None:
        """Initialize renderer.

        Args:
            stylesheets: Stylesheet URLs linked from every page, in order
            scripts: Script URLs included at the end of every page, in order
            converter: Markdown converter (default: MarkdownConverter())
            environment: Jinja2 environment providing page.html
                         (default: templates bundled with mdserve)
        """
        self._stylesheets = stylesheets
        self._scripts = scripts
        self._converter = converter or MarkdownConverter()
        env = environment or jinja2.Environment(
            loader=jinja2.PackageLoader("mdserve", "templates"),
            autoescape=jinja2.select_autoescape(["html"]),
            keep_trailing_newline=True,
        )
        self._template = env.get_template(TEMPLATE_NAME)

    def render(self, source_path: Path) -> bytes:
        """Render a markdown file to a UTF-8 encoded HTML page.

        Args:
            source_path: Resolved path of the markdown file

        Returns:
            Complete HTML page

        Raises:
            ReadError: If the file cannot be read
            ConversionError: If the markdown cannot be converted
            TemplateError: If the page template fails
        """
        try:
            source = source_path.read_bytes()
        except OSError as e:
            raise ReadError(f"Error reading file {source_path}: {e}") from e

        try:
            html = self._converter.convert(source)
        except ConversionError as e:
            raise ConversionError(f"Error converting markdown {source_path}: {e}") from e

        page = PageData(
            title=extract_title(source),
            stylesheets=self._stylesheets,
            scripts=self._scripts,
            content=Markup(html),
        )

        try:
            return self._template.render(page=page).encode("utf-8")
        except (jinja2.TemplateError, UnicodeEncodeError) as e:
            raise TemplateError(f"Error executing template for {source_path}: {e}") from e
