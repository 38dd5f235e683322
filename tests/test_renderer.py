"""Tests for page renderer."""

from pathlib import Path

import jinja2
import pytest

from mdserve.core.renderer import DEFAULT_TITLE, PageRenderer, extract_title
from mdserve.errors import ConversionError, ReadError, TemplateError


class TestExtractTitle:
    """Tests for extract_title()."""

    def test__h1_line__returns_heading_text(self) -> None:
        """Return the text after the level-1 marker."""
        assert extract_title(b"# Title Text\n\nBody") == "Title Text"

    def test__indented_h1__trimmed_before_matching(self) -> None:
        """Surrounding whitespace is trimmed per line."""
        assert extract_title(b"intro\n   # Spaced Title   \nmore") == "Spaced Title"

    def test__first_h1_wins(self) -> None:
        """Return the first matching line."""
        assert extract_title(b"# First\n# Second") == "First"

    def test__h2_only__returns_placeholder(self) -> None:
        """Lower-level headings are not titles."""
        assert extract_title(b"## Section\ntext") == DEFAULT_TITLE

    def test__marker_without_space__returns_placeholder(self) -> None:
        """The marker must be followed by a space."""
        assert extract_title(b"#hashtag") == DEFAULT_TITLE

    def test__crlf_line_endings__stripped(self) -> None:
        """Carriage returns do not leak into the title."""
        assert extract_title(b"# Windows\r\nbody\r\n") == "Windows"

    def test__empty_document__returns_placeholder(self) -> None:
        assert extract_title(b"") == "Document"

    @pytest.mark.parametrize(
        "line",
        [
            "\u00a0# Hello\u3000",
            "\t# Hello\u2003",
            "\u3000\u3000# Hello",
        ],
    )
    def test__unicode_whitespace__trimmed_before_matching(self, line: str) -> None:
        """Non-ASCII whitespace around the heading is trimmed too."""
        assert extract_title(f"{line}\nbody".encode()) == "Hello"


class TestPageRendererRender:
    """Tests for PageRenderer.render()."""

    def test__simple_markdown__renders_page(self, tmp_path: Path) -> None:
        """Render heading, paragraph and title into the page template."""
        source_path = tmp_path / "readme.md"
        source_path.write_text("# Hello\nWorld")

        page = PageRenderer().render(source_path).decode("utf-8")

        assert page.startswith("<!DOCTYPE html>")
        assert "<title>Hello</title>" in page
        assert "<h1>Hello</h1>" in page
        assert "<p>World</p>" in page

    def test__references__rendered_in_configured_order(self, tmp_path: Path) -> None:
        """Stylesheets go in the head and scripts after the content, in order."""
        source_path = tmp_path / "page.md"
        source_path.write_text("Body text")

        renderer = PageRenderer(
            stylesheets=("/a.css", "/b.css"),
            scripts=("/one.js", "/two.js"),
        )
        page = renderer.render(source_path).decode("utf-8")

        assert page.index('href="/a.css"') < page.index('href="/b.css"') < page.index("<title>")
        assert page.index("Body text") < page.index('src="/one.js"') < page.index('src="/two.js"')
        assert page.count('<link rel="stylesheet"') == 2
        assert page.count("<script src=") == 2

    def test__no_references__no_link_or_script_elements(self, tmp_path: Path) -> None:
        """Empty reference lists produce no elements."""
        source_path = tmp_path / "page.md"
        source_path.write_text("# Plain")

        page = PageRenderer().render(source_path).decode("utf-8")

        assert "<link" not in page
        assert "<script" not in page

    def test__title_and_urls__html_escaped(self, tmp_path: Path) -> None:
        """Title and reference URLs are escaped, content is not double-escaped."""
        source_path = tmp_path / "page.md"
        source_path.write_text("# Fish & <Chips>\n\n*emphasis*")

        renderer = PageRenderer(stylesheets=('/x.css?a=1&b="2"',))
        page = renderer.render(source_path).decode("utf-8")

        assert "<title>Fish &amp; &lt;Chips&gt;</title>" in page
        assert 'href="/x.css?a=1&amp;b=&#34;2&#34;"' in page
        assert "<em>emphasis</em>" in page

    def test__same_input__byte_identical_output(self, tmp_path: Path) -> None:
        """Rendering is deterministic."""
        source_path = tmp_path / "page.md"
        source_path.write_text("# Stable\n\n- one\n- two\n")
        renderer = PageRenderer(stylesheets=("/s.css",), scripts=("/s.js",))

        assert renderer.render(source_path) == renderer.render(source_path)
        assert renderer.render(source_path) == PageRenderer(
            stylesheets=("/s.css",), scripts=("/s.js",)
        ).render(source_path)

    def test__missing_file__raises_read_error(self, tmp_path: Path) -> None:
        """Raise ReadError when the file cannot be read."""
        with pytest.raises(ReadError, match="Error reading file"):
            PageRenderer().render(tmp_path / "gone.md")

    def test__invalid_utf8__raises_conversion_error(self, tmp_path: Path) -> None:
        """Raise ConversionError naming the file when conversion fails."""
        source_path = tmp_path / "bad.md"
        source_path.write_bytes(b"\xff\xfe# broken")

        with pytest.raises(ConversionError, match="bad.md"):
            PageRenderer().render(source_path)

    def test__template_failure__raises_template_error(self, tmp_path: Path) -> None:
        """Raise TemplateError when the page template fails."""
        source_path = tmp_path / "page.md"
        source_path.write_text("# Title")
        environment = jinja2.Environment(
            loader=jinja2.DictLoader({"page.html": "{{ page.title | explode }}"}),
        )
        environment.filters["explode"] = _raise_template_error

        renderer = PageRenderer(environment=environment)

        with pytest.raises(TemplateError, match="Error executing template"):
            renderer.render(source_path)

    def test__public_messages__contain_no_detail(self) -> None:
        """Response messages are generic."""
        assert ReadError.public_message == "Unable to read file"
        assert ConversionError.public_message == "Error rendering markdown"
        assert TemplateError.public_message == "Error rendering page"


def _raise_template_error(value: str) -> str:
    raise jinja2.TemplateRuntimeError(f"cannot render {value}")
