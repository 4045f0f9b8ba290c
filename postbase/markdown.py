import re
import functools
import html
from typing import Dict, Optional

from marko import Markdown, inline
from marko.ext.gfm import elements, renderer
from marko.helpers import MarkoExtension, render_dispatch
from marko.html_renderer import HTMLRenderer

from .value_objs import Excerpt

_md: Optional[Markdown] = None

MORE_MARKER = "<!--more-->"

HIGHLIGHT_REGEX = re.compile(
    r"""^[ \t]*\{\{[<%]\s*highlight\s+"?(?P<lang>[^\s"<>%{}]+)"?"""
    r"""(?:\s+(?:"(?P<options>[^"]*)"|(?P<bare_options>[^\s"<>%{}]+)))?\s*[>%]\}\}[ \t]*\n"""
    r"""(?P<code>.*?)"""
    r"""^[ \t]*\{\{[<%]\s*/highlight\s*[>%]\}\}[ \t]*$""",
    re.MULTILINE | re.DOTALL,
)

SHORTCODE_ATTR_REGEX = re.compile(r'(\w+)\s*=\s*(?:"([^"]*)"|([^\s"]+))')


def parse_shortcode_attrs(attr_str: str) -> Dict[str, str]:
    return {
        m.group(1): m.group(2) if m.group(2) is not None else m.group(3)
        for m in SHORTCODE_ATTR_REGEX.finditer(attr_str)
    }


class Figure(inline.InlineElement):
    """An image directive, eg '{{< figure src="/img/a.png" alt="A" >}}'."""

    pattern = r"\{\{[<%]\s*figure\s+(.*?)\s*/?[>%]\}\}"
    parse_children = False
    priority = 6
    children = []

    def __init__(self, match):
        attrs = parse_shortcode_attrs(match.group(1))
        self.src = attrs.get("src", "")
        self.alt = attrs.get("alt", "")
        self.title = attrs.get("title")
        self.width = attrs.get("width")


class PostbaseRendererMixin:
    @render_dispatch(HTMLRenderer)  # type: ignore
    def render_figure(self, element: Figure) -> str:
        """Turns an image directive into an image element"""
        attrs = [
            f'src="{html.escape(element.src)}"',
            f'alt="{html.escape(element.alt)}"',
        ]
        if element.title is not None:
            attrs.append(f'title="{html.escape(element.title)}"')
        if element.width is not None:
            attrs.append(f'width="{html.escape(element.width)}"')
        return "<img {}>".format(" ".join(attrs))

    @render_dispatch(HTMLRenderer)  # type: ignore
    def render_fenced_code(self, element) -> str:
        """Code is left for the browser to colour, so just keep the language
        (and any options) where a highlighter can find them."""
        code = html.escape(element.children[0].children)
        if not element.lang:
            return f"<pre><code>{code}</code></pre>\n"
        lang = html.escape(element.lang)
        pre_attrs = f' class="highlight" data-lang="{lang}"'
        if element.extra:
            pre_attrs += f' data-options="{html.escape(element.extra.strip())}"'
        return f'<pre{pre_attrs}><code class="language-{lang}">{code}</code></pre>\n'


PostbaseExtension = MarkoExtension(
    elements=[Figure],
    renderer_mixins=[PostbaseRendererMixin],
)


class GFMRendererMixin(renderer.GFMRendererMixin):
    """GFM rendering, except that tables from post bodies carry a class for
    the site's stylesheet to hook onto."""

    TABLE_CLASS = "post-table"

    @render_dispatch(HTMLRenderer)
    def render_table(self, element):
        head, *rows = element.children
        parts = [f'<table class="{self.TABLE_CLASS}">\n']
        parts.append(f"<thead>\n{self.render(head)}</thead>")  # type: ignore
        if rows:
            rendered_rows = "".join(self.render(row) for row in rows)  # type: ignore
            parts.append(f"\n<tbody>\n{rendered_rows}</tbody>")
        parts.append("</table>")
        return "".join(parts)


GFM = MarkoExtension(
    elements=[
        elements.Paragraph,
        elements.InlineHTML,
        elements.Strikethrough,
        elements.Url,
        elements.Table,
        elements.TableRow,
        elements.TableCell,
    ],
    renderer_mixins=[GFMRendererMixin],
)


def get_markdown() -> Markdown:
    global _md
    if _md is None:
        _md = Markdown(extensions=[GFM, PostbaseExtension])
    return _md


def _fence_for(code: str) -> str:
    longest = max((len(run) for run in re.findall(r"~+", code)), default=0)
    return "~" * max(3, longest + 1)


def _highlight_to_fenced(match: "re.Match") -> str:
    lang = match.group("lang")
    options = match.group("options") or match.group("bare_options") or ""
    code = match.group("code")
    fence = _fence_for(code)
    info = f"{lang} {options}".rstrip()
    return f"{fence}{info}\n{code}{fence}"


def expand_highlight_directives(md_str: str) -> str:
    """Rewrite highlight directives as fenced code blocks, which marko
    already understands."""
    return HIGHLIGHT_REGEX.sub(_highlight_to_fenced, md_str)


@functools.lru_cache
def render_markdown(md_str: str) -> str:
    return get_markdown().convert(expand_highlight_directives(md_str))


def split_excerpt(md_str: str, length: int = 300) -> Excerpt:
    """The part of a post shown in listings.

    Everything before the more marker, if there is one.  Otherwise the whole
    body when it is short enough, or the body cut at the last whitespace
    before length.

    """
    before, marker, _ = md_str.partition(MORE_MARKER)
    if marker:
        return Excerpt(markdown=before.rstrip(), truncated=True)
    stripped = md_str.strip()
    if len(stripped) <= length:
        return Excerpt(markdown=stripped, truncated=False)
    cut = stripped[:length]
    last_space = max(cut.rfind(" "), cut.rfind("\n"))
    if last_space > 0:
        cut = cut[:last_space]
    return Excerpt(markdown=cut.rstrip() + "…", truncated=True)


def strip_more_marker(md_str: str) -> str:
    return md_str.replace(MORE_MARKER, "", 1)
