"""
Markdown to HTML conversion, with optional pygments syntax highlighting for
fenced code blocks.
"""
from __future__ import annotations

import runpy
import typing as t
from pathlib import Path

import markdown_it
from mdit_py_plugins.anchors import anchors_plugin
from mdit_py_plugins.wordcount import wordcount_plugin
from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.style import Style
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .components.md_rendering import RoxyRendererHTML
from .errors import ThemeNotFound


def _find_style_class(namespace: dict[str, t.Any]) -> type[Style] | None:
    candidate = namespace.get('STYLE')
    if isinstance(candidate, type) and issubclass(candidate, Style):
        return candidate
    for value in namespace.values():
        if isinstance(value, type) and issubclass(value, Style) and value is not Style:
            return value
    return None


def load_theme(theme: str) -> type[Style]:
    """
    Resolve a highlighting theme. If @theme names an existing file, it is run
    as Python and must define a pygments `Style` subclass, preferably as
    `STYLE`. Otherwise @theme is looked up as a built-in pygments style name.
    """
    theme_path = Path(theme)
    if theme_path.is_file():
        try:
            namespace = runpy.run_path(str(theme_path))
        except Exception as exc:
            raise ThemeNotFound(f'theme file {theme_path} could not be loaded: {exc}') from exc
        style = _find_style_class(namespace)
        if style is None:
            raise ThemeNotFound(f'theme file {theme_path} does not define a pygments Style')
        return style

    try:
        return get_style_by_name(theme)
    except ClassNotFound as exc:
        raise ThemeNotFound(f'unknown theme {theme!r}') from exc


class Highlighter:
    """
    Syntax highlighting collaborator. Turns code into themed HTML, or returns
    None when pygments doesn't know the language.
    """
    def __init__(self, theme: str, **formatter_params: t.Any):
        self.theme = theme
        self.style = load_theme(theme)
        params = {'noclasses': True} | formatter_params
        self.formatter = HtmlFormatter(style=self.style, **params)

    def __call__(self, code: str, lang: str) -> str | None:
        try:
            lexer = get_lexer_by_name(lang)
        except ClassNotFound:
            return None
        return highlight(code, lexer, self.formatter)

    def highlight_fence(self, code: str, lang: str, _lang_attrs: str) -> str:
        """
        Adapter for markdown-it-py's `highlight` option, which treats an empty
        string as "not highlighted".
        """
        return self(code, lang) or ''


class RenderedMarkdown(t.NamedTuple):
    html: str
    wordcount: dict[str, int]


class MarkdownRenderer:
    """
    Converts markdown bodies into HTML. Parses according to CommonMark, with
    tables and strikethrough enabled.
    """
    def __init__(self,
                 highlighter: Highlighter | None = None,
                 *,
                 anchors: bool = False):
        """
        :param highlighter: A `Highlighter` for fenced code blocks tagged with
            a language. Without one, code is never highlighted.
        :param anchors: Whether to enable the `mdit_py_plugins.anchors`
            plugin, adding `id` attributes to headings.
        """
        self.highlighter = highlighter
        self.anchors = anchors
        self.processor = self._build_processor()

    @classmethod
    def from_theme(cls, theme: str | None, *, anchors: bool = False):
        """
        Build a renderer for an optional theme name or theme file path.
        """
        return cls(Highlighter(theme) if theme else None, anchors=anchors)

    def _build_processor(self):
        processor = markdown_it.MarkdownIt(
            'commonmark',
            {
                'highlight': self.highlighter.highlight_fence if self.highlighter else None,
            },
            renderer_cls=RoxyRendererHTML
        )
        processor.enable(['strikethrough', 'table'])
        if self.anchors:
            anchors_plugin(processor)
        wordcount_plugin(processor)
        return processor

    def render(self, body: str) -> RenderedMarkdown:
        """
        Render a markdown body to HTML, also returning word count data.
        """
        env: dict[str, t.Any] = {}
        rendered = self.processor.render(body, env=env)
        return RenderedMarkdown(rendered.strip(), dict(env.get('wordcount', {})))

    def __call__(self, body: str) -> str:
        return self.render(body).html
