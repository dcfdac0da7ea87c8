"""
Loading layouts as Jinja templates, and rendering pages into them.
"""
from __future__ import annotations

import types
import typing as t
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError, TemplateSyntaxError

from .content import DEFAULT_LAYOUT
from .errors import DirectoryError, LayoutNotFound, RenderError, TemplateCompileError

if t.TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from jinja2 import Template
    from .content import Page


SiteData = t.Mapping[str, t.Sequence['Page']]


def _find_layouts(path: Path) -> Iterator[Path]:
    for candidate in sorted(path.iterdir()):
        if candidate.name.startswith('.'):
            continue
        if candidate.is_dir():
            yield from _find_layouts(candidate)
        elif candidate.is_file():
            yield candidate


class LayoutRegistry:
    """
    Every layout in a layouts directory, compiled once and keyed by its
    POSIX path relative to that directory (e.g. `blog/post.html`). Read-only
    after loading, so it can be shared between worker threads.
    """
    def __init__(self,
                 env: Environment,
                 templates: Mapping[str, Template],
                 default_layout: str = DEFAULT_LAYOUT):
        self.env = env
        self.templates: Mapping[str, Template] = types.MappingProxyType(dict(templates))
        self.default_layout = default_layout

    @staticmethod
    def build_environment(layouts_dir: Path):
        """
        Create the Jinja `Environment` used for layouts. Autoescaping is off
        because rendered markdown is inserted as-is, and undefined variables
        are errors rather than empty strings.
        """
        return Environment(
            loader=FileSystemLoader(layouts_dir),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )

    @classmethod
    def load(cls, layouts_dir: Path, default_layout: str = DEFAULT_LAYOUT, env: Environment | None = None):
        """
        Recursively compile every layout under @layouts_dir. Dotfiles are
        ignored. Raises `DirectoryError` if the directory can't be read and
        `TemplateCompileError` if any layout is broken.
        """
        if not layouts_dir.is_dir():
            raise DirectoryError(f'layouts directory {layouts_dir} does not exist')
        env = env or cls.build_environment(layouts_dir)

        try:
            layout_paths = list(_find_layouts(layouts_dir))
        except OSError as exc:
            raise DirectoryError(f'layouts directory {layouts_dir} is unreadable: {exc}') from exc

        templates: dict[str, Template] = {}
        for path in layout_paths:
            name = path.relative_to(layouts_dir).as_posix()
            try:
                templates[name] = env.get_template(name)
            except TemplateSyntaxError as exc:
                raise TemplateCompileError(name, f'line {exc.lineno}: {exc.message}') from exc
            except UnicodeDecodeError as exc:
                raise TemplateCompileError(name, str(exc)) from exc
            except OSError as exc:
                raise DirectoryError(f'layout {name!r} is unreadable: {exc}') from exc

        return cls(env, templates, default_layout)

    def __contains__(self, name: object):
        return name in self.templates

    def __len__(self):
        return len(self.templates)

    @property
    def names(self):
        return sorted(self.templates)

    def resolve(self, name: str) -> Template:
        """
        Look up a layout by its exact relative path.
        """
        try:
            return self.templates[name]
        except KeyError:
            raise LayoutNotFound(name) from None


def build_page_context(page: Page, site_data: SiteData | None = None) -> dict[str, t.Any]:
    """
    Build the template context for a page. Frontmatter fields override the
    page helpers, and `content` always holds the rendered markdown.
    """
    context: dict[str, t.Any] = {
        'page': page,
        'data': site_data or {},
        'path': page.path.as_posix(),
        'slug': page.slug,
        'url': page.url,
    }
    context.update(page.frontmatter.fields)
    context['content'] = page.content
    return context


def render_page(registry: LayoutRegistry, page: Page, site_data: SiteData | None = None) -> str:
    """
    Render a page into its layout, returning the final HTML.
    """
    template = registry.resolve(page.layout_name)
    try:
        return template.render(build_page_context(page, site_data))
    except TemplateError as exc:
        raise RenderError(f'layout {page.layout_name!r}: {exc}') from exc
    except Exception as exc:
        # Errors raised by expressions inside the template, e.g. a bad filter
        # argument.
        raise RenderError(f'layout {page.layout_name!r}: {exc.__class__.__name__}: {exc}') from exc
