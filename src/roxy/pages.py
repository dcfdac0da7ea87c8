"""
The Step for rendering content files into layouts.
"""
from __future__ import annotations

import typing as t
from pathlib import Path, PurePosixPath

from .content import Page, parse_content
from .layouts import render_page
from .simple import BaseStandardStep

if t.TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from .core import FileOutcome, Task


def build_site_data(pages: Iterable[Page]) -> dict[str, list[Page]]:
    """
    Group pages by section (their top-level directory, or `default`), each
    section sorted by path.
    """
    data: dict[str, list[Page]] = {}
    for page in sorted(pages, key=lambda p: p.path):
        data.setdefault(page.section, []).append(page)
    return data


class PageStep(BaseStandardStep):
    """
    A Step for rendering frontmatter + markdown content files into layouts.

    Every page is loaded (split, decoded, and rendered to HTML) during
    `prepare()`, so that layouts can list other pages through `data`. Calling
    the Step then renders the page into its layout and writes it.
    """
    def __init__(self, default_layout: str | None = None):
        """
        :param default_layout: The layout to use for pages without a `layout`
            field. Falls back to the Context's `default_layout` setting.
        """
        self.default_layout = default_layout
        self.pages: dict[Path, Page] = {}
        self.site_data: dict[str, list[Page]] = {}

    def load_page(self, path: Path, output_path: Path) -> Page:
        """
        Read a content file and turn it into a `Page`.
        """
        frontmatter, body = parse_content(
            self.read_text(path),
            self.default_layout or self.context['default_layout']
        )
        assert self.context.markdown, 'Context.setup() must run before pages are loaded'
        rendered = self.context.markdown.render(body)
        return Page(
            PurePosixPath(self.context.relative_input(path).as_posix()),
            PurePosixPath(self.context.relative_output(output_path).as_posix()),
            frontmatter,
            rendered.html,
            rendered.wordcount,
        )

    def prepare(self, tasks: Sequence[Task]) -> list[FileOutcome]:
        def load(task: Task):
            return self.context.guard(task, lambda: self.load_page(task.path, task.output_path))

        self.pages = {}
        failures: list[FileOutcome] = []
        for task, (page, outcome) in zip(tasks, self.context.map(load, tasks, 'Loading...')):
            if page is None:
                failures.append(outcome)
            else:
                self.pages[task.path] = page

        self.site_data = build_site_data(self.pages.values())
        return failures

    def __call__(self, path: Path, output_path: Path):
        page = self.pages.get(path) or self.load_page(path, output_path)
        assert self.context.registry, 'Context.setup() must run before pages are rendered'
        html = render_page(self.context.registry, page, self.site_data)
        self.write_text(output_path, html)
