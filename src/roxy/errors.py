"""
Exceptions raised while building a Roxy site.

`ContentError` and its subclasses are scoped to a single content file and are
recorded in the build report. `FatalBuildError` and its subclasses abort the
whole build.
"""
from __future__ import annotations

from pathlib import Path


class RoxyError(Exception):
    """
    Base class for all Roxy errors.
    """
    @property
    def kind(self) -> str:
        """
        A short name for this error, used in build reports.
        """
        return self.__class__.__name__


class ContentError(RoxyError):
    """
    An error affecting only one input file. @path is filled in by the site
    walker once the error has been attributed to a file.
    """
    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self):
        if self.path is not None:
            return f'{self.path}: {self.message}'
        return self.message


class MalformedContent(ContentError):
    """
    The content file can't be split into frontmatter and body.
    """


class MalformedFrontmatter(ContentError):
    """
    A frontmatter line isn't a `key: value` pair.
    """


class LayoutNotFound(ContentError):
    """
    The layout requested by a content file isn't in the layout registry.
    """
    def __init__(self, layout_name: str, path: Path | None = None):
        super().__init__(f'layout {layout_name!r} does not exist', path)
        self.layout_name = layout_name


class RenderError(ContentError):
    """
    The template engine failed while rendering a page.
    """


class InputReadError(ContentError):
    """
    An input file couldn't be read, or isn't valid UTF-8.
    """


class OutputWriteError(ContentError):
    """
    An output file or one of its directories couldn't be written.
    """


class FatalBuildError(RoxyError):
    """
    An error which makes the whole build unusable.
    """


class TemplateCompileError(FatalBuildError):
    """
    A layout file failed to compile.
    """
    def __init__(self, layout_name: str, reason: str):
        super().__init__(f'layout {layout_name!r} failed to compile: {reason}')
        self.layout_name = layout_name


class DirectoryError(FatalBuildError):
    """
    One of the build directories is missing, unreadable, or can't be created.
    """


class ThemeNotFound(FatalBuildError):
    """
    The configured syntax-highlighting theme couldn't be loaded.
    """
