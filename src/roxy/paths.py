"""
Matchers for picking how input files are handled, and PathCalcs for deciding
where their output goes.
"""
from __future__ import annotations

import abc
import re
import typing as t
from pathlib import Path

if t.TYPE_CHECKING:
    from .core import Context, ContextDir


T = t.TypeVar('T')
T2 = t.TypeVar('T2')

CONTENT_EXTENSIONS = ('.md', '.markdown')
INDEX_BASE = 'index'


class Matcher(t.Generic[T], abc.ABC):
    """
    Abstract base class for Path Matchers. Provides pre-baked ability to
    combine Matchers with | and &.
    """
    @abc.abstractmethod
    def __call__(self, context: Context, path: Path) -> T:
        ...

    def __or__(self, other: Matcher[T2]):
        return _OrMatcher(self, other)

    def __and__(self, other: Matcher[T2]):
        return _AndMatcher(self, other)


class _OrMatcher(Matcher[T | T2]):
    def __init__(self, left: Matcher[T], right: Matcher[T2]):
        self.left = left
        self.right = right

    def __call__(self, context: Context, path: Path):
        return self.left(context, path) or self.right(context, path)


class _AndMatcher(Matcher[T | T2]):
    def __init__(self, left: Matcher[T], right: Matcher[T2]):
        self.left = left
        self.right = right

    def __call__(self, context: Context, path: Path):
        return self.left(context, path) and self.right(context, path)


class REMatcher(Matcher[re.Match | None]):
    """
    Path Matcher using regular expressions. @re_flags will be passed to
    `re.compile()`. Paths are matched relative to @parent_dir, a key to one of
    the Context's directories, so that unexpected characters in the directory
    itself can't cause false matches.
    """
    def __init__(self, re_string: str, re_flags: int = 0, parent_dir: ContextDir = 'input_dir'):
        self.regex = re.compile(re_string, re_flags)
        self.parent_dir: ContextDir = parent_dir

    def __call__(self, context: Context, path: Path):
        if not path.is_relative_to(context[self.parent_dir]):
            return None
        return self.regex.match(path.relative_to(context[self.parent_dir]).as_posix())


class HiddenMatcher(REMatcher):
    """
    Matches any path with a component starting with a dot.
    """
    def __init__(self, parent_dir: ContextDir = 'input_dir'):
        super().__init__(r'(.*/)*\..*', parent_dir=parent_dir)


class ContentMatcher(REMatcher):
    """
    Matches content files by extension, case-insensitively.
    """
    def __init__(self, extensions: t.Sequence[str] = CONTENT_EXTENSIONS, parent_dir: ContextDir = 'input_dir'):
        pattern = '|'.join(re.escape(ext) for ext in extensions)
        super().__init__(rf'(.*/)?[^/]+(?P<ext>{pattern})$', re.IGNORECASE, parent_dir)


class AnyMatcher(Matcher[bool]):
    """
    Matches every path.
    """
    def __call__(self, context: Context, path: Path):
        return True


class PathCalc(t.Generic[T], abc.ABC):
    """
    Abstract base class for path calculators which use `Matcher` match data to
    determine output paths from input paths.
    """
    @abc.abstractmethod
    def __call__(self, context: Context, path: Path, match: T) -> Path:
        ...


def _trim_ext_prefix(path: Path, match: re.Match[str]):
    _groups = match.groupdict()
    if _groups.get('ext'):
        return path.with_name(path.name[:-len(_groups['ext'])])
    return path


def web_index_transform(path: Path, index_base: str = INDEX_BASE) -> Path:
    """
    Transform a/b.c to a/b/index.c, while leaving a/index.c as-is.
    """
    if path.stem == index_base:
        return path
    return (path.with_suffix('') / index_base).with_suffix(path.suffix)


class OutputDirPathCalc(PathCalc[T]):
    """
    PathCalc which re-roots input paths under the Context's output directory,
    keeping every intermediate directory. If @ext is specified, it will replace
    the extension of input paths; an `ext` group in a regex match is used to
    find the extension being replaced. With @pretty_urls, `a/b.md` is written
    to `a/b/index.html` so its URL can omit the extension.
    """
    def __init__(self, ext: str | None = None, pretty_urls: bool = False):
        self.ext = ext
        self.pretty_urls = pretty_urls

    def relative(self, context: Context, path: Path, match: T) -> Path:
        """
        Calculate the output path relative to the output directory.
        """
        rel = path.relative_to(context['input_dir'])
        if self.ext is not None:
            if isinstance(match, re.Match) and match.groupdict().get('ext'):
                trimmed = _trim_ext_prefix(rel, match)
                rel = trimmed.with_name(trimmed.name + self.ext)
            else:
                rel = rel.with_suffix(self.ext)
        if self.pretty_urls:
            rel = web_index_transform(rel)
        return rel

    def __call__(self, context: Context, path: Path, match: T) -> Path:
        return context['output_dir'] / self.relative(context, path, match)
