"""
Splitting and decoding of content files.

A content file is a block of `key: value` frontmatter lines, a delimiter line
of three or more hyphens, and a markdown body:

    title: Hello World
    layout: blog/post.html
    ---
    # Hello

Files without a delimiter line are all body.
"""
from __future__ import annotations

import re
import typing as t
from pathlib import PurePosixPath

from .errors import MalformedContent, MalformedFrontmatter

if t.TYPE_CHECKING:
    from collections.abc import Mapping


DELIMITER_RE = re.compile(r'-{3,}')
# Lines end at \n only (keeping it), so \r\n files split the same way.
LINE_END_RE = re.compile(r'(?<=\n)')
LAYOUT_KEY = 'layout'
DEFAULT_LAYOUT = 'index.html'
DEFAULT_SECTION = 'default'
INDEX_STEM = 'index'


class Frontmatter:
    """
    Decoded frontmatter of one content file. @fields holds every field except
    the reserved `layout`, which is exposed as @layout_name.
    """
    def __init__(self, fields: dict[str, str], layout_name: str = DEFAULT_LAYOUT):
        self.fields = fields
        self.layout_name = layout_name

    def __repr__(self):
        return f'{self.__class__.__name__}({self.fields!r}, layout_name={self.layout_name!r})'

    def __eq__(self, other: object):
        if not isinstance(other, Frontmatter):
            return NotImplemented
        return self.fields == other.fields and self.layout_name == other.layout_name

    def __getitem__(self, key: str):
        return self.fields[key]

    def get(self, key: str, default: str | None = None):
        return self.fields.get(key, default)


def split_content(text: str) -> tuple[str, str]:
    """
    Split raw file text into a frontmatter block and a body block at the first
    delimiter line. Without a delimiter, the frontmatter block is empty and
    the whole text is body.

    Raises `MalformedContent` if the delimiter is the very first line, since
    that announces a frontmatter block with nothing in it.
    """
    text = text.removeprefix('\ufeff')
    lines = LINE_END_RE.split(text)

    for i, line in enumerate(lines):
        if DELIMITER_RE.fullmatch(line.strip()):
            if i == 0:
                raise MalformedContent('content starts with a frontmatter delimiter')
            return ''.join(lines[:i]), ''.join(lines[i + 1:])

    return '', text


def decode_frontmatter(block: str, default_layout: str = DEFAULT_LAYOUT) -> Frontmatter:
    """
    Parse a frontmatter block of `key: value` lines. Keys and values are
    trimmed, blank lines are skipped, and a repeated key keeps its last value.
    The `layout` field is pulled out into `Frontmatter.layout_name`, falling
    back to @default_layout.
    """
    fields: dict[str, str] = {}

    for lineno, line in enumerate(block.split('\n'), 1):
        if not line.strip():
            continue
        if ':' not in line:
            raise MalformedFrontmatter(f'line {lineno}: expected "key: value", got {line.strip()!r}')
        key, value = line.split(':', 1)
        key = key.strip()
        if not key:
            raise MalformedFrontmatter(f'line {lineno}: empty key')
        fields[key] = value.strip()

    layout_name = fields.pop(LAYOUT_KEY, default_layout)
    return Frontmatter(fields, layout_name)


def parse_content(text: str, default_layout: str = DEFAULT_LAYOUT) -> tuple[Frontmatter, str]:
    """
    Split and decode a content file, returning its frontmatter and markdown
    body.
    """
    block, body = split_content(text)
    return decode_frontmatter(block, default_layout), body


def calculate_slug(path: PurePosixPath) -> str:
    """
    Build the slug for an input-relative content path: `a/b.md` becomes
    `/a/b`, and `a/index.md` becomes `/a`.
    """
    path = path.with_suffix('')
    if path.name == INDEX_STEM:
        path = path.parent
    parts = [part for part in path.parts if part != '.']
    return '/' + '/'.join(parts)


class Page:
    """
    A content file which has been split, decoded, and rendered to HTML, ready
    for a layout.
    """
    def __init__(self,
                 path: PurePosixPath,
                 output_path: PurePosixPath,
                 frontmatter: Frontmatter,
                 content: str,
                 wordcount: Mapping[str, int] | None = None):
        self.path = path
        self.output_path = output_path
        self.frontmatter = frontmatter
        self.content = content
        self.wordcount = dict(wordcount or {})

    def __repr__(self):
        return f'{self.__class__.__name__}({self.path.as_posix()!r})'

    @property
    def layout_name(self):
        return self.frontmatter.layout_name

    @property
    def slug(self):
        return calculate_slug(self.path)

    @property
    def url(self):
        return '/' + self.output_path.as_posix()

    @property
    def section(self):
        """
        The top-level directory holding this page, or `default` for pages at
        the root of the input directory.
        """
        if len(self.path.parts) > 1:
            return self.path.parts[0]
        return DEFAULT_SECTION

    @property
    def title(self):
        return self.frontmatter.get('title', '')
