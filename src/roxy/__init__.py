"""
Roxy is a very small static site generator: it renders a directory of
frontmatter + markdown content files into Jinja layouts, mirroring the
content directory's structure in its output.
"""
from .content import Frontmatter, Page, decode_frontmatter, parse_content, split_content
from .core import BuildReport, BuildSettings, Context, FileOutcome, InputBuildSettings, Rule, Step, build, make_settings
from .errors import (
    ContentError, DirectoryError, FatalBuildError, InputReadError, LayoutNotFound, MalformedContent,
    MalformedFrontmatter, OutputWriteError, RenderError, RoxyError, TemplateCompileError, ThemeNotFound,
)
from .layouts import LayoutRegistry, render_page
from .markdown import Highlighter, MarkdownRenderer
from .pages import PageStep
from .paths import AnyMatcher, ContentMatcher, HiddenMatcher, OutputDirPathCalc, REMatcher
from .simple import DirectCopyStep
