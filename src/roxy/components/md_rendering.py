"""
A commonmark renderer based on markdown-it-py, with a fence hook that doesn't
double-wrap pygments output.
"""
from __future__ import annotations

import typing as t

from markdown_it.common.utils import unescapeAll
from markdown_it.renderer import RendererHTML
from markdown_it.utils import OptionsDict

if t.TYPE_CHECKING:
    from collections.abc import Sequence
    from markdown_it.token import Token
    from markdown_it.utils import EnvType


def fence_language(token: Token) -> str:
    """
    Return the language tag from a fence token's info string, or an empty
    string if it has none.
    """
    info = unescapeAll(token.info).strip() if token.info else ''
    return info.split(maxsplit=1)[0] if info else ''


class RoxyRendererHTML(RendererHTML):
    """
    A customized markdown-it-py HTML renderer which substitutes highlighted
    code verbatim and otherwise falls back to the stock commonmark fence.
    """
    # https://github.com/executablebooks/markdown-it-py/issues/256
    def fence(self, tokens: Sequence[Token], idx: int, options: OptionsDict, env: EnvType):
        """
        Handles rendering a markdown code fence, with optional syntax
        highlighting. Fences without a language tag, or whose language the
        highlighter rejects, are rendered unhighlighted.
        """
        token = tokens[idx]
        lang_name = fence_language(token)

        if lang_name and options.highlight:
            highlighted = options.highlight(token.content, lang_name, '')
            if highlighted:
                return highlighted

        plain_options = OptionsDict({**options, 'highlight': None})
        return super().fence(tokens, idx, plain_options, env)
