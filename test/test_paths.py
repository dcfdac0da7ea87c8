from __future__ import annotations

from pathlib import Path

import pytest

from roxy.core import Context, make_settings
from roxy.paths import AnyMatcher, ContentMatcher, HiddenMatcher, OutputDirPathCalc, REMatcher, web_index_transform


INPUT_PATH = Path('input')
OUTPUT_PATH = Path('output')
LAYOUTS_PATH = Path('layouts')


@pytest.fixture
def dummy_context():
    return Context(
        make_settings(
            input_dir=INPUT_PATH,
            output_dir=OUTPUT_PATH,
            layouts_dir=LAYOUTS_PATH,
        ),
        []
    )


@pytest.mark.parametrize('config,input,expected', [
    ((), INPUT_PATH / 'foo.txt', OUTPUT_PATH / 'foo.txt'),
    ((), INPUT_PATH / 'a' / 'b' / 'c.png', OUTPUT_PATH / 'a' / 'b' / 'c.png'),
    (('.html',), INPUT_PATH / 'foo.md', OUTPUT_PATH / 'foo.html'),
    (('.html',), INPUT_PATH / 'a' / 'foo.j.md', OUTPUT_PATH / 'a' / 'foo.j.html'),
    (('.html', True), INPUT_PATH / 'a' / 'b.md', OUTPUT_PATH / 'a' / 'b' / 'index.html'),
    (('.html', True), INPUT_PATH / 'a' / 'index.md', OUTPUT_PATH / 'a' / 'index.html'),
])
def test_output_dir_path_calc(config: tuple, input: Path, expected: Path, dummy_context: Context):
    calc = OutputDirPathCalc(*config)
    assert calc(dummy_context, input, None) == expected


@pytest.mark.parametrize('input,expected', [
    (INPUT_PATH / 'b.md', OUTPUT_PATH / 'b.html'),
    (INPUT_PATH / 'a' / 'b.md', OUTPUT_PATH / 'a' / 'b.html'),
    (INPUT_PATH / 'a' / 'b' / 'c.MD', OUTPUT_PATH / 'a' / 'b' / 'c.html'),
    (INPUT_PATH / 'notes.v2.markdown', OUTPUT_PATH / 'notes.v2.html'),
])
def test_output_dir_path_calc_content(input: Path, expected: Path, dummy_context: Context):
    calc = OutputDirPathCalc('.html')
    match = ContentMatcher()(dummy_context, input)
    assert match
    assert calc(dummy_context, input, match) == expected


@pytest.mark.parametrize('input,expected', [
    (Path('a/b.html'), Path('a/b/index.html')),
    (Path('a/index.html'), Path('a/index.html')),
    (Path('b.html'), Path('b/index.html')),
])
def test_web_index_transform(input: Path, expected: Path):
    assert web_index_transform(input) == expected


@pytest.mark.parametrize('input,expected', [
    (INPUT_PATH / 'foo.md', {'ext': '.md'}),
    (INPUT_PATH / 'a' / 'foo.Markdown', {'ext': '.Markdown'}),
    (INPUT_PATH / 'foo.md.bak', None),
    (INPUT_PATH / 'foo.txt', None),
    (INPUT_PATH / '.md', None),
    (INPUT_PATH / 'a' / '.md', None),
    (OUTPUT_PATH / 'foo.md', None),
])
def test_content_matcher(input: Path, expected: dict | None, dummy_context: Context):
    result = ContentMatcher()(dummy_context, input)
    if result:
        assert result.groupdict() == expected
    else:
        assert result is expected


@pytest.mark.parametrize('input,expected', [
    (INPUT_PATH / '.hidden', True),
    (INPUT_PATH / '.git' / 'config', True),
    (INPUT_PATH / 'a' / '.draft.md', True),
    (INPUT_PATH / 'a' / 'b.md', False),
    (INPUT_PATH / 'a.b' / 'c', False),
])
def test_hidden_matcher(input: Path, expected: bool, dummy_context: Context):
    assert bool(HiddenMatcher()(dummy_context, input)) is expected


def test_re_matcher_relative_to_parent(dummy_context: Context):
    matcher = REMatcher(r'input/.*')
    assert matcher(dummy_context, INPUT_PATH / 'input' / 'x')
    assert not matcher(dummy_context, INPUT_PATH / 'x')


def test_matcher_combinators(dummy_context: Context):
    md = REMatcher(r'.*\.md')
    in_a = REMatcher(r'a/.*')
    assert (md & in_a)(dummy_context, INPUT_PATH / 'a' / 'x.md')
    assert not (md & in_a)(dummy_context, INPUT_PATH / 'b' / 'x.md')
    assert (md | in_a)(dummy_context, INPUT_PATH / 'b' / 'x.md')
    assert (md | in_a)(dummy_context, INPUT_PATH / 'a' / 'x.txt')
    assert not (md | in_a)(dummy_context, INPUT_PATH / 'b' / 'x.txt')
    assert AnyMatcher()(dummy_context, INPUT_PATH / 'whatever')
