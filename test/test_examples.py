import pathlib

import pytest

from conftest import read_tree
from roxy.cli import EXIT_OK, main, parse_settings_args
from roxy.core import Context


EXAMPLE_LIST = [
    'basic_site',
]
EXAMPLE_PATHS = {
    name: (pathlib.Path(__file__).parent.parent / 'examples/' / f'{name}').with_suffix('.py')
    for name in EXAMPLE_LIST
}


def run_example(name: str, output_dir: pathlib.Path, *extra: str):
    settings = parse_settings_args(['--config', str(EXAMPLE_PATHS[name]), '--output', str(output_dir), *extra])
    return Context(settings).run()


@pytest.mark.parametrize('name', EXAMPLE_LIST)
def test_example(name: str, tmp_path: pathlib.Path):
    report = run_example(name, tmp_path)
    assert report.ok
    assert len(report) == 3

    tree = read_tree(tmp_path)
    assert sorted(tree) == ['blog/first-post.html', 'index.html', 'static/site.css']

    index = tree['index.html'].decode()
    assert '<title>Home</title>' in index
    assert '<h1>Welcome</h1>' in index
    assert '<a href="/blog/first-post.html">First Post</a>' in index
    assert '<a href="/index.html">Home</a>' in index

    post = tree['blog/first-post.html'].decode()
    assert '<h1>First Post</h1>' in post
    assert 'Kit &middot;' in post
    assert '<div class="highlight"' in post
    assert 'style="' in post
    assert '<pre><code class="language-nosuchlang">just some text\n</code></pre>' in post

    source_css = EXAMPLE_PATHS[name].with_suffix('') / 'content' / 'static' / 'site.css'
    assert tree['static/site.css'] == source_css.read_bytes()


@pytest.mark.parametrize('name', EXAMPLE_LIST)
def test_example_rerun(name: str, tmp_path: pathlib.Path):
    """
    Run an example twice without purging, and check that the runs have
    identical output.
    """
    run_example(name, tmp_path)
    first = read_tree(tmp_path)
    run_example(name, tmp_path)
    assert read_tree(tmp_path) == first


@pytest.mark.parametrize('name', EXAMPLE_LIST)
def test_example_parallel(name: str, tmp_path: pathlib.Path):
    """
    Build an example sequentially and with a thread pool, and check that
    both produce the same files.
    """
    run_example(name, tmp_path / 'sequential')
    run_example(name, tmp_path / 'parallel', '--jobs', '4')
    assert read_tree(tmp_path / 'sequential') == read_tree(tmp_path / 'parallel')


@pytest.mark.parametrize('name', EXAMPLE_LIST)
def test_example_cli(name: str, tmp_path: pathlib.Path):
    """
    Run an example using the CLI, and check that run has the expected output.
    """
    assert main(['--config', str(EXAMPLE_PATHS[name]), '--output', str(tmp_path), '--purge']) == EXIT_OK
    assert sorted(read_tree(tmp_path)) == ['blog/first-post.html', 'index.html', 'static/site.css']
