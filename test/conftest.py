from __future__ import annotations

from pathlib import Path

import pytest

from roxy.core import BuildSettings, make_settings


def write_tree(root: Path, files: dict[str, str | bytes]):
    for name, data in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, bytes):
            path.write_bytes(data)
        else:
            path.write_text(data, 'utf-8')


def read_tree(root: Path) -> dict[str, bytes]:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob('*'), key=lambda p: p.as_posix())
        if path.is_file()
    }


@pytest.fixture
def build_settings(tmp_path: Path) -> BuildSettings:
    settings = make_settings(
        input_dir=tmp_path / 'content',
        output_dir=tmp_path / 'build',
        layouts_dir=tmp_path / 'layouts',
    )
    settings['input_dir'].mkdir()
    write_tree(settings['layouts_dir'], {'index.html': '{{ content }}'})
    return settings
