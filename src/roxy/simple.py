"""
Simple Steps and a base class for Steps that read text and write text.
"""
from __future__ import annotations

import shutil
from pathlib import Path

from .core import Step
from .errors import InputReadError, OutputWriteError


def ensure_output_dir(output_path: Path):
    """
    Create the parent directories of @output_path.
    """
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputWriteError(f'could not create {output_path.parent}: {exc}') from exc


class DirectCopyStep(Step):
    """
    A simple Step which only copies a file to the output directory without
    renaming or extension changes.
    """
    def __call__(self, path: Path, output_path: Path):
        try:
            source = path.open('rb')
        except OSError as exc:
            raise InputReadError(f'could not read: {exc}') from exc
        ensure_output_dir(output_path)
        with source:
            try:
                with output_path.open('wb') as dest:
                    shutil.copyfileobj(source, dest)
            except OSError as exc:
                raise OutputWriteError(f'could not copy to {output_path}: {exc}') from exc


class BaseStandardStep(Step):
    """
    A base class providing helper behaviors for typical steps reading one text
    file and creating another.
    """
    encoding = 'utf-8'
    newline = '\n'

    def read_text(self, path: Path) -> str:
        try:
            return path.read_text(self.encoding)
        except UnicodeDecodeError as exc:
            raise InputReadError(f'not valid {self.encoding}: {exc.reason}') from exc
        except OSError as exc:
            raise InputReadError(f'could not read: {exc}') from exc

    def write_text(self, output_path: Path, text: str):
        ensure_output_dir(output_path)
        try:
            with output_path.open('w', encoding=self.encoding, newline=self.newline) as file:
                file.write(text)
        except OSError as exc:
            raise OutputWriteError(f'could not write {output_path}: {exc}') from exc
