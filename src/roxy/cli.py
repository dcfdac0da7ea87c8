"""
Roxy's command line interface.
"""
from __future__ import annotations

import argparse
import runpy
import sys
import typing as t
from pathlib import Path

from .core import DEFAULT_SETTINGS, BuildSettings, Context, InputBuildSettings, make_settings
from .errors import FatalBuildError
from .pretty_utils import print_with_style


EXIT_OK = 0
EXIT_FILE_FAILURES = 1
EXIT_FATAL = 2


class BuildNamespace(argparse.Namespace):
    """
    Internal used to preserve typing between InputBuildSettings, argparse, and
    BuildSettings. Arguments left unset on the command line stay None, so they
    don't override settings from a config file.
    """
    config: Path | None
    input_dir: Path | None
    output_dir: Path | None
    layouts_dir: Path | None
    theme: str | None
    default_layout: str | None
    include_hidden: bool | None
    copy_assets: bool | None
    pretty_urls: bool | None
    anchors: bool | None
    purge_dirs: bool | None
    jobs: int | None

    def overrides(self) -> InputBuildSettings:
        """
        Return the settings explicitly given on the command line.
        """
        return t.cast(InputBuildSettings, {
            key: value for key, value in vars(self).items()
            if key in DEFAULT_SETTINGS and value is not None
        })

    def to_build_settings(self, settings: InputBuildSettings | None = None) -> BuildSettings:
        """
        Merge config file @settings and command line overrides into complete
        BuildSettings.
        """
        return make_settings(settings, **self.overrides())


def _jobs(value: str):
    jobs = int(value)
    if jobs < 0:
        raise argparse.ArgumentTypeError('jobs must be 0 (automatic) or a positive number')
    return jobs


def build_parser(**kw: t.Any):
    """
    Create the argument parser for the `roxy` command.
    """
    parser = argparse.ArgumentParser(description='Build a static site from markdown content.', **kw)
    parser.add_argument('--config',
                        help='python file defining a SETTINGS dict; command line options override it',
                        type=Path)
    parser.add_argument('-i', '--input', '--content',
                        help=f'directory of content files (default: {DEFAULT_SETTINGS["input_dir"]})',
                        type=Path,
                        dest='input_dir')
    parser.add_argument('-o', '--output',
                        help=f'directory for the built site (default: {DEFAULT_SETTINGS["output_dir"]})',
                        type=Path,
                        dest='output_dir')
    parser.add_argument('-l', '--layouts',
                        help=f'directory of jinja layouts (default: {DEFAULT_SETTINGS["layouts_dir"]})',
                        type=Path,
                        dest='layouts_dir')
    parser.add_argument('-t', '--theme',
                        help='pygments style name or style file used to highlight fenced code')
    parser.add_argument('--default-layout',
                        help=f'layout for pages without a layout field (default: {DEFAULT_SETTINGS["default_layout"]})')
    parser.add_argument('--hidden',
                        help='process files and directories whose names start with a dot (default: yes)',
                        action=argparse.BooleanOptionalAction,
                        dest='include_hidden')
    parser.add_argument('--copy-assets',
                        help='copy non-content files into the output unchanged (default: yes)',
                        action=argparse.BooleanOptionalAction)
    parser.add_argument('--pretty-urls',
                        help='write a/b.md to a/b/index.html instead of a/b.html',
                        action=argparse.BooleanOptionalAction)
    parser.add_argument('--anchors',
                        help='add id attributes to headings',
                        action=argparse.BooleanOptionalAction)
    parser.add_argument('--purge',
                        help='empty the output directory before building',
                        action=argparse.BooleanOptionalAction,
                        dest='purge_dirs')
    parser.add_argument('-j', '--jobs',
                        help='number of files to process at once; 0 picks automatically (default: 1)',
                        type=_jobs)
    return parser


def parse_settings_args(argv: list[str] | None = None, **kw: t.Any) -> BuildSettings:
    """
    Parse command line arguments, load any config file they name, and produce
    final BuildSettings.
    """
    parser = build_parser(**kw)
    namespace = parser.parse_args(argv, namespace=BuildNamespace())
    settings = None
    if namespace.config:
        if not namespace.config.is_file():
            parser.error(f'config file {namespace.config} does not exist')
        settings = load_config(namespace.config)
    final_settings = namespace.to_build_settings(settings)
    if namespace.jobs == 0:
        final_settings['jobs'] = None
    return final_settings


def load_config(path: Path) -> InputBuildSettings | None:
    """
    Run a python config file and return its `SETTINGS`.
    """
    namespace = runpy.run_path(str(path))
    return namespace.get('SETTINGS')


def main(arguments: list[str] | None = None) -> int:
    """
    Roxy main function. Builds a site from command line arguments and returns
    the process exit status.
    """
    settings = parse_settings_args(arguments, prog='roxy')

    try:
        report = Context(settings).run()
    except FatalBuildError as exc:
        print_with_style(f'Build aborted ({exc.kind}): {exc}', file='stderr', style='red bold')
        return EXIT_FATAL

    report.print_summary()
    if report.ok:
        print_with_style(f'Output files at {settings["output_dir"].resolve()}', style='green')
        return EXIT_OK
    return EXIT_FILE_FAILURES


def run():
    """
    Console script entry point.
    """
    sys.exit(main())
