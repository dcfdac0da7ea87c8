"""
Core classes and types for the Roxy build pipeline: settings, rules, steps,
the site walk, and the build report.
"""
from __future__ import annotations

import abc
import os
import shutil
import typing as t
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .content import DEFAULT_LAYOUT
from .errors import ContentError, DirectoryError, InputReadError, OutputWriteError, RoxyError
from .pretty_utils import print_with_style, track_progress

if t.TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence
    from .layouts import LayoutRegistry
    from .markdown import MarkdownRenderer
    from .paths import Matcher, PathCalc


T = t.TypeVar('T')
U = t.TypeVar('U')
ContextDir = t.Literal['input_dir', 'output_dir', 'layouts_dir']


class InputBuildSettings(t.TypedDict, total=False):
    """
    TypedDict for defining build settings in a Roxy config file. Every key is
    optional.
    """
    input_dir: Path
    output_dir: Path
    layouts_dir: Path
    theme: str | None
    default_layout: str
    include_hidden: bool
    copy_assets: bool
    pretty_urls: bool
    anchors: bool
    purge_dirs: bool
    jobs: int | None


class BuildSettings(t.TypedDict):
    """
    TypedDict for processed build settings ready for passing to Context.
    """
    input_dir: Path
    output_dir: Path
    layouts_dir: Path
    theme: str | None
    default_layout: str
    include_hidden: bool
    copy_assets: bool
    pretty_urls: bool
    anchors: bool
    purge_dirs: bool
    jobs: int | None


DEFAULT_SETTINGS = BuildSettings(
    input_dir=Path('content'),
    output_dir=Path('build'),
    layouts_dir=Path('layouts'),
    theme=None,
    default_layout=DEFAULT_LAYOUT,
    include_hidden=True,
    copy_assets=True,
    pretty_urls=False,
    anchors=False,
    purge_dirs=False,
    jobs=1,
)


def make_settings(settings: InputBuildSettings | None = None, **overrides: t.Any) -> BuildSettings:
    """
    Fill in missing keys of @settings from `DEFAULT_SETTINGS`, then apply
    @overrides.
    """
    merged = t.cast(BuildSettings, {**DEFAULT_SETTINGS, **(settings or {}), **overrides})
    for key in ('input_dir', 'output_dir', 'layouts_dir'):
        merged[key] = Path(merged[key])
    return merged


def _rm_children(path: Path):
    if not path.exists():
        return
    for child in path.iterdir():
        if child.is_dir():
            shutil.rmtree(child)
        else:
            child.unlink()


class FileOutcome:
    """
    The result of processing one input file: success, or the error that
    stopped it. @path is relative to the input directory.
    """
    def __init__(self, path: Path, output_path: Path | None = None, error: RoxyError | None = None):
        self.path = path
        self.output_path = output_path
        self.error = error

    def __repr__(self):
        status = self.error.kind if self.error else 'ok'
        return f'{self.__class__.__name__}({self.path.as_posix()!r}, {status})'

    @property
    def ok(self):
        return self.error is None

    @property
    def kind(self):
        return self.error.kind if self.error else None


class BuildReport:
    """
    One `FileOutcome` per input file handled during a build. Failures may be
    recorded in any order when files are processed in parallel.
    """
    def __init__(self):
        self.outcomes: list[FileOutcome] = []

    def __len__(self):
        return len(self.outcomes)

    def __iter__(self):
        return iter(self.outcomes)

    def add(self, outcome: FileOutcome):
        self.outcomes.append(outcome)
        if outcome.error:
            print_with_style(f'✗ {outcome.error}', file='stderr', style='red')

    @property
    def succeeded(self):
        return [o for o in self.outcomes if o.ok]

    @property
    def failures(self):
        return [o for o in self.outcomes if not o.ok]

    @property
    def ok(self):
        return not self.failures

    @property
    def exit_code(self):
        return 0 if self.ok else 1

    def print_summary(self):
        """
        Display every failed file with its error kind, then the totals.
        """
        failures = self.failures
        if failures:
            print_with_style(f'{len(failures)} file(s) failed:', file='stderr', style='red bold')
            for outcome in failures:
                print_with_style(f'  {outcome.path.as_posix()}: {outcome.kind}', file='stderr', style='red')
        style = 'green' if self.ok else 'yellow'
        print_with_style(f'Built {len(self.succeeded)} of {len(self)} file(s).', style=style)


class Task(t.NamedTuple):
    """
    A single input file, the Step that will handle it, and its destination.
    """
    step: Step
    path: Path
    output_path: Path


class Rule(t.Generic[T]):
    """
    A single rule for file processing, with a matcher, an output path
    calculator, and a Step to run. A Rule with no Step (or no PathCalc)
    matches files in order to skip them.
    """
    def __init__(self,
                 matcher: Matcher[T],
                 path_calc: PathCalc[T] | None,
                 step: Step | None = None):
        self.matcher = matcher
        self.path_calc = path_calc
        self.step = step


class Step(abc.ABC):
    """
    Abstract base class for Steps, the handlers that turn an input file into
    an output file.
    """
    context: Context

    def bind(self, context: Context):
        """
        Bind this Step to a Context.
        """
        self.context = context

    def prepare(self, tasks: Sequence[Task]) -> list[FileOutcome]:
        """
        Hook run over all of this Step's tasks before any of them is called.
        Returns outcomes for tasks that already failed; those won't be run.
        """
        return []

    @abc.abstractmethod
    def __call__(self, path: Path, output_path: Path) -> None:
        ...


class Context:
    """
    A context and configuration class for building a Roxy site. Owns the
    layout registry and markdown renderer for the length of a build.
    """
    def __init__(self,
                 settings: BuildSettings,
                 rules: list[Rule] | None = None,
                 registry: LayoutRegistry | None = None,
                 markdown: MarkdownRenderer | None = None):
        self.settings = settings
        self.registry = registry
        self.markdown = markdown
        self.rules: list[Rule] = []
        for rule in self.default_rules() if rules is None else rules:
            self.rules.append(rule)
            if rule.step:
                rule.step.bind(self)

    @t.overload
    def __getitem__(self, key: ContextDir) -> Path: ...
    @t.overload
    def __getitem__(self, key: t.Literal['theme']) -> str | None: ...
    @t.overload
    def __getitem__(self, key: t.Literal['default_layout']) -> str: ...
    @t.overload
    def __getitem__(self, key: t.Literal['jobs']) -> int | None: ...
    @t.overload
    def __getitem__(self, key: t.Literal['include_hidden', 'copy_assets', 'pretty_urls', 'anchors', 'purge_dirs']) -> bool: ...
    def __getitem__(self, key):
        return self.settings[key]

    def default_rules(self) -> list[Rule]:
        """
        The standard rule set: optionally skip hidden files, render content
        files to `.html`, and copy everything else through unchanged.
        """
        from .pages import PageStep
        from .paths import AnyMatcher, ContentMatcher, HiddenMatcher, OutputDirPathCalc
        from .simple import DirectCopyStep

        rules: list[Rule] = []
        if not self['include_hidden']:
            rules.append(Rule(HiddenMatcher(), None))
        rules.append(Rule(ContentMatcher(), OutputDirPathCalc('.html', self['pretty_urls']), PageStep()))
        if self['copy_assets']:
            rules.append(Rule(AnyMatcher(), OutputDirPathCalc(), DirectCopyStep()))
        return rules

    def setup(self):
        """
        Load the layout registry and markdown renderer if they weren't
        supplied. Raises a `FatalBuildError` if either can't be built.
        """
        from .layouts import LayoutRegistry
        from .markdown import MarkdownRenderer

        if self.markdown is None:
            self.markdown = MarkdownRenderer.from_theme(self['theme'], anchors=self['anchors'])
        if self.registry is None:
            self.registry = LayoutRegistry.load(self['layouts_dir'], self['default_layout'])

    def find_inputs(self, path: Path) -> Iterator[Path]:
        """
        Overridable function to get paths to process based on a given @path.
        Default behavior is to recursively search for regular files, in
        sorted order, skipping the output directory if it's nested inside.
        """
        try:
            candidates = sorted(path.iterdir())
        except OSError as exc:
            raise DirectoryError(f'input directory {path} is unreadable: {exc}') from exc

        for candidate in candidates:
            if candidate.is_dir():
                if candidate.resolve() == self['output_dir'].resolve():
                    continue
                yield from self.find_inputs(candidate)
            elif candidate.is_file():
                yield candidate

    def match_paths(self, input_paths: Iterable[Path]) -> dict[Step, list[Task]]:
        """
        Match input paths against the Context's Rules, and associate each
        with the Step of the first Rule that matches it.
        """
        # We want to handle tasks in the order they're defined!
        tasks: dict[Step, list[Task]] = {r.step: [] for r in self.rules if r.step}

        for path in input_paths:
            for rule in self.rules:
                if match := rule.matcher(self, path):
                    # None can be used to halt further rule processing.
                    if rule.step and rule.path_calc:
                        tasks[rule.step].append(Task(rule.step, path, rule.path_calc(self, path, match)))
                    break

        return tasks

    def _relative_to(self, path: Path, key: ContextDir) -> Path:
        if path.is_relative_to(self[key]):
            return path.relative_to(self[key])
        return path

    def relative_input(self, path: Path) -> Path:
        """
        Return @path relative to the input directory.
        """
        return self._relative_to(path, 'input_dir')

    def relative_output(self, path: Path) -> Path:
        """
        Return @path relative to the output directory.
        """
        return self._relative_to(path, 'output_dir')

    def claim_outputs(self, tasks: dict[Step, list[Task]]) -> list[FileOutcome]:
        """
        Make sure no two tasks write the same output file. Outputs are claimed
        in rule order, then input order; a later task aiming at a claimed
        output is dropped from @tasks and returned as a failed outcome.
        """
        claimed: dict[Path, Path] = {}
        collisions: list[FileOutcome] = []
        for step_tasks in tasks.values():
            kept: list[Task] = []
            for task in step_tasks:
                rel_path = self.relative_input(task.path)
                owner = claimed.setdefault(task.output_path, rel_path)
                if owner == rel_path:
                    kept.append(task)
                    continue
                rel_output = self.relative_output(task.output_path)
                error = OutputWriteError(
                    f'{rel_output.as_posix()} is already produced by {owner.as_posix()}', rel_path
                )
                collisions.append(FileOutcome(rel_path, rel_output, error))
            step_tasks[:] = kept
        return collisions

    def map(self, func: t.Callable[[T], U], items: Sequence[T], desc: str) -> Iterator[U]:
        """
        Apply @func to every item, using a thread pool unless `jobs` is 1.
        Results are yielded in the order of @items.
        """
        jobs = self['jobs']
        if jobs == 1 or len(items) <= 1:
            yield from track_progress(map(func, items), desc, total=len(items))
            return
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            yield from track_progress(executor.map(func, items), desc, total=len(items))

    def guard(self, task: Task, func: t.Callable[[], T]) -> tuple[T | None, FileOutcome]:
        """
        Call @func on behalf of @task, turning per-file errors into a failed
        `FileOutcome` attributed to the task's input path.
        """
        rel_path = self.relative_input(task.path)
        rel_output = self.relative_output(task.output_path)
        try:
            result = func()
        except ContentError as exc:
            exc.path = rel_path
            return None, FileOutcome(rel_path, rel_output, exc)
        except OSError as exc:
            if exc.filename is not None and exc.filename == str(task.path):
                error = InputReadError(str(exc), rel_path)
            else:
                error = OutputWriteError(str(exc), rel_path)
            return None, FileOutcome(rel_path, rel_output, error)
        return result, FileOutcome(rel_path, rel_output)

    def run_task(self, task: Task) -> FileOutcome:
        """
        Run a single task, capturing per-file errors.
        """
        _, outcome = self.guard(task, lambda: task.step(task.path, task.output_path))
        return outcome

    def process(self, input_paths: list[Path] | None = None) -> BuildReport:
        """
        Process a set of files using the Context's defined rules. If
        @input_paths is empty or None, `self.find_inputs()` will be used to get
        a tree of files to process.
        """
        input_paths = input_paths or list(self.find_inputs(self['input_dir']))
        tasks = self.match_paths(input_paths)

        report = BuildReport()
        for outcome in self.claim_outputs(tasks):
            report.add(outcome)
        for step, step_tasks in tasks.items():
            if not step_tasks:
                continue
            failed: set[Path] = set()
            for outcome in step.prepare(step_tasks):
                report.add(outcome)
                failed.add(outcome.path)
            runnable = [task for task in step_tasks if self.relative_input(task.path) not in failed]
            for outcome in self.map(self.run_task, runnable, 'Processing...'):
                report.add(outcome)

        return report

    def run(self, input_paths: list[Path] | None = None) -> BuildReport:
        """
        Check the build directories, load layouts, optionally purge the output
        directory, then call `self.process()` with @input_paths. Fatal errors
        are raised; per-file errors end up in the returned `BuildReport`.
        """
        if not self['input_dir'].is_dir():
            raise DirectoryError(f'input directory {self["input_dir"]} does not exist')
        self.setup()

        output_dir = self['output_dir']
        if self['purge_dirs']:
            for key in ('input_dir', 'layouts_dir'):
                if self[key].resolve().is_relative_to(output_dir.resolve()):
                    raise DirectoryError(f'refusing to purge {output_dir}, which contains {key} {self[key]}')
        try:
            if self['purge_dirs']:
                _rm_children(output_dir)
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DirectoryError(f'output directory {output_dir} could not be prepared: {exc}') from exc
        if not os.access(output_dir, os.W_OK):
            raise DirectoryError(f'output directory {output_dir} is not writable')

        return self.process(input_paths)


def build(settings: InputBuildSettings | None = None, **overrides: t.Any) -> BuildReport:
    """
    Run a full build with the default rules, returning its `BuildReport`.
    """
    return Context(make_settings(settings, **overrides)).run()
