"""
Internal utilities for progress bars and pretty printing.
"""
import typing as t

import rich.console
import rich.progress


_rich_consoles = {
    'stdout': rich.console.Console(),
    'stderr': rich.console.Console(stderr=True),
}

T = t.TypeVar('T')


def track_progress(iterable: t.Iterable[T], desc: str, total: int | None = None) -> t.Iterable[T]:
    """
    Progress tracker using a rich progress bar on stdout.
    """
    yield from rich.progress.track(iterable, desc, total=total, console=_rich_consoles['stdout'])


def print_with_style(*args, sep=' ', end='\n', file: str = 'stdout', style=None):
    """
    Enhanced print() function which supports rich console styles.
    """
    _rich_consoles[file].print(*args, sep=sep, end=end, style=style, markup=False, highlight=False)
