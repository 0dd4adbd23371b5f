r"""@package diffgraph.utils

General utilities for simplifying certain tasks in Python.
"""

from timeit import default_timer
import datetime
from contextlib import contextmanager


__all__ = [
    "lmap",
    "timethis",
]


def lmap(func, *iterables):
    r"""Implementation of `map` that returns a list instead of a generator."""
    return list(map(func, *iterables))


class _Timing(object):
    r"""Result object of timethis() holding the elapsed time."""

    __slots__ = ("start", "elapsed")

    def __init__(self):
        self.start = default_timer()
        ## Elapsed time in seconds, available once the context has exited.
        self.elapsed = None

    def __str__(self):
        seconds = self.elapsed
        if seconds is None:
            seconds = default_timer() - self.start
        return str(datetime.timedelta(seconds=seconds))


@contextmanager
def timethis(start_msg=None, end_msg="Elapsed time: {}", silent=False,
             printer=print):
    r"""Context manager for timing code execution.

    The context yields an object whose `elapsed` attribute contains the
    duration in seconds after the block has finished.

    @param start_msg
        String to print at the beginning. May be `None` to print nothing.
    @param end_msg
        String to print after execution. The placeholder ``'{}'`` is
        replaced by the elapsed time. Default is ``"Elapsed time: {}"``.
    @param silent
        Whether to print anything at all. May be useful when a function has a
        verbosity setting to conditionally time its results.
    @param printer
        Callable taking one string used for output. Default is `print`.
        Scripts may pass e.g. `logging.info` here.
    """
    timing = _Timing()
    if not silent and start_msg is not None:
        printer(start_msg)
    try:
        yield timing
    finally:
        timing.elapsed = default_timer() - timing.start
        if not silent and end_msg is not None:
            printer(end_msg.format(timing))
