r"""@package testutils

Shared helpers for the `unittest` based test modules.

All test cases derive from GraphTestCase, a `unittest.TestCase` subclass
honouring the run-wide options stored in TestSettings. These options are set
by the `tests.py` runner from its command line flags.

Tests taking considerably longer than the rest are marked with the slowtest
decorator. They are skipped unless `TestSettings.skipslow` has been set to
`False` (e.g. by running `tests.py -s`).
"""

import sys
import functools
import unittest
import time

import numpy as np


__all__ = [
    "GraphTestCase",
    "TestSettings",
    "slowtest",
]


def slowtest(func):
    """Mark a test to be skipped unless slow tests are requested."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        if TestSettings.skipslow:
            raise unittest.SkipTest("slow test (run with -s to include it)")
        return func(*args, **kwargs)
    return wrapper


class GraphTestCase(unittest.TestCase):
    """Base class of the expression graph tests.

    Compared to `unittest.TestCase`, this class
        * prints the duration of each successful test if TestSettings.timing
          is set (visible with `verbosity=2`)
        * runs each test with numpy floating point warnings silenced, since
          `inf` and `nan` results are expected in many tests (tests checking
          the warnings re-enable them locally with `np.errstate`)
        * adds assertions for comparing numbers and sequences of numbers
    """

    def run(self, result=None):
        # Other runners (e.g. pytest) may pass objects without result lists.
        self._result = result if hasattr(result, 'errors') else None
        self._counts = self._resultCounts()
        with np.errstate(all='ignore'):
            return unittest.TestCase.run(self, result)

    def setUp(self):
        super(GraphTestCase, self).setUp()
        self.startTime = time.time()
        self.addCleanup(self._printTiming)

    def _resultCounts(self):
        r"""Numbers of errors, failures and skips recorded so far."""
        result = self._result
        if result is None:
            return (0, 0, 0)
        return (len(result.errors), len(result.failures), len(result.skipped))

    def _printTiming(self):
        if not TestSettings.timing or self._result is None:
            return
        if self._resultCounts() != self._counts:
            return
        if getattr(self._result, 'dots', False):
            return
        if not getattr(self._result, 'showAll', False):
            return
        duration = time.time() - self.startTime
        print("(%.4f seconds) ... " % duration, file=sys.stderr, end='')

    def assertIsType(self, obj, cls):
        r"""Assert that `type(obj)` is `cls` (subclasses do not count)."""
        self.assertIs(type(obj), cls)

    def assertRelClose(self, a, b, rel_tol=1e-9, abs_tol=0.0, msg=None):
        r"""Assert that two numbers agree within a relative tolerance."""
        a, b = float(a), float(b)
        if abs(a - b) <= max(rel_tol * max(abs(a), abs(b)), abs_tol):
            return
        standardMsg = "%r != %r (rel_tol=%r, abs_tol=%r)" % (a, b, rel_tol,
                                                             abs_tol)
        self.fail(self._formatMessage(msg, standardMsg))

    def assertListAlmostEqual(self, a, b, places=None, delta=None):
        r"""Element-wise version of `assertAlmostEqual()` for sequences.

        Either `places` (default `7`) or `delta` may be given, not both.
        """
        if places is not None and delta is not None:
            raise TypeError("Specify either places or delta, not both.")
        a, b = list(a), list(b)
        if len(a) != len(b):
            self.fail("Sequences differ in length: %d != %d" % (len(a), len(b)))
        if delta is None:
            places = 7 if places is None else places
            def close(x, y):
                return round(abs(x - y), places) == 0
        else:
            def close(x, y):
                return abs(x - y) <= delta
        bad = [i for i, (x, y) in enumerate(zip(a, b))
               if x != y and not close(x, y)]
        if not bad:
            return
        shown = bad[:9]
        lines = ["%d of %d elements differ%s:"
                 % (len(bad), len(a), "" if len(bad) == len(shown)
                    else " (showing first %d)" % len(shown))]
        lines.extend("  [%d] %r != %r (difference: %r)" % (i, a[i], b[i], b[i] - a[i])
                     for i in shown)
        self.fail("\n".join(lines))


class TestSettings(object):
    """Options of the current test run."""
    ## Stop at the first failure or error.
    failfast = False
    ## Whether test output is buffered (informational only).
    buffering = False
    ## Print the duration of each test.
    timing = False
    ## Skip tests decorated with slowtest.
    skipslow = True
