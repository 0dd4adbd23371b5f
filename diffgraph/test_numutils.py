#!/usr/bin/env python3

import unittest
import sys
import warnings

import numpy as np
from mpmath import mp
from scipy.linalg import LinAlgWarning

from testutils import GraphTestCase
from .exprs import EvalContext, param, log
from .numutils import raise_all_warnings, isclose, central_difference
from .numutils import numeric_derivative


class TestRaiseAllWarnings(GraphTestCase):
    def test_division_by_zero(self):
        f = 1 / param(0.0)
        with raise_all_warnings():
            with self.assertRaises(FloatingPointError):
                EvalContext().evaluate(f)
        self.assertTrue(np.isinf(EvalContext().evaluate(f)))

    def test_invalid_value(self):
        f = log(param(-1.0))
        with raise_all_warnings():
            with self.assertRaises(FloatingPointError):
                EvalContext().evaluate(f)

    def test_linalg_warning(self):
        with raise_all_warnings():
            with self.assertRaises(LinAlgWarning):
                warnings.warn("singular", LinAlgWarning)

    def test_settings_restored(self):
        before = np.geterr()
        try:
            with raise_all_warnings():
                raise RuntimeError("error")
        except RuntimeError:
            pass
        self.assertEqual(np.geterr(), before)


class TestIsClose(GraphTestCase):
    def test_float(self):
        self.assertTrue(isclose(1.0, 1.0 + 1e-12))
        self.assertFalse(isclose(1.0, 1.0 + 1e-6))
        self.assertTrue(isclose(1.0, 1.0 + 1e-6, rel_tol=1e-5))
        self.assertFalse(isclose(0.0, 1e-20))
        self.assertTrue(isclose(0.0, 1e-20, abs_tol=1e-15))

    def test_mp(self):
        with mp.workdps(30):
            a = mp.mpf(1) / 3
            b = a + mp.mpf('1e-28')
            tol = mp.mpf('1e-25')
            self.assertTrue(isclose(a, b, rel_tol=tol, use_mp=True))
            self.assertFalse(isclose(a, b + mp.mpf('1e-10'), rel_tol=tol,
                                     use_mp=True))


class TestFiniteDifferences(GraphTestCase):
    def test_central_difference(self):
        self.assertAlmostEqual(central_difference(np.sin, 0.3), np.cos(0.3),
                               places=8)
        self.assertAlmostEqual(central_difference(lambda x: x**2, 1e4),
                               2e4, places=3)

    def test_numeric_derivative_restores_value(self):
        p = param(2.0)
        f = p * p * p
        self.assertAlmostEqual(numeric_derivative(f, p), 12.0, places=6)
        self.assertEqual(p.value(), 2.0)


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
