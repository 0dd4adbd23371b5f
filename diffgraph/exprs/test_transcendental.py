#!/usr/bin/env python3

import unittest
import sys
import math

import numpy as np

from testutils import GraphTestCase
from .basics import Division, Multiply
from .constants import one, zero
from .contexts import DiffContext, EvalContext
from .parameter import param
from .transcendental import Log, Exp, log, exp
from ..numutils import numeric_derivative


class TestLog(GraphTestCase):
    def test_value(self):
        p = param(math.e)
        self.assertAlmostEqual(log(p).value(), 1.0)
        self.assertAlmostEqual(EvalContext().evaluate(log(p * p)), 2.0)
        self.assertIsType(log(p), Log)

    def test_derivative(self):
        p = param(4.0)
        d = DiffContext(p).diff(log(p))
        self.assertIsType(d, Division)
        self.assertIs(d.lhs, one())
        self.assertIs(d.rhs, p)
        self.assertEqual(d.value(), 0.25)
        self.assertIs(DiffContext(param(1.0)).diff(log(p)), zero())

    def test_non_positive(self):
        p = param(-1.0)
        with np.errstate(invalid='warn'):
            with self.assertWarns(RuntimeWarning):
                val = EvalContext().evaluate(log(p))
        self.assertTrue(np.isnan(val))
        p.bind(0.0)
        self.assertEqual(EvalContext().evaluate(log(p)), -np.inf)

    def test_integer_type_rejected(self):
        with self.assertRaises(TypeError):
            log(param(2))
        with self.assertRaises(TypeError):
            Log(param(2, dtype=np.int32))
        with self.assertRaises(TypeError):
            Log(2.0)
        self.assertEqual(log(param(2, dtype=np.float32)).dtype,
                         np.dtype(np.float32))


class TestExp(GraphTestCase):
    def test_value(self):
        p = param(0.0)
        self.assertEqual(exp(p).value(), 1.0)
        p.bind(1.0)
        self.assertAlmostEqual(exp(p).value(), math.e)

    def test_derivative_reuses_node(self):
        p = param(0.3)
        f = exp(p)
        self.assertIs(DiffContext(p).diff(f), f)
        d = DiffContext(p).diff(exp(2 * p))
        self.assertIsType(d, Multiply)
        self.assertIsType(d.lhs, Exp)
        self.assertAlmostEqual(float(d.value()), 2 * math.exp(0.6))

    def test_integer_type_rejected(self):
        with self.assertRaises(TypeError):
            exp(param(1))

    def test_overflow(self):
        p = param(1000.0)
        self.assertEqual(EvalContext().evaluate(exp(p)), np.inf)

    def test_composition(self):
        x, y = param(0.4), param(1.3)
        f = log(exp(x * y) + y * y) * exp(-1 * x)
        for p in (x, y):
            d = DiffContext(p).diff(f)
            self.assertAlmostEqual(float(EvalContext().evaluate(d)),
                                   numeric_derivative(f, p), places=6)


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
