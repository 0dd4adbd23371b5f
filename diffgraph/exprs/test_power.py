#!/usr/bin/env python3

import unittest
import sys

import numpy as np

from testutils import GraphTestCase
from .basics import Multiply, Division
from .constants import constant, zero, two
from .contexts import DiffContext, EvalContext
from .parameter import param
from .power import Power, Square, power, square
from ..numutils import numeric_derivative


class TestSquare(GraphTestCase):
    def test_value(self):
        p = param(-3.0)
        self.assertEqual(square(p).value(), 9.0)
        self.assertEqual(EvalContext().evaluate(square(p)), 9.0)
        self.assertEqual(square(4).value(), 16)
        self.assertEqual(square(p).dtype, p.dtype)

    def test_derivative(self):
        p, q = param(-3.0), param(1.0)
        ctx = DiffContext(p)
        d = ctx.diff(square(p))
        self.assertIsType(d, Multiply)
        self.assertIs(d.lhs, two())
        self.assertIs(d.rhs, p)
        self.assertEqual(d.value(), -6.0)
        self.assertIs(ctx.diff(square(q)), zero())

    def test_chain_rule(self):
        p = param(0.5)
        f = square(3 * p + 1)
        d = DiffContext(p).diff(f)
        self.assertAlmostEqual(float(d.value()), 2 * 2.5 * 3)
        self.assertAlmostEqual(float(d.value()), numeric_derivative(f, p),
                               places=6)


class TestPower(GraphTestCase):
    def test_value(self):
        p = param(2.0)
        self.assertIsType(p**3, Power)
        self.assertEqual((p**3).value(), 8.0)
        self.assertEqual((2**p).value(), 4.0)
        self.assertAlmostEqual(power(p, 0.5).value(), np.sqrt(2.0))
        self.assertAlmostEqual(power(9.0, 0.5).value(), 3.0)
        self.assertEqual(EvalContext().evaluate(p**p), 4.0)

    def test_constant_exponent(self):
        p = param(2.0)
        d = DiffContext(p).diff(p**3.0)
        # General rule, giving u**v * (v/u) without the logarithmic term.
        self.assertIsType(d, Multiply)
        self.assertIsType(d.rhs, Division)
        self.assertAlmostEqual(float(d.value()), 12.0)

    def test_constant_exponent_at_zero(self):
        p = param(0.0)
        d = DiffContext(p).diff(p**2.0)
        self.assertTrue(np.isnan(EvalContext().evaluate(d)))
        self.assertEqual(DiffContext(p).diff(square(p)).value(), 0.0)

    def test_variable_exponent(self):
        x, y = param(1.7), param(0.6)
        f = x**y
        dx = DiffContext(x).diff(f)
        dy = DiffContext(y).diff(f)
        self.assertAlmostEqual(float(dx.value()), 0.6 * 1.7**-0.4)
        self.assertAlmostEqual(float(dy.value()), 1.7**0.6 * np.log(1.7))
        for p, d in ((x, dx), (y, dy)):
            self.assertAlmostEqual(float(d.value()), numeric_derivative(f, p),
                                   places=6)

    def test_constant_base(self):
        p = param(1.5)
        d = DiffContext(p).diff(constant(3.0)**p)
        self.assertAlmostEqual(float(d.value()), 3.0**1.5 * np.log(3.0))

    def test_integer_power(self):
        p = param(3)
        f = p**2
        self.assertEqual(f.dtype, np.dtype(np.float64))
        self.assertIsType(f.value(), np.float64)
        self.assertEqual(f.value(), 9.0)
        # The general rule needs the logarithm of the base.
        with self.assertRaises(TypeError):
            DiffContext(p).diff(f)

    def test_negative_integer_exponent(self):
        p, q = param(2), param(-1)
        f = p**q
        self.assertEqual(f.dtype, np.dtype(np.float64))
        self.assertEqual(EvalContext().evaluate(f), 0.5)
        self.assertEqual(f.value(), 0.5)
        self.assertEqual(power(param(4, dtype=np.int32), -2).value(), 0.0625)
        q.bind(-2)
        self.assertEqual(EvalContext().evaluate(f), 0.25)

    def test_float32_power(self):
        p = param(2.0, dtype=np.float32)
        f = p**3.0
        self.assertEqual(f.dtype, np.dtype(np.float32))
        self.assertIsType(EvalContext().evaluate(f), np.float32)

    def test_sympy(self):
        x, y = param(1.7, name='x'), param(0.6, name='y')
        expr = (x**y).to_sympy()
        self.assertEqual(str(expr), "x**y")
        self.assertIsInstance(Square(x).to_sympy(), type(expr))


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
