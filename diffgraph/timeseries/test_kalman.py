#!/usr/bin/env python3

import unittest
import sys
import math
import os.path as op

import numpy as np

from testutils import GraphTestCase, slowtest
from ..exprs import DiffContext, EvalContext, Exp, param, zero, one
from ..numutils import numeric_derivative
from ..optimize import NewtonMethod
from .kalman import KalmanParameters, KalmanFilter, kalman_likelihood


OBSERVATIONS = [1.2, 0.7, 1.9, 2.4, 2.0, 2.8, 2.5, 3.1]


def load_prices():
    fname = op.join(op.dirname(op.realpath(__file__)), op.pardir, op.pardir,
                    'scripts', 'prices.txt')
    return np.loadtxt(fname)


class TestKalmanFilter(GraphTestCase):
    def setUp(self):
        super(TestKalmanFilter, self).setUp()
        self.drift = param(1.0, name='drift')
        self.tension = param(2.0, name='tension')
        self.offset = param(3.0, name='offset')
        self.log_mv = param(math.log(10.0), name='log_mv')
        self.log_sv = param(math.log(10.0), name='log_sv')
        self.params = KalmanParameters(
            drift=self.drift, tension=self.tension, offset=self.offset,
            log_measure_variance=self.log_mv,
            log_state_variance=self.log_sv,
        )

    def test_estimate(self):
        kf = KalmanFilter(self.params, init_state=1.0, init_variance=2.0)
        m = kf.estimate(3.0)
        self.assertRelClose(EvalContext().evaluate(m), 12.0)
        self.assertRelClose(m.value(), 12.0)

    def test_filtering(self):
        kf = KalmanFilter(self.params, init_state=1.0, init_variance=2.0)
        self.assertIsNone(kf.likelihood)
        self.assertEqual(kf.time, 0)
        kf.estimate(3.0)
        state = kf.filtering(3.0, 12.5)
        self.assertIs(state, kf.state)
        self.assertEqual(kf.time, 1)
        ctx = EvalContext()
        self.assertRelClose(ctx.evaluate(state), 3.156977, rel_tol=1e-5)
        self.assertRelClose(ctx.evaluate(kf.likelihood), 5.14895,
                            rel_tol=1e-5)
        self.assertRelClose(ctx.evaluate(kf.variance), 18.0 * 10.0 / 172.0)

    def test_filtering_needs_estimate(self):
        kf = KalmanFilter(self.params, init_state=1.0, init_variance=2.0)
        with self.assertRaises(RuntimeError):
            kf.filtering(1.0, 1.0)
        kf.estimate(1.0)
        kf.filtering(1.0, 1.0)
        with self.assertRaises(RuntimeError):
            kf.filtering(1.0, 1.0)

    def test_rebind(self):
        kf = KalmanFilter(self.params, init_state=1.0, init_variance=2.0)
        m = kf.estimate(3.0)
        self.drift.bind(2.0)
        self.assertRelClose(EvalContext().evaluate(m), 15.0)

    def test_variances_shared(self):
        kf = kalman_likelihood(self.params, OBSERVATIONS, init_state=1.0,
                               init_variance=2.0)
        nodes = kf.likelihood.nodes()
        exps = [n for n in nodes if isinstance(n, Exp)]
        self.assertEqual(len(exps), 2)
        self.assertIn(self.params.measure_variance, exps)
        self.assertIn(self.params.state_variance, exps)
        ctx = EvalContext()
        ctx.evaluate(kf.likelihood)
        self.assertEqual(ctx.evaluate_count, len(nodes))

    def test_skip_count(self):
        params = KalmanParameters(
            drift=self.drift, tension=self.tension, offset=self.offset,
            log_measure_variance=self.log_mv,
            log_state_variance=self.log_sv,
            likelihood_skip_count=2,
        )
        full = kalman_likelihood(self.params, OBSERVATIONS[:3], 1.0, 2.0)
        kf = KalmanFilter(params, init_state=1.0, init_variance=2.0)
        for i, y in enumerate(OBSERVATIONS[:3]):
            kf.estimate(1.0)
            kf.filtering(1.0, y)
            if i < 2:
                self.assertIsNone(kf.likelihood)
        self.assertIsNotNone(kf.likelihood)
        first_two = kalman_likelihood(self.params, OBSERVATIONS[:2], 1.0, 2.0)
        ctx = EvalContext()
        self.assertRelClose(
            ctx.evaluate(kf.likelihood),
            ctx.evaluate(full.likelihood) - ctx.evaluate(first_two.likelihood),
            rel_tol=1e-12, abs_tol=1e-12,
        )
        with self.assertRaises(ValueError):
            KalmanParameters(0.0, 1.0, 0.0, 0.0, 0.0, likelihood_skip_count=-1)

    def test_variables(self):
        params = KalmanParameters(drift=self.drift, tension=1.0, offset=zero(),
                                  log_measure_variance=self.log_mv,
                                  log_state_variance=self.log_sv)
        self.assertEqual(params.variables(),
                         [self.drift, self.log_mv, self.log_sv])
        self.assertIs(params.offset, zero())

    def test_gradient(self):
        self.drift.bind(0.3)
        self.tension.bind(0.9)
        self.offset.bind(0.1)
        self.log_mv.bind(math.log(0.5))
        self.log_sv.bind(math.log(0.2))
        kf = kalman_likelihood(self.params, OBSERVATIONS, init_state=1.0,
                               init_variance=1.0)
        lf = kf.likelihood
        ctx = EvalContext()
        for p in self.params.variables():
            d = DiffContext(p).diff(lf)
            self.assertRelClose(ctx.evaluate(d), numeric_derivative(lf, p),
                                rel_tol=1e-5, abs_tol=1e-7)

    def test_fit_drift(self):
        # The likelihood is quadratic in the drift.
        prices = load_prices()[:60]
        params = KalmanParameters(
            drift=self.drift, tension=1.0, offset=zero(),
            log_measure_variance=math.log(0.01),
            log_state_variance=math.log(0.01), likelihood_skip_count=1,
        )
        self.drift.bind(0.0)
        kf = kalman_likelihood(params, prices, init_state=prices[0],
                               init_variance=1.0, x=one())
        grad = DiffContext(self.drift).diff(kf.likelihood)
        before = float(EvalContext().evaluate(grad))
        NewtonMethod([grad], [self.drift]).step()
        after = float(EvalContext().evaluate(grad))
        self.assertLess(abs(after), 1e-6 * max(1.0, abs(before)))

    @slowtest
    def test_hessian(self):
        prices = load_prices()
        params = KalmanParameters(
            drift=param(0.0), tension=param(1.0), offset=zero(),
            log_measure_variance=param(math.log(0.01)),
            log_state_variance=param(math.log(0.01)),
            likelihood_skip_count=1,
        )
        variables = params.variables()
        kf = kalman_likelihood(params, prices, init_state=prices[0],
                               init_variance=1.0, x=one())
        grad = [DiffContext(p).diff(kf.likelihood) for p in variables]
        newton = NewtonMethod(grad, variables)
        ctx = EvalContext()
        H = np.array([[float(ctx.evaluate(h)) for h in row]
                      for row in newton.jacobian])
        self.assertEqual(H.shape, (4, 4))
        scale = np.max(np.abs(H))
        for i in range(4):
            for j in range(i):
                self.assertRelClose(H[i, j], H[j, i], rel_tol=1e-6,
                                    abs_tol=1e-9 * scale)
        for g, p in zip(grad, variables):
            self.assertRelClose(ctx.evaluate(g),
                                numeric_derivative(kf.likelihood, p),
                                rel_tol=1e-3, abs_tol=1e-4)


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
