#!/usr/bin/env python3
r"""Fit a Kalman filter to a series of observations.

Usage:
    fit_kalman.py [-v|-verbose] [OBSERVATION_FILE]

The drift, tension and the two noise variances of the model are fitted by
minimizing the filter's likelihood using Newton's method on its gradient.
Settings are read from `fit_kalman.cfg` and optionally `fit_kalman.mine.cfg`
in this directory.
"""

import sys
import os
import math
import logging
from configparser import ConfigParser

import numpy as np
from scipy.linalg import LinAlgError, LinAlgWarning

op = os.path
sys.path.insert(0, op.realpath(op.join(op.dirname(__file__), op.pardir)))

from diffgraph.exprs import DiffContext, EvalContext, param, zero, one
from diffgraph.numutils import raise_all_warnings, isclose
from diffgraph.optimize import NewtonMethod
from diffgraph.timeseries import KalmanParameters, kalman_likelihood
from diffgraph.utils import timethis


class Main(object):
    def __init__(self, *args):
        self.args = list(args)
        self.root_dir = op.dirname(op.realpath(__file__))
        config = ConfigParser()
        with open(op.join(self.root_dir, 'fit_kalman.cfg')) as cfg_file:
            config.read_file(cfg_file)
        config.read(op.join(self.root_dir, "fit_kalman.mine.cfg"))
        self.config = config

    def get(self, name, kind=float):
        if kind is int:
            return self.config.getint("kalman", name)
        if kind is float:
            return self.config.getfloat("kalman", name)
        return self.config.get("kalman", name)

    def pop_flag(self, flag):
        try:
            self.args.remove(flag)
            return True
        except ValueError:
            pass
        return False

    def load_observations(self):
        if self.args:
            fname = self.args[0]
        else:
            fname = op.join(self.root_dir, self.get("observations", kind=str))
        logging.info("Observation file: %s", fname)
        values = np.loadtxt(fname, ndmin=1)
        count = self.get("count", kind=int)
        if count > 0:
            values = values[:count]
        logging.info("Using %d observations", len(values))
        return values

    def main(self):
        if self.pop_flag('-v') or self.pop_flag('-verbose'):
            logging.getLogger().setLevel(logging.INFO)
        observations = self.load_observations()
        if len(observations) < 2:
            logging.error("Need at least two observations.")
            sys.exit(2)
        params = KalmanParameters(
            drift=param(self.get("drift"), name='drift'),
            tension=param(self.get("tension"), name='tension'),
            offset=zero(),
            log_measure_variance=param(math.log(self.get("measure_variance")),
                                       name='log_measure_variance'),
            log_state_variance=param(math.log(self.get("state_variance")),
                                     name='log_state_variance'),
            likelihood_skip_count=self.get("likelihood_skip_count", kind=int),
        )
        variables = params.variables()
        kf = kalman_likelihood(params, observations,
                               init_state=observations[0],
                               init_variance=self.get("init_variance"),
                               x=one())
        lf = kf.likelihood
        logging.info("Likelihood graph has %d nodes", len(lf.nodes()))
        with timethis("Building Hessian...", "Hessian built in {}",
                      printer=logging.info):
            gradient = [DiffContext(p).diff(lf) for p in variables]
            newton = NewtonMethod(gradient, variables)
        likelihood = None
        try:
            with raise_all_warnings():
                for i in range(self.get("steps", kind=int)):
                    newton.step()
                    value = float(EvalContext().evaluate(lf))
                    logging.info("%02d: likelihood = %s", i+1, value)
                    if likelihood is not None and isclose(likelihood, value):
                        likelihood = value
                        break
                    likelihood = value
        except (FloatingPointError, LinAlgError, LinAlgWarning) as e:
            logging.error("Newton search failed: %s", e)
            sys.exit(1)
        for p in variables:
            print("%s = %s" % (p.name, p.value()))
        print("measure_variance = %s" % params.measure_variance.value())
        print("state_variance = %s" % params.state_variance.value())
        print("likelihood = %s" % likelihood)


if __name__ == "__main__":
    logging.basicConfig(format="%(levelname)s: %(message)s")
    Main(*sys.argv[1:]).main()
