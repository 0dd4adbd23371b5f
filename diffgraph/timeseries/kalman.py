r"""@package diffgraph.timeseries.kalman

Kalman filter for a scalar state space model, built as an expression graph.

The model is
\f[
    s_t = d + a\, s_{t-1} + \eta_t, \qquad
    y_t = c + s_t x_t + \epsilon_t,
\f]
with drift \f$ d \f$, tension \f$ a \f$, offset \f$ c \f$, a known regressor
\f$ x_t \f$, and normally distributed noise terms with variances
\f$ \sigma_\eta^2 = e^{\lambda_\eta} \f$ (state) and
\f$ \sigma_\epsilon^2 = e^{\lambda_\epsilon} \f$ (measurement). The
variances are parameterized by their logarithms, so that unconstrained
optimization keeps them positive.

For each observation, estimate() performs the prediction step and filtering()
the update step. All quantities are expression nodes, so after feeding all
observations, the accumulated likelihood (more precisely, minus two times the
log-likelihood without constant terms) is an expression graph of the model
parameters, which can be differentiated and minimized.

@b Examples

```
    params = KalmanParameters(
        drift=param(0.0), tension=param(1.0), offset=zero(),
        log_measure_variance=param(math.log(0.01)),
        log_state_variance=param(math.log(0.01)),
    )
    kf = kalman_likelihood(params, prices, init_state=prices[0],
                           init_variance=1.0)
    gradient = [DiffContext(p).diff(kf.likelihood) for p in params.variables()]
```
"""

from ..exprs import Differentiable, Parameter, ensure_node, exp, log, one
from ..exprs import square


__all__ = [
    "KalmanParameters",
    "KalmanFilter",
    "kalman_likelihood",
]


class KalmanParameters(object):
    r"""Model parameters of a KalmanFilter.

    All parameters are expression nodes, usually exprs.Parameter objects to
    be fitted. Numbers are converted to constants.
    """

    __slots__ = ("drift", "tension", "offset", "log_measure_variance",
                 "log_state_variance", "likelihood_skip_count",
                 "measure_variance", "state_variance")

    def __init__(self, drift, tension, offset, log_measure_variance,
                 log_state_variance, likelihood_skip_count=0):
        r"""Init function.

        @param drift
            Constant term of the state transition.
        @param tension
            Factor multiplying the previous state.
        @param offset
            Constant term of the measurement equation.
        @param log_measure_variance
            Logarithm of the measurement noise variance.
        @param log_state_variance
            Logarithm of the state noise variance.
        @param likelihood_skip_count
            Number of initial observations not contributing to the
            likelihood. Useful to skip the transient caused by an arbitrary
            initial state. Default is `0`.
        """
        self.drift = ensure_node(drift)
        self.tension = ensure_node(tension)
        self.offset = ensure_node(offset)
        self.log_measure_variance = ensure_node(log_measure_variance)
        self.log_state_variance = ensure_node(log_state_variance)
        if likelihood_skip_count < 0:
            raise ValueError("likelihood_skip_count must not be negative.")
        self.likelihood_skip_count = likelihood_skip_count
        ## Measurement variance node, shared by all time steps.
        self.measure_variance = exp(self.log_measure_variance)
        ## State variance node, shared by all time steps.
        self.state_variance = exp(self.log_state_variance)

    def variables(self):
        r"""List of the model parameters which are exprs.Parameter objects."""
        candidates = (self.drift, self.tension, self.offset,
                      self.log_measure_variance, self.log_state_variance)
        return [p for p in candidates if isinstance(p, Parameter)]


class KalmanFilter(object):
    r"""Kalman filter whose state and likelihood are expression graphs.

    Call estimate() and filtering() alternately, once per observation.
    """

    def __init__(self, parameters, init_state, init_variance):
        r"""Create a filter.

        @param parameters
            KalmanParameters object.
        @param init_state
            Initial state estimate (node or number).
        @param init_variance
            Variance of the initial state estimate (node or number).
        """
        self._params = parameters
        self._state = ensure_node(init_state)
        self._variance = ensure_node(init_variance)
        self._one = one(self._state.dtype)
        self._estimate_state = None
        self._estimate_variance = None
        self._estimate_measure = None
        self._likelihood = None
        self._time = 0

    @property
    def parameters(self):
        return self._params

    @property
    def state(self):
        r"""Current (filtered) state expression."""
        return self._state

    @property
    def variance(self):
        r"""Current (filtered) state variance expression."""
        return self._variance

    @property
    def likelihood(self):
        r"""Accumulated likelihood expression (`None` if nothing counted yet)."""
        return self._likelihood

    @property
    def time(self):
        r"""Number of observations processed by filtering()."""
        return self._time

    def estimate(self, x):
        r"""Prediction step. Returns the expected measurement expression.

        @param x
            Regressor (node or number) of the upcoming observation.
        """
        p = self._params
        x = ensure_node(x)
        self._estimate_state = p.drift + p.tension * self._state
        self._estimate_measure = p.offset + self._estimate_state * x
        self._estimate_variance = (square(p.tension) * self._variance
                                   + p.state_variance)
        return self._estimate_measure

    def filtering(self, x, y):
        r"""Update step for observation `y`. Returns the new state expression.

        Must be preceded by a call to estimate() with the same regressor `x`.
        """
        if self._estimate_measure is None:
            raise RuntimeError("estimate() must be called before filtering().")
        p = self._params
        x = ensure_node(x)
        y = ensure_node(y)
        V = self._estimate_variance
        error = y - self._estimate_measure
        x2 = square(x)
        error_variance = V * x2 + p.measure_variance
        current = log(error_variance) + square(error) / error_variance
        if self._time >= p.likelihood_skip_count:
            if self._likelihood is None:
                self._likelihood = current
            else:
                self._likelihood = self._likelihood + current
        self._time += 1
        k = (x * V) / (x2 * V + p.measure_variance)
        self._state = self._estimate_state + k * error
        self._variance = (self._one - x * k) * V
        self._estimate_measure = None
        return self._state


def kalman_likelihood(parameters, observations, init_state, init_variance,
                      x=1.0):
    r"""Run a KalmanFilter over a sequence of observations.

    @param parameters
        KalmanParameters object.
    @param observations
        Iterable of observed values (numbers or nodes).
    @param init_state
        Initial state estimate.
    @param init_variance
        Variance of the initial state estimate.
    @param x
        Regressor used for all observations. Default is `1.0`. A single
        node is created for numbers and shared across all time steps.

    @return The KalmanFilter after processing all observations. Its
        `likelihood` attribute holds the likelihood expression.
    """
    kf = KalmanFilter(parameters, init_state, init_variance)
    if not isinstance(x, Differentiable):
        x = ensure_node(x)
    for y in observations:
        kf.estimate(x)
        kf.filtering(x, y)
    return kf
