r"""@package diffgraph.numutils

Numerical helpers shared by the drivers and the tests.


@b Examples

```
    >>> p = param(2.0)
    >>> numeric_derivative(p * p * p, p)   # approximately 12.0
```
"""

from contextlib import contextmanager
import warnings

from scipy.linalg import LinAlgWarning
import numpy as np
from mpmath import mp

from .exprs import EvalContext


__all__ = [
    "NumericalError",
    "raise_all_warnings",
    "isclose",
    "central_difference",
    "numeric_derivative",
]


class NumericalError(Exception):
    r"""Raised when a numerical evaluation produced an unusable result.

    For example, a driver evaluating expression graphs may raise this (or a
    subclass) if the result is not finite.
    """
    pass


@contextmanager
def raise_all_warnings():
    r"""Make floating point problems raise instead of warn.

    Expression graphs normally propagate `inf` and `nan` silently (numpy only
    emits a `RuntimeWarning`). Drivers like the Newton iteration use this
    context to stop as soon as an evaluation overflows, divides by zero or
    produces an invalid value:
    ```
        with raise_all_warnings():
            try:
                EvalContext().evaluate(1 / param(0.0))
            except FloatingPointError:
                ...
    ```
    Warnings about singular matrices issued by `scipy.linalg`
    (`LinAlgWarning`) are raised as exceptions as well. The previous numpy
    error settings are restored on exit.
    """
    previous = np.seterr(divide='raise', over='raise', invalid='raise')
    try:
        with warnings.catch_warnings():
            warnings.simplefilter('error', LinAlgWarning)
            yield
    finally:
        np.seterr(**previous)


def isclose(a, b, rel_tol=None, abs_tol=None, use_mp=False):
    r"""Compare two numbers using a relative and an absolute tolerance.

    With `use_mp=True`, the comparison is delegated to `mpmath.mp.almosteq()`
    and its defaults (based on the current working precision) apply.
    Otherwise, `rel_tol` defaults to `1e-9` and `abs_tol` to zero.
    """
    if use_mp:
        return mp.almosteq(a, b, rel_eps=rel_tol, abs_eps=abs_tol)
    rel_tol = 1e-9 if rel_tol is None else rel_tol
    abs_tol = 0.0 if abs_tol is None else abs_tol
    scale = max(abs(a), abs(b))
    return abs(a - b) <= max(rel_tol * scale, abs_tol)


def central_difference(func, x, h=1e-6):
    r"""Second order finite difference estimate of `func'(x)`.

    The step is scaled with the magnitude of `x` (but not below `h`) to keep
    the relative error small for large arguments.
    """
    h = h * max(1.0, abs(x))
    return (func(x + h) - func(x - h)) / (2 * h)


def numeric_derivative(expr, parameter, h=1e-6):
    r"""Finite difference derivative of an expression w.r.t. a parameter.

    The parameter is temporarily rebound to nearby values and the expression
    is evaluated with a fresh evaluation context each time. The original
    value is restored afterwards.

    @param expr
        Expression node to differentiate.
    @param parameter
        The exprs.Parameter to vary.
    @param h
        Relative step size (see central_difference()).
    """
    x0 = float(parameter.value())
    def f(x):
        parameter.bind(x)
        return float(EvalContext().evaluate(expr))
    try:
        return central_difference(f, x0, h=h)
    finally:
        parameter.bind(x0)
