r"""@package diffgraph.exprs.constants

Constant leaf nodes and the sentinel constants zero, one and two.

The sentinels are StaticConstant instances of which exactly one exists per
element type and value for the lifetime of the process. They behave like any
other constant when evaluated, but the differentiation context additionally
uses their *identity* to simplify derivative expressions (e.g. multiplying
by the one sentinel is skipped). This is never done by comparing values,
so an ordinary `Constant(0.0)` is not treated as zero during simplification.
"""

import sympy as sp

from .common import as_dtype, dtype_of
from .numexpr import Differentiable


__all__ = [
    "Constant",
    "StaticConstant",
    "constant",
    "zero",
    "one",
    "two",
]


class Constant(Differentiable):
    r"""Represent a fixed, externally supplied value.

    The derivative of a constant w.r.t. any parameter is zero.
    """

    def __init__(self, value, dtype=None, name='const'):
        r"""Init function.

        Args:
            value:  The constant value.
            dtype:  Element type. By default inferred from `value`.
            name:   Name of the node.
        """
        if dtype is None:
            dtype = dtype_of(value)
        super(Constant, self).__init__(dtype=dtype, name=name)
        ## The constant value as numpy scalar of the node's element type.
        self._value = self.dtype.type(value)

    @property
    def nice_name(self):
        return "%s (%r)" % (self.name, self._value)

    def value(self):
        return self._value

    def evaluate(self, context):
        return self._value

    def differentiate(self, context):
        return context.zero

    def _expr_str(self, args):
        return "%r" % self._value.item()

    def _sympy(self, args, symbols):
        return sp.sympify(self._value.item())


class StaticConstant(Constant):
    r"""Process-wide unique constant used as sentinel.

    Do not instantiate this class directly. Use zero(), one() or two() to
    obtain the shared instance for an element type.
    """

    def __init__(self, value, dtype):
        super(StaticConstant, self).__init__(value, dtype=dtype,
                                             name='static')

    def _sympy(self, args, symbols):
        return sp.Integer(int(self._value))


## Shared sentinels keyed by `(dtype, value)`.
_SENTINELS = dict()


def _sentinel(value, dtype):
    r"""Return the unique sentinel for `value` and the given element type."""
    dtype = as_dtype(dtype)
    key = (dtype, value)
    try:
        return _SENTINELS[key]
    except KeyError:
        return _SENTINELS.setdefault(key, StaticConstant(value, dtype))


def zero(dtype=None):
    r"""Sentinel constant 0 for the given element type (default `float64`)."""
    return _sentinel(0, dtype)


def one(dtype=None):
    r"""Sentinel constant 1 for the given element type (default `float64`)."""
    return _sentinel(1, dtype)


def two(dtype=None):
    r"""Sentinel constant 2 for the given element type (default `float64`)."""
    return _sentinel(2, dtype)


def constant(value, dtype=None, name='const'):
    r"""Create a new Constant node (never a sentinel)."""
    return Constant(value, dtype=dtype, name=name)
