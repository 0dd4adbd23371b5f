r"""@package diffgraph.exprs.transcendental

Natural logarithm and exponential function nodes.

Both are only defined for floating point element types. The logarithm of a
non-positive value evaluates to `nan` (or `-inf` for zero) without raising.
"""

import numpy as np
import sympy as sp

from .common import require_floating
from .numexpr import Differentiable, ensure_node


__all__ = [
    "Log",
    "Exp",
    "log",
    "exp",
]


class _UnaryFunction(Differentiable):
    r"""Base class for functions of a single floating point node."""

    def __init__(self, x, name=None):
        dtype = None
        if isinstance(x, Differentiable):
            dtype = x.dtype
            require_floating(dtype, self.__class__.__name__)
        super(_UnaryFunction, self).__init__(dtype=dtype, children=(x,),
                                             name=name)

    @property
    def x(self):
        r"""The argument node."""
        return self._children[0]

    def value(self):
        return self._apply(self.x.value())

    def evaluate(self, context):
        return self._apply(context.evaluate(self.x))

    def _apply(self, x):
        raise NotImplementedError


class Log(_UnaryFunction):
    r"""Natural logarithm \f$ \ln u \f$ with derivative \f$ u'/u \f$."""

    def _apply(self, x):
        return np.log(x)

    def differentiate(self, context):
        x = self.x
        dlog = context.div(context.one, x)
        return context.mul(dlog, context.diff(x))

    def _expr_str(self, args):
        return "log%s" % args[0]

    def _sympy(self, args, symbols):
        return sp.log(args[0])


class Exp(_UnaryFunction):
    r"""Exponential function \f$ e^u \f$ with derivative \f$ e^u u' \f$.

    The derivative reuses this node as the \f$ e^u \f$ factor.
    """

    def _apply(self, x):
        return np.exp(x)

    def differentiate(self, context):
        return context.mul(self, context.diff(self.x))

    def _expr_str(self, args):
        return "exp%s" % args[0]

    def _sympy(self, args, symbols):
        return sp.exp(args[0])


def log(x):
    r"""Create a Log node (numbers are converted to constants)."""
    return Log(ensure_node(x))


def exp(x):
    r"""Create an Exp node (numbers are converted to constants)."""
    return Exp(ensure_node(x))
