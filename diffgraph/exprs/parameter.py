r"""@package diffgraph.exprs.parameter

Mutable leaf nodes representing the parameters of an expression graph.
"""

import itertools

import sympy as sp

from .common import dtype_of
from .numexpr import Differentiable


__all__ = [
    "Parameter",
    "param",
]


_names = itertools.count()


class Parameter(Differentiable):
    r"""Leaf node holding a value that may be rebound between evaluations.

    A parameter is typically shared by many nodes of a graph. Rebinding it via
    bind() changes the value seen by all of them. Note that evaluation
    contexts cache values, so a context created before calling bind() must
    not be used afterwards.

    The derivative of a parameter is the one sentinel if the parameter is the
    differentiation target and the zero sentinel otherwise.
    """

    def __init__(self, value, dtype=None, name=None):
        r"""Init function.

        Args:
            value:  Initial value.
            dtype:  Element type. By default inferred from `value`.
            name:   Name of the parameter. Unique names ``p0``, ``p1``, ...
                    are generated if not given. The name is used e.g. as
                    symbol name in to_sympy().
        """
        if dtype is None:
            dtype = dtype_of(value)
        if name is None:
            name = "p%d" % next(_names)
        super(Parameter, self).__init__(dtype=dtype, name=name)
        self._value = None
        self.bind(value)

    @property
    def nice_name(self):
        return "%s (%r)" % (self.name, self._value)

    def bind(self, value):
        r"""Set a new value for this parameter."""
        self._value = self.dtype.type(value)

    def value(self):
        return self._value

    def evaluate(self, context):
        return self._value

    def differentiate(self, context):
        return context.one if context.target is self else context.zero

    def _expr_str(self, args):
        return self.name

    def _sympy(self, args, symbols):
        try:
            return symbols[self]
        except KeyError:
            sym = symbols[self] = sp.Symbol(self.name, real=True)
            return sym


def param(value, dtype=None, name=None):
    r"""Create a new Parameter node."""
    return Parameter(value, dtype=dtype, name=name)
