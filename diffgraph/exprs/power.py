r"""@package diffgraph.exprs.power

Power and square expression nodes.
"""

import numpy as np

from .common import result_dtype
from .numexpr import Differentiable, ensure_node


__all__ = [
    "Power",
    "Square",
    "power",
    "square",
]


class Square(Differentiable):
    r"""Square \f$ u^2 \f$ of a node.

    This is a specialization of Power which multiplies the value with itself
    instead of calling the general power function.
    """

    def __init__(self, x, name=None):
        dtype = x.dtype if isinstance(x, Differentiable) else None
        super(Square, self).__init__(dtype=dtype, children=(x,), name=name)

    @property
    def x(self):
        r"""The node being squared."""
        return self._children[0]

    def value(self):
        x = self.x.value()
        return x * x

    def evaluate(self, context):
        x = context.evaluate(self.x)
        return x * x

    def differentiate(self, context):
        x = self.x
        return context.mul(context.mul(context.two, x), context.diff(x))

    def _expr_str(self, args):
        return "%s**2" % args[0]

    def _sympy(self, args, symbols):
        return args[0]**2


class Power(Differentiable):
    r"""Power \f$ u^v \f$ of two nodes.

    The derivative always uses the general rule
    \f[
        (u^v)' = u^v \left(u' \frac{v}{u} + v' \ln u\right),
    \f]
    even if the exponent is a constant. In that case, the term containing
    \f$ \ln u \f$ is dropped during simplification, but the remaining term
    still divides by \f$ u \f$, so the derivative evaluates to `nan` at
    \f$ u = 0 \f$ even for e.g. \f$ u^2 \f$. Use Square for squares.

    Powers of integer typed nodes are computed in `float64` (like Division),
    so that negative exponents yield fractions instead of raising.
    """

    def __init__(self, lhs, rhs, name=None):
        r"""Init function.

        Args:
            lhs:    Base node.
            rhs:    Exponent node.
            name:   Name of the node.
        """
        dtype = None
        if isinstance(lhs, Differentiable) and isinstance(rhs, Differentiable):
            dtype = result_dtype(lhs.dtype, rhs.dtype)
            if not np.issubdtype(dtype, np.floating):
                dtype = result_dtype(dtype, np.float64)
        super(Power, self).__init__(dtype=dtype, children=(lhs, rhs),
                                    name=name)

    @property
    def lhs(self):
        r"""The base."""
        return self._children[0]

    @property
    def rhs(self):
        r"""The exponent."""
        return self._children[1]

    def value(self):
        return self._apply(self.lhs.value(), self.rhs.value())

    def evaluate(self, context):
        return self._apply(context.evaluate(self.lhs),
                           context.evaluate(self.rhs))

    def _apply(self, a, b):
        to_type = self.dtype.type
        return np.power(to_type(a), to_type(b))

    def differentiate(self, context):
        from .transcendental import Log
        lhs, rhs = self.lhs, self.rhs
        ld = context.mul(context.diff(lhs), context.div(rhs, lhs))
        rd = context.mul(context.diff(rhs), Log(lhs))
        return context.mul(self, context.add(ld, rd))

    def _expr_str(self, args):
        return "%s**%s" % tuple(args)

    def _sympy(self, args, symbols):
        return args[0]**args[1]


def square(x):
    r"""Create a Square node (numbers are converted to constants)."""
    return Square(ensure_node(x))


def power(x, y):
    r"""Create a Power node (numbers are converted to constants)."""
    if isinstance(x, Differentiable):
        return Power(x, ensure_node(y, x.dtype))
    y = ensure_node(y)
    return Power(ensure_node(x, y.dtype), y)
