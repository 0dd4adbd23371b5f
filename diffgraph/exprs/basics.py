r"""@package diffgraph.exprs.basics

The four basic arithmetic operations as expression nodes.

Nodes created here (usually via the `+`, `-`, `*` and `/` operators) are
never simplified. Simplification only happens while building derivatives,
where the helpers of contexts.DiffContext are used instead.
"""

import numpy as np

from .common import result_dtype
from .numexpr import Differentiable


__all__ = [
    "Addition",
    "Subtraction",
    "Multiply",
    "Division",
]


class _BinaryOperation(Differentiable):
    r"""Base class for nodes with a left and right hand side operand."""

    ## Operator symbol used when printing the expression.
    _op = None

    def __init__(self, lhs, rhs, name=None):
        r"""Init function.

        Args:
            lhs:    Left hand side operand node.
            rhs:    Right hand side operand node.
            name:   Name of the node (e.g. for debugging output).
        """
        dtype = None
        if isinstance(lhs, Differentiable) and isinstance(rhs, Differentiable):
            dtype = self._result_dtype(lhs.dtype, rhs.dtype)
        super(_BinaryOperation, self).__init__(dtype=dtype,
                                               children=(lhs, rhs),
                                               name=name)

    @classmethod
    def _result_dtype(cls, lhs_dtype, rhs_dtype):
        return result_dtype(lhs_dtype, rhs_dtype)

    @property
    def lhs(self):
        r"""Left hand side operand."""
        return self._children[0]

    @property
    def rhs(self):
        r"""Right hand side operand."""
        return self._children[1]

    def value(self):
        return self._apply(self.lhs.value(), self.rhs.value())

    def evaluate(self, context):
        return self._apply(context.evaluate(self.lhs),
                           context.evaluate(self.rhs))

    def _apply(self, a, b):
        r"""Combine the values of the two operands."""
        raise NotImplementedError

    def _expr_str(self, args):
        return "%s %s %s" % (args[0], self._op, args[1])


class Addition(_BinaryOperation):
    r"""Sum \f$ u + v \f$ of two nodes."""
    _op = "+"

    def _apply(self, a, b):
        return a + b

    def differentiate(self, context):
        return context.add(context.diff(self.lhs), context.diff(self.rhs))

    def _sympy(self, args, symbols):
        return args[0] + args[1]


class Subtraction(_BinaryOperation):
    r"""Difference \f$ u - v \f$ of two nodes."""
    _op = "-"

    def _apply(self, a, b):
        return a - b

    def differentiate(self, context):
        return context.sub(context.diff(self.lhs), context.diff(self.rhs))

    def _sympy(self, args, symbols):
        return args[0] - args[1]


class Multiply(_BinaryOperation):
    r"""Product \f$ u v \f$ of two nodes.

    The derivative is built using the product rule
    \f$ (u v)' = u' v + u v' \f$.
    """
    _op = "*"

    def _apply(self, a, b):
        return a * b

    def differentiate(self, context):
        lhs, rhs = self.lhs, self.rhs
        ldy = context.mul(context.diff(lhs), rhs)
        rdy = context.mul(lhs, context.diff(rhs))
        return context.add(ldy, rdy)

    def _sympy(self, args, symbols):
        return args[0] * args[1]


class Division(_BinaryOperation):
    r"""Quotient \f$ u / v \f$ of two nodes.

    The derivative is built using the quotient rule
    \f$ (u/v)' = (u' v - u v') / v^2 \f$.

    Division by zero is not trapped and results in `inf` or `nan`. Dividing
    integer typed nodes yields `float64` values (numpy's true division).
    """
    _op = "/"

    @classmethod
    def _result_dtype(cls, lhs_dtype, rhs_dtype):
        dtype = result_dtype(lhs_dtype, rhs_dtype)
        if not np.issubdtype(dtype, np.floating):
            dtype = result_dtype(dtype, np.float64)
        return dtype

    def _apply(self, a, b):
        return np.true_divide(a, b)

    def differentiate(self, context):
        from .power import Square
        lhs, rhs = self.lhs, self.rhs
        ldy = context.mul(context.diff(lhs), rhs)
        rdy = context.mul(lhs, context.diff(rhs))
        return context.div(context.sub(ldy, rdy), Square(rhs))

    def _sympy(self, args, symbols):
        return args[0] / args[1]
