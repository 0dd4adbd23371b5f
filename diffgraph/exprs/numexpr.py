r"""@package diffgraph.exprs.numexpr

Base of the differentiable expression system.

Every node of an expression graph is an instance of a Differentiable
subclass. Nodes are built bottom-up from parameters and constants, and any
node may be used as child of several parents, so the resulting structure is a
directed acyclic graph rather than a tree.

Nodes can be processed in three ways:
    * value() computes the current value directly by recursing into the
      children. This is meant for quick one-off reads of small graphs.
    * evaluate() computes the value, but obtains the values of the children
      from a contexts.EvalContext, which caches each node's value. This is
      what should be used for large graphs with many shared sub-expressions.
    * differentiate() builds a new expression graph representing the
      derivative of the node w.r.t. the target of a contexts.DiffContext.

As a simple example, let's build \f$ f(a, b) = a^2 b \f$ and evaluate its
derivative w.r.t. \f$ a \f$:

~~~.py
a = param(3.0, name='a')
b = param(2.0, name='b')
f = square(a) * b
df_da = DiffContext(a).diff(f)
print("df/da =", EvalContext().evaluate(df_da))  # 12.0
~~~

Nodes compare by identity only. Two structurally identical but separately
constructed nodes are distinct and are cached separately by the contexts.
"""

from abc import ABCMeta, abstractmethod
import numbers

from .common import as_dtype, scalar_dtype, walk_nodes


__all__ = [
    "Differentiable",
    "ensure_node",
]


def _is_scalar(obj):
    r"""Return whether `obj` is a plain number that can become a constant."""
    return isinstance(obj, numbers.Real) and not isinstance(obj, bool)


def ensure_node(obj, dtype=None):
    r"""Ensure an object is an expression node, converting it if necessary.

    Numbers are converted to constants.Constant nodes. If `dtype` is given,
    the constant's element type is promoted together with it, so that e.g. a
    Python float combined with a `float32` graph stays `float32`. Numbers the
    graph's type cannot represent (e.g. `3000000000` with an `int32` graph) promote
    it to a wider type instead, see common.scalar_dtype().

    Anything else raises a `TypeError`.
    """
    if isinstance(obj, Differentiable):
        return obj
    if not _is_scalar(obj):
        raise TypeError("Cannot use %r as expression node." % (obj,))
    from .constants import Constant
    if dtype is not None:
        dtype = scalar_dtype(dtype, obj)
    return Constant(obj, dtype=dtype)


class Differentiable(metaclass=ABCMeta):
    r"""Parent class for all expression graph nodes.

    The methods a child has to override are:
        * value() computing the value by direct recursion
        * evaluate() computing the value using an evaluation context
        * differentiate() constructing the derivative using a
          differentiation context
        * _expr_str() returning a representation of the expression
        * _sympy() converting the node given its converted children

    Nodes are conceptually immutable. The only exception is the
    parameter.Parameter leaf, whose value may be rebound.
    """

    def __init__(self, dtype, children=(), name=None):
        r"""Base class init for expression nodes.

        Args:
            dtype: Element type of the values this node produces.
            children: Sequence of child nodes. Each must be a Differentiable.
            name: (string, optional)
                Name for the node. By default, the class name is used.
        """
        for child in children:
            if not isinstance(child, Differentiable):
                raise TypeError("Operands must be expression nodes, got %r."
                                % (child,))
        self._dtype = as_dtype(dtype)
        self._children = tuple(children)
        self._name = name if name else self.__class__.__name__

    @property
    def dtype(self):
        r"""Element type (`numpy.dtype`) of this node's values."""
        return self._dtype

    @property
    def children(self):
        r"""Tuple of the direct child nodes."""
        return self._children

    @property
    def name(self):
        r"""Name given to this node."""
        return self._name

    @property
    def nice_name(self):
        r"""More descriptive name, which may be overridden by sub classes."""
        return self._name

    @abstractmethod
    def value(self):
        r"""Compute the current value by recursing directly into the children."""
        pass

    def __call__(self):
        r"""Shortcut for value()."""
        return self.value()

    @abstractmethod
    def evaluate(self, context):
        r"""Compute the value, taking child values from an evaluation context.

        Implementations must obtain the values of their children via
        ``context.evaluate(child)`` and never by calling the children
        directly.
        """
        pass

    @abstractmethod
    def differentiate(self, context):
        r"""Return the node representing the derivative of this node.

        The derivative is taken w.r.t. ``context.target``. Implementations
        must obtain the derivatives of their children via
        ``context.diff(child)`` and combine them using the simplifying
        helpers of the context (``context.add()``, ``context.mul()``, etc.).
        """
        pass

    def nodes(self):
        r"""List of all distinct nodes of this graph, children first."""
        return list(walk_nodes(self))

    def str(self):
        r"""Return the expression represented by this node as a string.

        Note that shared sub-expressions are repeated each time they are
        used, so for large graphs the string may become very long. The
        string is assembled without recursion, so deep graphs are fine.
        """
        converted = dict()
        for node in walk_nodes(self):
            args = [converted[child] for child in node.children]
            converted[node] = "(%s)" % node._expr_str(args)
        return converted[self]

    def __repr__(self):
        return "<%s %s [%s]>" % (self.__class__.__name__, self.nice_name,
                                 self._dtype)

    @abstractmethod
    def _expr_str(self, args):
        r"""String representing the expression (without outer parentheses).

        Args:
            args: List of the already formatted child expressions, in the
                order of `children`.
        """
        pass

    def to_sympy(self, symbols=None):
        r"""Convert this graph into a `sympy` expression.

        Shared sub-expressions are converted only once. The conversion does
        not recurse, so deep graphs can be converted too.

        Args:
            symbols: (dict, optional)
                Mapping from parameter nodes to the `sympy` symbols to use for
                them. Parameters not contained in the mapping become real
                symbols named after the parameter.
        """
        converted = dict()
        symbols = dict(symbols) if symbols else dict()
        for node in walk_nodes(self):
            args = [converted[child] for child in node.children]
            converted[node] = node._sympy(args, symbols)
        return converted[self]

    @abstractmethod
    def _sympy(self, args, symbols):
        r"""Build the `sympy` expression of this node.

        Args:
            args: List of the already converted child expressions.
            symbols: Mapping from parameter nodes to symbols (see to_sympy()).
        """
        pass

    def __add__(self, other):
        if not _is_scalar(other) and not isinstance(other, Differentiable):
            return NotImplemented
        from .basics import Addition
        return Addition(self, ensure_node(other, self._dtype))

    def __radd__(self, other):
        if not _is_scalar(other):
            return NotImplemented
        from .basics import Addition
        return Addition(ensure_node(other, self._dtype), self)

    def __sub__(self, other):
        if not _is_scalar(other) and not isinstance(other, Differentiable):
            return NotImplemented
        from .basics import Subtraction
        return Subtraction(self, ensure_node(other, self._dtype))

    def __rsub__(self, other):
        if not _is_scalar(other):
            return NotImplemented
        from .basics import Subtraction
        return Subtraction(ensure_node(other, self._dtype), self)

    def __mul__(self, other):
        if not _is_scalar(other) and not isinstance(other, Differentiable):
            return NotImplemented
        from .basics import Multiply
        return Multiply(self, ensure_node(other, self._dtype))

    def __rmul__(self, other):
        if not _is_scalar(other):
            return NotImplemented
        from .basics import Multiply
        return Multiply(ensure_node(other, self._dtype), self)

    def __truediv__(self, other):
        if not _is_scalar(other) and not isinstance(other, Differentiable):
            return NotImplemented
        from .basics import Division
        return Division(self, ensure_node(other, self._dtype))

    def __rtruediv__(self, other):
        if not _is_scalar(other):
            return NotImplemented
        from .basics import Division
        return Division(ensure_node(other, self._dtype), self)

    def __pow__(self, other):
        if not _is_scalar(other) and not isinstance(other, Differentiable):
            return NotImplemented
        from .power import Power
        return Power(self, ensure_node(other, self._dtype))

    def __rpow__(self, other):
        if not _is_scalar(other):
            return NotImplemented
        from .power import Power
        return Power(ensure_node(other, self._dtype), self)

