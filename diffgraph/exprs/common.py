r"""@package diffgraph.exprs.common

Utils used by multiple modules in diffgraph.exprs.

The element type of an expression graph is represented by a `numpy.dtype`.
All values produced when evaluating nodes are numpy scalars, which means that
division by zero or the logarithm of negative numbers produce `inf` or `nan`
(together with a numpy `RuntimeWarning`) instead of raising exceptions.
"""

import math

import numpy as np


__all__ = [
    "DEFAULT_DTYPE",
    "as_dtype",
    "dtype_of",
    "result_dtype",
    "scalar_dtype",
    "is_floating",
    "require_floating",
    "walk_nodes",
]


## Element type used whenever none is specified or can be inferred.
DEFAULT_DTYPE = np.dtype(np.float64)


def as_dtype(dtype):
    r"""Convert the argument to a numeric `numpy.dtype`.

    `None` is taken to mean the default element type `float64`. Boolean,
    complex and non-numeric types are rejected with a `TypeError`.
    """
    if dtype is None:
        return DEFAULT_DTYPE
    dtype = np.dtype(dtype)
    if dtype.kind not in 'iuf':
        raise TypeError("Unsupported element type: %s" % dtype)
    return dtype


def dtype_of(value):
    r"""Return the element type of a Python or numpy scalar."""
    if isinstance(value, np.generic):
        return as_dtype(value.dtype)
    if isinstance(value, bool):
        raise TypeError("Booleans are not valid element values.")
    if isinstance(value, int):
        return as_dtype(np.int64)
    return as_dtype(np.result_type(value))


def result_dtype(*dtypes):
    r"""Element type resulting from combining values of the given types."""
    return as_dtype(np.result_type(*dtypes))


def scalar_dtype(dtype, value):
    r"""Element type for a number combined with nodes of type `dtype`.

    The node type is kept if it can represent `value`. Python integers too
    large for an integer type and Python floats beyond the range of a
    floating point type promote to a wider type instead of overflowing.
    """
    dtype = as_dtype(dtype)
    if isinstance(value, np.generic):
        return result_dtype(dtype, value.dtype)
    if isinstance(value, int):
        if dtype.kind in 'iu':
            return result_dtype(dtype, np.min_scalar_type(value))
    elif dtype.kind in 'iu':
        return result_dtype(dtype, np.float64)
    elif math.isinf(value) or math.isnan(value):
        return dtype
    if abs(value) > float(np.finfo(dtype).max):
        return result_dtype(dtype, np.float64)
    return dtype


def is_floating(dtype):
    r"""Return whether the given element type is a floating point type."""
    return np.issubdtype(as_dtype(dtype), np.floating)


def require_floating(dtype, what):
    r"""Raise a `TypeError` if `dtype` is not a floating point type.

    Args:
        dtype: Element type to check.
        what: Description used in the error message.
    """
    if not is_floating(dtype):
        raise TypeError("%s requires a floating point element type, got %s."
                        % (what, as_dtype(dtype)))


def walk_nodes(roots, skip=None):
    r"""Generator yielding all distinct nodes reachable from the given roots.

    Nodes are produced in post-order, i.e. each node is yielded only after all
    its children have been yielded. Shared sub-expressions are yielded once.
    The traversal uses an explicit stack, so arbitrarily deep graphs can be
    walked regardless of the interpreter's recursion limit.

    Args:
        roots: A single node or an iterable of nodes to start from.
        skip: Optional container (e.g. a `dict` or `set`). Nodes contained
            in it are neither yielded nor descended into.
    """
    if not isinstance(roots, (list, tuple)):
        roots = [roots]
    if skip is None:
        skip = ()
    seen = set()
    stack = [(node, False) for node in reversed(roots)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            yield node
            continue
        if node in seen or node in skip:
            continue
        seen.add(node)
        stack.append((node, True))
        for child in reversed(node.children):
            if child not in seen and child not in skip:
                stack.append((child, False))
