r"""@package diffgraph.exprs.contexts

Contexts for differentiating and evaluating expression graphs.

Both contexts cache their results per node identity. Within one context
instance, each distinct node is hence processed at most once, no matter how
many parents share it. This is what makes large graphs with heavily reused
sub-expressions (like the likelihood of a Kalman filter, where the same
parameters appear in every time step) cheap to process.

A DiffContext is bound to one target and builds derivative graphs. An
EvalContext computes values for one fixed set of parameter values. Since the
values are cached, an evaluation context becomes stale as soon as any
parameter is rebound and a new one has to be created.

@b Examples

```
    p = param(2.0)
    f = p * p + p
    df = DiffContext(p).diff(f)
    ctx = EvalContext()
    ctx.evaluate(f)    # 6.0
    ctx.evaluate(df)   # 5.0
    p.bind(3.0)
    EvalContext().evaluate(df)  # 7.0, a new context is needed after bind()
```

@b Notes

Instead of recursing into sub-graphs, the contexts first collect all nodes
not yet in their cache (children first) and then process them one by one.
When a node's evaluate() or differentiate() method asks the context for a
child's result, it is therefore always found in the cache. This allows
graphs much deeper than the interpreter's recursion limit to be processed,
while the evaluation counters remain exactly those of a plain recursive
implementation.
"""

from .common import walk_nodes
from .constants import zero, one, two
from .numexpr import Differentiable


__all__ = [
    "DiffContext",
    "EvalContext",
    "diff_context",
    "eval_context",
]


def _check_node(node):
    if not isinstance(node, Differentiable):
        raise TypeError("Expected an expression node, got %r." % (node,))


class DiffContext(object):
    r"""Memoizing builder of derivative graphs w.r.t. one target.

    Apart from diff(), which returns the derivative of any node, this class
    provides the simplifying helpers add(), sub(), mul() and div() used by
    the nodes when combining derivatives. These check their operands for
    identity with the zero and one sentinels of the target's element type and
    skip creating nodes that would not change the result.
    """

    __slots__ = ("_target", "_zero", "_one", "_two", "_memo")

    def __init__(self, target):
        r"""Create a differentiation context.

        Args:
            target: Node w.r.t. which derivatives are taken. This is usually a
                parameter.Parameter.
        """
        _check_node(target)
        self._target = target
        self._zero = zero(target.dtype)
        self._one = one(target.dtype)
        self._two = two(target.dtype)
        self._memo = dict()

    @property
    def target(self):
        r"""Node w.r.t. which derivatives are taken."""
        return self._target

    @property
    def zero(self):
        r"""Zero sentinel of the target's element type."""
        return self._zero

    @property
    def one(self):
        r"""One sentinel of the target's element type."""
        return self._one

    @property
    def two(self):
        r"""Two sentinel of the target's element type."""
        return self._two

    @property
    def memo_size(self):
        r"""Number of nodes whose derivative has been computed."""
        return len(self._memo)

    def diff(self, node):
        r"""Return the derivative of `node` w.r.t. the target.

        Repeated calls for the same node return the identical derivative
        object.
        """
        memo = self._memo
        try:
            return memo[node]
        except KeyError:
            _check_node(node)
        for n in walk_nodes(node, skip=memo):
            memo[n] = n.differentiate(self)
        return memo[node]

    def is_zero(self, node):
        r"""Return whether `node` is the zero sentinel."""
        return node is self._zero

    def is_one(self, node):
        r"""Return whether `node` is the one sentinel."""
        return node is self._one

    def is_two(self, node):
        r"""Return whether `node` is the two sentinel."""
        return node is self._two

    def add(self, lhs, rhs):
        r"""Sum of two nodes, omitting zero sentinel operands."""
        from .basics import Addition
        if self.is_zero(lhs):
            return rhs
        if self.is_zero(rhs):
            return lhs
        return Addition(lhs, rhs)

    def sub(self, lhs, rhs):
        r"""Difference of two nodes, omitting a zero sentinel subtrahend."""
        from .basics import Subtraction
        if self.is_zero(rhs):
            return lhs
        return Subtraction(lhs, rhs)

    def mul(self, lhs, rhs):
        r"""Product of two nodes.

        Returns the zero sentinel if either operand is the zero sentinel and
        omits one sentinel factors.
        """
        from .basics import Multiply
        if self.is_zero(lhs) or self.is_zero(rhs):
            return self._zero
        if self.is_one(lhs):
            return rhs
        if self.is_one(rhs):
            return lhs
        return Multiply(lhs, rhs)

    def div(self, lhs, rhs):
        r"""Quotient of two nodes, omitting division by the one sentinel."""
        from .basics import Division
        if self.is_one(rhs):
            return lhs
        return Division(lhs, rhs)


class EvalContext(object):
    r"""Memoizing evaluator for one fixed set of parameter values.

    The counters call_count and evaluate_count can be used to inspect how
    effectively shared sub-expressions are reused. Each call to evaluate()
    (including the ones nodes make for their children) increments
    call_count, while evaluate_count only counts the nodes whose value had to
    actually be computed.
    """

    __slots__ = ("_memo", "_call_count", "_evaluate_count")

    def __init__(self):
        self._memo = dict()
        self._call_count = 0
        self._evaluate_count = 0

    @property
    def call_count(self):
        r"""Total number of evaluate() calls."""
        return self._call_count

    @property
    def evaluate_count(self):
        r"""Number of nodes actually evaluated (i.e. cache misses)."""
        return self._evaluate_count

    @property
    def cache_hit_count(self):
        r"""Number of evaluate() calls served from the cache."""
        return self._call_count - self._evaluate_count

    def evaluate(self, node):
        r"""Return the value of `node` for the current parameter values."""
        self._call_count += 1
        memo = self._memo
        try:
            return memo[node]
        except KeyError:
            _check_node(node)
        for n in walk_nodes(node, skip=memo):
            memo[n] = n.evaluate(self)
            self._evaluate_count += 1
        return memo[node]

    def evaluate_all(self, nodes):
        r"""Evaluate a sequence of nodes, returning a list of values."""
        return [self.evaluate(node) for node in nodes]


def diff_context(target):
    r"""Create a DiffContext for the given target."""
    return DiffContext(target)


def eval_context():
    r"""Create a fresh EvalContext."""
    return EvalContext()
