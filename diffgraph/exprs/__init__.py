r"""@package diffgraph.exprs

Expression system for composing differentiable functions of parameters and
efficiently evaluating them and their derivatives.

Each expression is a node (a numexpr.Differentiable subclass) in a directed
acyclic graph. Leaves are constants.Constant and parameter.Parameter nodes,
inner nodes are arithmetic operations (basics), powers (power) or the
transcendental functions in transcendental. Graphs are normally built using
the usual Python operators:

~~~.py
x = param(1.5, name='x')
y = param(0.5, name='y')
f = log(x * y) + exp(y) / square(x)
~~~

NOTE: Building a derivative and computing values are done by *contexts*,
      see contexts.DiffContext and contexts.EvalContext. Both cache their
      results per node, so shared sub-expressions are processed only once.

~~~.py
dfdx = DiffContext(x).diff(f)
ctx = EvalContext()
print(ctx.evaluate(f), ctx.evaluate(dfdx))
~~~

The derivative graphs are themselves ordinary expressions. They can be
evaluated, differentiated again, or converted to `sympy` expressions (see
numexpr.Differentiable.to_sympy()) for inspection.
"""

from .numexpr import Differentiable, ensure_node
from .constants import Constant, StaticConstant, constant, zero, one, two
from .parameter import Parameter, param
from .basics import Addition, Subtraction, Multiply, Division
from .power import Power, Square, power, square
from .transcendental import Log, Exp, log, exp
from .contexts import DiffContext, EvalContext, diff_context, eval_context
