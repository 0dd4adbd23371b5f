r"""@package diffgraph.optimize

Optimizers driven by differentiable expression graphs.

Currently, Newton's method (newton.NewtonMethod) for square systems of
equations is implemented. Its Jacobian is obtained symbolically from the
target expressions using the differentiation contexts of diffgraph.exprs.
"""

from .newton import NewtonMethod, newton_method, NoConvergence
from .newton import StepLimitExceeded
