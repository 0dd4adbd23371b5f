r"""@package diffgraph.optimize.newton

Newton's method for systems of expression graphs.

Given \f$ N \f$ target expressions \f$ f_i \f$ and \f$ N \f$ parameters
\f$ p_j \f$, each Newton step solves
\f[
    J \Delta = f, \qquad J_{ij} = \frac{\partial f_i}{\partial p_j},
\f]
and updates \f$ p_j \leftarrow p_j - \Delta_j \f$. The Jacobian is built
symbolically once, when the NewtonMethod object is created, and only
evaluated in each step.

To minimize a scalar expression, pass its gradient as targets, in which case
the Jacobian is the Hessian of the expression.

@b Examples

```
    p1, p2 = param(1.0), param(1.0)
    newton = NewtonMethod([square(p1), square(p2)], [p1, p2])
    for i in range(20):
        newton.step()
    # p1 and p2 are now close to zero
```
"""

import numpy as np
from scipy.linalg import LinAlgWarning, LinAlgError

from ..exprs import DiffContext, EvalContext
from ..linalg import LUDecomposition
from ..numutils import raise_all_warnings, isclose, NumericalError
from ..utils import lmap, timethis


__all__ = [
    "NewtonMethod",
    "newton_method",
    "NoConvergence",
    "StepLimitExceeded",
]


class NoConvergence(Exception):
    r"""Base for exceptions indicating failed convergence of Newton steps.

    This exception is raised directly when an error is raised during the
    Newton steps which is related to convergence (e.g. a singular Jacobian
    signalled by `scipy.linalg.LinAlgWarning`).
    """
    pass


class StepLimitExceeded(NoConvergence):
    r"""Raised when convergence not achieved within the step count limit."""
    pass


def newton_method(functions, parameters, steps=50, atol=1e-12, objective=None,
                  rtol=1e-9, disp=True, mat_solver='scipy.lu', verbose=False):
    r"""Solve a system of equations by taking Newton steps.

    The parameters are modified in place. On return, they contain the
    solution.

    @param functions
        Sequence of expressions whose common root is sought.
    @param parameters
        Sequence of exprs.Parameter objects to vary. Must have the same length
        as `functions`.
    @param steps
        Maximum number of Newton steps to take. Default is `50`.
    @param atol
        Stop once the largest absolute function value is below this value.
        Default is `1e-12`.
    @param objective
        Optional expression which is evaluated after each step. If its value
        does not change (within `rtol`) between two steps, the search is
        considered converged. Useful when minimizing `objective` using its
        gradient as `functions`.
    @param rtol
        Relative tolerance for the `objective` convergence test.
    @param disp
        Whether to raise StepLimitExceeded if convergence could not be
        reached within `steps` steps. Default is `True`.
    @param mat_solver
        Matrix solver method, see linalg.LUDecomposition.
    @param verbose
        Whether to print status information during the search.

    @return The number of steps taken.
    """
    solver = NewtonMethod(functions, parameters, mat_solver=mat_solver,
                          verbose=verbose)
    return solver.solve(max_steps=steps, atol=atol, objective=objective,
                        rtol=rtol, disp=disp)


class NewtonMethod(object):
    r"""Newton's method with an analytic Jacobian.

    The caller decides how many steps to take by calling step() repeatedly,
    or uses solve() to iterate until a convergence criterion is met.
    """

    __slots__ = ("_functions", "_parameters", "_jacobian", "mat_solver",
                 "verbose")

    def __init__(self, functions, parameters, mat_solver='scipy.lu',
                 verbose=False):
        r"""Create a Newton solver and build the Jacobian.

        @param functions
            Sequence of target expressions.
        @param parameters
            Sequence of exprs.Parameter objects, one per target.
        @param mat_solver
            Matrix solver method, see linalg.LUDecomposition.
        @param verbose
            Whether solve() should print status information.
        """
        functions = list(functions)
        parameters = list(parameters)
        if not functions or len(functions) != len(parameters):
            raise ValueError("Need the same (non-zero) number of functions "
                             "and parameters, got %d and %d."
                             % (len(functions), len(parameters)))
        self._functions = functions
        self._parameters = parameters
        contexts = [DiffContext(p) for p in parameters]
        self._jacobian = [[ctx.diff(f) for ctx in contexts] for f in functions]
        ## Matrix solver method used to solve the linear problem in each step.
        self.mat_solver = mat_solver
        ## Whether to print status information in solve().
        self.verbose = verbose

    @property
    def dimension(self):
        r"""Number of functions (and parameters)."""
        return len(self._functions)

    @property
    def functions(self):
        return list(self._functions)

    @property
    def parameters(self):
        return list(self._parameters)

    @property
    def jacobian(self):
        r"""Nested list of derivative expressions (row per function)."""
        return [list(row) for row in self._jacobian]

    def residuals(self):
        r"""Evaluate the target functions at the current parameter values."""
        ctx = EvalContext()
        return np.array(lmap(float, ctx.evaluate_all(self._functions)))

    def step(self):
        r"""Take one full Newton step, rebinding all parameters."""
        ctx = EvalContext()
        f = lmap(ctx.evaluate, self._functions)
        J = [lmap(ctx.evaluate, row) for row in self._jacobian]
        if self.mat_solver == 'scipy.lu':
            f = np.array(f, dtype=np.float64)
            J = np.array(J, dtype=np.float64)
        delta = LUDecomposition(J, mat_solver=self.mat_solver).solve(f)
        for p, d in zip(self._parameters, delta):
            p.bind(p.value() - p.dtype.type(d))

    def solve(self, max_steps=50, atol=1e-12, objective=None, rtol=1e-9,
              disp=True):
        r"""Take Newton steps until converged.

        See newton_method() for a description of the parameters.

        @return The number of steps taken.
        """
        with raise_all_warnings():
            try:
                with timethis(end_msg="Newton search took {}",
                              silent=not self.verbose):
                    return self._solve(max_steps, atol, objective, rtol, disp)
            except (LinAlgWarning, LinAlgError, FloatingPointError,
                    NumericalError) as e:
                raise NoConvergence(str(e))

    def _solve(self, max_steps, atol, objective, rtol, disp):
        r"""Wrapped function for performing the Newton steps."""
        prev_obj = None
        if objective is not None:
            prev_obj = float(EvalContext().evaluate(objective))
        for i in range(max_steps):
            self.step()
            err = np.max(np.abs(self.residuals()))
            if not np.isfinite(err):
                raise NumericalError("Non-finite residual after step %d." % (i+1))
            if self.verbose:
                print("%02d: max residual: %s" % (i+1, err))
            if err <= atol:
                return i+1
            if objective is not None:
                obj = float(EvalContext().evaluate(objective))
                if self.verbose:
                    print("    objective: %s" % obj)
                if isclose(obj, prev_obj, rel_tol=rtol):
                    return i+1
                prev_obj = obj
        if disp:
            raise StepLimitExceeded(
                "Newton search did not converge within %d steps." % max_steps
            )
        return max_steps
