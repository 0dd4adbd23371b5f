r"""@package diffgraph.linalg

Dense linear algebra used by the Newton's method driver.

The main class is LUDecomposition, a row-pivoted LU factorization of a square
matrix which can solve linear systems and compute the inverse. Floating point
factorizations are done by `scipy.linalg` (LAPACK), while the ``'mp.lu_solve'``
method uses `mpmath` arbitrary precision arithmetics.

@b Examples

```
    lu = LUDecomposition([[4.0, 3.0], [6.0, 3.0]])
    x = lu.solve([10.0, 12.0])   # [1.0, 2.0]
    A_inv = lu.inverse()
```
"""

import numpy as np
from scipy import linalg
from mpmath import mp


__all__ = [
    "LUDecomposition",
    "mat_solve",
]


_SOLVERS = ('scipy.lu', 'mp.lu_solve')


class LUDecomposition(object):
    r"""Row-pivoted LU decomposition of a square matrix.

    The factorization is computed once at construction and reused for every
    call to solve() or inverse().
    """

    __slots__ = ("_mat_solver", "_n", "_lu", "_matrix")

    def __init__(self, matrix, mat_solver='scipy.lu'):
        r"""Factorize a square matrix.

        @param matrix
            Square matrix (nested sequence, `numpy` array or `mpmath`
            matrix).
        @param mat_solver
            Either ``'scipy.lu'`` (default) for fast floating point
            factorization, or ``'mp.lu_solve'`` for `mpmath` arbitrary
            precision operations (respecting the current `mp.dps`).
        """
        if mat_solver not in _SOLVERS:
            raise NotImplementedError("Solver method '%s' not implemented."
                                      % mat_solver)
        self._mat_solver = mat_solver
        if mat_solver == 'mp.lu_solve':
            matrix = mp.matrix(matrix)
            shape = (matrix.rows, matrix.cols)
        else:
            matrix = np.array(matrix, dtype=np.float64)
            shape = matrix.shape
        if len(shape) != 2 or shape[0] != shape[1]:
            raise ValueError("Matrix must be square, got shape %s." % (shape,))
        self._n = shape[0]
        self._matrix = matrix
        self._lu = None
        if mat_solver == 'scipy.lu':
            self._lu = linalg.lu_factor(matrix)

    @property
    def n(self):
        r"""Dimension of the (square) matrix."""
        return self._n

    @property
    def mat_solver(self):
        r"""Solver method used by this decomposition."""
        return self._mat_solver

    def solve(self, y):
        r"""Solve `A x = y` for `x` and return `x`."""
        if self._mat_solver == 'mp.lu_solve':
            x = mp.lu_solve(self._matrix, mp.matrix(y))
            return [x[i] for i in range(self._n)]
        y = np.array(y, dtype=np.float64)
        if y.shape != (self._n,):
            raise ValueError("Right hand side must have shape (%d,)." % self._n)
        return linalg.lu_solve(self._lu, y)

    def inverse(self):
        r"""Compute the inverse matrix."""
        if self._mat_solver == 'mp.lu_solve':
            return mp.inverse(self._matrix)
        return linalg.lu_solve(self._lu, np.eye(self._n))


def mat_solve(A, b, mat_solver='scipy.lu'):
    r"""Solve `A x = b` for `x` using the chosen solving method."""
    return LUDecomposition(A, mat_solver=mat_solver).solve(b)
