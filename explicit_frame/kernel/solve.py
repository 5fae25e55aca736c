# explicit_frame/kernel/solve.py
"""Sparse factorization and solve of the effective system matrix, with mechanism detection."""

import numpy as np
from scipy import sparse
from scipy.sparse.linalg import splu


class MechanismError(RuntimeError):
    """Raised when the system matrix is singular or the solve is not finite."""
    pass


class FactorizedMatrix:
    """
    Sparse LU factorization of a square matrix, computed once and reused.

    Factorization is the expensive part of a step; solving against an
    existing factorization is cheap. The integrator keeps one of these
    per distinct time step size.

    Args:
        A: Square sparse matrix (converted to CSC for the factorization)

    Raises:
        MechanismError: If the matrix is exactly singular
    """

    def __init__(self, A):
        A = sparse.csc_matrix(A)
        assert A.shape[0] == A.shape[1], f"Matrix must be square, got {A.shape}"
        self.shape = A.shape
        try:
            self._lu = splu(A)
        except RuntimeError as e:
            raise MechanismError(
                f"Singular system matrix ({A.shape[0]} DOFs). Check masses and supports. {e}"
            ) from e

    def solve(self, b: np.ndarray) -> np.ndarray:
        """
        Solve A·x = b.

        Raises:
            MechanismError: If the solution contains NaN or inf
        """
        assert b.shape == (self.shape[0],), \
            f"Right-hand side shape {b.shape} doesn't match matrix {self.shape}"
        x = self._lu.solve(b)
        if not np.all(np.isfinite(x)):
            raise MechanismError("Non-finite solution. System matrix is ill-conditioned.")
        return x
