# explicit_frame/kernel/compare.py
"""Tolerant comparison of scalars (integers compare exactly, floats relative to magnitude)."""

import numbers


class ValueCompare:
    """
    Compare two scalars with a magnitude-scaled tolerance.

    Integral values are compared exactly. Floating values are treated as
    equal when |a - b| <= epsilon * max(|a|, |b|).

    Used to decide whether a time step changed (which forces a new
    factorization) and whether a simulation reached its end time.

    Examples:
    ---------
    >>> cmp = ValueCompare()
    >>> cmp.equal(0.1 + 0.2, 0.3)
    True
    >>> cmp.less_than(1.0, 1.0 + 1e-16)
    False
    """

    def __init__(self, epsilon: float = 1e-14):
        self.epsilon = epsilon

    def _tol(self, a, b) -> float:
        return max(abs(a), abs(b)) * self.epsilon

    @staticmethod
    def _integral(a, b) -> bool:
        return isinstance(a, numbers.Integral) and isinstance(b, numbers.Integral)

    def less_than(self, a, b) -> bool:
        """a < b beyond tolerance."""
        if self._integral(a, b):
            return a < b
        return (b - a) > self._tol(a, b)

    def greater_than(self, a, b) -> bool:
        """a > b beyond tolerance."""
        if self._integral(a, b):
            return a > b
        return (a - b) > self._tol(a, b)

    def equal(self, a, b) -> bool:
        """a == b within tolerance."""
        if self._integral(a, b):
            return a == b
        return abs(a - b) <= self._tol(a, b)
