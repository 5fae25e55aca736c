# explicit_frame/kernel/sparse.py
"""
SPARSE OPERATORS: Triplet Accumulation, Pruning and Structural Filtering
========================================================================

PURPOSE:
--------
Global frame matrices are mostly zeros: each node only couples to the
nodes it shares an element with. This module provides the three sparse
operations the mesh and the integrator need:

1. TripletBuilder
   Collect (row, col, value) contributions, possibly with repeated
   positions, and finalize them into a compressed CSR matrix where
   duplicates are summed.

2. prune_small
   Drop stored entries whose magnitude is at or below an absolute
   tolerance (round-off left behind by rotations and sums).

3. filter_entries
   Keep only the stored entries for which a predicate over
   (rows, cols, values) is true. Boundary-condition enforcement is one
   use: drop every entry in a constrained row or column.

USAGE:
------
    builder = TripletBuilder(shape=(ndof, ndof))
    for dof_map, ke in contributions:
        builder.add_block(dof_map, ke)
    K = builder.build()                      # CSR, duplicates summed, pruned

    constrained = np.array([0, 1, 2])
    Minv = filter_entries(
        Minv,
        lambda r, c, v: ~(np.isin(r, constrained) | np.isin(c, constrained)),
    )
"""

import numpy as np
from typing import Callable, List, Sequence, Tuple
from scipy import sparse


PRUNE_TOL = 1e-14

EntryPredicate = Callable[[np.ndarray, np.ndarray, np.ndarray], np.ndarray]


class TripletBuilder:
    """
    Accumulates (row, col, value) triplets and builds a CSR matrix.

    Contributions are stored as per-call arrays and concatenated once in
    build(), so independent element contributions never touch shared
    state until the final merge.

    Parameters:
    -----------
    shape : Tuple[int, int]
        Shape of the matrix being built
    """

    def __init__(self, shape: Tuple[int, int]):
        self.shape = shape
        self._rows: List[np.ndarray] = []
        self._cols: List[np.ndarray] = []
        self._vals: List[np.ndarray] = []

    def __len__(self) -> int:
        return sum(len(v) for v in self._vals)

    def add(self, rows, cols, values) -> None:
        """Append raw triplets. Arrays must have equal length."""
        rows = np.asarray(rows, dtype=np.int64).ravel()
        cols = np.asarray(cols, dtype=np.int64).ravel()
        values = np.asarray(values, dtype=float).ravel()
        assert rows.shape == cols.shape == values.shape, \
            f"Triplet arrays differ in length: {rows.shape}, {cols.shape}, {values.shape}"
        self._rows.append(rows)
        self._cols.append(cols)
        self._vals.append(values)

    def add_block(self, dof_map: Sequence[int], block: np.ndarray) -> None:
        """
        Scatter a dense square block into the triplet list.

        block[a, b] is contributed at (dof_map[a], dof_map[b]). Exact zeros
        in the block are skipped.
        """
        dof_map = np.asarray(dof_map, dtype=np.int64)
        n = len(dof_map)
        assert block.shape == (n, n), \
            f"Block shape {block.shape} doesn't match dof_map length {n}"

        a, b = np.nonzero(block)
        self.add(dof_map[a], dof_map[b], block[a, b])

    def build(self, prune_tol: float = PRUNE_TOL) -> sparse.csr_matrix:
        """
        Sum duplicates, prune small entries and return a compressed CSR matrix.

        The returned matrix is owned by the caller and is meant to be
        treated as read-only.
        """
        if self._vals:
            rows = np.concatenate(self._rows)
            cols = np.concatenate(self._cols)
            vals = np.concatenate(self._vals)
        else:
            rows = cols = np.zeros(0, dtype=np.int64)
            vals = np.zeros(0, dtype=float)

        A = sparse.coo_matrix((vals, (rows, cols)), shape=self.shape).tocsr()
        A.sum_duplicates()
        return prune_small(A, prune_tol)


def prune_small(A, tol: float = PRUNE_TOL) -> sparse.csr_matrix:
    """
    Return a compressed CSR copy of A without entries where |value| <= tol.
    """
    A = sparse.csr_matrix(A, copy=True)
    A.data[np.abs(A.data) <= tol] = 0.0
    A.eliminate_zeros()
    A.sort_indices()
    return A


def filter_entries(A, keep: EntryPredicate) -> sparse.csr_matrix:
    """
    Structural filter over the stored entries of a sparse matrix.

    Parameters:
    -----------
    A : sparse matrix
        Matrix to filter (any scipy sparse format)
    keep : callable
        keep(rows, cols, values) -> boolean mask, evaluated on the arrays
        of stored entries. Entries where the mask is False are removed.

    Returns:
    --------
    sparse.csr_matrix
        Filtered copy of A with the same shape
    """
    coo = sparse.coo_matrix(A)
    mask = np.asarray(keep(coo.row, coo.col, coo.data), dtype=bool)
    assert mask.shape == coo.data.shape, "Predicate must return one flag per stored entry"
    return sparse.csr_matrix(
        (coo.data[mask], (coo.row[mask], coo.col[mask])),
        shape=A.shape,
    )


def outside_index_set(indices) -> EntryPredicate:
    """
    Predicate for filter_entries() keeping entries whose row AND column
    both lie outside the given index set.
    """
    indices = np.unique(np.asarray(list(indices), dtype=np.int64))

    def keep(rows, cols, values):
        return ~(np.isin(rows, indices) | np.isin(cols, indices))

    return keep


def set_diagonal_entries(A, indices, value: float = 1.0) -> sparse.csr_matrix:
    """
    Return a CSR copy of A with A[i, i] = value for each i in indices.

    Existing diagonal entries at those positions are replaced.
    """
    indices = np.unique(np.asarray(list(indices), dtype=np.int64))
    A = sparse.csr_matrix(A, copy=True)
    if len(indices) == 0:
        return A

    A = filter_entries(A, lambda r, c, v: ~((r == c) & np.isin(r, indices)))
    D = sparse.csr_matrix(
        (np.full(len(indices), value, dtype=float), (indices, indices)),
        shape=A.shape,
    )
    A = (A + D).tocsr()
    A.sort_indices()
    return A
