# explicit_frame/kernel/assemble.py
"""
ASSEMBLY: Sparse Global Matrix Assembly
=======================================

PURPOSE:
--------
This module handles the assembly of element contributions into global
sparse matrices. This is the scatter-add operation that builds K, M and
M⁻¹ from element-level data.

Assembly doesn't care about element TYPE. It just needs:
- Total number of DOFs
- For each element: its DOF map and its matrix in GLOBAL coordinates

For a two-node frame element the DOF map is

    [6·nn1, ..., 6·nn1+5, 6·nn2, ..., 6·nn2+5]

so local rows/columns < 6 land in node 1's block and >= 6 in node 2's.

USAGE:
------
    contributions = []
    for element in elements:
        dof_map = dof.element_dof_map(element.node_numbers)
        ke = R.T @ element.local_stiffness(nodes) @ R
        contributions.append((dof_map, ke))

    K = assemble_global_sparse(ndof, contributions)
"""

import numpy as np
from typing import List, Sequence, Tuple
from scipy import sparse

from .sparse import TripletBuilder, PRUNE_TOL


Contribution = Tuple[Sequence[int], np.ndarray]


def assemble_global_sparse(
    ndof: int,
    contributions: List[Contribution],
    prune_tol: float = PRUNE_TOL,
) -> sparse.csr_matrix:
    """
    Assemble a global sparse matrix from element contributions.

    ALGORITHM:
    ----------
    triplets = []
    for each element:
        for each non-zero (local_i, local_j) in element matrix:
            triplets += (dof_map[local_i], dof_map[local_j], value)
    A = sum duplicates(triplets); prune |A_ij| <= prune_tol

    Parameters:
    -----------
    ndof : int
        Total number of DOFs in the system (6 × n_nodes)

    contributions : List[Tuple[List[int], np.ndarray]]
        List of (dof_map, matrix) tuples, one per element. The matrix must
        be square with side len(dof_map) and expressed in global axes.

    prune_tol : float
        Absolute tolerance below which assembled entries are dropped

    Returns:
    --------
    sparse.csr_matrix
        Global matrix, shape (ndof, ndof)
    """
    builder = TripletBuilder((ndof, ndof))

    for dof_map, me in contributions:
        assert max(dof_map) < ndof, \
            f"DOF map {list(dof_map)} exceeds system size {ndof}"
        builder.add_block(dof_map, me)

    return builder.build(prune_tol)


def assemble_global_F(
    ndof: int,
    contributions: List[Tuple[Sequence[int], np.ndarray]],
) -> np.ndarray:
    """
    Assemble a global dense vector from element contributions.

    Same scatter-add logic as assemble_global_sparse(), but for vectors,
    e.g. gathering element end forces into nodal force totals.
    """
    F = np.zeros(ndof, dtype=float)

    for dof_map, fe in contributions:
        assert fe.shape == (len(dof_map),), \
            f"Element vector shape {fe.shape} doesn't match dof_map length {len(dof_map)}"
        np.add.at(F, np.asarray(dof_map, dtype=np.int64), fe)

    return F
