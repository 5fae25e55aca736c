# explicit_frame/kernel - Element-agnostic numerical core
"""
KERNEL: THE ELEMENT-AGNOSTIC FOUNDATION
=======================================

This package contains the plumbing shared by every part of the frame
solver, independent of beam theory:

- DOF numbering:    (node_id, local_dof) <-> global index, 6 DOFs per node
- Sparse operators: triplet accumulation, pruning, predicate filtering
- Assembly:         scatter element blocks into global sparse matrices
- Solve:            sparse LU factorization with mechanism detection
- Comparison:       tolerant scalar comparison for step sizes and end times

The ELEMENT implementations (Euler-Bernoulli, Timoshenko) live in v3d/;
the kernel only sees their matrices.
"""

from .dof import DOF, DOFManager, NUM_DOFS
from .compare import ValueCompare
from .sparse import TripletBuilder, prune_small, filter_entries, PRUNE_TOL
from .assemble import assemble_global_sparse
from .solve import FactorizedMatrix, MechanismError

__all__ = [
    'DOF', 'DOFManager', 'NUM_DOFS',
    'ValueCompare',
    'TripletBuilder', 'prune_small', 'filter_entries', 'PRUNE_TOL',
    'assemble_global_sparse',
    'FactorizedMatrix', 'MechanismError',
]
