# explicit_frame/mesh.py
"""
MESH: Global Stiffness, Mass and Inverse Mass of a Beam Frame
=============================================================

PURPOSE:
--------
Turn nodes + elements + boundary conditions into the three global sparse
operators the explicit integrator needs:

    K     stiffness      (6N × 6N)
    M     mass           (6N × 6N)
    M⁻¹   inverse mass   (6N × 6N), with constrained DOFs decoupled

ALGORITHM:
----------
For each element:
    1. M_e = element.local_mass(nodes);  M⁻¹_e = element.local_inv_mass(nodes)
    2. K_e   = element.local_stiffness(nodes)
    3. Rotate all three to global axes:  A_global = Rᵀ · A_local · R
    4. Scatter through the dof map [6·nn1 … 6·nn1+5, 6·nn2 … 6·nn2+5]

Then sum duplicate entries, prune |value| <= 1e-14, and finally apply
the boundary conditions to M⁻¹ ONLY:

    - every entry in a constrained row or column is removed
    - each constrained diagonal entry is set to 1.0

K and M are never modified by boundary conditions. The integrator
enforces BCs on the equations of motion at every step.
"""

import logging
import numpy as np
from typing import List, Sequence, Tuple
from scipy import sparse

from .kernel.dof import DOF_3D_FRAME
from .kernel.assemble import assemble_global_sparse
from .kernel.sparse import filter_entries, outside_index_set, set_diagonal_entries
from .prescribed import BC
from .v3d.elements import BeamElement
from .v3d.model import NodeLike, node_coordinates
from .v3d.transform import element_rotation, to_global

logger = logging.getLogger(__name__)


class Mesh:
    """
    Assembled global operators of a 3D beam frame.

    Parameters:
    -----------
    nodes : sequence of Node3D or (x, y, z), or (N, 3) array
        Node coordinates; a node's index is its position in this list
    elements : sequence of BeamElement
        Two-node elements referencing node indices
    bcs : sequence of BC
        Boundary conditions. The mesh keeps its own copy; later changes to
        the caller's list have no effect.

    Raises:
    -------
    ValueError
        If an element references a node that doesn't exist, an element has
        zero length or a reference direction parallel to its axis, or a BC
        references a DOF outside the model

    Example:
    --------
    >>> nodes = [(0, 0, 0), (1, 0, 0)]
    >>> props = BeamProps(E=200e9, G=80e9, A=0.01, Iz=1e-5, Iy=1e-5, J=2e-5, density=7800)
    >>> mesh = Mesh(nodes, [TimoshenkoBeam(0, 1, props)], [])
    >>> mesh.stiffness.shape
    (12, 12)
    """

    def __init__(
        self,
        nodes: Sequence[NodeLike],
        elements: Sequence[BeamElement],
        bcs: Sequence[BC] = (),
    ):
        self._nodes = np.array(node_coordinates(nodes), dtype=float)
        self._nodes.setflags(write=False)
        self._elements = tuple(elements)
        self._bcs = tuple(bcs)
        self._ndof = DOF_3D_FRAME.ndof(len(self._nodes))

        self._validate()

        self._stiffness, self._mass, inv_mass = self._assemble()
        self._inv_mass = self._apply_bcs(inv_mass)

        logger.debug(
            "Assembled mesh: %d nodes, %d elements, %d DOFs, nnz(K)=%d, nnz(M)=%d, %d constrained DOFs",
            self.n_nodes, len(self._elements), self._ndof,
            self._stiffness.nnz, self._mass.nnz, len(self.constrained_dofs),
        )

    def _validate(self) -> None:
        n_nodes = len(self._nodes)
        for i, element in enumerate(self._elements):
            for nn in element.node_numbers:
                if not 0 <= nn < n_nodes:
                    raise ValueError(
                        f"Element {i} references node {nn}, but the mesh has {n_nodes} nodes"
                    )
        for bc in self._bcs:
            if not 0 <= bc.global_index < self._ndof:
                raise ValueError(
                    f"Boundary condition on node {bc.node}, DOF {bc.dof} "
                    f"(global index {bc.global_index}) is outside the model's {self._ndof} DOFs"
                )

    def _element_contributions(self, element: BeamElement):
        """Global-axis (dof_map, k, m, m_inv) for one element."""
        nodes = self._nodes
        R, _ = element_rotation(nodes, element)

        mass_local = element.local_mass(nodes)
        inv_mass_local = element.local_inv_mass(nodes)
        stiffness_local = element.local_stiffness(nodes)

        dof_map = DOF_3D_FRAME.element_dof_map(list(element.node_numbers))
        return (
            dof_map,
            to_global(stiffness_local, R),
            to_global(mass_local, R),
            to_global(inv_mass_local, R),
        )

    def _assemble(self) -> Tuple[sparse.csr_matrix, sparse.csr_matrix, sparse.csr_matrix]:
        k_parts: List[Tuple[List[int], np.ndarray]] = []
        m_parts: List[Tuple[List[int], np.ndarray]] = []
        minv_parts: List[Tuple[List[int], np.ndarray]] = []

        for element in self._elements:
            dof_map, ke, me, minv_e = self._element_contributions(element)
            k_parts.append((dof_map, ke))
            m_parts.append((dof_map, me))
            minv_parts.append((dof_map, minv_e))

        return (
            assemble_global_sparse(self._ndof, k_parts),
            assemble_global_sparse(self._ndof, m_parts),
            assemble_global_sparse(self._ndof, minv_parts),
        )

    def _apply_bcs(self, inv_mass: sparse.csr_matrix) -> sparse.csr_matrix:
        constrained = self.constrained_dofs
        if len(constrained) == 0:
            return inv_mass
        pruned = filter_entries(inv_mass, outside_index_set(constrained))
        return set_diagonal_entries(pruned, constrained, 1.0)

    @property
    def constrained_dofs(self) -> np.ndarray:
        """Sorted unique global indices referenced by a boundary condition."""
        return np.unique(np.array([bc.global_index for bc in self._bcs], dtype=np.int64))

    @property
    def nodes(self) -> np.ndarray:
        """(N, 3) read-only node coordinates."""
        return self._nodes

    @property
    def elements(self) -> Tuple[BeamElement, ...]:
        return self._elements

    @property
    def bcs(self) -> Tuple[BC, ...]:
        return self._bcs

    @property
    def n_nodes(self) -> int:
        return len(self._nodes)

    @property
    def ndof(self) -> int:
        return self._ndof

    @property
    def stiffness(self) -> sparse.csr_matrix:
        """Global stiffness K (not modified by boundary conditions)."""
        return self._stiffness

    @property
    def mass(self) -> sparse.csr_matrix:
        """Global consistent mass M (not modified by boundary conditions)."""
        return self._mass

    @property
    def inv_mass(self) -> sparse.csr_matrix:
        """Global inverse mass with constrained rows/columns replaced by unit vectors."""
        return self._inv_mass
