# explicit_frame/kernel/dof.py
"""
DOF MANAGER: Global Degree of Freedom Indexing for 3D Beam Frames
=================================================================

PURPOSE:
--------
This module handles the mapping between (node_id, local_dof) pairs and
global DOF indices. Every matrix, vector and prescribed value in the
package shares this numbering:

    3D Frame:  6 DOF/node (ux, uy, uz, rx, ry, rz)

    global_index = 6 * node_id + local_dof

The mapping is invertible: divmod(global_index, 6) gives the node and
the local DOF back.

USAGE:
------
    dof = DOFManager()

    # Global index for node 2, rotation about z
    g = dof.idx(node_id=2, local_dof=DOF.ROTATION_Z)   # → 17

    # And back again
    dof.split(17)                                      # → (2, 5)
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import List, Tuple


class DOF(IntEnum):
    """Local degrees of freedom of a frame node."""
    DISPLACEMENT_X = 0
    DISPLACEMENT_Y = 1
    DISPLACEMENT_Z = 2
    ROTATION_X = 3
    ROTATION_Y = 4
    ROTATION_Z = 5


NUM_DOFS = len(DOF)  # DOFs per node


@dataclass(frozen=True)
class DOFManager:
    """
    Manages degree-of-freedom indexing for frame analysis.

    This is the bridge between "node 5, z-rotation" and "global DOF index 35".

    Attributes:
    -----------
    dof_per_node : int
        Number of DOFs per node, 6 for a 3D frame (ux, uy, uz, rx, ry, rz)

    Examples:
    ---------
    >>> dof = DOFManager()
    >>> dof.idx(0, 0)  # Node 0, DOF 0 (ux)
    0
    >>> dof.idx(1, 0)  # Node 1, DOF 0 (ux)
    6
    >>> dof.ndof(4)    # Total DOFs for 4 nodes
    24
    """
    dof_per_node: int = NUM_DOFS

    def idx(self, node_id: int, local_dof: int) -> int:
        """
        Get the global DOF index for a node's local DOF.

        Parameters:
        -----------
        node_id : int
            The node index (0-indexed position in the node list)
        local_dof : int
            The local DOF index within the node (0 to dof_per_node-1),
            0=ux, 1=uy, 2=uz, 3=rx, 4=ry, 5=rz

        Returns:
        --------
        int
            Global DOF index in the system matrices

        Raises:
        -------
        ValueError
            If node_id is negative or local_dof is out of range
        """
        if node_id < 0:
            raise ValueError(f"Node index must be non-negative, got {node_id}")
        if not 0 <= local_dof < self.dof_per_node:
            raise ValueError(
                f"Local DOF must be in [0, {self.dof_per_node}), got {local_dof}"
            )
        return self.dof_per_node * node_id + int(local_dof)

    def split(self, global_index: int) -> Tuple[int, int]:
        """
        Inverse of idx(): recover (node_id, local_dof) from a global index.

        Examples:
        ---------
        >>> DOFManager().split(17)
        (2, 5)
        """
        if global_index < 0:
            raise ValueError(f"Global index must be non-negative, got {global_index}")
        node_id, local_dof = divmod(int(global_index), self.dof_per_node)
        return node_id, local_dof

    def ndof(self, n_nodes: int) -> int:
        """Total number of DOFs (size of K) for a model with n_nodes."""
        return self.dof_per_node * n_nodes

    def node_dofs(self, node_id: int) -> List[int]:
        """
        Get all global DOF indices for a single node.

        Examples:
        ---------
        >>> DOFManager().node_dofs(2)
        [12, 13, 14, 15, 16, 17]
        """
        base = self.dof_per_node * node_id
        return list(range(base, base + self.dof_per_node))

    def element_dof_map(self, node_ids: List[int]) -> List[int]:
        """
        Get the DOF map for an element connecting multiple nodes.

        For a two-node beam, local rows/columns 0-5 land in the first
        node's block and 6-11 in the second node's block.

        Examples:
        ---------
        >>> DOFManager().element_dof_map([0, 2])
        [0, 1, 2, 3, 4, 5, 12, 13, 14, 15, 16, 17]
        """
        result = []
        for node_id in node_ids:
            result.extend(self.node_dofs(node_id))
        return result


DOF_3D_FRAME = DOFManager()
