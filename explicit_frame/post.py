# element end forces, nodal results, reactions

import numpy as np
import pandas as pd
from typing import Dict, Sequence

from .kernel.assemble import assemble_global_F
from .kernel.dof import DOF, DOF_3D_FRAME
from .mesh import Mesh
from .v3d.elements import BeamElement
from .v3d.model import NodeLike
from .v3d.transform import element_rotation

END_FORCE_LABELS = ['N', 'Vy', 'Vz', 'T', 'My', 'Mz']


def element_end_forces_local(
    nodes: Sequence[NodeLike],
    element: BeamElement,
    d_global: np.ndarray,
) -> np.ndarray:
    """
    Compute element end forces in LOCAL coordinates from global displacements.

    The process:
    1. Extract element's global displacements
    2. Transform to local coordinates (d_local = R · d_global)
    3. Compute forces using f = k_local × d_local

    Parameters:
    -----------
    nodes : (N, 3) array or sequence of Node3D
        Node coordinates
    element : BeamElement
        The element for which to compute end forces
    d_global : np.ndarray
        Global displacement vector, shape (6N,)

    Returns:
    --------
    np.ndarray
        Shape (12,) array of forces the nodes exert ON the element, in
        local axes: [Fx1, Fy1, Fz1, Mx1, My1, Mz1, Fx2, ..., Mz2]
    """
    dof_map = DOF_3D_FRAME.element_dof_map(list(element.node_numbers))
    d_elem_global = np.asarray(d_global, dtype=float)[dof_map]

    R, _ = element_rotation(nodes, element)
    d_local = R @ d_elem_global

    return element.local_stiffness(nodes) @ d_local


def element_axial_force(
    nodes: Sequence[NodeLike],
    element: BeamElement,
    d_global: np.ndarray,
) -> float:
    """Axial force in the element, positive = tension."""
    f_local = element_end_forces_local(nodes, element, d_global)
    return float(f_local[6 + DOF.DISPLACEMENT_X])


def nodal_internal_forces(mesh: Mesh, d_global: np.ndarray) -> np.ndarray:
    """
    Sum element end forces (rotated to global axes) at the nodes.

    Equal to K · d for the same displacements; useful for checking the
    assembled stiffness against element-by-element results.
    """
    contributions = []
    for element in mesh.elements:
        _, R_T = element_rotation(mesh.nodes, element)
        f_local = element_end_forces_local(mesh.nodes, element, d_global)
        contributions.append(
            (DOF_3D_FRAME.element_dof_map(list(element.node_numbers)), R_T @ f_local)
        )
    return assemble_global_F(mesh.ndof, contributions)


def compute_nodal_displacements(
    n_nodes: int,
    d_global: np.ndarray,
) -> Dict[int, Dict[str, float]]:
    """
    Extract nodal displacements and rotations from the global vector.

    Returns:
    --------
    Dict[int, Dict[str, float]]
        Mapping of node index to {'ux', 'uy', 'uz', 'rx', 'ry', 'rz', 'magnitude'}
    """
    result = {}
    for node_id in range(n_nodes):
        values = np.asarray(d_global, dtype=float)[DOF_3D_FRAME.node_dofs(node_id)]
        entry = dict(zip(['ux', 'uy', 'uz', 'rx', 'ry', 'rz'], map(float, values)))
        entry['magnitude'] = float(np.linalg.norm(values[:3]))
        result[node_id] = entry
    return result


def compute_reactions(mesh: Mesh, nodal_forces: np.ndarray) -> Dict[int, Dict[int, float]]:
    """
    Pick the reactions out of a nodal force vector (e.g. ExplicitSystem.forces).

    Returns:
    --------
    Dict[int, Dict[int, float]]
        node index -> {local DOF: force} for every constrained DOF
    """
    reactions: Dict[int, Dict[int, float]] = {}
    for g in mesh.constrained_dofs:
        node, dof = DOF_3D_FRAME.split(int(g))
        reactions.setdefault(node, {})[dof] = float(nodal_forces[g])
    return reactions


def element_forces_table(mesh: Mesh, d_global: np.ndarray) -> pd.DataFrame:
    """
    Local end forces of every element as a DataFrame.

    One row per element end, columns: element, node, end (1 or 2), and
    N, Vy, Vz, T, My, Mz. At end 2 the axial column is the element force
    (tension positive); at end 1 it is its negative.
    """
    rows = []
    for i, element in enumerate(mesh.elements):
        f_local = element_end_forces_local(mesh.nodes, element, d_global)
        for end, node in enumerate(element.node_numbers, start=1):
            block = f_local[6 * (end - 1): 6 * end]
            row = {'element': i, 'node': node, 'end': end}
            row.update(zip(END_FORCE_LABELS, map(float, block)))
            rows.append(row)
    return pd.DataFrame(rows, columns=['element', 'node', 'end'] + END_FORCE_LABELS)
