# explicit_frame/v3d/transform.py
"""
LOCAL-TO-GLOBAL ROTATION FOR 3D BEAM ELEMENTS
=============================================

A beam element's stiffness and mass are simplest in its own axes:

    x' : along the member, from node 1 to node 2
    y' : the reference direction given in BeamProps.normal
    z' : x' × y', completing a right-handed triad

The three unit vectors, stacked as rows, form the 3×3 direction-cosine
matrix λ. A frame element has four vector triples (translation and
rotation at each of its two nodes), so the full 12×12 rotation is λ
repeated four times on the diagonal:

    R = diag(λ, λ, λ, λ)

Element matrices move to global axes with

    A_global = Rᵀ · A_local · R
"""

import logging
import numpy as np
from typing import Tuple

from .model import node_point

logger = logging.getLogger(__name__)

# Relative axial component of the reference direction above which projecting it is reported
PROJECTION_WARN_TOL = 1e-6


def local_axes(p1, p2, normal) -> np.ndarray:
    """
    Compute the 3×3 direction-cosine matrix λ for a beam from p1 to p2.

    Rows are the local x, y, z unit vectors in global coordinates. The
    reference direction is projected onto the plane normal to the
    element axis before normalizing, so λ is orthonormal even when the
    reference direction is not exactly perpendicular to the member.

    Parameters:
    -----------
    p1, p2 : array-like, shape (3,)
        Global coordinates of node 1 and node 2
    normal : array-like, shape (3,)
        Reference direction for the local y-axis

    Returns:
    --------
    np.ndarray
        3×3 matrix [[x'], [y'], [z']]

    Raises:
    -------
    ValueError
        If the element has zero length or the reference direction is
        parallel to the element axis
    """
    p1 = np.asarray(p1, dtype=float)
    p2 = np.asarray(p2, dtype=float)
    dx = p2 - p1
    L = np.linalg.norm(dx)
    if L <= 0.0:
        raise ValueError(f"Element has zero length (both nodes at {tuple(p1)})")
    nx = dx / L

    r = np.asarray(normal, dtype=float)
    r_perp = r - np.dot(r, nx) * nx
    r_norm = np.linalg.norm(r_perp)
    if r_norm <= 1e-12 * max(np.linalg.norm(r), 1.0):
        raise ValueError(
            f"Reference direction {tuple(r)} is parallel to the element axis {tuple(nx)}"
        )
    ny = r_perp / r_norm
    if abs(np.dot(r, nx)) > PROJECTION_WARN_TOL * np.linalg.norm(r):
        logger.warning(
            "Reference direction %s is not perpendicular to the element axis %s; "
            "using its projection %s",
            tuple(r), tuple(nx), tuple(ny),
        )

    nz = np.cross(nx, ny)
    nz /= np.linalg.norm(nz)

    return np.vstack([nx, ny, nz])


def rotation_matrix(lam: np.ndarray) -> np.ndarray:
    """Expand a 3×3 direction-cosine block to the 12×12 element rotation."""
    return np.kron(np.eye(4), lam)


def element_rotation(nodes: np.ndarray, element) -> Tuple[np.ndarray, np.ndarray]:
    """
    Local-to-global rotation of an element and its transpose.

    Parameters:
    -----------
    nodes : np.ndarray or sequence of Node3D
        Node coordinates, indexed by node number
    element : BeamElement
        Element providing node_numbers and props.normal

    Returns:
    --------
    (R, R_T) : Tuple[np.ndarray, np.ndarray]
        12×12 rotation and its transpose
    """
    nn1, nn2 = element.node_numbers
    lam = local_axes(node_point(nodes, nn1), node_point(nodes, nn2), element.props.normal)
    R = rotation_matrix(lam)
    return R, R.T


def to_global(A_local: np.ndarray, R: np.ndarray) -> np.ndarray:
    """Rotate a 12×12 element matrix from local to global axes: Rᵀ·A·R."""
    return R.T @ A_local @ R
