# explicit_frame/v3d/elements.py
"""
3D BEAM ELEMENTS: Local Stiffness and Mass Matrices
===================================================

PURPOSE:
--------
This module provides the two-node 3D beam elements the mesh assembles.
Each element produces 12×12 matrices in its OWN (beam-local) axes; the
mesh rotates them into global axes with the element transform.

LOCAL DOF ORDER:
----------------
    [ux1, uy1, uz1, rx1, ry1, rz1, ux2, uy2, uz2, rx2, ry2, rz2]

    x' : along the member (axial, torsion)
    y' : reference direction (bending in the x'-y' plane uses Iz)
    z' : x' × y'           (bending in the x'-z' plane uses Iy)

ENGINEERING CONTEXT:
--------------------
A 3D frame member decouples into four independent actions:

    Axial:     u   (EA/L)
    Torsion:   θx  (GJ/L)
    Bending:   v, θz  about z' (EIz)
    Bending:   w, θy  about y' (EIy)

Each bending plane uses the same 4×4 cubic-Hermite block. The x'-z' plane
differs only in sign: with a right-handed triad a positive θy rotates
the member DOWNWARD in z', so θy = -dw/dx and every translation-rotation
coupling term changes sign.

ELEMENT THEORIES:
-----------------
- EulerBernoulliBeam: plane sections stay normal to the axis. Correct for
  slender members (L/h > ~10).
- TimoshenkoBeam: adds shear deformation through
      φ = 12EI / (G A L²)
  per bending plane. Slender members (φ → 0) match Euler-Bernoulli,
  deep members come out softer.

Mass matrices are CONSISTENT, with polar inertia ρ(Iy+Iz) for torsion.
The Euler-Bernoulli bending mass is the cubic-Hermite translational block.
The Timoshenko element defines its mass through the closed-form INVERSE
of its shear-deformable bending mass, whose rotation terms depend on φ;
its local_mass() is the inverse of that matrix.
"""

import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence, Tuple

from .model import BeamProps, NodeLike, node_point


def element_geometry_3d(nodes: Sequence[NodeLike], element: "BeamElement") -> Tuple[float, float, float, float]:
    """
    Compute length and direction cosines for a 3D beam element.

    Parameters:
    -----------
    nodes : np.ndarray or sequence of Node3D
        Node coordinates, indexed by node number
    element : BeamElement
        The beam element

    Returns:
    --------
    Tuple[float, float, float, float]
        (L, l, m, n) where:
        - L: Element length (m)
        - l, m, n: Direction cosines of the axis with global x, y, z

    Raises:
    -------
    ValueError
        If element has zero length (nodes at same location)
    """
    p1 = node_point(nodes, element.nn1)
    p2 = node_point(nodes, element.nn2)
    dx, dy, dz = p2 - p1

    L = float(np.sqrt(dx*dx + dy*dy + dz*dz))

    if L <= 0.0:
        raise ValueError(
            f"Element ({element.nn1}, {element.nn2}) has zero length "
            f"(both nodes at ({p1[0]}, {p1[1]}, {p1[2]}))"
        )

    return L, dx / L, dy / L, dz / L


# Local indices of the two bending planes: (translation 1, rotation 1, translation 2, rotation 2)
_PLANE_XY = (1, 5, 7, 11)
_PLANE_XZ = (2, 4, 8, 10)


def _scatter(target: np.ndarray, dofs: Sequence[int], block: np.ndarray, sign: float = 1.0) -> None:
    """
    Add a 4×4 bending block (or 2×2 axial block) into a 12×12 matrix.

    With sign = -1 the rotation rows/columns are negated, turning an x'-y'
    plane block into its x'-z' counterpart.
    """
    n = len(dofs)
    flip = np.ones(n)
    if n == 4:
        flip[[1, 3]] = sign
    idx = np.asarray(dofs)
    target[np.ix_(idx, idx)] += flip[:, None] * block * flip[None, :]


def _bar_block(coef: float) -> np.ndarray:
    return coef * np.array([[1.0, -1.0], [-1.0, 1.0]])


def _bar_mass_block(coef: float) -> np.ndarray:
    return coef * np.array([[1.0 / 3.0, 1.0 / 6.0], [1.0 / 6.0, 1.0 / 3.0]])


def _bar_inv_mass_block(coef: float) -> np.ndarray:
    return (2.0 / coef) * np.array([[2.0, -1.0], [-1.0, 2.0]])


@dataclass(frozen=True)
class BeamElement(ABC):
    """
    Abstract two-node 3D beam element.

    Parameters:
    -----------
    nn1, nn2 : int
        Indices of the start and end nodes in the node list
    props : BeamProps
        Material and section properties

    Concrete elements implement local_stiffness() and local_mass(); by
    default the inverse mass follows from local_mass().
    """
    nn1: int
    nn2: int
    props: BeamProps

    def __post_init__(self):
        if self.nn1 < 0 or self.nn2 < 0:
            raise ValueError(f"Node indices must be non-negative, got ({self.nn1}, {self.nn2})")
        if self.nn1 == self.nn2:
            raise ValueError(f"Element connects node {self.nn1} to itself")

    @property
    def node_numbers(self) -> Tuple[int, int]:
        return (self.nn1, self.nn2)

    def length(self, nodes: Sequence[NodeLike]) -> float:
        return element_geometry_3d(nodes, self)[0]

    @abstractmethod
    def local_stiffness(self, nodes: Sequence[NodeLike]) -> np.ndarray:
        """12×12 stiffness matrix in beam-local axes."""

    @abstractmethod
    def local_mass(self, nodes: Sequence[NodeLike]) -> np.ndarray:
        """12×12 consistent mass matrix in beam-local axes."""

    def local_inv_mass(self, nodes: Sequence[NodeLike]) -> np.ndarray:
        """12×12 inverse of the local mass matrix."""
        return np.linalg.inv(self.local_mass(nodes))


class EulerBernoulliBeam(BeamElement):
    """
    Classical 3D frame element (no shear deformation).

    Example:
    --------
    >>> props = BeamProps(E=10, G=10, A=1, Iz=1, Iy=1, J=1, density=1)
    >>> beam = EulerBernoulliBeam(0, 1, props)
    >>> k = beam.local_stiffness(np.array([[0, 0, 0], [1, 0, 0]]))
    >>> float(k[1, 1])   # 12EIz/L³
    120.0
    """

    def shear_parameters(self, nodes) -> Tuple[float, float]:
        """(φz, φy): shear parameters for bending about z' (Iz) and y' (Iy)."""
        return 0.0, 0.0

    def local_stiffness(self, nodes):
        L = self.length(nodes)
        p = self.props
        phi_z, phi_y = self.shear_parameters(nodes)
        k = np.zeros((12, 12), dtype=float)

        _scatter(k, (0, 6), _bar_block(p.E * p.A / L))
        _scatter(k, (3, 9), _bar_block(p.G * p.J / L))

        _scatter(k, _PLANE_XY, _bending_stiffness(p.E * p.Iz, L, phi_z))
        _scatter(k, _PLANE_XZ, _bending_stiffness(p.E * p.Iy, L, phi_y), sign=-1.0)

        return k

    def local_mass(self, nodes):
        L = self.length(nodes)
        p = self.props
        m = np.zeros((12, 12), dtype=float)

        rhoAL = p.density * p.A * L
        _scatter(m, (0, 6), _bar_mass_block(rhoAL))
        _scatter(m, (3, 9), _bar_mass_block(p.density * (p.Iy + p.Iz) * L))

        _scatter(m, _PLANE_XY, rhoAL * _bending_mass(L))
        _scatter(m, _PLANE_XZ, rhoAL * _bending_mass(L), sign=-1.0)

        return m


class TimoshenkoBeam(EulerBernoulliBeam):
    """
    Shear-deformable 3D frame element.

    Stiffness follows EulerBernoulliBeam with a non-zero shear parameter in
    each bending plane; mass comes from the closed-form inverse in
    local_inv_mass(). The full area A is used as shear area, so with
    G → ∞ the element reduces to EulerBernoulliBeam.

    Example:
    --------
    >>> props = BeamProps(E=10, G=10, A=1, Iz=1, Iy=1, J=1, density=1)
    >>> inv_m = TimoshenkoBeam(0, 1, props).local_inv_mass(np.array([[0, 0, 0], [1, 0, 0]]))
    >>> round(float(inv_m[1, 1]) * 11809)   # φ = 12
    2704
    """

    def shear_parameters(self, nodes) -> Tuple[float, float]:
        L = self.length(nodes)
        p = self.props
        GAL2 = p.G * p.A * L * L
        return 12.0 * p.E * p.Iz / GAL2, 12.0 * p.E * p.Iy / GAL2

    def local_inv_mass(self, nodes):
        L = self.length(nodes)
        p = self.props
        phi_z, phi_y = self.shear_parameters(nodes)
        inv_m = np.zeros((12, 12), dtype=float)

        rhoAL = p.density * p.A * L
        _scatter(inv_m, (0, 6), _bar_inv_mass_block(rhoAL))
        _scatter(inv_m, (3, 9), _bar_inv_mass_block(p.density * (p.Iy + p.Iz) * L))

        _scatter(inv_m, _PLANE_XY, _bending_inv_mass(rhoAL, L, phi_z))
        _scatter(inv_m, _PLANE_XZ, _bending_inv_mass(rhoAL, L, phi_y), sign=-1.0)

        return inv_m

    def local_mass(self, nodes):
        return np.linalg.inv(self.local_inv_mass(nodes))


def _bending_stiffness(EI: float, L: float, phi: float) -> np.ndarray:
    """
    4×4 bending stiffness for [v1, θ1, v2, θ2] in the x'-y' sign convention.

    phi = 0 gives the Euler-Bernoulli block.
    """
    c = EI / (L**3 * (1.0 + phi))
    return c * np.array([
        [ 12.0,     6.0*L,              -12.0,     6.0*L],
        [ 6.0*L,   (4.0 + phi)*L*L,     -6.0*L,   (2.0 - phi)*L*L],
        [-12.0,    -6.0*L,               12.0,    -6.0*L],
        [ 6.0*L,   (2.0 - phi)*L*L,     -6.0*L,   (4.0 + phi)*L*L],
    ])


def _bending_mass(L: float) -> np.ndarray:
    """
    4×4 consistent cubic-Hermite mass for [v1, θ1, v2, θ2], per unit ρAL:
    (1/420)[156, 22L, 54, -13L; ...].
    """
    return np.array([
        [ 156.0,     22.0*L,     54.0,    -13.0*L],
        [ 22.0*L,    4.0*L*L,    13.0*L,  -3.0*L*L],
        [ 54.0,      13.0*L,     156.0,   -22.0*L],
        [-13.0*L,   -3.0*L*L,   -22.0*L,   4.0*L*L],
    ]) / 420.0


def _bending_inv_mass(mass: float, L: float, phi: float) -> np.ndarray:
    """
    4×4 inverse of the shear-deformable bending mass for [v1, θ1, v2, θ2]
    in the x'-y' sign convention.

    mass is ρAL. phi = 0 gives the inverse of _bending_mass(L) · ρAL,
    i.e. (1/ρAL)[16, -120/L, -4, -60/L; ...].
    """
    p = phi
    d1 = mass * (6.0 + p*(12.0 + p)) * (2.0 + p*(4.0 + 3.0*p))
    d2 = L * L * (1.0 + p)**2 * d1
    tail = 21.0 * p * (98.0 + 15.0*p)

    a = 192.0 * (1.0 + p)**2 / d1
    b = 60.0 * (24.0 + p*(62.0 + 7.0*p*(8.0 + 3.0*p))) / (L * d1)
    c = 24.0 * (2.0 + p*(4.0 + 7.0*p)) / d1
    e = 60.0 * (12.0 + p*(38.0 + 3.0*p*(18.0 + 7.0*p))) / (L * d1)
    f = 30.0 * (480.0 + p*(2592.0 + p*(5928.0 + p*(7428.0 + p*(5350.0 + tail))))) / d2
    g = 30.0 * (336.0 + p*(2016.0 + p*(5172.0 + p*(7068.0 + p*(5324.0 + tail))))) / d2
    return np.array([
        [ a,  -b,  -c,  -e],
        [-b,   f,   e,   g],
        [-c,   e,   a,   b],
        [-e,   g,   b,   f],
    ])


ELEMENT_TYPES = {
    'euler_bernoulli': EulerBernoulliBeam,
    'timoshenko': TimoshenkoBeam,
}
