# explicit_frame/v3d/model.py
"""
3D MODEL DEFINITIONS: Node3D and BeamProps
==========================================

PURPOSE:
--------
This module defines the basic data structures for 3D frame analysis:
- Node3D: A point in 3D space with x, y, z coordinates
- BeamProps: The material and section properties of a beam element

ENGINEERING CONTEXT:
--------------------
A 3D FRAME is a structural system where:
- Members carry axial force, two shears, torsion and two bending moments
- Connections are rigid (moments transfer between members)
- Each node has 6 DOFs: ux, uy, uz, rx, ry, rz

Nodes carry no id: a node is identified by its position in the node
list, and that position is what DOFManager turns into global indices.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np


@dataclass(frozen=True)
class Node3D:
    """
    A node (joint) in 3D space.

    Parameters:
    -----------
    x, y, z : float
        Coordinates in the global coordinate system (meters)

    Examples:
    ---------
    >>> n0 = Node3D(0.0, 0.0, 0.0)  # Origin
    >>> n1 = Node3D(1.0, 0.0, 0.0)  # 1m along x-axis
    """
    x: float
    y: float
    z: float

    @property
    def coords(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


NodeLike = Union[Node3D, Sequence[float], np.ndarray]


def node_coordinates(nodes: Sequence[NodeLike]) -> np.ndarray:
    """
    Convert a node list into an (N, 3) float array.

    Accepts Node3D objects, (x, y, z) sequences or an existing array.

    Raises:
    -------
    ValueError
        If any node does not have exactly three coordinates
    """
    if isinstance(nodes, np.ndarray):
        coords = np.asarray(nodes, dtype=float)
    else:
        coords = np.array(
            [n.coords if isinstance(n, Node3D) else n for n in nodes],
            dtype=float,
        )
    if coords.size == 0:
        return np.zeros((0, 3), dtype=float)
    if coords.ndim != 2 or coords.shape[1] != 3:
        raise ValueError(f"Nodes must have x, y and z coordinates, got array of shape {coords.shape}")
    return coords


def node_point(nodes: Sequence[NodeLike], index: int) -> np.ndarray:
    """Coordinates of nodes[index] as a length-3 float array."""
    node = nodes[index]
    if isinstance(node, Node3D):
        return np.array(node.coords, dtype=float)
    return np.asarray(node, dtype=float)


@dataclass(frozen=True)
class BeamProps:
    """
    Material and section properties of a 3D beam element.

    Parameters:
    -----------
    E : float
        Young's modulus (Pa). Steel: ~200-210 GPa
    G : float
        Shear modulus (Pa). Steel: ~80 GPa
    A : float
        Cross-sectional area (m²)
    Iz : float
        Second moment of area for bending in the local x-y plane (m⁴)
    Iy : float
        Second moment of area for bending in the local x-z plane (m⁴)
    J : float
        Torsion constant (m⁴)
    density : float
        Mass density (kg/m³). Steel: ~7800
    normal : Tuple[float, float, float]
        Reference direction fixing the element's local y-axis. Should be
        perpendicular to the element; it must not be parallel to it.

    Examples:
    ---------
    >>> props = BeamProps(E=200e9, G=80e9, A=0.0314, Iz=7.85e-5, Iy=7.85e-5,
    ...                   J=1.57e-4, density=7800.0, normal=(0.0, 1.0, 0.0))
    """
    E: float
    G: float
    A: float
    Iz: float
    Iy: float
    J: float
    density: float
    normal: Tuple[float, float, float] = (0.0, 1.0, 0.0)

    def __post_init__(self):
        object.__setattr__(self, 'normal', tuple(float(c) for c in self.normal))
        if len(self.normal) != 3:
            raise ValueError(f"normal must have 3 components, got {len(self.normal)}")

    @property
    def wave_speed(self) -> float:
        """1-D axial wave speed sqrt(E/ρ) (m/s)."""
        return float(np.sqrt(self.E / self.density))
