# explicit_frame/v3d - 3D Beam Elements
"""
V3D: 3D BEAM ELEMENTS
=====================

This package provides the 3D frame model:
- Node3D, BeamProps: nodes and element property bundles
- EulerBernoulliBeam, TimoshenkoBeam: 12×12 local stiffness/mass, 6 DOF/node
- local_axes / element_rotation: beam-local to global rotation

These elements work with the element-agnostic kernel for assembly.

USAGE:
------
    from explicit_frame.v3d import BeamProps, TimoshenkoBeam, element_rotation

    nodes = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
    props = BeamProps(E=200e9, G=80e9, A=0.0314, Iz=7.85e-5, Iy=7.85e-5,
                      J=1.57e-4, density=7800.0, normal=(0.0, 1.0, 0.0))
    beam = TimoshenkoBeam(0, 1, props)

    R, R_T = element_rotation(nodes, beam)
    k_global = R_T @ beam.local_stiffness(nodes) @ R
"""

from .model import Node3D, BeamProps, node_coordinates, node_point
from .transform import local_axes, rotation_matrix, element_rotation, to_global
from .elements import (
    BeamElement,
    EulerBernoulliBeam,
    TimoshenkoBeam,
    ELEMENT_TYPES,
    element_geometry_3d,
)

__all__ = [
    'Node3D', 'BeamProps', 'node_coordinates', 'node_point',
    'local_axes', 'rotation_matrix', 'element_rotation', 'to_global',
    'BeamElement', 'EulerBernoulliBeam', 'TimoshenkoBeam', 'ELEMENT_TYPES',
    'element_geometry_3d',
]
