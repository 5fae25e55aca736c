# explicit_frame - Explicit Dynamics of 3D Beam Frames
"""
EXPLICIT-FRAME: Transient Analysis of 3D Beam Frames
====================================================

This package provides:
- 3D Euler-Bernoulli and Timoshenko beam elements
- Sparse assembly of global stiffness, mass and inverse mass
- Newmark time stepping with Rayleigh damping and cached factorization
- JSON/CSV model loading, a run manager with restartable dumps, and a CLI

ARCHITECTURE:
-------------
    kernel/         Element-agnostic core (DOF numbering, sparse ops, assembly, solve)
    v3d/            3D model, coordinate transform, beam elements
    prescribed.py   Boundary conditions and external forces
    mesh.py         Global K, M, M⁻¹ with BC enforcement on M⁻¹
    system.py       Explicit integrator (ExplicitSystem)
    stability.py    Stable time step estimate
    post.py         Element end forces, reactions
    config.py       Options dataclasses, ConfigError
    loaders.py      JSON configuration + CSV tables
    manager.py      Run loop and state dumps
    cli.py          Command-line entry point
    viz/            matplotlib and Plotly figures
"""

from .kernel import DOF, DOFManager, ValueCompare, MechanismError
from .v3d import Node3D, BeamProps, BeamElement, EulerBernoulliBeam, TimoshenkoBeam
from .prescribed import BC, BCType, Force
from .mesh import Mesh
from .system import ExplicitSystem
from .stability import estimate_stable_timestep
from .config import ConfigError, IntegratorOptions, ManagerOptions

__version__ = "0.1.0"

__all__ = [
    'DOF', 'DOFManager', 'ValueCompare', 'MechanismError',
    'Node3D', 'BeamProps', 'BeamElement', 'EulerBernoulliBeam', 'TimoshenkoBeam',
    'BC', 'BCType', 'Force',
    'Mesh', 'ExplicitSystem', 'estimate_stable_timestep',
    'ConfigError', 'IntegratorOptions', 'ManagerOptions',
]
