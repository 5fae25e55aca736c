# explicit_frame/prescribed.py
"""
PRESCRIBED VALUES: Boundary Conditions and External Forces
==========================================================

Both share one shape: a node, a local DOF at that node, the derived
global DOF index, and a value that may depend on time.

    BC(node=0, dof=DOF.DISPLACEMENT_X, value=0.0)                       # fixed
    BC(node=1, dof=0, value=0.001, bc_type=BCType.VELOCITY)             # driven
    Force(node=1, dof=DOF.DISPLACEMENT_Z, value=lambda t: 1e3 * t)      # ramp

A BC holds either the DOF's position (DISPLACEMENT) or its rate
(VELOCITY). A Force is always added to the nodal force vector.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Union

from .kernel.dof import DOF_3D_FRAME


ValueFunction = Union[float, Callable[[float], float]]


class BCType(IntEnum):
    """Kind of boundary condition. Values match the `type` column of the bcs file."""
    DISPLACEMENT = 0
    VELOCITY = 1


@dataclass(frozen=True)
class PrescribedValue:
    """
    A time-dependent value attached to one nodal DOF.

    Parameters:
    -----------
    node : int
        Node index
    dof : int
        Local DOF at the node (0-5, see kernel.dof.DOF)
    value : float or callable
        Constant value, or a function of time t returning the value
    """
    node: int
    dof: int
    value: ValueFunction = 0.0

    def __post_init__(self):
        # Validates both indices.
        DOF_3D_FRAME.idx(self.node, self.dof)
        object.__setattr__(self, 'node', int(self.node))
        object.__setattr__(self, 'dof', int(self.dof))

    @property
    def global_index(self) -> int:
        return DOF_3D_FRAME.idx(self.node, self.dof)

    def get_value(self, t: float) -> float:
        """Evaluate the prescribed value at time t."""
        if callable(self.value):
            return float(self.value(t))
        return float(self.value)


@dataclass(frozen=True)
class BC(PrescribedValue):
    """Boundary condition: holds a DOF's displacement or velocity."""
    bc_type: BCType = BCType.DISPLACEMENT

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, 'bc_type', BCType(self.bc_type))


@dataclass(frozen=True)
class Force(PrescribedValue):
    """External nodal force (or moment, for rotational DOFs)."""
