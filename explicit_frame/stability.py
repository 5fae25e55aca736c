# explicit_frame/stability.py
"""Stable time step estimate for explicit integration of a beam frame."""

import numpy as np
from typing import Sequence

from .v3d.elements import BeamElement
from .v3d.model import NodeLike

SAFETY_FACTOR = 10.0


def estimate_stable_timestep(nodes: Sequence[NodeLike], elements: Sequence[BeamElement]) -> float:
    """
    Estimate a stable step size from element lengths and axial wave speeds.

    For each element the time an axial wave needs to cross it is

        t_e = L / sqrt(E/ρ)

    and the estimate is min(t_e) / 10.

    Parameters:
    -----------
    nodes : sequence of Node3D or (x, y, z), or (N, 3) array
        Node coordinates
    elements : sequence of BeamElement
        Elements of the frame

    Returns:
    --------
    float
        Estimated stable time step (s)

    Raises:
    -------
    ValueError
        If there are no elements
    """
    if len(elements) == 0:
        raise ValueError("Cannot estimate a stable time step without elements")

    crossing_times = np.array([
        element.length(nodes) / element.props.wave_speed
        for element in elements
    ])
    return float(crossing_times.min() / SAFETY_FACTOR)
