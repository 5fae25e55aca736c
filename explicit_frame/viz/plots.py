# explicit_frame/viz/plots.py
"""
STATIC PLOTS: Frame Geometry and Time Histories (matplotlib)
============================================================

- plot_frame: undeformed frame, optionally overlaid with the deformed
  shape (translations scaled by `scale`)
- plot_time_history: one DOF (or any scalar) against time

Both draw on a given axis or create one, and return the axis so callers
can add to it or save the figure.
"""

import os
import numpy as np
import matplotlib.pyplot as plt
from typing import Optional, Sequence

from ..kernel.dof import DOF_3D_FRAME
from ..v3d.elements import BeamElement
from ..v3d.model import NodeLike, node_coordinates


def deformed_coordinates(nodes: Sequence[NodeLike], displacements: np.ndarray, scale: float = 1.0) -> np.ndarray:
    """
    Node coordinates moved by their (scaled) translations.

    Rotational DOFs are ignored; members are drawn as straight lines
    between displaced nodes.
    """
    coords = node_coordinates(nodes)
    d = np.asarray(displacements, dtype=float)
    assert d.shape == (DOF_3D_FRAME.ndof(len(coords)),), \
        f"Displacement vector of shape {d.shape} doesn't match {len(coords)} nodes"
    translations = d.reshape(len(coords), DOF_3D_FRAME.dof_per_node)[:, :3]
    return coords + scale * translations


def plot_frame(
    nodes: Sequence[NodeLike],
    elements: Sequence[BeamElement],
    displacements: Optional[np.ndarray] = None,
    scale: float = 1.0,
    ax=None,
    title: Optional[str] = None,
    outpath: Optional[str] = None,
):
    """
    Plot a 3D frame, and its deformed shape when displacements are given.

    Parameters:
    -----------
    nodes : (N, 3) array or sequence of Node3D
        Node coordinates
    elements : sequence of BeamElement
        Members to draw
    displacements : np.ndarray, optional
        Global displacement vector, shape (6N,)
    scale : float
        Factor applied to translations for the deformed shape. Real
        deflections are tiny; scale them up to see them.
    ax : mpl_toolkits.mplot3d.Axes3D, optional
        Axis to draw on; a new figure is created when omitted
    title : str, optional
        Axis title
    outpath : str, optional
        Save the figure to this path (directory created if needed)

    Returns:
    --------
    The 3D axis
    """
    coords = node_coordinates(nodes)
    if ax is None:
        fig = plt.figure(figsize=(8, 6))
        ax = fig.add_subplot(111, projection='3d')

    for k, element in enumerate(elements):
        xyz = coords[list(element.node_numbers)]
        ax.plot(xyz[:, 0], xyz[:, 1], xyz[:, 2], color='lightgray', linestyle='--',
                linewidth=1.5, label='Undeformed' if k == 0 else None)

    if displacements is not None:
        moved = deformed_coordinates(coords, displacements, scale)
        for k, element in enumerate(elements):
            xyz = moved[list(element.node_numbers)]
            ax.plot(xyz[:, 0], xyz[:, 1], xyz[:, 2], color='steelblue', linewidth=2.0,
                    label=f'Deformed (×{scale:g})' if k == 0 else None)
        ax.scatter(moved[:, 0], moved[:, 1], moved[:, 2], color='steelblue', s=12)
    else:
        ax.scatter(coords[:, 0], coords[:, 1], coords[:, 2], color='black', s=12)

    ax.set_xlabel('X (m)')
    ax.set_ylabel('Y (m)')
    ax.set_zlabel('Z (m)')
    if title:
        ax.set_title(title)
    if len(elements) > 0:
        ax.legend(loc='upper left')

    if outpath:
        _save(ax.figure, outpath)
    return ax


def plot_time_history(
    times: Sequence[float],
    values: Sequence[float],
    ax=None,
    label: Optional[str] = None,
    outpath: Optional[str] = None,
):
    """Plot a scalar history (e.g. tip displacement) against time. Returns the axis."""
    times = np.asarray(times, dtype=float)
    values = np.asarray(values, dtype=float)
    assert times.shape == values.shape, \
        f"times {times.shape} and values {values.shape} differ in shape"

    if ax is None:
        _, ax = plt.subplots(figsize=(8, 4))

    ax.plot(times, values, linewidth=1.5, label=label)
    ax.set_xlabel('Time (s)')
    ax.grid(True, alpha=0.3)
    if label:
        ax.legend()

    if outpath:
        _save(ax.figure, outpath)
    return ax


def _save(fig, outpath: str) -> None:
    directory = os.path.dirname(outpath)
    if directory:
        os.makedirs(directory, exist_ok=True)
    fig.savefig(outpath, dpi=150, bbox_inches='tight')
