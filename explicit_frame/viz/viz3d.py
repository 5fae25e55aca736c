# explicit_frame/viz/viz3d.py
"""
3D VISUALIZATION: Interactive Frame Viewer
==========================================

Interactive Plotly figure of a beam frame:
- Rotation/zoom/pan of the 3D model
- Members coloured by axial force (red = tension, blue = compression)
- Constrained nodes highlighted
- Optional deformed shape overlay
- Export to HTML for sharing
"""

import os
import numpy as np
import plotly.graph_objects as go
from typing import List, Optional, Sequence

from ..v3d.elements import BeamElement
from ..v3d.model import NodeLike, node_coordinates
from .plots import deformed_coordinates


def create_frame_figure(
    nodes: Sequence[NodeLike],
    elements: Sequence[BeamElement],
    axial_forces: Optional[Sequence[float]] = None,
    constrained_nodes: Optional[List[int]] = None,
    displacements: Optional[np.ndarray] = None,
    scale: float = 1.0,
    title: str = "Frame Structure",
) -> go.Figure:
    """
    Create a Plotly figure for a 3D beam frame.

    Parameters:
    -----------
    nodes : (N, 3) array or sequence of Node3D
        Node coordinates
    elements : sequence of BeamElement
        Members to draw
    axial_forces : sequence of float, optional
        One axial force per element (tension positive) for colouring
    constrained_nodes : list of int, optional
        Node indices to mark as supported
    displacements : np.ndarray, optional
        Global displacement vector (6N,) for a deformed overlay
    scale : float
        Factor applied to translations of the deformed overlay
    title : str
        Plot title

    Returns:
    --------
    go.Figure
    """
    coords = node_coordinates(nodes)
    fig = go.Figure()

    if axial_forces is None:
        xs, ys, zs = [], [], []
        for element in elements:
            nn1, nn2 = element.node_numbers
            # None breaks the line between members
            xs.extend([coords[nn1, 0], coords[nn2, 0], None])
            ys.extend([coords[nn1, 1], coords[nn2, 1], None])
            zs.extend([coords[nn1, 2], coords[nn2, 2], None])
        fig.add_trace(go.Scatter3d(
            x=xs, y=ys, z=zs,
            mode='lines',
            line=dict(color='steelblue', width=4),
            name='Members',
            hoverinfo='skip',
        ))
    else:
        assert len(axial_forces) == len(elements), "One axial force per element is required"
        max_force = max((abs(f) for f in axial_forces), default=0.0) or 1.0
        for i, (element, force) in enumerate(zip(elements, axial_forces)):
            nn1, nn2 = element.node_numbers
            intensity = int(255 * abs(force) / max_force)
            color = f'rgb({intensity}, 50, 50)' if force > 0 else f'rgb(50, 50, {intensity})'
            kind = "Tension" if force > 0 else "Compression"
            fig.add_trace(go.Scatter3d(
                x=coords[[nn1, nn2], 0], y=coords[[nn1, nn2], 1], z=coords[[nn1, nn2], 2],
                mode='lines',
                line=dict(color=color, width=4),
                showlegend=False,
                hovertext=f"Element {i}: {force/1000:.3f} kN ({kind})",
                hoverinfo='text',
            ))

    if displacements is not None:
        moved = deformed_coordinates(coords, displacements, scale)
        xs, ys, zs = [], [], []
        for element in elements:
            nn1, nn2 = element.node_numbers
            xs.extend([moved[nn1, 0], moved[nn2, 0], None])
            ys.extend([moved[nn1, 1], moved[nn2, 1], None])
            zs.extend([moved[nn1, 2], moved[nn2, 2], None])
        fig.add_trace(go.Scatter3d(
            x=xs, y=ys, z=zs,
            mode='lines',
            line=dict(color='orange', width=3, dash='dash'),
            name=f'Deformed (×{scale:g})',
        ))

    constrained = set(constrained_nodes or [])
    fig.add_trace(go.Scatter3d(
        x=coords[:, 0], y=coords[:, 1], z=coords[:, 2],
        mode='markers',
        marker=dict(
            size=[10 if i in constrained else 5 for i in range(len(coords))],
            color=['red' if i in constrained else 'darkgray' for i in range(len(coords))],
            line=dict(width=1, color='black'),
        ),
        name='Nodes',
        text=[f"Node {i}: ({x:.2f}, {y:.2f}, {z:.2f})" for i, (x, y, z) in enumerate(coords)],
        hoverinfo='text',
    ))

    fig.update_layout(
        title=dict(text=title, font=dict(size=16)),
        scene=dict(
            xaxis=dict(title='X (m)'),
            yaxis=dict(title='Y (m)'),
            zaxis=dict(title='Z (m)'),
            aspectmode='data',
            camera=dict(eye=dict(x=1.5, y=1.5, z=1.0)),
        ),
        showlegend=True,
        legend=dict(x=0.02, y=0.98),
        margin=dict(l=0, r=0, t=40, b=0),
    )
    return fig


def plot_frame_3d(
    nodes: Sequence[NodeLike],
    elements: Sequence[BeamElement],
    outpath: Optional[str] = None,
    show: bool = True,
    **kwargs
) -> go.Figure:
    """
    Create and optionally display/save an interactive frame figure.

    outpath, if given, is written as standalone HTML. Remaining keyword
    arguments go to create_frame_figure().
    """
    fig = create_frame_figure(nodes, elements, **kwargs)

    if outpath:
        directory = os.path.dirname(outpath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fig.write_html(outpath)

    if show:
        fig.show()

    return fig
