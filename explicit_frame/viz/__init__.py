# explicit_frame/viz - Visualization Tools
"""
VIZ: Visualization of Frames and Their Response
===============================================

- plots: static figures (matplotlib): frame geometry, time histories
- viz3d: interactive 3D frame viewer (Plotly)
"""

from .plots import plot_frame, plot_time_history, deformed_coordinates
from .viz3d import create_frame_figure, plot_frame_3d

__all__ = [
    'plot_frame', 'plot_time_history', 'deformed_coordinates',
    'create_frame_figure', 'plot_frame_3d',
]
