import numpy as np
from matplotlib.collections import LineCollection, PolyCollection
import matplotlib.pyplot as plt

from pyfdhelm.io.power_density import PowerDensityRecord

_EDGE_COLOR = {
    "outer": "red",
    "inner": "blue",
    "axis": "green",
    "default": "black",
}


def _edge_col(tag):
    return _EDGE_COLOR.get(tag, _EDGE_COLOR["default"])


def plot_mesh(mesh, ax=None, highlight_tag=None):
    """
    Plots the corner polygons of a meridional mesh and its boundary edges.

    Args:
        mesh (Mesh): The mesh to plot.
        ax (matplotlib.axes.Axes, optional): An existing axes object to plot on.
        highlight_tag (str, optional): Only boundary edges with this tag are
                                       coloured; the others are drawn in gray.
    Returns:
        matplotlib.axes.Axes: The axes object containing the plot.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 8))

    polys = [mesh.nodes_x_y_pos[list(elem.corner_nodes)] for elem in mesh.elements_list]
    ax.add_collection(PolyCollection(polys, facecolors=(0.9, 0.9, 0.9, 0.5),
                                     edgecolors=(0.1, 0.1, 0.1, 0.4), linewidths=0.5, zorder=1))

    boundary = mesh.boundary_edges()
    segments = [mesh.nodes_x_y_pos[list(edge.nodes)] for edge in boundary]
    colors = []
    for edge in boundary:
        if highlight_tag is None or edge.tag == highlight_tag:
            colors.append(_edge_col(edge.tag))
        else:
            colors.append('lightgray')
    ax.add_collection(LineCollection(segments, colors=colors, linewidths=1.5, zorder=2))

    ax.autoscale_view()
    ax.set_aspect('equal', adjustable='box')
    ax.set_xlabel('r')
    ax.set_ylabel('z')
    return ax


def plot_power_density(records, ax=None):
    """
    Plots the power-flux integrand against the polar angle theta.

    ``records`` is any iterable of PowerDensityRecord (e.g. the ``records`` of a
    RecordingPowerDensitySink) or an (n, 4) array of (r, z, theta, integrand).
    """
    if not isinstance(records, np.ndarray):
        records = [tuple(rec) for rec in records]
    data = np.asarray(records, dtype=float).reshape(-1, len(PowerDensityRecord._fields))
    if ax is None:
        fig, ax = plt.subplots(figsize=(7, 4))
    order = np.argsort(data[:, 2])
    ax.plot(data[order, 2], data[order, 3], 'o-', markersize=3)
    ax.set_xlabel(r'$\theta$')
    ax.set_ylabel('power density')
    ax.grid(True, alpha=0.3)
    return ax
