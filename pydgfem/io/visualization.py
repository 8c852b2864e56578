"""pydgfem.io.visualization"""
import numpy as np
from matplotlib.collections import LineCollection, PolyCollection
import matplotlib.pyplot as plt

from pydgfem.physics.boundary import BoundaryType

_ELEM_FILL = (0.9, 0.9, 0.9, 0.5)
_FACE_COLOR = {
    int(BoundaryType.MANUFACTURED_SOLUTION): "black",
    int(BoundaryType.WALL): "red",
    int(BoundaryType.OUTFLOW): "darkviolet",
    int(BoundaryType.INFLOW): "blue",
    int(BoundaryType.FARFIELD): "green",
    int(BoundaryType.EXTRAPOLATION): "orange",
}
_INTERIOR_COLOR = "gray"


def _face_col(boundary_id):
    if boundary_id is None:
        return _INTERIOR_COLOR
    return _FACE_COLOR.get(int(boundary_id), "black")


def plot_mesh(mesh, *, plot_nodes=True, plot_normals=False, show=True, ax=None):
    """
    Plots a line or quad mesh with faces coloured by boundary id.

    Args:
        mesh (Mesh): The mesh to plot.
        plot_nodes (bool, optional): If True, plots the corner nodes.
        plot_normals (bool, optional): If True, draws every face normal (pointing
                                       out of the face's left element).
        show (bool, optional): If True, calls plt.show() at the end.
        ax (matplotlib.axes.Axes, optional): An existing axes object to plot on.
    Returns:
        matplotlib.axes.Axes: The axes object containing the plot.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 6))
    xy = mesh.nodes_x_y_pos
    if mesh.spatial_dim == 1:
        xy = np.column_stack([xy[:, 0], np.zeros(xy.shape[0])])

    if mesh.element_type == "quad":
        polys = [xy[c] for c in mesh.corner_connectivity]
        ax.add_collection(PolyCollection(polys, facecolors=[_ELEM_FILL], edgecolors="none"))
        segments, colors = [], []
        for f in mesh.faces_list:
            segments.append(xy[list(f.nodes)])
            colors.append(_face_col(f.boundary_id))
        ax.add_collection(LineCollection(segments, colors=colors, linewidths=1.5))
    else:
        segments = [xy[c] for c in mesh.corner_connectivity]
        ax.add_collection(LineCollection(segments, colors=_INTERIOR_COLOR, linewidths=2.0))
        for f in mesh.faces_list:
            p = xy[f.nodes[0]]
            ax.plot(p[0], p[1], "|", markersize=14, color=_face_col(f.boundary_id))

    if plot_normals:
        mids = np.array([xy[list(f.nodes)].mean(axis=0) for f in mesh.faces_list])
        normals = np.array([np.pad(f.normal, (0, 2 - f.normal.shape[0])) for f in mesh.faces_list])
        scale = 0.25 * float(np.sqrt(np.mean(mesh.areas()))) if mesh.spatial_dim == 2 else 0.25 * float(np.mean(mesh.areas()))
        ax.quiver(mids[:, 0], mids[:, 1], normals[:, 0], normals[:, 1],
                  angles="xy", scale_units="xy", scale=1.0 / scale, color="tab:blue", width=0.003)

    if plot_nodes:
        ax.plot(xy[:, 0], xy[:, 1], "k.", markersize=4)

    ax.autoscale_view()
    ax.set_aspect("equal" if mesh.spatial_dim == 2 else "auto")
    ax.set_title(f"{mesh.element_type} mesh: {mesh.n_elements} elements")
    if show:
        plt.show()
    return ax


def plot_sparsity(matrix, *, ax=None, show=True, markersize=2, title=None):
    """Sparsity pattern of an assembled (sparse or dense) Jacobian."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 6))
    ax.spy(matrix, markersize=markersize)
    nnz = matrix.nnz if hasattr(matrix, "nnz") else int(np.count_nonzero(matrix))
    ax.set_title(title or f"{matrix.shape[0]} x {matrix.shape[1]}, nnz = {nnz}")
    if show:
        plt.show()
    return ax
