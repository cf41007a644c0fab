"""
Visualization and Plotting Utilities
=====================================

This module provides utilities for visualizing extracted meshes, optionally
on top of the raster they were extracted from.

Functions
---------
plot_mesh
    Draw the triangles of a mesh with matplotlib.

The primary use case is checking extraction results during development
and debugging.
"""

import matplotlib.pyplot as plt
import numpy as np

from MSquares.raster import as_numpy


def plot_mesh(
    mesh,
    ax=None,
    raster=None,
    color="black",
    linewidth=0.5,
    show_points=False,
    cmap="gray",
):
    """Plot the triangles of an extracted mesh.

    Parameters
    ----------
    mesh : MSquares.mesh.Mesh
        Mesh to draw; only the x and y coordinates are used.
    ax : matplotlib.axes.Axes, optional
        Axes to plot on. If None, creates a new figure and shows it.
    raster : array-like, optional
        Raster of shape (height, width) drawn underneath the mesh.
    color : str, default 'black'
        Color of the triangle edges.
    linewidth : float, default 0.5
        Width of the triangle edges.
    show_points : bool, default False
        If True, marks every vertex.
    cmap : str, default 'gray'
        Matplotlib colormap for the raster.

    Examples
    --------
    >>> from MSquares.msquares import from_grayscale
    >>> from MSquares.plotting import plot_mesh
    >>> meshes = from_grayscale(data, 64, 64, 4, 0.5)
    >>> plot_mesh(meshes.get_mesh(0), raster=data.reshape(64, 64))

    Notes
    -----
    Mesh y coordinates grow with the raster row, so the y axis is inverted
    to show the mesh the same way up as the image.
    """
    plt_show = False
    if ax is None:
        fig, ax = plt.subplots()
        plt_show = True

    if raster is not None:
        raster = as_numpy(raster)
        height, width = raster.shape[:2]
        scale = max(width, height)
        ax.imshow(
            raster,
            cmap=cmap,
            extent=(0, width / scale, height / scale, 0),
            interpolation="nearest",
        )

    points = np.asarray(mesh.points)
    if mesh.ntriangles > 0:
        ax.triplot(
            points[:, 0],
            points[:, 1],
            mesh.triangles.astype(np.int64),
            color=color,
            linewidth=linewidth,
        )
    if show_points and mesh.npoints > 0:
        ax.plot(points[:, 0], points[:, 1], "o", color=color, markersize=2)

    if not ax.yaxis_inverted():
        ax.invert_yaxis()
    ax.set_xticks([])
    ax.set_yticks([])
    ax.set_aspect(1)
    if plt_show:
        plt.show()
    return ax
