"""
Raster Input Handling
=====================

Helpers that turn caller data into the row-major numpy rasters the
marching squares engine works on, and that sample implicit functions
(for example signed distance functions) on a pixel grid.

Rasters are always in raster order: the first row is the top row of the
image, i.e. the row with the largest y coordinate of the sampled domain.
"""

import logging

import numpy as np
import torch

import MSquares

logger = logging.getLogger(MSquares.__name__)


def as_numpy(data) -> np.ndarray:
    """Convert numpy arrays, torch tensors and sequences to a numpy array."""
    if isinstance(data, torch.Tensor):
        return data.detach().cpu().numpy()
    return np.asarray(data)


def grayscale_raster(data, width: int, height: int) -> np.ndarray:
    """
    Returns ``data`` as a float32 array of shape (height, width).

    ``data`` may be flat with ``width * height`` entries or already shaped
    ``(height, width)``.
    """
    raster = as_numpy(data)
    if raster.ndim == 2:
        assert raster.shape == (
            height,
            width,
        ), f"raster shape {raster.shape} does not match ({height}, {width})"
    assert (
        raster.size == width * height
    ), f"raster has {raster.size} values, expected {width * height}"
    return raster.reshape(height, width).astype(np.float32, copy=False)


def color_raster(data, width: int, height: int, bpp: int) -> np.ndarray:
    """
    Returns 8-bit ``data`` as a uint8 array of shape (height, width, bpp).
    """
    if bpp not in (1, 2, 3, 4):
        raise ValueError(f"bpp must be 1, 2, 3 or 4, got {bpp}")
    raster = as_numpy(data)
    if raster.dtype != np.uint8:
        raise ValueError(f"color rasters must be uint8, got {raster.dtype}")
    assert (
        raster.size == width * height * bpp
    ), f"raster has {raster.size} values, expected {width * height * bpp}"
    return raster.reshape(height, width, bpp)


def rasterize(fun, width: int, height: int, bounds=None, torch_input=False):
    """Sample an implicit function at the pixel centers of a raster.

    Parameters
    ----------
    fun : callable
        Function accepting query points of shape (N, 2) and returning N
        values (any shape that flattens to N). Functions returning torch
        tensors are supported.
    width, height : int
        Raster size in pixels.
    bounds : array-like, optional
        2×2 array ``[[xmin, ymin], [xmax, ymax]]`` of the sampled domain.
        Defaults to ``[[0, 0], [1, 1]]``.
    torch_input : bool, default False
        If True, ``fun`` receives a float32 ``torch.Tensor`` instead of a
        numpy array, which is what the torch based SDF classes expect.

    Returns
    -------
    np.ndarray
        float32 array of shape (height, width) in raster order.

    Examples
    --------
    >>> def circle(q):
    ...     return np.linalg.norm(q - 0.5, axis=1) - 0.25
    >>> raster = rasterize(circle, 32, 32)
    >>> raster.shape
    (32, 32)
    """
    if bounds is None:
        bounds = np.array([[0.0, 0.0], [1.0, 1.0]])
    bounds = as_numpy(bounds).astype(np.float64)
    assert bounds.shape == (2, 2), "bounds must have shape [2, 2]"

    dx = (bounds[1, 0] - bounds[0, 0]) / width
    dy = (bounds[1, 1] - bounds[0, 1]) / height
    x = bounds[0, 0] + dx * (np.arange(width) + 0.5)
    # first raster row is the top of the domain
    y = bounds[1, 1] - dy * (np.arange(height) + 0.5)
    xx, yy = np.meshgrid(x, y)
    queries = np.hstack([xx.reshape(-1, 1), yy.reshape(-1, 1)])
    if torch_input:
        queries = torch.from_numpy(queries).to(torch.float32)

    logger.debug(f"Sampling implicit function on a {width}x{height} raster")
    values = as_numpy(fun(queries)).reshape(-1)
    if values.shape[0] != width * height:
        raise RuntimeError(
            f"Function returned {values.shape[0]} values for {width * height} queries"
        )
    return values.reshape(height, width).astype(np.float32)
