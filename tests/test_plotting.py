import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402

from MSquares.msquares import from_grayscale  # noqa: E402
from MSquares.plotting import plot_mesh  # noqa: E402


def test_plot_mesh():
    data = np.zeros((16, 16), dtype=np.float32)
    data[4:12, 4:12] = 1.0
    mesh = from_grayscale(data, 16, 16, 2, 0.5).get_mesh(0)
    fig, ax = plt.subplots()
    returned = plot_mesh(mesh, ax=ax, raster=data, show_points=True)
    assert returned is ax
    assert len(ax.lines) > 0
    # y grows with the raster row
    bottom, top = ax.get_ylim()
    assert bottom > top
    plt.close(fig)


def test_plot_empty_mesh():
    mesh = from_grayscale(np.zeros(16), 4, 4, 1, 0.5).get_mesh(0)
    fig, ax = plt.subplots()
    plot_mesh(mesh, ax=ax)
    assert len(ax.lines) == 0
    plt.close(fig)


if __name__ == "__main__":
    test_plot_mesh()
