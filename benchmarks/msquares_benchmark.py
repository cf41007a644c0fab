import time

import numpy as np
import pandas as pd

from MSquares.msquares import from_grayscale
from MSquares.raster import rasterize


def circle(queries):
    return np.linalg.norm(queries - 0.5, axis=1) - 0.3


def noise(queries):
    rng = np.random.default_rng(0)
    return rng.random(queries.shape[0]) - 0.5


def run_benchmark():
    fields = {"Circle": circle, "Noise": noise}
    sizes = [64, 128, 256]
    cellsizes = [1, 2, 4]
    results = []

    print(f"{'Field':<8} | {'Size':<6} | {'Cell':<5} | {'Tris':<8} | {'Time (s)':<10}")
    print("-" * 50)

    for name, fun in fields.items():
        for size in sizes:
            raster = rasterize(fun, size, size)
            for cellsize in cellsizes:
                start_time = time.perf_counter()
                try:
                    meshes = from_grayscale(raster, size, size, cellsize, 0.0)
                except OverflowError:
                    continue
                end_time = time.perf_counter()

                elapsed = end_time - start_time
                ntris = meshes.get_mesh(0).ntriangles
                meshes.free()
                results.append(
                    {
                        "Field": name,
                        "Size": size,
                        "Cellsize": cellsize,
                        "Triangles": ntris,
                        "Time": elapsed,
                    }
                )
                print(
                    f"{name:<8} | {size:<6} | {cellsize:<5} | {ntris:<8} | {elapsed:.4f}"
                )

    return pd.DataFrame(results)


df = run_benchmark()
summary = df.pivot_table(index=["Field", "Size"], columns="Cellsize", values="Time")
print("\nTime per extraction (s):")
print(summary)
