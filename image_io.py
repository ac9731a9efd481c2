import os

import numpy as np
from PIL import Image


def write_ppm(path: str, pixels: np.ndarray):
    """Write an (h, w, 3) uint8 buffer as plain text PPM (P3), top row first."""
    height, width, _ = pixels.shape
    with open(path, "w") as f:
        f.write(f"P3\n{width} {height}\n255\n")
        for row in pixels:
            f.write(" ".join(f"{r} {g} {b}" for r, g, b in row.tolist()))
            f.write("\n")


def save_image(path: str, pixels: np.ndarray):
    """Save the buffer, picking the format from the file extension."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    if path.lower().endswith(".ppm"):
        write_ppm(path, pixels)
    else:
        Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8)).save(path)
