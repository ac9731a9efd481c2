import math

import glm
import numpy as np

import helperclasses as hc
from config import RenderConfig
from scene import Scene

# sub-pixel offsets for the 4x ordered grid
SUPERSAMPLE_OFFSETS = ((0.25, 0.25), (0.25, 0.75), (0.75, 0.25), (0.75, 0.75))


class Tile:
    """A tile_size x tile_size block of pixels; (column, row) counted from the bottom left."""

    def __init__(self, column: int, row: int, size: int):
        self.column = column
        self.row = row
        self.size = size

    def pixels(self):
        for i in range(self.column * self.size, (self.column + 1) * self.size):
            for j in range(self.row * self.size, (self.row + 1) * self.size):
                yield i, j

    def __repr__(self):
        return f"Tile({self.column}, {self.row}, size={self.size})"


class Camera:

    def __init__(self, eye_position: glm.dvec3, lookat: glm.dvec3, up: glm.dvec3, fov: float,
                 focal_distance: float, width: int, height: int, config: RenderConfig = None):
        self.config = config or RenderConfig()
        tile = self.config.tile_size
        for label, size in (("width", width), ("height", height)):
            if size <= 0 or size % tile != 0:
                raise ValueError(f"Viewport {label} {size} is not a positive multiple of the tile size {tile}")
        if focal_distance <= 0:
            raise ValueError(f"focal_distance must be positive, got {focal_distance}")
        if not 0 < fov < 180:
            raise ValueError(f"fov must be in (0, 180) degrees, got {fov}")

        self.eye_position = eye_position
        self.lookat = lookat
        self.up = up
        self.fov = fov
        self.focal_distance = focal_distance
        self.width = width
        self.height = height

        # forward points from the eye towards the look-at point
        if glm.length(lookat - eye_position) == 0.0:
            raise ValueError("Camera position and look-at point coincide")
        self.w = glm.normalize(lookat - eye_position)
        right = glm.cross(self.w, up)
        if glm.length(right) == 0.0:
            raise ValueError("Camera up vector is parallel to the viewing direction")
        self.u = glm.normalize(right)
        self.v = glm.cross(self.u, self.w)

        self.focal_plane_height = 2.0 * focal_distance * math.tan(math.radians(fov) / 2.0)
        self.pixel_width = self.focal_plane_height / height
        self.focal_plane_width = self.pixel_width * width

        self.focal_plane_center = eye_position + focal_distance * self.w
        self.focal_plane_origin = self.focal_plane_center - (
            (self.focal_plane_width / 2.0) * self.u + (self.focal_plane_height / 2.0) * self.v)

    @property
    def aspect(self):
        return self.width / self.height

    def tiles(self):
        size = self.config.tile_size
        return [Tile(column, row, size)
                for column in range(self.width // size)
                for row in range(self.height // size)]

    def primary_ray(self, i: float, j: float, dx: float = 0.5, dy: float = 0.5):
        """Ray from the eye through the point (i + dx, j + dy) of the focal plane, in pixels."""
        target = self.focal_plane_origin + (i + dx) * self.pixel_width * self.u + (j + dy) * self.pixel_width * self.v
        return hc.Ray(self.eye_position, glm.normalize(target - self.eye_position))

    def pixel_colour(self, scene: Scene, i: int, j: int):
        if not self.config.supersample:
            return scene.ray_color(self.primary_ray(i, j), 0.0, hc.INF, 0)

        colour = glm.dvec3(0.0)
        for dx, dy in SUPERSAMPLE_OFFSETS:
            colour += scene.ray_color(self.primary_ray(i, j, dx, dy), 0.0, hc.INF, 0)
        return colour / len(SUPERSAMPLE_OFFSETS)

    def buffer_row(self, j: int):
        # row 0 of the image is the top of the focal plane
        return self.height - 1 - j

    def render_tile(self, scene: Scene, tile: Tile):
        """Render one tile into a fresh (size, size, 3) uint8 block, top row first."""
        size = tile.size
        block = np.zeros((size, size, 3), dtype=np.float64)
        x0 = tile.column * size
        y0 = tile.row * size
        for i, j in tile.pixels():
            colour = self.pixel_colour(scene, i, j)
            block[size - 1 - (j - y0), i - x0] = (colour.x, colour.y, colour.z)
        return to_bytes(block)

    def tile_slice(self, tile: Tile):
        """Row and column slices of the image buffer covered by ``tile``."""
        size = tile.size
        top = self.buffer_row((tile.row + 1) * size - 1)
        left = tile.column * size
        return slice(top, top + size), slice(left, left + size)


def to_bytes(colours: np.ndarray):
    """Quantize [0, 1] colours to uint8, truncating like a C cast. NaNs become 0."""
    colours = np.nan_to_num(colours, nan=0.0, posinf=1.0, neginf=0.0)
    return np.clip(255.0 * colours, 0.0, 255.0).astype(np.uint8)
