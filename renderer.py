"""Tile scheduler: renders a camera's viewport on a pool of worker processes.

Every tile is submitted once to a ``ProcessPoolExecutor``. Workers trace their
tile into a private block and send it back; only the parent process writes
into the image, one returned block at a time. Tiles never overlap, so every
pixel of the image is written exactly once.

With a single worker the tiles are traced in the calling process.
"""
import logging
import time
from concurrent.futures import ProcessPoolExecutor, as_completed

import numpy as np
from tqdm import tqdm

from camera import Camera, Tile
from config import RenderConfig
from scene import Scene

logger = logging.getLogger(__name__)

# Set once per worker process by _init_worker
_worker_camera = None
_worker_scene = None


def _init_worker(camera: Camera, scene: Scene):
    global _worker_camera, _worker_scene
    _worker_camera = camera
    _worker_scene = scene


def _render_tile(tile: Tile):
    return _worker_camera.render_tile(_worker_scene, tile)


class TileScheduler:

    def __init__(self, camera: Camera, scene: Scene, config: RenderConfig = None):
        self.camera = camera
        self.scene = scene
        self.config = config or camera.config
        if self.config.tile_size != camera.config.tile_size:
            raise ValueError(f"Tile size {self.config.tile_size} does not match the camera's {camera.config.tile_size}")

        self.image = np.zeros((camera.height, camera.width, 3), dtype=np.uint8)
        self.progress = None

    def store(self, tile: Tile, block: np.ndarray):
        rows, cols = self.camera.tile_slice(tile)
        self.image[rows, cols] = block
        if self.progress is not None:
            self.progress.update(1)

    def run_serial(self, tiles):
        for tile in tiles:
            self.store(tile, self.camera.render_tile(self.scene, tile))

    def run_parallel(self, tiles, workers):
        with ProcessPoolExecutor(max_workers=workers, initializer=_init_worker,
                                 initargs=(self.camera, self.scene)) as executor:
            futures = {executor.submit(_render_tile, tile): tile for tile in tiles}
            try:
                for future in as_completed(futures):
                    self.store(futures[future], future.result())
            except BaseException:
                # tiles not yet started are dropped; the pool still waits for running ones
                for future in futures:
                    future.cancel()
                raise

    def run(self):
        tiles = self.camera.tiles()
        workers = min(self.config.workers, len(tiles))

        logger.info("Rendering %dx%d image: %d tiles on %d workers",
                    self.camera.width, self.camera.height, len(tiles), workers)
        start = time.perf_counter()

        if self.config.progress:
            self.progress = tqdm(total=len(tiles), unit="tile")
        try:
            if workers > 1:
                self.run_parallel(tiles, workers)
            else:
                self.run_serial(tiles)
        finally:
            if self.progress is not None:
                self.progress.close()
                self.progress = None

        logger.info("Rendered in %.2fs", time.perf_counter() - start)
        return self.image


def render(camera: Camera, scene: Scene, config: RenderConfig = None):
    """Render the whole image; blocks until every tile is done.

    Returns a (height, width, 3) uint8 array, row 0 at the top of the image.
    A worker's exception is re-raised here once the pool has shut down.
    """
    return TileScheduler(camera, scene, config).run()
