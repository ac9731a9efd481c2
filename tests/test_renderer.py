import glm
import numpy as np
import pytest

import geometry as geom
import helperclasses as hc
import renderer
from camera import Camera
from config import RenderConfig
from conftest import material, vec
from scene import Scene


def sphere_scene(config):
    shiny = hc.Material("shiny", glm.dvec3(0.1), glm.dvec3(0.8, 0.3, 0.3), glm.dvec3(1.0), glm.dvec3(0.0), 50.0)
    scene = Scene(config=config)
    scene.add_object(geom.Sphere("ball", shiny, vec(0, 0, 0), 1.0))
    scene.add_light(hc.Light("light", glm.dvec3(0.2), vec(0, 3, -2)))
    return scene


def sphere_camera(config, size=64):
    return Camera(vec(0, 0, 6), vec(0, 0, 1), vec(0, 1, 0), 65.0, 1.0, size, size, config)


def busy_scene(config):
    scene = sphere_scene(config)
    scene.add_light(hc.Light("fill", glm.dvec3(0.5), vec(-2, 1, 4)))
    scene.add_object(geom.Plane("floor", material(ambient=0.1, diffuse=1.0), vec(0, -1.5, 0), vec(0, 1, 0)))
    scene.add_object(geom.Triangle("shard", material(ambient=0.1, diffuse=0.4, specular=1.0, shininess=100.0),
                                   vec(1.2, -1, 0), vec(2.0, 1.5, 0.5), vec(2.2, -0.5, 1)))
    scene.add_object(geom.Torus("ring", material(ambient=0.1, specular=1.0, mirror=0.8, shininess=100.0),
                                vec(-1.5, 1.0, 1.0), 0.4, 0.1, config))
    scene.add_object(geom.Sphere("mirror", material(mirror=1.0), vec(-1.5, -0.5, -1.0), 0.7))
    return scene


def test_end_to_end_single_sphere():
    config = RenderConfig(tile_size=64, workers=2)
    pixels = renderer.render(sphere_camera(config), sphere_scene(config), config)

    assert pixels.shape == (64, 64, 3)
    assert pixels.dtype == np.uint8
    assert pixels[32, 32].any()
    for row, col in ((0, 0), (0, 63), (63, 0), (63, 63)):
        assert not pixels[row, col].any()


def test_render_is_deterministic():
    config = RenderConfig(tile_size=16, workers=4)
    camera = sphere_camera(config)
    scene = busy_scene(config)
    first = renderer.render(camera, scene, config)
    second = renderer.render(camera, scene, config)
    assert np.array_equal(first, second)
    assert first.any()


def test_process_pool_matches_serial_render():
    single = RenderConfig(tile_size=16, workers=1)
    many = RenderConfig(tile_size=16, workers=4)
    scene = busy_scene(single)
    a = renderer.render(sphere_camera(single), scene, single)
    b = renderer.render(sphere_camera(many), scene, many)
    assert np.array_equal(a, b)


def test_tiles_land_in_the_right_place():
    config = RenderConfig(tile_size=16, workers=3)
    camera = sphere_camera(config, size=32)
    scene = sphere_scene(config)
    pixels = renderer.render(camera, scene, config)

    for tile in camera.tiles():
        rows, cols = camera.tile_slice(tile)
        assert np.array_equal(pixels[rows, cols], camera.render_tile(scene, tile))


def test_image_is_flipped_vertically():
    # only the upper half of the view contains geometry
    config = RenderConfig(tile_size=16, workers=2)
    camera = Camera(vec(0, -1, 0), vec(0, -1, -1), vec(0, 1, 0), 90.0, 1.0, 32, 32, config)
    ceiling = geom.Plane("ceiling", material(ambient=1.0), vec(0, 0, 0), vec(0, -1, 0))
    pixels = renderer.render(camera, Scene([ceiling], config=config), config)
    assert (pixels[0] == 255).all()
    assert (pixels[-1] == 0).all()


def test_progress_bar():
    config = RenderConfig(tile_size=16, workers=2, progress=True)
    pixels = renderer.render(sphere_camera(config, size=32), sphere_scene(config), config)
    assert pixels.any()


class Exploding(geom.Geometry):

    def intersect(self, ray, t_min, t_max):
        raise RuntimeError("boom")


@pytest.mark.parametrize("workers", [1, 2])
def test_worker_errors_are_raised(workers):
    config = RenderConfig(tile_size=16, workers=workers)
    scene = Scene([Exploding("bad", "exploding", material())], config=config)
    with pytest.raises(RuntimeError, match="boom"):
        renderer.render(sphere_camera(config, size=32), scene, config)


def test_tile_size_mismatch():
    camera = sphere_camera(RenderConfig(tile_size=64))
    with pytest.raises(ValueError):
        renderer.render(camera, Scene(), RenderConfig(tile_size=16))


def test_zero_workers_rejected():
    with pytest.raises(ValueError):
        RenderConfig(workers=0)


def test_defaults_to_camera_config():
    config = RenderConfig(tile_size=32, workers=1)
    pixels = renderer.render(sphere_camera(config), sphere_scene(config))
    assert pixels.shape == (64, 64, 3)
