import glm
import pytest

import helperclasses as hc
from config import RenderConfig


def vec(x, y, z):
    return glm.dvec3(x, y, z)


def material(ambient=0.0, diffuse=0.0, specular=0.0, mirror=0.0, shininess=10.0, name="test"):
    return hc.Material(name, glm.dvec3(ambient), glm.dvec3(diffuse), glm.dvec3(specular),
                       glm.dvec3(mirror), shininess)


def ray(origin, direction):
    return hc.Ray(glm.dvec3(*origin), glm.normalize(glm.dvec3(*direction)))


@pytest.fixture
def config():
    return RenderConfig(workers=2, tile_size=16)


@pytest.fixture
def matte():
    return material(ambient=0.1, diffuse=0.5)
