import json
import logging
from dataclasses import fields

import geometry as geom
import helperclasses as hc
from camera import Camera
from config import RenderConfig
from scene import Scene

logger = logging.getLogger(__name__)

make_vec3 = hc.make_vec3


def load_scene(infile: str, overrides: dict = None):
    """Read a JSON scene file. Returns (camera, scene, config)."""
    logger.info("Parsing file: %s", infile)
    with open(infile) as f:
        data = json.load(f)
    return build_scene(data, overrides)


def load_config(data: dict, overrides: dict = None):
    settings = dict(data.get("render", {}))
    known = {f.name for f in fields(RenderConfig)}
    for key in settings:
        if key not in known:
            logger.warning("Unknown render setting '%s', ignoring", key)
    settings.update({k: v for k, v in (overrides or {}).items() if v is not None})
    return RenderConfig.from_dict(settings)


def build_scene(data: dict, overrides: dict = None):
    config = load_config(data, overrides)

    # Loading camera
    cam_pos = make_vec3(data["camera"]["position"])
    cam_lookat = make_vec3(data["camera"]["lookAt"])
    cam_up = make_vec3(data["camera"].get("up", [0, 1, 0]))
    cam_fov = data["camera"]["fov"]
    cam_focal = data["camera"].get("focal_distance", 1.0)

    # Loading resolution
    default_resolution = [config.tile_size * 4, config.tile_size * 3]
    width = data.get("resolution", default_resolution)[0]
    height = data.get("resolution", default_resolution)[1]

    camera = Camera(cam_pos, cam_lookat, cam_up, cam_fov, cam_focal, width, height, config)

    # Loading scene lights
    lights = []
    for light in data.get("lights", []):
        l_type = light.get("type", "point")
        l_name = light.get("name", f"light{len(lights)}")
        if l_type != "point":
            logger.warning("Unsupported light type '%s' for '%s', skipping", l_type, l_name)
            continue
        l_colour = make_vec3(light["colour"])
        l_power = light.get("power", 1.0)
        lights.append(hc.Light(l_name, l_colour * l_power, make_vec3(light["position"])))

    # Loading materials
    material_by_name = {}
    for material in data.get("materials", []):
        mat_name = material["name"]
        mat_ambient = make_vec3(material.get("ambient", [0, 0, 0]))
        mat_diffuse = make_vec3(material.get("diffuse", [0, 0, 0]))
        mat_specular = make_vec3(material.get("specular", [0, 0, 0]))
        mat_reflection = make_vec3(material.get("reflection", [0, 0, 0]))
        mat_shininess = material.get("shininess", 0)
        mat_refr_index = material.get("refraction_index", 1.0)
        mat_roughness = material.get("roughness", 0.3)
        if mat_refr_index <= 0:
            raise ValueError(f"Material '{mat_name}' has a non-positive refraction index")
        if mat_shininess < 0:
            raise ValueError(f"Material '{mat_name}' has a negative shininess")
        material_by_name[mat_name] = hc.Material(mat_name, mat_ambient, mat_diffuse, mat_specular, mat_reflection,
                                                 mat_shininess, mat_refr_index, mat_roughness)

    # Load geometries
    scene = Scene(lights=lights, config=config)
    for geometry in data.get("objects", []):
        g = load_geometry(geometry, material_by_name, config)
        if g is not None:
            scene.add_object(g)

    logger.info("Loaded %d objects and %d lights", len(scene.objects), len(scene.lights))
    return camera, scene, config


def load_geometry(geometry, material_by_name, config):

    # Elements common to all objects: name, type, and material
    g_name = geometry.get("name", geometry["type"])
    g_type = geometry["type"]
    mats = geometry.get("materials", [])
    g_mat = material_by_name[mats[0]] if mats else hc.Material.black()

    if g_type == "sphere":
        g_pos = make_vec3(geometry.get("position", [0, 0, 0]))
        g_radius = geometry["radius"]
        return geom.Sphere(g_name, g_mat, g_pos, g_radius)
    elif g_type == "plane":
        g_pos = make_vec3(geometry.get("position", [0, 0, 0]))
        g_normal = make_vec3(geometry["normal"])
        return geom.Plane(g_name, g_mat, g_pos, g_normal)
    elif g_type == "triangle":
        v0, v1, v2 = (make_vec3(v) for v in geometry["vertices"])
        return geom.Triangle(g_name, g_mat, v0, v1, v2)
    elif g_type == "torus":
        g_pos = make_vec3(geometry.get("position", [0, 0, 0]))
        return geom.Torus(g_name, g_mat, g_pos, geometry["major_radius"], geometry["minor_radius"], config)
    else:
        logger.warning("Unknown object type '%s', skipping initialization", g_type)
        return None
