import glm

import geometry as geom
import helperclasses as hc
import lighting
from config import RenderConfig


class Scene:
    """Shapes and point lights, read-only once rendering starts."""

    def __init__(self, objects: list[geom.Geometry] = None, lights: list[hc.Light] = None,
                 config: RenderConfig = None):
        self.config = config or RenderConfig()
        self.objects = []
        self.lights = list(lights or [])
        for obj in objects or []:
            self.add_object(obj)

    def add_object(self, obj: geom.Geometry):
        # a torus built without a config solves with the scene's settings
        if isinstance(obj, geom.Torus) and obj.config is None:
            obj.config = self.config
        self.objects.append(obj)

    def add_light(self, light: hc.Light):
        self.lights.append(light)

    def find_intersection(self, ray: hc.Ray, t_min: float, t_max: float):
        """Nearest hit in (t_min, t_max). Returns (hit, record)."""
        best = t_max
        record = hc.Record.default()

        for obj in self.objects:
            if not obj.bbox.intersect(ray):
                continue

            t = obj.intersect(ray, t_min, t_max)

            # strict comparison: the first shape wins a tie
            if t_min < t < best:
                best = t
                position = ray.getPoint(t)
                record = hc.Record(t, obj.normal(position), position, obj.material)

        return best != t_max, record

    def ray_color(self, ray: hc.Ray, t_min: float, t_max: float, depth: int = 0):
        if depth >= self.config.max_depth:
            return glm.dvec3(0.0)

        hit, record = self.find_intersection(ray, t_min, t_max)
        if not hit:
            return glm.dvec3(0.0)  # Background colour

        mat = record.mat
        colour = glm.dvec3(mat.ambient)
        for light in self.lights:
            colour += self.compute_lighting(record, light, ray)

        # Non reflective surface, no need to recurse
        if glm.dot(mat.mirror, mat.mirror) < self.config.reflect_epsilon:
            return colour

        reflection_ray = self.reflect_ray(ray, record)
        reflected = mat.mirror * self.ray_color(reflection_ray, self.config.epsilon, hc.INF, depth + 1)

        # additive, clamped to at most 1 per channel
        return glm.min(colour + reflected, glm.dvec3(1.0))

    def compute_lighting(self, intersection: hc.Record, light: hc.Light, ray: hc.Ray):
        normal = intersection.normal
        position = intersection.position
        mat = intersection.mat

        light_dir = hc.safe_normalize(light.position - position)
        shadow_ray = hc.Ray(position, light_dir)
        distance_to_light = shadow_ray.getDistance(light.position)

        occluded, _ = self.find_intersection(shadow_ray, self.config.epsilon, distance_to_light)
        if occluded:
            return glm.dvec3(0.0)  # Light is blocked, no contribution

        view_dir = hc.safe_normalize(ray.origin - position)

        ndotl = glm.dot(normal, light_dir)
        diffuse = max(0.0, ndotl) * mat.diffuse

        if self.config.specular_model == "cook_torrance":
            factor = lighting.cook_torrance_specular(light_dir, normal, view_dir, 1.0,
                                                     mat.refractive_index, mat.roughness)
        else:
            factor = lighting.phong_specular(light_dir, normal, view_dir, mat.shininess)
        specular = factor * mat.specular

        return light.colour * (diffuse + specular)

    def reflect_ray(self, ray: hc.Ray, intersection: hc.Record):
        """
        Mirror the ray about the surface normal, starting just off the surface.
        """
        reflect_dir = hc.safe_normalize(lighting.reflect(ray.direction, intersection.normal))
        reflect_origin = intersection.position + self.config.epsilon * reflect_dir
        return hc.Ray(reflect_origin, reflect_dir)
