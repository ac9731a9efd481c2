import math

import glm

INF = float("inf")


def make_vec3(array: list):
    return glm.dvec3(array[0], array[1], array[2])


def safe_normalize(v: glm.dvec3):
    # zero-length input gives the zero vector instead of NaNs
    length = glm.length(v)
    if length == 0.0 or not math.isfinite(length):
        return glm.dvec3(0.0)
    return v / length


class Ray:
    def __init__(self, o: glm.dvec3, d: glm.dvec3):
        self.origin = o
        self.direction = d

    def getDistance(self, point: glm.dvec3):
        return glm.length(point - self.origin)

    def getPoint(self, t: float):
        return self.origin + self.direction * t


class Material:
    def __init__(self, name: str, ambient: glm.dvec3, diffuse: glm.dvec3, specular: glm.dvec3,
                 mirror: glm.dvec3, shininess: float, refractive_index: float = 1.0, roughness: float = 0.3):
        self.name = name
        self.ambient = ambient      # ka ambient coefficient
        self.diffuse = diffuse      # kd diffuse coefficient
        self.specular = specular    # ks specular coefficient
        self.mirror = mirror        # km mirror reflectivity
        self.shininess = shininess  # specular exponent
        self.refractive_index = refractive_index  # only used by the Cook-Torrance model
        self.roughness = roughness  # rms slope of microfacets, Cook-Torrance only

    @staticmethod
    def black(name: str = "black"):
        zero = glm.dvec3(0.0)
        return Material(name, zero, zero, zero, zero, 0.0)


class Light:
    def __init__(self, name: str, colour: glm.dvec3, position: glm.dvec3):
        self.name = name
        self.colour = colour      # colour and intensity of the light
        self.position = position


class Record:
    def __init__(self, t: float, normal: glm.dvec3, position: glm.dvec3, material: Material):
        self.t = t
        self.normal = normal
        self.position = position
        self.mat = material

    @staticmethod
    def default(): # create an empty intersection record with t = inf
        return Record(INF, None, None, None)


class BoundingBox:
    """Axis aligned box used to reject rays before the exact intersection test.

    The default box is unbounded, so shapes that do not compute one (planes)
    are never rejected.
    """

    def __init__(self, minpos: glm.dvec3 = None, maxpos: glm.dvec3 = None):
        self.minpos = minpos if minpos is not None else glm.dvec3(-INF)
        self.maxpos = maxpos if maxpos is not None else glm.dvec3(INF)

    @staticmethod
    def around(points: list):
        minpos = glm.dvec3(points[0])
        maxpos = glm.dvec3(points[0])
        for p in points[1:]:
            minpos = glm.dvec3(min(minpos.x, p.x), min(minpos.y, p.y), min(minpos.z, p.z))
            maxpos = glm.dvec3(max(maxpos.x, p.x), max(maxpos.y, p.y), max(maxpos.z, p.z))
        return BoundingBox(minpos, maxpos)

    def intersect(self, ray: Ray):
        t_min = -INF
        t_max = INF
        for axis in range(3):
            o = ray.origin[axis]
            d = ray.direction[axis]
            lo = self.minpos[axis]
            hi = self.maxpos[axis]
            if d == 0.0:
                # parallel to this slab: inside or never
                if o < lo or o > hi:
                    return False
                continue
            t0 = (lo - o) / d
            t1 = (hi - o) / d
            if t0 > t1:
                t0, t1 = t1, t0
            t_min = max(t_min, t0)
            t_max = min(t_max, t1)
            if t_min > t_max:
                return False
        # box entirely behind the ray origin
        return t_max >= 0.0
