import cmath
import logging
import math
import random

import glm

import helperclasses as hc
from config import RenderConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = RenderConfig()


def clamp(t: float, t_min: float, t_max: float):
    return min(max(t, t_min), t_max)


class Geometry:
    """Base class for the renderable primitives.

    ``intersect`` returns the ray parameter of the closest surface point inside
    ``[t_min, t_max]``. A miss is reported by returning ``t_max`` itself, so the
    caller keeps its current bound and no separate miss value is needed.
    """

    def __init__(self, name: str, gtype: str, material: hc.Material, bbox: hc.BoundingBox = None):
        self.name = name
        self.gtype = gtype
        self.material = material
        self.bbox = bbox if bbox is not None else hc.BoundingBox()

    def intersect(self, ray: hc.Ray, t_min: float, t_max: float):
        return t_max

    def normal(self, point: glm.dvec3):
        raise NotImplementedError


class Plane(Geometry):
    def __init__(self, name: str, material: hc.Material, point: glm.dvec3, normal: glm.dvec3):
        super().__init__(name, "plane", material)
        self.point = point
        self._normal = glm.normalize(normal)

    def normal(self, point: glm.dvec3):
        return self._normal

    def intersect(self, ray: hc.Ray, t_min: float, t_max: float):
        denom = glm.dot(self._normal, ray.direction)

        # Parallel ray: the linear solve diverges to +-inf, which clamps to a bound
        if denom == 0.0:
            return t_max

        t = glm.dot(self.point - ray.origin, self._normal) / denom
        if math.isnan(t):
            return t_max
        return clamp(t, t_min, t_max)


class Sphere(Geometry):
    def __init__(self, name: str, material: hc.Material, center: glm.dvec3, radius: float):
        bbox = hc.BoundingBox(center - radius, center + radius)
        super().__init__(name, "sphere", material, bbox)
        self.center = center
        self.radius = radius

    def normal(self, point: glm.dvec3):
        return hc.safe_normalize(point - self.center)

    def intersect(self, ray: hc.Ray, t_min: float, t_max: float):
        # Half-angle form of the quadratic, valid for a unit length direction
        oc = ray.origin - self.center
        b = glm.dot(ray.direction, oc)
        c = glm.dot(oc, oc) - self.radius * self.radius

        discriminant = b * b - c

        if discriminant < 0:
            return t_max

        if discriminant == 0:
            return clamp(-b, t_min, t_max)

        root = math.sqrt(discriminant)
        t0 = root - b
        t1 = -(root + b)

        return clamp(min(t0, t1), t_min, t_max)


class Triangle(Geometry):
    def __init__(self, name: str, material: hc.Material, v0: glm.dvec3, v1: glm.dvec3, v2: glm.dvec3):
        super().__init__(name, "triangle", material, hc.BoundingBox.around([v0, v1, v2]))
        self.v0 = v0
        self.v1 = v1
        self.v2 = v2

        # Edges of the triangle
        self.edge1 = v1 - v0
        self.edge2 = v2 - v0

        self._normal = hc.safe_normalize(glm.cross(self.edge1, self.edge2))

        # Vertices given anticlockwise about the origin: flip to face outwards
        if glm.dot(glm.cross(v0, v1), v2) >= 0.0:
            self._normal = -self._normal

    def normal(self, point: glm.dvec3):
        return self._normal

    def barycentric(self, ray: hc.Ray):
        """Return (b1, b2, t) for the ray against the triangle's plane, or None when parallel."""
        # Möller-Trumbore
        s = ray.origin - self.v0
        s1 = glm.cross(ray.direction, self.edge2)
        s2 = glm.cross(s, self.edge1)

        det = glm.dot(s1, self.edge1)
        if det == 0.0:
            return None

        inv_det = 1.0 / det
        b1 = inv_det * glm.dot(s1, s)
        b2 = inv_det * glm.dot(s2, ray.direction)
        t = inv_det * glm.dot(s2, self.edge2)
        return b1, b2, t

    def intersect(self, ray: hc.Ray, t_min: float, t_max: float):
        solution = self.barycentric(ray)
        if solution is None:
            return t_max

        b1, b2, t = solution
        if b1 < 0.0 or b2 < 0.0 or b1 + b2 > 1.0:
            return t_max

        return clamp(t, t_min, t_max)


def smallest_real_quartic_root(a: float, b: float, c: float, d: float, config: RenderConfig, t_min: float = -hc.INF):
    """Smallest real root above ``t_min`` of x^4 + a x^3 + b x^2 + c x + d.

    Durand-Kerner iteration on four complex seeds. When the seeds fail to
    settle within ``torus_max_iterations`` steps they are re-seeded from a
    generator seeded with ``torus_seed``, at most ``torus_max_retries`` times;
    after that the polynomial is reported as having no root (``inf``).

    The convergence test is absolute. Roots in the thousands only settle to a
    few 1e-3, and roots near 1e4 never move less than ``torus_threshold``, so a
    torus that far from the ray origin is always missed.
    """

    def evaluate(x):
        return d + x * (c + x * (b + x * (a + x)))

    def next_point(x, p, q, r):
        return x - evaluate(x) / ((x - p) * (x - q) * (x - r))

    rng = None
    q = complex(0.4, 0.9)
    roots = None

    for _ in range(config.torus_max_retries + 1):
        P, Q, R, S = complex(1.0), q, q * q, q * q * q
        for _ in range(config.torus_max_iterations):
            try:
                Phat = next_point(P, Q, R, S)
                Qhat = next_point(Q, P, R, S)
                Rhat = next_point(R, P, Q, S)
                Shat = next_point(S, P, Q, R)
            except ZeroDivisionError:
                # two seeds collapsed onto each other
                break

            if not all(cmath.isfinite(z) for z in (Phat, Qhat, Rhat, Shat)):
                break

            if (abs(Phat - P) < config.torus_threshold
                    and abs(Qhat - Q) < config.torus_threshold
                    and abs(Rhat - R) < config.torus_threshold
                    and abs(Shat - S) < config.torus_threshold):
                roots = (Phat, Qhat, Rhat, Shat)
                break

            P, Q, R, S = Phat, Qhat, Rhat, Shat

        if roots is not None:
            break

        if rng is None:
            rng = random.Random(config.torus_seed)
        q = complex(rng.random(), rng.random())
    else:
        logger.debug("Quartic solver gave up after %d attempts (coefficients %r)",
                     config.torus_max_retries + 1, (a, b, c, d))
        return hc.INF

    smallest = hc.INF
    for root in roots:
        if abs(root.imag) < config.torus_epsilon and t_min < root.real < smallest:
            smallest = root.real
    return smallest


class Torus(Geometry):
    """Torus around the z axis through ``center``.

    Implicit form f(x, y, z) = (x^2 + y^2 + z^2 + R^2 - r^2)^2 - 4 R^2 (x^2 + y^2).
    The normal is the normalized gradient of f. On the z axis of a torus with
    r >= R the gradient can vanish; the normal is then the zero vector.

    Without a ``config`` the torus takes the settings of the ``Scene`` it is
    added to, or the defaults when intersected on its own.
    """

    def __init__(self, name: str, material: hc.Material, center: glm.dvec3, major_radius: float,
                 minor_radius: float, config: RenderConfig = None):
        extent = abs(major_radius + minor_radius)
        super().__init__(name, "torus", material, hc.BoundingBox(center - extent, center + extent))
        self.center = center
        self.major_radius = major_radius
        self.minor_radius = minor_radius
        self.config = config

    def normal(self, point: glm.dvec3):
        p = point - self.center
        R2 = self.major_radius * self.major_radius
        s = glm.dot(p, p) + R2 - self.minor_radius * self.minor_radius
        # grad f / 4
        gradient = glm.dvec3(p.x * (s - 2.0 * R2), p.y * (s - 2.0 * R2), p.z * s)
        return hc.safe_normalize(gradient)

    def coefficients(self, ray: hc.Ray):
        """Monic quartic coefficients (a, b, c, d) of f along the ray."""
        p = ray.origin - self.center
        d = ray.direction
        T = 4.0 * self.major_radius * self.major_radius
        G = T * (d.x * d.x + d.y * d.y)
        H = 2.0 * T * (p.x * d.x + p.y * d.y)
        I = T * (p.x * p.x + p.y * p.y)
        J = glm.dot(d, d)
        K = 2.0 * glm.dot(d, p)
        L = glm.dot(p, p) + self.major_radius * self.major_radius - self.minor_radius * self.minor_radius
        M = 1.0 / (J * J)

        return (M * (2.0 * J * K),
                M * (2.0 * J * L + K * K - G),
                M * (2.0 * K * L - H),
                M * (L * L - I))

    def intersect(self, ray: hc.Ray, t_min: float, t_max: float):
        if glm.dot(ray.direction, ray.direction) == 0.0:
            return t_max

        a, b, c, d = self.coefficients(ray)
        root = smallest_real_quartic_root(a, b, c, d, self.config or DEFAULT_CONFIG, t_min)

        return clamp(root, t_min, t_max)
