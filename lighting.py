import math

import glm

import helperclasses as hc

# Floor for the cosine terms of the Cook-Torrance model
COSINE_FLOOR = 1e-6


def reflect(incident: glm.dvec3, normal: glm.dvec3):
    """Mirror ``incident`` about ``normal``."""
    return incident - 2.0 * glm.dot(incident, normal) * normal


def phong_specular(light_dir: glm.dvec3, normal: glm.dvec3, view_dir: glm.dvec3, shininess: float):
    LN = glm.dot(light_dir, normal)
    R = hc.safe_normalize(2.0 * LN * normal - light_dir)
    return max(0.0, glm.dot(R, view_dir)) ** shininess


def schlick_approximation(r0: float, cos: float):
    """Schlick approximation of the Fresnel factor.

    r0 = ((n1 - n2) / (n1 + n2))^2, cos = dot(N, V).
    """
    return r0 + (1.0 - r0) * (1.0 - cos) ** 5


def beckmann_distribution(HN: float, m: float):
    """Beckmann microfacet distribution, HN = dot(H, N), m = rms slope (roughness)."""
    cos2 = HN * HN
    tan2 = (cos2 - 1.0) / cos2
    m2 = m * m
    return math.exp(tan2 / m2) / (math.pi * m2 * cos2 * cos2)


def geometric_attenuation(HN: float, LN: float, EN: float, EH: float):
    # self shadowing of the microfacets
    common = 2.0 * HN / EH
    return min(1.0, common * EN, common * LN)


def cook_torrance_specular(light_dir: glm.dvec3, normal: glm.dvec3, view_dir: glm.dvec3,
                           ior1: float, ior2: float, roughness: float):
    """Cook-Torrance specular BRDF for unit vectors L, N, E.

    Returns 0 when either the light or the viewer is below the surface, or the
    roughness is not positive.
    """
    EN = glm.dot(view_dir, normal)
    LN = glm.dot(light_dir, normal)
    if EN <= 0.0 or LN <= 0.0 or roughness <= 0.0:
        return 0.0

    H = hc.safe_normalize(light_dir + view_dir)
    HN = max(COSINE_FLOOR, glm.dot(H, normal))
    EH = max(COSINE_FLOOR, glm.dot(view_dir, H))

    G = geometric_attenuation(HN, LN, EN, EH)
    D = beckmann_distribution(HN, roughness)

    r0 = ((ior1 - ior2) / (ior1 + ior2)) ** 2
    F = schlick_approximation(r0, EN)

    return (D * F * G) / (4.0 * EN * LN)
