import os
from dataclasses import dataclass, fields, replace

SPECULAR_MODELS = ("phong", "cook_torrance")


def _default_workers():
    return os.cpu_count() or 1


@dataclass(frozen=True)
class RenderConfig:
    """Run-time tunables shared by the scene, the camera and the renderer."""

    max_depth: int = 5              # recursion depth at which ray_color returns black
    epsilon: float = 1e-4           # shadow / reflection ray offset
    reflect_epsilon: float = 1e-6   # squared |km| below which reflection is skipped
    tile_size: int = 64
    workers: int = 4
    supersample: bool = False       # 4 samples per pixel on an ordered grid
    specular_model: str = "phong"
    progress: bool = False          # tqdm bar over tiles

    # Durand-Kerner quartic solver used by the torus
    torus_threshold: float = 1e-5   # per-iteration movement that counts as converged
    torus_epsilon: float = 1e-5     # |imag| below which a root is treated as real
    torus_max_iterations: int = 500
    torus_max_retries: int = 8
    torus_seed: int = 0

    def __post_init__(self):
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.tile_size < 1:
            raise ValueError(f"tile_size must be >= 1, got {self.tile_size}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        for name in ("epsilon", "torus_threshold", "torus_epsilon"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.reflect_epsilon < 0:
            raise ValueError(f"reflect_epsilon must be >= 0, got {self.reflect_epsilon}")
        if self.torus_max_iterations < 1 or self.torus_max_retries < 0:
            raise ValueError("torus solver needs at least one iteration and a non-negative retry count")
        if self.specular_model not in SPECULAR_MODELS:
            raise ValueError(f"Unknown specular model '{self.specular_model}', expected one of {SPECULAR_MODELS}")

    @staticmethod
    def from_dict(data: dict, base: "RenderConfig" = None):
        """Build a config from a mapping, ignoring keys that are not config fields."""
        base = base or RenderConfig(workers=_default_workers())
        known = {f.name for f in fields(RenderConfig)}
        overrides = {k: v for k, v in data.items() if k in known}
        return replace(base, **overrides)
