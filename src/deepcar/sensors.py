"""
Distance sensors mounted on a vehicle.
"""
from dataclasses import dataclass, field
from typing import Optional

import numpy as np


def transform_point(transform, point):
    """Apply a 4x4 pose to a 3D point."""
    return transform[:3, :3] @ point + transform[:3, 3]


@dataclass
class Sensor:
    """
    A ray from start_local to end_local in vehicle space.

    distance is the free length along the ray: max_length when nothing was
    hit, else max_length scaled by the hit fraction.
    """
    start_local: np.ndarray
    end_local: np.ndarray
    max_length: float = field(init=False)
    distance: float = field(init=False)
    start_world: np.ndarray = field(init=False)
    end_world: np.ndarray = field(init=False)

    def __post_init__(self):
        self.start_local = np.asarray(self.start_local, dtype=np.float64)
        self.end_local = np.asarray(self.end_local, dtype=np.float64)
        self.max_length = float(np.linalg.norm(self.end_local - self.start_local))
        self.distance = self.max_length
        self.start_world = self.start_local.copy()
        self.end_world = self.end_local.copy()

    def refresh_pose(self, transform):
        transform = np.asarray(transform, dtype=np.float64)
        self.start_world = transform_point(transform, self.start_local)
        self.end_world = transform_point(transform, self.end_local)

    def apply_hit(self, hit_fraction: Optional[float]):
        if hit_fraction is None:
            self.distance = self.max_length
        else:
            self.distance = self.max_length * min(max(float(hit_fraction), 0.0), 1.0)
        return self.distance
