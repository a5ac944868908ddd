"""
Interfaces the physics engine has to provide. The simulation only asks the
world to step, reads poses, casts rays and applies actuation through these.
"""
from typing import Optional, Protocol

import numpy as np


class VehiclePhysics(Protocol):
    """One raycast-vehicle body."""

    def world_transform(self) -> np.ndarray:
        """4x4 chassis pose in world space."""

    def linear_velocity(self) -> np.ndarray:
        ...

    def set_steering(self, value: float) -> None:
        ...

    def apply_engine_force(self, force: float) -> None:
        ...

    def set_brake(self, force: float) -> None:
        ...

    def disable(self) -> None:
        """Take the body out of the simulation (dead vehicles)."""


class PhysicsWorld(Protocol):

    def step(self, dt: float) -> None:
        ...

    def ray_test(self, start: np.ndarray, end: np.ndarray) -> Optional[float]:
        """Closest hit fraction along start->end ignoring vehicles, None if nothing was hit."""

    def create_vehicle(self) -> VehiclePhysics:
        ...

    def remove_vehicle(self, physics: VehiclePhysics) -> None:
        ...
