"""
Controllers deciding steering and engine force for a vehicle each tick.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
import torch

from . import constants
from .config import ControllerConfig
from .errors import DimensionMismatch

logger = logging.getLogger(__name__)


@dataclass
class Actuation:
    """Two degrees of freedom plus an optional brake override."""
    steering: float = 0.0
    engine_force: float = 0.0
    brake: Optional[float] = None

    def apply_to(self, physics):
        physics.set_steering(self.steering)
        physics.apply_engine_force(self.engine_force)
        if self.brake is not None:
            physics.set_brake(self.brake)


class VehicleController:
    """Base controller. update(dt) returns the actuation it applied, or None."""

    def __init__(self, vehicle, config: ControllerConfig = None):
        self.vehicle = vehicle
        self.config = config or ControllerConfig()

    def compute(self, dt) -> Optional[Actuation]:
        raise NotImplementedError

    def update(self, dt) -> Optional[Actuation]:
        actuation = self.compute(dt)
        if actuation is not None and self.vehicle.physics is not None:
            actuation.apply_to(self.vehicle.physics)
        return actuation


class UserController(VehicleController):
    """
    Keyboard driving. Key names follow panda3d events, a release is
    reported as "<key>-up".
    """
    KEY_LEFT = "arrow_left"
    KEY_RIGHT = "arrow_right"
    KEY_UP = "arrow_up"
    KEY_DOWN = "arrow_down"
    KEY_HANDBRAKE = "space"
    KEYS = (KEY_LEFT, KEY_RIGHT, KEY_UP, KEY_DOWN, KEY_HANDBRAKE)

    def __init__(self, vehicle, config: ControllerConfig = None):
        super().__init__(vehicle, config)
        self.actuation = Actuation(brake=0.0)

    def bind(self, accept):
        """Register key handlers with a panda3d style accept(event, method, extraArgs)."""
        for key in self.KEYS:
            accept(key, self.key_event, [key, True])
            accept(key + "-up", self.key_event, [key, False])

    def key_event(self, key, pressed):
        cfg = self.config
        if pressed:
            if key == self.KEY_LEFT:
                self.actuation.steering = cfg.steer_max
            elif key == self.KEY_RIGHT:
                self.actuation.steering = -cfg.steer_max
            elif key == self.KEY_UP:
                self.actuation.engine_force = cfg.engine_force_forward_max
            elif key == self.KEY_DOWN:
                self.actuation.engine_force = cfg.engine_force_reverse_max
            elif key == self.KEY_HANDBRAKE:
                self.actuation.brake = cfg.brake_max
        else:
            if key in (self.KEY_LEFT, self.KEY_RIGHT):
                self.actuation.steering = 0.0
            elif key in (self.KEY_UP, self.KEY_DOWN):
                self.actuation.engine_force = 0.0
                self.actuation.brake = cfg.rolling_brake
            elif key == self.KEY_HANDBRAKE:
                self.actuation.brake = 0.0

    def compute(self, dt):
        return Actuation(self.actuation.steering, self.actuation.engine_force, self.actuation.brake)


class RandomController(VehicleController):
    """Random steering and forward force every tick. Baseline only, never evolved."""

    def __init__(self, vehicle, config: ControllerConfig = None, rng: np.random.Generator = None):
        super().__init__(vehicle, config)
        self.rng = rng if rng is not None else np.random.default_rng()

    def compute(self, dt):
        steer = (-1.0 + 2.0 * self.rng.random()) * self.config.steer_max
        force = self.rng.random() * self.config.engine_force_forward_max
        return Actuation(steer, force)


class NeuralNetController(VehicleController):
    """Feeds sensor distances through the vehicle's network."""
    DOF = constants.DOF  # steer, engine force

    def compute(self, dt):
        network = self.vehicle.neural_network
        inputs = self.vehicle.sensor_distances()
        if network is None or network.input_size != len(inputs) or network.output_size != self.DOF:
            logger.error(f"could not execute neural network {network!r} with {len(inputs)} sensors "
                         f"and {self.DOF} outputs")
            return None

        try:
            with torch.no_grad():
                output = network(inputs).numpy()
        except DimensionMismatch as e:
            logger.error(f"could not execute neural network: {e}")
            return None

        cfg = self.config
        steer = float(np.clip(output[0], -1.0, 1.0)) * cfg.steer_max
        t = float(np.clip(output[1], -1.0, 1.0)) * 0.5 + 0.5  # map [-1,1] to [0,1]
        force = cfg.engine_force_reverse_max + (cfg.engine_force_forward_max - cfg.engine_force_reverse_max) * t
        return Actuation(steer, force)
