"""
Vehicle agent: sensors, network, controller and track progress
"""
import logging
import time

import numpy as np

from . import constants
from .errors import ConfigurationError
from .neural_network import NeuralNetwork
from .physics import VehiclePhysics
from .progress import AgentProgressState
from .sensors import Sensor

logger = logging.getLogger(__name__)


class Vehicle:
    def __init__(self, physics: VehiclePhysics, clock=time.monotonic):
        self.physics = physics
        self.clock = clock
        self.sensors = []
        self.neural_network = None
        self.controller = None
        self.progress = AgentProgressState(birth_time=clock())

    # ----------------------------
    # Setup
    # ----------------------------

    def add_sensor(self, start, end):
        sensor = Sensor(start, end)
        self._refresh_sensor_pose(sensor)
        self.sensors.append(sensor)
        return sensor

    def init_neural_network(self, hidden_layers=constants.HIDDEN_LAYERS, weight_range=constants.WEIGHT_RANGE):
        """Build a sensors -> hidden layers -> DOF network with random weights."""
        if not self.sensors:
            raise ConfigurationError("vehicle has no sensors to feed a neural network")
        if not hidden_layers:
            raise ConfigurationError("neural network needs at least one internal layer")

        network = NeuralNetwork()
        network.add_layer(len(self.sensors))
        for size in hidden_layers:
            network.add_layer(size)
        network.add_layer(constants.DOF)
        network.randomize(*weight_range)
        self.neural_network = network
        return network

    def set_controller(self, controller):
        """Swap the active controller variant."""
        self.controller = controller
        return controller

    def replace_physics(self, physics: VehiclePhysics):
        self.physics = physics
        for sensor in self.sensors:
            self._refresh_sensor_pose(sensor)

    # ----------------------------
    # Per tick
    # ----------------------------

    def update(self, dt, simulation):
        """Refresh sensors, track progress and run the controller."""
        transform = self.physics.world_transform()
        for sensor in self.sensors:
            sensor.refresh_pose(transform)
            sensor.apply_hit(simulation.world.ray_test(sensor.start_world, sensor.end_world))

        simulation.tracker.update(self.progress, transform[:3, 3], self.physics.linear_velocity())

        if self.controller is not None:
            return self.controller.update(dt)
        return None

    def sensor_distances(self):
        return np.array([s.distance for s in self.sensors], dtype=np.float32)

    def _refresh_sensor_pose(self, sensor):
        if self.physics is not None:
            sensor.refresh_pose(self.physics.world_transform())

    # ----------------------------
    # Lifecycle
    # ----------------------------

    def kill(self):
        if self.progress.alive:
            logger.debug(f"{self!r} killed at segment {self.progress.current_segment}")
        self.progress.kill()

    def reset(self):
        self.progress.reset(self.clock())
        for sensor in self.sensors:
            sensor.apply_hit(None)

    # ----------------------------
    # Convenience
    # ----------------------------

    @property
    def alive(self):
        return self.progress.alive

    @property
    def birth_time(self):
        return self.progress.birth_time

    @property
    def current_segment(self):
        return self.progress.current_segment

    @property
    def best_segment(self):
        return self.progress.best_segment

    @property
    def current_track_distance(self):
        return self.progress.current_distance

    @property
    def best_track_distance(self):
        return self.progress.best_distance

    @property
    def travel_direction(self):
        return self.progress.travel_direction

    def __repr__(self):
        return (f"Vehicle(alive={self.alive}, segment={self.current_segment}, "
                f"distance={self.current_track_distance:.2f})")
