import numpy as np
import pytest

from deepcar.track import Track


class FakePhysics:
    def __init__(self, position=(0.0, 0.0, 0.0), velocity=(0.0, 0.0, 0.0)):
        self.position = np.array(position, dtype=np.float64)
        self.velocity = np.array(velocity, dtype=np.float64)
        self.steering = None
        self.engine_force = None
        self.brake = None
        self.disabled = False

    def world_transform(self):
        transform = np.eye(4)
        transform[:3, 3] = self.position
        return transform

    def linear_velocity(self):
        return self.velocity

    def set_steering(self, value):
        self.steering = value

    def apply_engine_force(self, force):
        self.engine_force = force

    def set_brake(self, force):
        self.brake = force

    def disable(self):
        self.disabled = True


class FakeWorld:
    def __init__(self, hit_fraction=None):
        self.hit_fraction = hit_fraction
        self.steps = 0
        self.created = []
        self.removed = []
        self.rays = []

    def step(self, dt):
        self.steps += 1

    def ray_test(self, start, end):
        self.rays.append((start, end))
        return self.hit_fraction

    def create_vehicle(self):
        physics = FakePhysics()
        self.created.append(physics)
        return physics

    def remove_vehicle(self, physics):
        self.removed.append(physics)


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def square_track():
    # 10 x 10 square in the x/z plane, segments of length 10
    return Track([(0, 0, 0), (10, 0, 0), (10, 0, 10), (0, 0, 10)])


@pytest.fixture
def world():
    return FakeWorld()


@pytest.fixture
def clock():
    return FakeClock()
