import pickle

import numpy as np
import pytest
import torch

from deepcar.config import EvolutionConfig, SimulationConfig
from deepcar.errors import ConfigurationError
from deepcar.simulation import Simulation


def make_simulation(world, track, clock, num_cars=3, **evolution):
    evolution.setdefault("random_seed", 7)
    return Simulation(
        world,
        track,
        SimulationConfig(num_cars=num_cars),
        EvolutionConfig(**evolution),
        clock=clock,
    )


def parameters(vehicle):
    return [p.detach().clone() for p in vehicle.neural_network.parameters()]


def test_population_setup(world, square_track, clock):
    sim = make_simulation(world, square_track, clock, num_cars=5)
    assert sim.num_vehicles == 5
    assert len(world.created) == 5
    for vehicle in sim.vehicles:
        assert len(vehicle.sensors) == 3
        assert vehicle.neural_network.layers == [3, 4, 3, 2]
    # front sensor is stretched by the rig scale
    assert sim.vehicles[0].sensors[0].max_length == pytest.approx((5.0666 - 1.0072) * 5.0)


def test_missing_track_rejected(world, clock):
    with pytest.raises(ConfigurationError):
        Simulation(world, None, clock=clock)


def test_update_applies_actuation(world, square_track, clock):
    sim = make_simulation(world, square_track, clock)
    assert sim.update(0.016) == 3
    assert world.steps == 1
    for physics in world.created:
        assert physics.steering is not None
        assert physics.engine_force is not None


def test_stall_timeout_kills_only_slow_vehicles(world, square_track, clock):
    sim = make_simulation(world, square_track, clock, num_cars=2)
    slow, progressing = sim.vehicles
    slow.physics.position = np.array([5.0, 0.0, 0.0])         # segment 0
    progressing.physics.position = np.array([5.0, 0.0, 10.0])  # segment 2

    clock.now = 20.0001
    sim.update(0.016)
    assert slow.alive is False
    assert progressing.alive is True
    assert slow.physics.disabled


def test_generation_transition_when_all_dead(world, square_track, clock):
    sim = make_simulation(world, square_track, clock, num_cars=4)
    for vehicle in sim.vehicles:
        vehicle.kill()

    old_physics = [v.physics for v in sim.vehicles]
    assert sim.update(0.016) == 0
    assert sim.generation == 1
    assert len(sim.fitness_history) == 1
    assert all(v.alive for v in sim.vehicles)
    assert world.removed == old_physics
    assert all(v.physics is not old for v, old in zip(sim.vehicles, old_physics))


def test_apply_evolution_single_vehicle_keeps_genes(world, square_track, clock):
    sim = make_simulation(world, square_track, clock, num_cars=1, crossover_rate=0.0, mutation_rate=0.0)
    vehicle = sim.vehicles[0]
    vehicle.progress.best_distance = 10.0
    before = parameters(vehicle)

    stats = sim.apply_evolution()
    assert stats.best_fitness == 10.0
    assert sim.average_fitness == 10.0
    for old, new in zip(before, vehicle.neural_network.parameters()):
        assert torch.equal(old, new)


def test_apply_evolution_keeps_best_vehicle_weights(world, square_track, clock):
    sim = make_simulation(world, square_track, clock, num_cars=5, mutation_rate=1.0, mutation_max_change=1.0)
    for i, vehicle in enumerate(sim.vehicles):
        vehicle.progress.best_distance = float(i)
    best = sim.vehicles[4]
    before = parameters(best)
    others = [parameters(v) for v in sim.vehicles[:4]]

    sim.apply_evolution()
    assert sim.average_fitness == pytest.approx(2.0)
    for old, new in zip(before, best.neural_network.parameters()):
        assert torch.equal(old, new)
    # everybody else got new genes
    for vehicle, old_params in zip(sim.vehicles[:4], others):
        assert any(not torch.equal(o, n) for o, n in zip(old_params, vehicle.neural_network.parameters()))


def test_track_contact_kills_vehicle(world, square_track, clock):
    sim = make_simulation(world, square_track, clock)
    target = sim.vehicles[1]
    assert sim.handle_track_contact(target.physics) is target
    assert not target.alive
    assert sim.handle_track_contact(object()) is None
    assert sim.num_alive == 2


def test_best_vehicle(world, square_track, clock):
    sim = make_simulation(world, square_track, clock)
    sim.vehicles[0].progress.current_distance = 3.0
    sim.vehicles[1].progress.current_distance = 9.0
    sim.vehicles[2].progress.current_distance = 5.0
    assert sim.best_vehicle() is sim.vehicles[1]
    sim.vehicles[1].kill()
    assert sim.best_vehicle() is sim.vehicles[2]
    for vehicle in sim.vehicles:
        vehicle.kill()
    assert sim.best_vehicle() is None


def test_save_and_load_population(world, square_track, clock, tmp_path):
    path = str(tmp_path / "models" / "population.pkl")
    sim = make_simulation(world, square_track, clock)
    sim.generation = 6
    assert sim.save_population(path)
    saved = [parameters(v) for v in sim.vehicles]

    other = make_simulation(world, square_track, clock)
    assert other.load_population(path) == 3
    assert other.generation == 6
    for vehicle, old_params in zip(other.vehicles, saved):
        for old, new in zip(old_params, vehicle.neural_network.parameters()):
            assert torch.equal(old, new)


def test_load_population_skips_mismatched_genes(world, square_track, clock, tmp_path):
    path = str(tmp_path / "population.pkl")
    make_simulation(world, square_track, clock).save_population(path)

    wider = Simulation(world, square_track, SimulationConfig(num_cars=2, hidden_layers=(5,)), clock=clock)
    assert wider.load_population(path) == 0


def test_load_population_ignores_foreign_pickle(world, square_track, clock, tmp_path):
    path = tmp_path / "population.pkl"
    path.write_bytes(pickle.dumps({"foo": 1}))
    sim = make_simulation(world, square_track, clock)
    sim.generation = 2
    assert sim.load_population(str(path)) == 0
    assert sim.generation == 2
