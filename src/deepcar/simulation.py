"""
Simulation core: ticks the population and runs a generation transition
once every vehicle is dead.
"""
import logging
import time
from collections import deque

import numpy as np

from . import constants
from .chromosome import Chromosome
from .config import ControllerConfig, EvolutionConfig, SimulationConfig
from .controllers import NeuralNetController
from .errors import ConfigurationError, DimensionMismatch
from .evolution import EvolutionEngine
from .persistence import load_population, save_population
from .physics import PhysicsWorld
from .progress import TrackProgressTracker
from .vehicle import Vehicle

logger = logging.getLogger(__name__)


class Simulation:
    """
    Single-threaded, tick driven simulation of an evolving population.

    world is the physics collaborator (see deepcar.physics); track is the
    already loaded track polyline.
    """

    def __init__(self, world: PhysicsWorld, track, config: SimulationConfig = None,
                 evolution_config: EvolutionConfig = None,
                 controller_config: ControllerConfig = None,
                 clock=time.monotonic, rng: np.random.Generator = None,
                 sensor_rig=constants.SENSOR_RIG):
        if track is None:
            raise ConfigurationError("simulation needs a track")
        self.world = world
        self.track = track
        self.config = (config or SimulationConfig()).validate()
        self.controller_config = controller_config or ControllerConfig()
        self.clock = clock
        self.sensor_rig = sensor_rig

        self.tracker = TrackProgressTracker(
            track,
            stall_timeout=self.config.stall_timeout,
            min_progress_segment=self.config.min_progress_segment,
        )
        self.engine = EvolutionEngine(evolution_config, rng=rng)

        self.vehicles = [self.create_vehicle() for _ in range(self.config.num_cars)]
        self.chromosomes = []
        self.chromosomes_next = []

        self.generation = 0
        self.average_fitness = 0.0
        self.fitness_history = deque(maxlen=constants.FITNESS_HISTORY_LENGTH)
        logger.info(f"Simulation initialized with {len(self.vehicles)} vehicles on {track!r}")

    def create_vehicle(self):
        vehicle = Vehicle(self.world.create_vehicle(), clock=self.clock)
        for start, end in self.sensor_rig:
            start = np.asarray(start, dtype=np.float64)
            end = np.asarray(end, dtype=np.float64)
            vehicle.add_sensor(start, start + (end - start) * self.config.sensor_scale)
        vehicle.init_neural_network(self.config.hidden_layers, (self.config.weight_min, self.config.weight_max))
        vehicle.set_controller(NeuralNetController(vehicle, self.controller_config))
        return vehicle

    @property
    def num_vehicles(self):
        return len(self.vehicles)

    @property
    def num_alive(self):
        return sum(1 for v in self.vehicles if v.alive)

    def update(self, dt):
        """Advance one tick. Returns the number of vehicles alive after the tick."""
        self.world.step(dt)
        now = self.clock()

        num_alive = 0
        for vehicle in self.vehicles:
            if vehicle.alive:
                vehicle.update(dt, self)

                # kill vehicles in reverse dir or without progress
                if self.tracker.should_kill(vehicle.progress, now):
                    vehicle.kill()

            if vehicle.alive:
                num_alive += 1
            else:
                vehicle.physics.disable()

        if not num_alive:
            self.apply_evolution()
            self.reset_vehicles()
        return num_alive

    def handle_track_contact(self, physics):
        """Contact callback from the physics layer: a chassis touched the track mesh."""
        for vehicle in self.vehicles:
            if vehicle.physics is physics:
                vehicle.kill()
                return vehicle
        return None

    def best_vehicle(self):
        """Living vehicle furthest along the track, or None"""
        best = None
        fitness = -1.0
        for vehicle in self.vehicles:
            if vehicle.alive and vehicle.current_track_distance > fitness:
                fitness = vehicle.current_track_distance
                best = vehicle
        return best

    # ----------------------------
    # Generation transition
    # ----------------------------

    def apply_evolution(self):
        if not self.chromosomes:
            self.chromosomes = [Chromosome(v) for v in self.vehicles]
            self.chromosomes_next = [Chromosome(v) for v in self.vehicles]

        for chromosome in self.chromosomes:
            chromosome.read_genes_from_owner()
        # snapshot, read-only until the next transition
        self.average_fitness = float(np.mean([c.fitness for c in self.chromosomes]))

        stats = self.engine.compute_new_population(self.chromosomes, self.chromosomes_next, self.average_fitness)
        self.chromosomes, self.chromosomes_next = self.chromosomes_next, self.chromosomes

        for chromosome in self.chromosomes:
            try:
                chromosome.write_genes_to_owner()
            except DimensionMismatch as e:
                logger.error(f"Gene transfer skipped for {chromosome.owner!r}: {e}")

        self.generation += 1
        self.fitness_history.append(stats.best_fitness)
        return stats

    def reset_vehicles(self):
        for vehicle in self.vehicles:
            vehicle.reset()

            # replace with a fresh physics body
            self.world.remove_vehicle(vehicle.physics)
            vehicle.replace_physics(self.world.create_vehicle())

    # ----------------------------
    # Persistence
    # ----------------------------

    def save_population(self, filename=constants.POPULATION_FILE):
        chromosomes = []
        for vehicle in self.vehicles:
            chromosome = Chromosome(vehicle)
            chromosome.read_genes_from_owner()
            chromosomes.append(chromosome)
        return save_population(chromosomes, self.generation, filename)

    def load_population(self, filename=constants.POPULATION_FILE):
        """Write saved genes into the vehicles. Returns the number of vehicles updated."""
        population_data, generation = load_population(filename)
        if population_data is None:
            return 0

        loaded = 0
        for vehicle, entry in zip(self.vehicles, population_data['chromosomes']):
            try:
                Chromosome(vehicle, entry['genes']).write_genes_to_owner()
            except DimensionMismatch as e:
                logger.error(f"Saved genes do not fit {vehicle!r}: {e}")
                continue
            loaded += 1

        self.generation = generation
        self.engine.generation = generation
        return loaded
