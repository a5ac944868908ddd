"""
Configuration management for the driving simulation.
Centralizes access to config.properties and provides typed access to parameters.
"""
import logging
from configparser import ConfigParser
from dataclasses import dataclass
from typing import Optional

from . import constants
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class EvolutionConfig:
    """Tunable parameters of the genetic algorithm. Safe to edit between generations."""
    selection_pressure: float = constants.SELECTION_PRESSURE  # fitness exponent is 1 / selection_pressure
    crossover_rate: float = constants.CROSSOVER_RATE
    mutation_rate: float = constants.MUTATION_RATE
    mutation_max_change: float = constants.MUTATION_MAX_CHANGE
    fitness_epsilon: float = constants.FITNESS_EPSILON
    random_seed: Optional[int] = None

    def validate(self):
        if not 0.0 < self.selection_pressure <= 1.0:
            raise ConfigurationError(f"selection_pressure must be in (0, 1], got {self.selection_pressure}")
        for name in ("crossover_rate", "mutation_rate"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must be in [0, 1], got {value}")
        if self.mutation_max_change < 0.0:
            raise ConfigurationError(f"mutation_max_change must be >= 0, got {self.mutation_max_change}")
        if self.fitness_epsilon <= 0.0:
            raise ConfigurationError(f"fitness_epsilon must be > 0, got {self.fitness_epsilon}")
        return self


@dataclass
class ControllerConfig:
    """Actuation limits shared by all controller variants."""
    steer_max: float = constants.STEER_MAX
    engine_force_forward_max: float = constants.ENGINE_FORCE_FORWARD_MAX
    engine_force_reverse_max: float = constants.ENGINE_FORCE_REVERSE_MAX
    brake_max: float = constants.BRAKE_MAX
    rolling_brake: float = constants.ROLLING_BRAKE


@dataclass
class SimulationConfig:
    """Population layout and kill conditions."""
    num_cars: int = constants.POPULATION_SIZE
    hidden_layers: tuple = constants.HIDDEN_LAYERS
    weight_min: float = constants.WEIGHT_RANGE[0]
    weight_max: float = constants.WEIGHT_RANGE[1]
    stall_timeout: float = constants.STALL_TIMEOUT
    min_progress_segment: int = constants.MIN_PROGRESS_SEGMENT
    sensor_scale: float = constants.SENSOR_SCALE

    def validate(self):
        if self.num_cars < 1:
            raise ConfigurationError(f"num_cars must be >= 1, got {self.num_cars}")
        if not self.hidden_layers or any(size < 1 for size in self.hidden_layers):
            raise ConfigurationError(f"hidden_layers must be a non-empty list of positive sizes, got {self.hidden_layers}")
        if self.weight_min > self.weight_max:
            raise ConfigurationError(f"weight range [{self.weight_min}, {self.weight_max}] is empty")
        if self.stall_timeout <= 0.0:
            raise ConfigurationError(f"stall_timeout must be > 0, got {self.stall_timeout}")
        return self


class ConfigManager:
    """
    Typed access to config.properties with fallback defaults from constants.
    Each section is parsed once and cached.
    """

    def __init__(self, config_file: str = constants.PARAMETERS_FILE):
        self.config = ConfigParser()
        read = self.config.read(config_file)
        if not read:
            logger.debug(f"No configuration file at {config_file}, using defaults")

        self._evolution_config: Optional[EvolutionConfig] = None
        self._controller_config: Optional[ControllerConfig] = None
        self._simulation_config: Optional[SimulationConfig] = None

    @property
    def evolution_config(self) -> EvolutionConfig:
        if self._evolution_config is None:
            self._evolution_config = self._load_evolution_config()
        return self._evolution_config

    @property
    def controller_config(self) -> ControllerConfig:
        if self._controller_config is None:
            self._controller_config = self._load_controller_config()
        return self._controller_config

    @property
    def simulation_config(self) -> SimulationConfig:
        if self._simulation_config is None:
            self._simulation_config = self._load_simulation_config()
        return self._simulation_config

    def _load_evolution_config(self) -> EvolutionConfig:
        seed = self.config.get("EVOLUTION", "random_seed", fallback=None)
        return EvolutionConfig(
            selection_pressure=self.config.getfloat("EVOLUTION", "selection_pressure", fallback=constants.SELECTION_PRESSURE),
            crossover_rate=self.config.getfloat("EVOLUTION", "crossover_rate", fallback=constants.CROSSOVER_RATE),
            mutation_rate=self.config.getfloat("EVOLUTION", "mutation_rate", fallback=constants.MUTATION_RATE),
            mutation_max_change=self.config.getfloat("EVOLUTION", "mutation_max_change", fallback=constants.MUTATION_MAX_CHANGE),
            fitness_epsilon=self.config.getfloat("EVOLUTION", "fitness_epsilon", fallback=constants.FITNESS_EPSILON),
            random_seed=int(seed) if seed else None,
        ).validate()

    def _load_controller_config(self) -> ControllerConfig:
        return ControllerConfig(
            steer_max=self.config.getfloat("CONTROLLER", "steer_max", fallback=constants.STEER_MAX),
            engine_force_forward_max=self.config.getfloat("CONTROLLER", "engine_force_forward_max", fallback=constants.ENGINE_FORCE_FORWARD_MAX),
            engine_force_reverse_max=self.config.getfloat("CONTROLLER", "engine_force_reverse_max", fallback=constants.ENGINE_FORCE_REVERSE_MAX),
            brake_max=self.config.getfloat("CONTROLLER", "brake_max", fallback=constants.BRAKE_MAX),
            rolling_brake=self.config.getfloat("CONTROLLER", "rolling_brake", fallback=constants.ROLLING_BRAKE),
        )

    def _load_simulation_config(self) -> SimulationConfig:
        return SimulationConfig(
            num_cars=self.config.getint("SIMULATION", "num_cars", fallback=constants.POPULATION_SIZE),
            hidden_layers=self._get_int_list("SIMULATION", "hidden_layers", constants.HIDDEN_LAYERS),
            weight_min=self.config.getfloat("SIMULATION", "weight_min", fallback=constants.WEIGHT_RANGE[0]),
            weight_max=self.config.getfloat("SIMULATION", "weight_max", fallback=constants.WEIGHT_RANGE[1]),
            stall_timeout=self.config.getfloat("SIMULATION", "stall_timeout", fallback=constants.STALL_TIMEOUT),
            min_progress_segment=self.config.getint("SIMULATION", "min_progress_segment", fallback=constants.MIN_PROGRESS_SEGMENT),
            sensor_scale=self.config.getfloat("SIMULATION", "sensor_scale", fallback=constants.SENSOR_SCALE),
        ).validate()

    def _get_int_list(self, section, option, fallback) -> tuple:
        raw = self.config.get(section, option, fallback=None)
        if raw is None:
            return tuple(fallback)
        try:
            return tuple(int(part) for part in raw.split(",") if part.strip())
        except ValueError as e:
            raise ConfigurationError(f"[{section}] {option} must be a comma separated list of integers: {raw!r}") from e


def configure_logging(level=logging.INFO):
    """Console logging for applications embedding the simulation."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
