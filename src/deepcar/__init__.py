"""
Neuroevolution of track-driving vehicles.

Feed-forward networks drive the cars, a genetic algorithm breeds new weights
from the distance each car covered along the track.
"""
from .chromosome import Chromosome
from .config import ConfigManager, ControllerConfig, EvolutionConfig, SimulationConfig
from .controllers import Actuation, NeuralNetController, RandomController, UserController, VehicleController
from .errors import ConfigurationError, DeepCarError, DimensionMismatch, LengthMismatch
from .evolution import EvolutionEngine, GenerationStats
from .neural_network import NeuralNetwork
from .progress import AgentProgressState, TrackProgressTracker
from .sensors import Sensor
from .simulation import Simulation
from .track import Track
from .vehicle import Vehicle

__all__ = [
    "Actuation",
    "AgentProgressState",
    "Chromosome",
    "ConfigManager",
    "ConfigurationError",
    "ControllerConfig",
    "DeepCarError",
    "DimensionMismatch",
    "EvolutionConfig",
    "EvolutionEngine",
    "GenerationStats",
    "LengthMismatch",
    "NeuralNetController",
    "NeuralNetwork",
    "RandomController",
    "Sensor",
    "Simulation",
    "SimulationConfig",
    "Track",
    "TrackProgressTracker",
    "UserController",
    "Vehicle",
    "VehicleController",
]
