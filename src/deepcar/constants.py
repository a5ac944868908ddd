"""
Constants and default settings for the driving simulation.
Values here are the fallbacks used when config.properties does not set them.
"""

# Population and network layout
POPULATION_SIZE = 40
HIDDEN_LAYERS = (4, 3)
WEIGHT_RANGE = (-1.0, 1.0)

# Evolution defaults
SELECTION_PRESSURE = 0.25
CROSSOVER_RATE = 1.0
MUTATION_RATE = 0.05
MUTATION_MAX_CHANGE = 0.5
FITNESS_EPSILON = 1e-3  # zero-distance cars keep a nonzero chance to breed

# Vehicle actuation limits
STEER_MAX = 0.6
ENGINE_FORCE_FORWARD_MAX = 5000.0
ENGINE_FORCE_REVERSE_MAX = -3000.0
BRAKE_MAX = 500.0
ROLLING_BRAKE = 10.0  # keeps wheel friction when no engine force is applied

# Actuation degrees of freedom: steering, engine force
DOF = 2

# Kill conditions
STALL_TIMEOUT = 20.0  # seconds
MIN_PROGRESS_SEGMENT = 2
VELOCITY_EPSILON = 1e-6  # squared speed below which travel direction is 0

# Sensor rig: (start, end) in vehicle space, end is stretched by SENSOR_SCALE
SENSOR_SCALE = 5.0
SENSOR_RIG = (
    ((0.0209, 1.5, 1.0072), (0.0209, 1.5, 5.0666)),   # front
    ((-0.5070, 1.5, 0.9990), (-3.1516, 1.5, 4.2972)),  # front left
    ((0.4965, 1.5, 1.0095), (3.3649, 1.5, 4.4035)),    # front right
)

# Statistics
FITNESS_HISTORY_LENGTH = 100  # keep last 100 generations

# Files
PARAMETERS_FILE = "config.properties"
POPULATION_FILE = "trained_models/population.pkl"
