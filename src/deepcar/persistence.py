"""
Saving and loading evolved populations.
"""
import logging
import os
import pickle

import numpy as np

from . import constants

logger = logging.getLogger(__name__)


def save_population(chromosomes, generation, filename=constants.POPULATION_FILE):
    """Save the gene vectors and fitness of a population to a file"""
    population_data = {
        'generation': generation,
        'chromosomes': [
            {'fitness': c.fitness, 'genes': np.asarray(c.genes, dtype=np.float64)}
            for c in chromosomes
        ],
    }
    try:
        directory = os.path.dirname(filename)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(filename, 'wb') as f:
            pickle.dump(population_data, f)
    except OSError as e:
        logger.error(f"Error saving population to {filename}: {e}")
        return False

    logger.info(f"Population saved to {filename} - Generation {generation}, "
                f"{len(population_data['chromosomes'])} chromosomes")
    return True


def load_population(filename=constants.POPULATION_FILE):
    """Load a population from a file. Returns (data, generation) or (None, 0)."""
    if not os.path.exists(filename):
        logger.info(f"No saved population found at {filename}")
        return None, 0

    try:
        with open(filename, 'rb') as f:
            population_data = pickle.load(f)
    except (OSError, pickle.UnpicklingError, EOFError) as e:
        logger.error(f"Error loading population from {filename}: {e}")
        return None, 0

    if not _is_population_data(population_data):
        logger.error(f"Error loading population from {filename}: unexpected data layout "
                     f"{type(population_data).__name__}")
        return None, 0

    logger.info(f"Population loaded from {filename} - Generation {population_data['generation']}, "
                f"{len(population_data['chromosomes'])} chromosomes")
    return population_data, population_data['generation']


def best_chromosome_data(population_data):
    """Entry with the highest fitness in loaded population data, or None"""
    if not population_data or not population_data['chromosomes']:
        return None
    return max(population_data['chromosomes'], key=lambda c: c['fitness'])


def _is_population_data(population_data):
    if not isinstance(population_data, dict):
        return False
    if 'generation' not in population_data or not isinstance(population_data.get('chromosomes'), list):
        return False
    return all(isinstance(c, dict) and 'genes' in c and 'fitness' in c
               for c in population_data['chromosomes'])
