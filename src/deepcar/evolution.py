"""
Genetic algorithm that breeds the next generation of network weights.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import EvolutionConfig
from .errors import ConfigurationError, DimensionMismatch

logger = logging.getLogger(__name__)


@dataclass
class GenerationStats:
    generation: int
    best_fitness: float
    average_fitness: float
    worst_fitness: float
    elite_index: int


class EvolutionEngine:
    """
    Fitness-proportionate selection, uniform crossover and uniform mutation,
    with the single best individual carried over unchanged.

    The config object is read on every call, so editing it between
    generations (e.g. from a debug panel) changes the next transition.
    """

    def __init__(self, config: EvolutionConfig = None, rng: np.random.Generator = None):
        self.config = config or EvolutionConfig()
        self.config.validate()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.random_seed)
        self.generation = 0

    def compute_new_population(self, current, next_population, average_fitness: Optional[float] = None) -> GenerationStats:
        """
        Fill the genes of next_population from the fitness-ranked current population.

        average_fitness is the population average snapshot taken by the caller
        before evolving; when omitted it is computed from current.
        """
        if not current:
            raise ConfigurationError("cannot evolve an empty population")
        if len(next_population) != len(current):
            raise ConfigurationError(
                f"population size mismatch: {len(current)} current vs {len(next_population)} next")

        fitness = np.array([c.fitness for c in current], dtype=np.float64)
        if average_fitness is None:
            average_fitness = float(fitness.mean())

        weights = self._selection_weights(fitness, average_fitness)
        elite = int(np.argmax(fitness))

        for i, child in enumerate(next_population):
            if i == elite:
                child.genes = current[elite].genes.copy()
                continue
            parent1 = current[self.select_parent(weights)]
            parent2 = current[self.select_parent(weights)]
            try:
                genes = self.crossover(parent1.genes, parent2.genes)
            except DimensionMismatch as e:
                logger.warning(f"Crossover skipped for slot {i}: {e}")
                genes = parent1.genes.copy()
            child.genes = self.mutate(genes)

        self.generation += 1
        stats = GenerationStats(
            generation=self.generation,
            best_fitness=float(fitness[elite]),
            average_fitness=float(average_fitness),
            worst_fitness=float(fitness.min()),
            elite_index=elite,
        )
        logger.info(f"Generation {stats.generation} evolved! Best fitness: {stats.best_fitness:.2f}, "
                    f"average: {stats.average_fitness:.2f}")
        return stats

    def _selection_weights(self, fitness, average_fitness):
        """
        Roulette probabilities. Fitness is taken relative to the population
        average and raised to 1 / selection_pressure, so 1.0 is plain
        fitness-proportionate selection. Every weight is floored at
        fitness_epsilon of an average individual's weight, which keeps
        zero-distance cars selectable.
        """
        eps = self.config.fitness_epsilon
        relative = np.maximum(fitness, 0.0) / max(average_fitness, eps)
        weights = np.maximum(relative ** (1.0 / self.config.selection_pressure), eps)
        return weights / weights.sum()

    def select_parent(self, weights) -> int:
        """Roulette wheel pick of one index according to weights."""
        return int(self.rng.choice(len(weights), p=weights))

    def crossover(self, genes1, genes2):
        """Uniform crossover with probability crossover_rate, else a copy of genes1."""
        if len(genes1) != len(genes2):
            raise DimensionMismatch(f"cannot cross {len(genes1)} genes with {len(genes2)} genes")
        if self.rng.random() >= self.config.crossover_rate:
            return np.array(genes1, dtype=np.float64)
        mask = self.rng.random(len(genes1)) < 0.5
        return np.where(mask, genes1, genes2).astype(np.float64)

    def mutate(self, genes):
        """Perturb each gene with probability mutation_rate by at most mutation_max_change."""
        genes = np.array(genes, dtype=np.float64)
        max_change = self.config.mutation_max_change
        mask = self.rng.random(len(genes)) < self.config.mutation_rate
        genes[mask] += self.rng.uniform(-max_change, max_change, int(mask.sum()))
        return genes
