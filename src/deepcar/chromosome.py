"""
Genetic encoding of a vehicle's network weights.
"""
import numpy as np
import torch
from torch.nn.utils import parameters_to_vector, vector_to_parameters

from .errors import LengthMismatch


class Chromosome:
    """
    Flat gene vector mirroring the weights of one vehicle's network.

    Genes are laid out link by link, each link contributing its weight
    matrix row by row followed by its bias. The owner keeps exclusive
    ownership of the network: genes are copied out with
    read_genes_from_owner() and copied back with write_genes_to_owner().
    """

    def __init__(self, owner=None, genes=None, fitness=0.0):
        self.owner = owner
        self.genes = np.zeros(0) if genes is None else np.asarray(genes, dtype=np.float64).copy()
        self._fitness = float(fitness)

    @property
    def fitness(self) -> float:
        """Best track distance of the owner, or the stored value when unowned."""
        if self.owner is not None:
            return float(self.owner.best_track_distance)
        return self._fitness

    @fitness.setter
    def fitness(self, value):
        self._fitness = float(value)

    def read_genes_from_owner(self):
        network = self.owner.neural_network
        self.genes = parameters_to_vector(network.parameters()).detach().cpu().numpy().astype(np.float64)
        return self.genes

    def write_genes_to_owner(self):
        network = self.owner.neural_network
        expected = network.num_parameters()
        if len(self.genes) != expected:
            raise LengthMismatch(f"chromosome has {len(self.genes)} genes, network expects {expected}")
        with torch.no_grad():
            vector_to_parameters(torch.as_tensor(self.genes, dtype=torch.float32), network.parameters())

    def __len__(self):
        return len(self.genes)

    def __repr__(self):
        return f"Chromosome(genes={len(self.genes)}, fitness={self.fitness:.2f})"
