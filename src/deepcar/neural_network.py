"""
Layered feed-forward network that drives a vehicle.
"""
import torch
import torch.nn as nn

from .errors import ConfigurationError, DimensionMismatch


class NeuralNetwork(nn.Module):
    """
    Feed-forward network built layer by layer.

    Every link between two layers is an ``nn.Linear`` holding a
    (size_out x size_in) weight matrix and one bias per output. Hidden
    layers use tanh, the output layer is linear so it can be mapped onto
    signed control ranges.
    """

    def __init__(self, layers=None):
        super(NeuralNetwork, self).__init__()
        self.layers = []
        self.links = nn.ModuleList()
        self._frozen = False
        for size in layers or ():
            self.add_layer(size)

    def add_layer(self, size):
        """Append a layer, linking it to the previous one if there is one."""
        if self._frozen:
            raise ConfigurationError("cannot add layers after the weights have been initialized")
        if size < 1:
            raise ConfigurationError(f"layer size must be positive, got {size}")
        if self.layers:
            self.links.append(nn.Linear(self.layers[-1], size))
        self.layers.append(int(size))

    def randomize(self, low=-1.0, high=1.0):
        """Fill every weight and bias with uniform samples in [low, high]."""
        if low > high:
            raise ConfigurationError(f"empty weight range [{low}, {high}]")
        with torch.no_grad():
            for link in self.links:
                nn.init.uniform_(link.weight, low, high)
                nn.init.uniform_(link.bias, low, high)
        self._frozen = True

    @property
    def num_links(self):
        return len(self.links)

    def link(self, index):
        return self.links[index]

    @property
    def input_size(self):
        return self.layers[0] if self.layers else 0

    @property
    def output_size(self):
        return self.layers[-1] if self.layers else 0

    def num_parameters(self):
        return sum(p.numel() for p in self.parameters())

    def forward(self, x):
        if not self.links:
            raise ConfigurationError(f"network needs at least two layers, has {self.layers}")
        x = torch.as_tensor(x, dtype=torch.float32)
        if x.dim() == 0:
            raise DimensionMismatch(f"expected {self.input_size} inputs, got a scalar")
        if x.shape[-1] != self.input_size:
            raise DimensionMismatch(f"expected {self.input_size} inputs, got {x.shape[-1]}")
        self._frozen = True
        for link in self.links[:-1]:
            x = torch.tanh(link(x))
        # linear output: steering / engine force
        return self.links[-1](x)

    def __repr__(self):
        return f"NeuralNetwork(layers={self.layers})"
