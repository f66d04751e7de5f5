"""A small fully connected neural network for MNIST digit recognition."""

__version__ = "0.1.0"