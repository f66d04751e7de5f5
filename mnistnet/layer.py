"""Fully connected layer with a sigmoid or ReLU activation."""

from __future__ import annotations

import math
import random
from typing import Callable

from .matrix import Matrix


def sigmoid(x: float) -> float:
    """Logistic function 1 / (1 + e^-x)."""
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    e = math.exp(x)
    return e / (1.0 + e)


def sigmoid_prime(x: float) -> float:
    """Derivative of the logistic function."""
    s = sigmoid(x)
    return s * (1.0 - s)


def relu(x: float) -> float:
    """Rectified linear unit."""
    return x if x > 0 else 0.0


def relu_prime(x: float) -> float:
    """Derivative of the rectified linear unit (zero at and below zero)."""
    is_active = not x <= 0
    return float(is_active)


_ACTIVATIONS: dict[str, tuple[Callable[[float], float], Callable[[float], float]]] = {
    "relu": (relu, relu_prime),
    "sigmoid": (sigmoid, sigmoid_prime),
}


class Layer:
    """A dense layer computing activation(weights @ input + biases)."""

    def __init__(
        self,
        input_size: int,
        output_size: int,
        activation: str,
        rng: random.Random | None = None,
    ) -> None:
        if input_size <= 0 or output_size <= 0:
            raise ValueError("Layer input and output sizes must be positive.")
        if rng is None:
            rng = random.Random()

        self.activation = activation
        limit = math.sqrt(6.0 / (float(input_size) + float(output_size)))
        self.weights = Matrix.from_rows(
            [rng.uniform(-limit, limit) for _ in range(input_size)]
            for _ in range(output_size)
        )
        bias_init = 0.01 if activation == "relu" else 0.0
        self.biases = Matrix(output_size, 1, bias_init)

        self.last_input = Matrix()
        self.last_z = Matrix()
        self.grad_weights = Matrix(output_size, input_size)
        self.grad_biases = Matrix(output_size, 1)
        self.delta_weights = Matrix(output_size, input_size)
        self.delta_biases = Matrix(output_size, 1)

    def _functions(self, purpose: str) -> tuple[Callable[[float], float], Callable[[float], float]]:
        try:
            return _ACTIVATIONS[self.activation]
        except KeyError:
            raise ValueError(
                f"Unsupported activation function{purpose}: {self.activation}"
            ) from None

    def forward(self, inputs: Matrix) -> Matrix:
        """Run the layer on a column vector and remember what backward needs."""
        self.last_input = inputs
        z = self.weights.multiply(inputs).add(self.biases)
        self.last_z = z
        return self.activate(z)

    def activate(self, z: Matrix) -> Matrix:
        func, _ = self._functions("")
        return z.apply(func)

    def activate_prime(self, z: Matrix) -> Matrix:
        _, derivative = self._functions(" for derivative")
        return z.apply(derivative)

    def backward(self, output_error: Matrix) -> Matrix:
        """Store the parameter gradients and return the error for the previous layer."""
        d_z = output_error.multiply_elements(self.activate_prime(self.last_z))
        self.grad_weights = d_z.multiply(self.last_input.transpose())
        self.grad_biases = d_z
        return self.weights.transpose().multiply(d_z)

    def zero_deltas(self) -> None:
        self.delta_weights = Matrix(*self.weights.shape)
        self.delta_biases = Matrix(*self.biases.shape)

    def accumulate_gradients(self) -> None:
        self.delta_weights = self.delta_weights.add(self.grad_weights)
        self.delta_biases = self.delta_biases.add(self.grad_biases)

    def update_parameters(self, learning_rate: float, batch_size: int) -> None:
        """Step the parameters against the accumulated gradients, averaged over the batch."""
        if batch_size <= 0:
            raise ValueError("Batch size must be positive for updating parameters.")
        scale = learning_rate / float(batch_size)
        self.weights = self.weights.subtract(self.delta_weights.multiply_scalar(scale))
        self.biases = self.biases.subtract(self.delta_biases.multiply_scalar(scale))

    def print_weights(self) -> None:
        rows, cols = self.weights.shape
        print(f"Layer Weights ({rows}x{cols}):")
        self.weights.display()
        rows, cols = self.biases.shape
        print(f"Layer Biases ({rows}x{cols}):")
        self.biases.display()