"""Feed-forward network trained with mini-batch gradient descent on MSE."""

from __future__ import annotations

import random
from typing import Sequence

from .layer import Layer
from .matrix import Matrix


class Network:
    """A stack of dense layers."""

    def __init__(
        self,
        layer_sizes: Sequence[int],
        activations: Sequence[str],
        rng: random.Random | None = None,
    ) -> None:
        if len(activations) != len(layer_sizes) - 1:
            raise ValueError("Mismatch in layer sizes and activations.")
        if len(layer_sizes) < 2:
            raise ValueError("Network must have at least an input and an output size.")
        if rng is None:
            rng = random.Random()
        self.layers = [
            Layer(n_in, n_out, activation, rng)
            for n_in, n_out, activation in zip(layer_sizes, layer_sizes[1:], activations)
        ]

    def predict(self, inputs: Matrix) -> Matrix:
        output = inputs
        for layer in self.layers:
            output = layer.forward(output)
        return output

    def mean_squared_error(self, predicted: Matrix, actual: Matrix) -> float:
        if predicted.shape != actual.shape:
            raise ValueError("MSE: Predicted and actual matrices dimensions mismatch.")
        values = [v for row in predicted.subtract(actual).tolist() for v in row]
        if not values:
            return 0.0
        return sum(v * v for v in values) / len(values)

    def mean_squared_error_derivative(self, predicted: Matrix, actual: Matrix) -> Matrix:
        rows, cols = predicted.shape
        count = rows * cols
        if count == 0:
            return Matrix(rows, cols)
        return predicted.subtract(actual).multiply_scalar(2.0 / count)

    def backpropagate_sample(self, output_error: Matrix) -> None:
        """Propagate an output gradient back through every layer."""
        error = output_error
        for layer in reversed(self.layers):
            error = layer.backward(error)

    def train_on_batch(
        self,
        inputs: Sequence[Matrix],
        targets: Sequence[Matrix],
        learning_rate: float,
    ) -> float:
        """Run one gradient step over a batch and return its mean loss before the step."""
        if not inputs or not targets:
            raise ValueError("Batch inputs or targets cannot be empty.")
        if len(inputs) != len(targets):
            raise ValueError("Batch inputs and targets size mismatch.")

        for layer in self.layers:
            layer.zero_deltas()

        total_loss = 0.0
        for sample, target in zip(inputs, targets):
            predicted = self.predict(sample)
            total_loss += self.mean_squared_error(predicted, target)
            self.backpropagate_sample(self.mean_squared_error_derivative(predicted, target))
            for layer in self.layers:
                layer.accumulate_gradients()

        for layer in self.layers:
            layer.update_parameters(learning_rate, len(inputs))

        return total_loss / len(inputs)