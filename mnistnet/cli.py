"""Train and evaluate a digit classifier on the MNIST data set."""

from __future__ import annotations

import argparse
import random
import sys
import time
from typing import Sequence

from .matrix import Matrix
from .mnist import MNISTDataset, MNISTError, load
from .network import Network

LAYER_SIZES = (784, 100, 10)
ACTIVATIONS = ("relu", "sigmoid")


def predict_digit(network: Network, image: Matrix) -> int:
    """The index of the largest output of the network, or -1 if it has none."""
    prediction = network.predict(image)
    rows, cols = prediction.shape
    if rows == 0 or cols == 0:
        print(
            f"Warning: predict_digit received an empty prediction vector ({rows}x{cols}).",
            file=sys.stderr,
        )
        return -1
    best_index, best_value = 0, -1.0
    for index, row in enumerate(prediction.tolist()):
        if row[0] > best_value:
            best_index, best_value = index, row[0]
    return best_index


def label_digit(label: Matrix) -> int:
    """The position of the 1.0 in a one-hot label column, or -1."""
    for index, row in enumerate(label.tolist()):
        if row[0] == 1.0:
            return index
    return -1


def evaluate(network: Network, dataset: MNISTDataset) -> tuple[int, int]:
    """Return (correct predictions, number of samples) over the dataset."""
    correct = sum(
        predict_digit(network, image) == label_digit(label)
        for image, label in zip(dataset.images, dataset.labels)
    )
    return correct, len(dataset.images)


def train_epoch(
    network: Network,
    dataset: MNISTDataset,
    learning_rate: float,
    batch_size: int,
    rng: random.Random,
) -> float:
    """Train over a shuffled pass of the dataset; return the average per-sample loss."""
    if batch_size <= 0:
        raise ValueError("Batch size must be positive.")
    indices = list(range(dataset.number_of_items))
    rng.shuffle(indices)

    total_loss = 0.0
    for start in range(0, len(indices), batch_size):
        batch = indices[start:start + batch_size]
        inputs = [dataset.images[i] for i in batch]
        targets = [dataset.labels[i] for i in batch]
        total_loss += network.train_on_batch(inputs, targets, learning_rate) * len(batch)

    return total_loss / len(indices) if indices else 0.0


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mnistnet", description="Train a dense network on MNIST digits."
    )
    parser.add_argument("--train-images", default="train-images-idx3-ubyte")
    parser.add_argument("--train-labels", default="train-labels-idx1-ubyte")
    parser.add_argument("--test-images", default="t10k-images-idx3-ubyte")
    parser.add_argument("--test-labels", default="t10k-labels-idx1-ubyte")
    parser.add_argument("--max-train", type=int, default=60000)
    parser.add_argument("--max-test", type=int, default=10000)
    parser.add_argument("--learning-rate", type=float, default=0.01)
    parser.add_argument("--epochs", type=int, default=20)
    parser.add_argument("--batch-size", type=int, default=32)
    parser.add_argument("--seed", type=int, default=123)
    parser.add_argument(
        "--dynamic-seed", action="store_true", help="seed from the current time"
    )
    return parser.parse_args(argv)


def _print_accuracy(prefix: str, correct: int, total: int) -> None:
    accuracy = correct / total if total else 0.0
    print(f"{prefix}{accuracy * 100.0:.4f}% ({correct}/{total})")


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    if args.dynamic_seed:
        seed = int(time.time())
        print(f"Using dynamic random seed: {seed}")
    else:
        seed = args.seed
        print(f"Using fixed random seed: {seed}")
    init_rng = random.Random(seed)
    shuffle_rng = random.Random(seed)

    try:
        print("Loading Training Data...")
        training = load(args.train_images, args.train_labels, args.max_train)
        print("Loading Test Data...")
        test = load(args.test_images, args.test_labels, args.max_test)
    except MNISTError as exc:
        print(f"Error loading MNIST data: {exc}", file=sys.stderr)
        return 1

    try:
        network = Network(LAYER_SIZES, ACTIVATIONS, init_rng)

        print("\n--- Training Started (MNIST CPU-Centric - Full Dataset) ---")
        description = f"Network: Input({LAYER_SIZES[0]})" + "".join(
            f" -> {activation}({size})"
            for activation, size in zip(ACTIVATIONS, LAYER_SIZES[1:])
        )
        print(description)
        print(
            f"Learning Rate: {args.learning_rate:g}, Epochs: {args.epochs}, "
            f"Batch Size: {args.batch_size}"
        )
        print(f"Training on {training.number_of_items} samples.")

        for epoch in range(args.epochs):
            loss = train_epoch(
                network, training, args.learning_rate, args.batch_size, shuffle_rng
            )
            print(
                f"Epoch {epoch:3d}/{args.epochs - 1}, "
                f"Average Training Loss: {loss:.8f}"
            )
            if test.images:
                correct, total = evaluate(network, test)
                _print_accuracy(f"  Test Accuracy after Epoch {epoch}: ", correct, total)
        print("--- Training Finished ---\n")

        print("--- Final Test Set Evaluation ---")
        if test.images:
            correct, total = evaluate(network, test)
            _print_accuracy("Final Test Accuracy: ", correct, total)
    except ValueError as exc:
        print(
            f"An exception occurred during network training/evaluation: {exc}",
            file=sys.stderr,
        )
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())