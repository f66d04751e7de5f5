import random
import struct

import pytest

from mnistnet.cli import evaluate, label_digit, main, predict_digit, train_epoch
from mnistnet.matrix import Matrix
from mnistnet.mnist import MNISTDataset
from mnistnet.network import Network


def column(*values):
    return Matrix.from_rows([v] for v in values)


def identity_network():
    network = Network([3, 3], ["relu"], rng=random.Random(0))
    layer = network.layers[0]
    layer.weights = Matrix.from_rows([[1, 0, 0], [0, 1, 0], [0, 0, 1]])
    layer.biases = Matrix(3, 1)
    return network


def test_label_digit_finds_one_hot_position():
    assert label_digit(column(0, 0, 1, 0)) == 2
    assert label_digit(column(1, 0, 0)) == 0


def test_label_digit_without_one_returns_minus_one():
    assert label_digit(column(0, 0.5, 0)) == -1


def test_predict_digit_picks_largest_output():
    network = identity_network()
    assert predict_digit(network, column(0.1, 0.9, 0.3)) == 1
    assert predict_digit(network, column(0.7, 0.2, 0.3)) == 0


def test_predict_digit_ties_keep_first():
    network = identity_network()
    assert predict_digit(network, column(0.5, 0.5, 0.5)) == 0


def test_evaluate_counts_correct_predictions():
    network = identity_network()
    dataset = MNISTDataset(
        images=[column(0.9, 0.1, 0.0), column(0.1, 0.2, 0.8), column(0.6, 0.1, 0.1)],
        labels=[column(1, 0, 0), column(0, 0, 1), column(0, 1, 0)],
        image_rows=3,
        image_cols=1,
    )
    assert evaluate(network, dataset) == (2, 3)


def test_evaluate_empty_dataset():
    assert evaluate(identity_network(), MNISTDataset()) == (0, 0)


def small_dataset():
    return MNISTDataset(
        images=[column(1, 0), column(0, 1)],
        labels=[column(1, 0), column(0, 1)],
        image_rows=2,
        image_cols=1,
    )


def test_train_epoch_reduces_loss():
    network = Network([2, 2], ["sigmoid"], rng=random.Random(1))
    rng = random.Random(2)
    dataset = small_dataset()
    losses = [train_epoch(network, dataset, 2.0, 2, rng) for _ in range(30)]
    assert all(loss >= 0.0 for loss in losses)
    assert losses[-1] < losses[0]


def test_train_epoch_is_deterministic_for_same_seeds():
    results = []
    for _ in range(2):
        network = Network([2, 3, 2], ["relu", "sigmoid"], rng=random.Random(5))
        rng = random.Random(9)
        results.append([train_epoch(network, small_dataset(), 0.5, 1, rng) for _ in range(3)])
    assert results[0] == results[1]


def test_train_epoch_rejects_bad_batch_size():
    network = Network([2, 2], ["sigmoid"], rng=random.Random(1))
    with pytest.raises(ValueError):
        train_epoch(network, small_dataset(), 0.1, 0, random.Random(0))


def test_train_epoch_empty_dataset():
    network = Network([2, 2], ["sigmoid"], rng=random.Random(1))
    assert train_epoch(network, MNISTDataset(), 0.1, 4, random.Random(0)) == 0.0


def write_idx(tmp_path, name, count):
    images = tmp_path / f"{name}-images"
    labels = tmp_path / f"{name}-labels"
    with open(images, "wb") as stream:
        stream.write(struct.pack(">iiii", 2051, count, 28, 28))
        for i in range(count):
            stream.write(bytes((i * 7 + j) % 256 for j in range(784)))
    with open(labels, "wb") as stream:
        stream.write(struct.pack(">ii", 2049, count))
        stream.write(bytes(i % 10 for i in range(count)))
    return str(images), str(labels)


def test_main_trains_and_reports(tmp_path, capsys):
    train_images, train_labels = write_idx(tmp_path, "train", 3)
    test_images, test_labels = write_idx(tmp_path, "test", 2)
    code = main([
        "--train-images", train_images,
        "--train-labels", train_labels,
        "--test-images", test_images,
        "--test-labels", test_labels,
        "--epochs", "1",
        "--batch-size", "2",
    ])
    out = capsys.readouterr().out
    assert code == 0
    assert "Using fixed random seed: 123" in out
    assert "Network: Input(784) -> relu(100) -> sigmoid(10)" in out
    assert "Training on 3 samples." in out
    assert "Final Test Accuracy: " in out
    assert "/2)" in out


def test_main_reports_missing_data(tmp_path, capsys):
    code = main(["--train-images", str(tmp_path / "absent")])
    assert code == 1
    assert "Error loading MNIST data" in capsys.readouterr().err