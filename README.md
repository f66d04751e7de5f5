# mnistnet

A small fully connected neural network that learns to recognise handwritten
digits from the MNIST data set. It uses mean squared error, mini-batch
gradient descent, Xavier-style uniform weight initialisation and ReLU or
sigmoid activations. The only dependency is NumPy.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Training from the command line

Put the four uncompressed MNIST IDX files in the current directory:

- `train-images-idx3-ubyte`
- `train-labels-idx1-ubyte`
- `t10k-images-idx3-ubyte`
- `t10k-labels-idx1-ubyte`

Then run:

```
mnistnet
```

With no options this trains a 784 → 100 (ReLU) → 10 (sigmoid) network for
20 epochs with a learning rate of 0.01 and batches of 32, using a fixed
random seed of 123. After each epoch it prints the average training loss and
the accuracy on the test set, and at the end the final test accuracy.

Options:

| Option | Default | Meaning |
| --- | --- | --- |
| `--train-images PATH` | `train-images-idx3-ubyte` | training image file |
| `--train-labels PATH` | `train-labels-idx1-ubyte` | training label file |
| `--test-images PATH` | `t10k-images-idx3-ubyte` | test image file |
| `--test-labels PATH` | `t10k-labels-idx1-ubyte` | test label file |
| `--max-train N` | `60000` | read at most N training samples |
| `--max-test N` | `10000` | read at most N test samples |
| `--learning-rate X` | `0.01` | gradient descent step size |
| `--epochs N` | `20` | number of passes over the training data |
| `--batch-size N` | `32` | samples per gradient step |
| `--seed N` | `123` | seed for weight initialisation and shuffling |
| `--dynamic-seed` | off | seed from the current time instead |

The command exits with status 1 if a data file cannot be opened or is
malformed, or if training fails with an invalid setting.

## Using the library

```python
import random

from mnistnet import mnist
from mnistnet.cli import evaluate, predict_digit, train_epoch
from mnistnet.network import Network

rng = random.Random(123)
net = Network([784, 100, 10], ["relu", "sigmoid"], rng)

train = mnist.load("train-images-idx3-ubyte", "train-labels-idx1-ubyte", 60000)
test = mnist.load("t10k-images-idx3-ubyte", "t10k-labels-idx1-ubyte", 10000)

loss = train_epoch(net, train, 0.01, 32, rng)
correct, total = evaluate(net, test)
digit = predict_digit(net, test.images[0])
```

### Modules

- `mnistnet.matrix` — `Matrix`, a dense matrix of floats. Build one with
  `Matrix(rows, cols, fill)` or `Matrix.from_rows(...)`; read and write
  entries with `m[r, c]`; combine with `add` (`+`), `subtract` (`-`),
  `multiply` (`a @ b`), `multiply_elements`, `multiply_scalar`, `transpose`
  and `apply`. `shape`, `tolist`, `format` and `display` inspect it. Shape
  mismatches raise `ValueError`, bad indices `IndexError`.
- `mnistnet.layer` — `Layer`, a dense layer with `"relu"` or `"sigmoid"`
  activation, and the functions `sigmoid`, `sigmoid_prime`, `relu`,
  `relu_prime`.
- `mnistnet.network` — `Network`, a stack of layers with `predict`,
  `mean_squared_error`, `mean_squared_error_derivative`,
  `backpropagate_sample` and `train_on_batch`.
- `mnistnet.mnist` — `read_images`, `read_labels` and `load` for IDX files,
  returning an `MNISTDataset`. Images are 784×1 columns scaled to `[0, 1]`,
  labels 10×1 one-hot columns (a label outside 0–9 gives an all-zero column
  and a warning on standard error). Missing or malformed files raise
  `MNISTError`.
- `mnistnet.cli` — `predict_digit`, `label_digit`, `evaluate`,
  `train_epoch` and the `main` entry point of the `mnistnet` command.

## What it does not do

Training runs on the CPU only. The package does not save or load trained
networks: the weights live only as long as the `Network` object, and the
command line tool discards them when it finishes.