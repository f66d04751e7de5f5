"""Reader for the MNIST IDX image and label files."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator

import numpy as np

from .matrix import Matrix

_IMAGE_MAGIC = 0x00000803
_LABEL_MAGIC = 0x00000801
_NUM_CLASSES = 10
_PROGRESS_STEP = 10000


class MNISTError(Exception):
    """Raised when an MNIST file cannot be opened or is malformed."""


@dataclass
class MNISTDataset:
    """Images as flattened column vectors and labels as one-hot columns."""

    images: list[Matrix] = field(default_factory=list)
    labels: list[Matrix] = field(default_factory=list)
    image_rows: int = 0
    image_cols: int = 0

    @property
    def number_of_items(self) -> int:
        return len(self.images)


@contextmanager
def _open(path: str, kind: str) -> Iterator[BinaryIO]:
    try:
        stream = open(path, "rb")
    except OSError as exc:
        raise MNISTError(f"Cannot open {kind} file: {path}") from exc
    with stream:
        yield stream


def _read_int(stream: BinaryIO) -> int:
    data = stream.read(4)
    if len(data) != 4:
        raise MNISTError("Failed to read 4 bytes for integer.")
    return int.from_bytes(data, "big", signed=True)


def _check_magic(stream: BinaryIO, expected: int, kind: str, path: str) -> None:
    magic = _read_int(stream)
    if magic != expected:
        raise MNISTError(
            f"Invalid magic number in {kind} file: {path}. "
            f"Expected {expected}, got {magic}"
        )


def _limit(count: int, max_items: int) -> int:
    return max_items if 0 < max_items < count else count


def _report_progress(done: int, total: int, what: str) -> None:
    if done % _PROGRESS_STEP == 0 and total > _PROGRESS_STEP:
        print(f"Loaded {done}/{total} {what}...")


def _column(values: np.ndarray) -> Matrix:
    if values.size == 0:
        return Matrix(0, 1)
    return Matrix.from_rows((float(v),) for v in values)


def read_images(path: str, max_items: int = 0) -> tuple[list[Matrix], int, int]:
    """Read an IDX3 image file; return the images and their row and column counts.

    Pixels are scaled to [0, 1] and each image is flattened to a column vector.
    A positive ``max_items`` smaller than the file's count limits how many are read.
    """
    with _open(path, "image") as stream:
        _check_magic(stream, _IMAGE_MAGIC, "image", path)
        count = _read_int(stream)
        rows = _read_int(stream)
        cols = _read_int(stream)
        to_read = _limit(count, max_items)
        print(f"Loading {to_read} images ({rows}x{cols}) from {path}")

        image_size = rows * cols
        images: list[Matrix] = []
        for index in range(to_read):
            buffer = stream.read(image_size)
            if len(buffer) != image_size:
                raise MNISTError(
                    f"Failed to read image data for image {index} from {path}"
                )
            pixels = np.frombuffer(buffer, dtype=np.uint8).astype(np.float64) / 255.0
            images.append(_column(pixels))
            _report_progress(index + 1, to_read, "images")
    return images, rows, cols


def read_labels(path: str, max_items: int = 0) -> list[Matrix]:
    """Read an IDX1 label file as one-hot 10x1 columns.

    A label outside 0..9 gives an all-zero column and a warning on stderr.
    """
    with _open(path, "label") as stream:
        _check_magic(stream, _LABEL_MAGIC, "label", path)
        count = _read_int(stream)
        to_read = _limit(count, max_items)
        print(f"Loading {to_read} labels from {path}")

        labels: list[Matrix] = []
        for index in range(to_read):
            byte = stream.read(1)
            if len(byte) != 1:
                raise MNISTError(
                    f"Failed to read label data for label {index} from {path}"
                )
            value = byte[0]
            one_hot = Matrix(_NUM_CLASSES, 1, 0.0)
            if value < _NUM_CLASSES:
                one_hot[value, 0] = 1.0
            else:
                print(
                    f"Warning: Invalid label {value} encountered at index {index}",
                    file=sys.stderr,
                )
            labels.append(one_hot)
            _report_progress(index + 1, to_read, "labels")
    return labels


def load(image_path: str, label_path: str, max_items: int = 0) -> MNISTDataset:
    """Load matching image and label files into a dataset."""
    images, rows, cols = read_images(image_path, max_items)
    labels = read_labels(label_path, max_items)
    if len(images) != len(labels):
        raise MNISTError(
            f"Mismatch between number of loaded images ({len(images)}) "
            f"and labels ({len(labels)})."
        )
    dataset = MNISTDataset(images=images, labels=labels, image_rows=rows, image_cols=cols)

    print(f"Successfully loaded {dataset.number_of_items} image-label pairs.")
    if images:
        first_rows, first_cols = images[0].shape
        print(
            f"Image dimensions: {rows}x{cols} "
            f"(flattened to {first_rows}x{first_cols})"
        )
    if labels:
        label_rows, label_cols = labels[0].shape
        print(f"Label dimensions (one-hot): {label_rows}x{label_cols}")
    return dataset