import struct

import pytest

from mnistnet.mnist import MNISTDataset, MNISTError, load, read_images, read_labels


def write_images(path, images, rows, cols, magic=2051, count=None):
    with open(path, "wb") as stream:
        total = len(images) if count is None else count
        stream.write(struct.pack(">iiii", magic, total, rows, cols))
        for image in images:
            stream.write(bytes(image))
    return str(path)


def write_labels(path, labels, magic=2049, count=None):
    with open(path, "wb") as stream:
        total = len(labels) if count is None else count
        stream.write(struct.pack(">ii", magic, total))
        stream.write(bytes(labels))
    return str(path)


IMAGES = [[0, 255, 51, 102], [255, 255, 0, 0], [10, 20, 30, 40]]


def test_read_images_scales_and_flattens(tmp_path):
    path = write_images(tmp_path / "img", IMAGES, 2, 2)
    images, rows, cols = read_images(path)
    assert (rows, cols) == (2, 2)
    assert len(images) == 3
    for image, raw in zip(images, IMAGES):
        assert image.shape == (4, 1)
        assert [row[0] for row in image.tolist()] == pytest.approx([b / 255.0 for b in raw])
    assert images[0][1, 0] == 1.0
    assert images[0][0, 0] == 0.0


def test_read_images_respects_max_items(tmp_path):
    path = write_images(tmp_path / "img", IMAGES, 2, 2)
    images, _, _ = read_images(path, 2)
    assert len(images) == 2
    all_images, _, _ = read_images(path, 10)
    assert len(all_images) == 3


def test_read_images_bad_magic(tmp_path):
    path = write_images(tmp_path / "img", IMAGES, 2, 2, magic=2049)
    with pytest.raises(MNISTError, match="Expected 2051"):
        read_images(path)


def test_read_images_missing_file(tmp_path):
    with pytest.raises(MNISTError, match="Cannot open image file"):
        read_images(str(tmp_path / "absent"))


def test_read_images_truncated_data(tmp_path):
    path = write_images(tmp_path / "img", IMAGES, 2, 2, count=5)
    with pytest.raises(MNISTError, match="image 3"):
        read_images(path)


def test_read_images_short_header(tmp_path):
    path = tmp_path / "img"
    path.write_bytes(b"\x00\x00")
    with pytest.raises(MNISTError, match="4 bytes"):
        read_images(str(path))


def test_read_labels_one_hot(tmp_path):
    path = write_labels(tmp_path / "lbl", [3, 0, 9])
    labels = read_labels(path)
    assert len(labels) == 3
    for label, digit in zip(labels, [3, 0, 9]):
        column = [row[0] for row in label.tolist()]
        assert len(column) == 10
        assert column.index(1.0) == digit
        assert sum(column) == 1.0


def test_read_labels_invalid_value_warns(tmp_path, capsys):
    path = write_labels(tmp_path / "lbl", [12])
    labels = read_labels(path)
    assert [row[0] for row in labels[0].tolist()] == [0.0] * 10
    assert "Invalid label 12" in capsys.readouterr().err


def test_read_labels_bad_magic_and_truncation(tmp_path):
    bad = write_labels(tmp_path / "bad", [1], magic=2051)
    with pytest.raises(MNISTError, match="Expected 2049"):
        read_labels(bad)
    short = write_labels(tmp_path / "short", [1, 2], count=4)
    with pytest.raises(MNISTError, match="label 2"):
        read_labels(short)


def test_read_labels_missing_file(tmp_path):
    with pytest.raises(MNISTError, match="Cannot open label file"):
        read_labels(str(tmp_path / "absent"))


def test_load_pairs_images_and_labels(tmp_path):
    images = write_images(tmp_path / "img", IMAGES, 2, 2)
    labels = write_labels(tmp_path / "lbl", [1, 2, 3])
    dataset = load(images, labels)
    assert isinstance(dataset, MNISTDataset)
    assert dataset.number_of_items == 3
    assert (dataset.image_rows, dataset.image_cols) == (2, 2)
    assert dataset.labels[2][3, 0] == 1.0


def test_load_with_limit(tmp_path):
    images = write_images(tmp_path / "img", IMAGES, 2, 2)
    labels = write_labels(tmp_path / "lbl", [1, 2, 3])
    dataset = load(images, labels, 1)
    assert dataset.number_of_items == 1
    assert len(dataset.labels) == 1


def test_load_mismatch(tmp_path):
    images = write_images(tmp_path / "img", IMAGES, 2, 2)
    labels = write_labels(tmp_path / "lbl", [1, 2])
    with pytest.raises(MNISTError, match="Mismatch"):
        load(images, labels)