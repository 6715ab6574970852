import json

import numpy as np
import pytest

WORD_INDEX = {"the": 1, "movie": 2, "was": 3, "great": 4, "awful": 5, "plot": 6, "acting": 7, "fine": 8}


def _object_array(seqs):
    arr = np.empty(len(seqs), dtype=object)
    for i, seq in enumerate(seqs):
        arr[i] = seq
    return arr


def write_imdb_files(directory, train, test):
    """Write ``(xs, ys)`` splits the way the downloaded archive stores them."""
    (x_train, y_train), (x_test, y_test) = train, test
    np.savez(
        directory / "imdb.npz",
        x_train=_object_array(x_train),
        y_train=np.array(y_train, dtype=np.int64),
        x_test=_object_array(x_test),
        y_test=np.array(y_test, dtype=np.int64),
    )
    (directory / "imdb_word_index.json").write_text(json.dumps(WORD_INDEX), encoding="utf-8")
    return directory


def make_reviews(rng, labels):
    """Filler words plus three sentiment words: 'great' for 1, 'awful' for 0."""
    xs = []
    for label in labels:
        filler = rng.choice([1, 2, 3, 6, 7, 8], size=int(rng.integers(3, 12))).tolist()
        xs.append(filler + [4 if label else 5] * 3)
    return xs, list(labels)


@pytest.fixture
def word_index():
    return dict(WORD_INDEX)


@pytest.fixture
def imdb_dir(tmp_path):
    """Tiny stand-in for the downloaded IMDB files with alternating labels."""
    rng = np.random.default_rng(0)
    train = make_reviews(rng, [i % 2 for i in range(64)])
    test = make_reviews(rng, [i % 2 for i in range(32)])
    return write_imdb_files(tmp_path, train, test)


@pytest.fixture
def grouped_imdb_dir(tmp_path):
    """Archive stored label-grouped: all negatives first, then all positives."""
    rng = np.random.default_rng(1)
    train = make_reviews(rng, [0] * 50 + [1] * 50)
    test = make_reviews(rng, [0] * 20 + [1] * 20)
    return write_imdb_files(tmp_path, train, test)


@pytest.fixture
def noisy_imdb_dir(tmp_path):
    """Labels unrelated to the text, so validation loss stops improving early."""
    rng = np.random.default_rng(2)
    train_xs, _ = make_reviews(rng, [0] * 80)
    test_xs, _ = make_reviews(rng, [0] * 40)
    train = (train_xs, rng.integers(0, 2, size=80).tolist())
    test = (test_xs, rng.integers(0, 2, size=40).tolist())
    return write_imdb_files(tmp_path, train, test)
