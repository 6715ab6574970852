import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import torch
from loguru import logger
from torch.utils.data import DataLoader, Dataset

from .downloader import REVIEWS_FILE, WORD_INDEX_FILE, ImdbDownloader
from .sequences import SequenceNormalizer
from .vocab import INDEX_OFFSET, START_CODE, UNK_CODE

Example = Tuple[List[int], int]
SHUFFLE_SEED = 113


def load_word_index(path) -> Dict[str, int]:
    """Read the raw (unshifted) word -> rank table."""
    with open(path, "r", encoding="utf-8") as handle:
        word_index = json.load(handle)
    if not isinstance(word_index, dict):
        raise ValueError(f"Expected a JSON object in {path}, got {type(word_index).__name__}")
    logger.info("Loaded word index with {} entries from {}", len(word_index), path)
    return word_index


def _pairs(xs, ys) -> List[Example]:
    if len(xs) != len(ys):
        raise ValueError(f"Got {len(xs)} reviews but {len(ys)} labels")
    return [([int(code) for code in x], int(y)) for x, y in zip(xs, ys)]


def load_reviews(path, seed: Optional[int] = SHUFFLE_SEED) -> Tuple[List[Example], List[Example]]:
    """Return ``(train, test)`` lists of ``(raw_codes, label)`` pairs from an ``imdb.npz`` archive.

    The archive stores reviews grouped by label, so both splits are permuted
    with one ``RandomState(seed)`` (train first, then test), matching the
    Keras loader. ``seed=None`` keeps file order.
    """
    with np.load(path, allow_pickle=True) as archive:
        x_train, y_train = archive["x_train"], archive["y_train"]
        x_test, y_test = archive["x_test"], archive["y_test"]
    if seed is not None:
        rng = np.random.RandomState(seed)
        order = np.arange(len(x_train))
        rng.shuffle(order)
        x_train, y_train = x_train[order], y_train[order]
        order = np.arange(len(x_test))
        rng.shuffle(order)
        x_test, y_test = x_test[order], y_test[order]
    train = _pairs(x_train, y_train)
    test = _pairs(x_test, y_test)
    logger.info("Loaded {} training and {} test reviews from {}", len(train), len(test), path)
    return train, test


def load_imdb(
    data_dir, download: bool = False, shuffle_seed: Optional[int] = SHUFFLE_SEED
) -> Tuple[Dict[str, int], List[Example], List[Example]]:
    """Load the word index and both review splits, fetching them first when requested."""
    ddir = Path(data_dir)
    if download:
        ImdbDownloader(name="imdb_downloader", data_dir=ddir).compute()
    for filename in (REVIEWS_FILE, WORD_INDEX_FILE):
        if not (ddir / filename).exists():
            raise FileNotFoundError(f"Expected file missing: {ddir / filename}. Use --download to fetch it.")
    word_index = load_word_index(ddir / WORD_INDEX_FILE)
    train, test = load_reviews(ddir / REVIEWS_FILE, seed=shuffle_seed)
    return word_index, train, test


def encode_reviews(pairs: Iterable[Example], num_words: int) -> List[Example]:
    """Shift raw codes into vocabulary codes.

    Each review gets a leading ``<START>``; codes at or above ``num_words``
    collapse to ``<UNK>``.
    """
    encoded: List[Example] = []
    for raw_codes, label in pairs:
        if label not in (0, 1):
            raise ValueError(f"Labels must be 0 or 1, got {label!r}")
        codes = [START_CODE]
        for raw in raw_codes:
            code = raw + INDEX_OFFSET
            codes.append(code if code < num_words else UNK_CODE)
        encoded.append((codes, label))
    return encoded


def split_validation(examples: Sequence[Example], validation_split: float) -> Tuple[List[Example], List[Example]]:
    """Hold out the leading ``validation_split`` fraction of examples for validation."""
    if not 0.0 <= validation_split < 1.0:
        raise ValueError(f"validation_split must be in [0, 1), got {validation_split}")
    cut = int(len(examples) * validation_split)
    return list(examples[cut:]), list(examples[:cut])


class ReviewDataset(Dataset):
    """Labelled reviews normalized to a fixed length."""

    def __init__(self, examples: Sequence[Example], normalizer: SequenceNormalizer):
        self.normalizer = normalizer
        self.inputs = normalizer.to_tensor([codes for codes, _ in examples])
        self.labels = torch.tensor([label for _, label in examples], dtype=torch.float32)

    def __len__(self) -> int:
        return len(self.labels)

    def __getitem__(self, idx: int) -> Tuple[torch.Tensor, torch.Tensor]:
        return self.inputs[idx], self.labels[idx]


def build_dataloaders(
    train_set: ReviewDataset,
    val_set: ReviewDataset,
    batch_size: int,
    test_set: Optional[ReviewDataset] = None,
    seed: Optional[int] = None,
) -> Tuple[DataLoader, DataLoader, Optional[DataLoader]]:
    """Create loaders; only the training loader shuffles."""
    generator = None
    if seed is not None:
        generator = torch.Generator()
        generator.manual_seed(seed)
    train_loader = DataLoader(train_set, batch_size=batch_size, shuffle=True, generator=generator)
    val_loader = DataLoader(val_set, batch_size=batch_size, shuffle=False)
    test_loader = None
    if test_set is not None:
        test_loader = DataLoader(test_set, batch_size=batch_size, shuffle=False)
    return train_loader, val_loader, test_loader
