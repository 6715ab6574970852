from dataclasses import dataclass
from typing import Iterable, List, Sequence

import torch

from .vocab import PAD_CODE


class InvalidLengthError(ValueError):
    """Raised when a normalizer is configured with a non-positive target length."""


@dataclass(frozen=True)
class SequenceNormalizer:
    """Force code sequences to exactly ``length`` items.

    Longer sequences lose their tail; shorter ones are right-padded with
    ``pad_code``.
    """

    length: int
    pad_code: int = PAD_CODE

    def __post_init__(self):
        if isinstance(self.length, bool) or not isinstance(self.length, int) or self.length <= 0:
            raise InvalidLengthError(f"Target length must be a positive integer, got {self.length!r}")
        if isinstance(self.pad_code, bool) or not isinstance(self.pad_code, int) or self.pad_code < 0:
            raise ValueError(f"pad_code must be a non-negative integer, got {self.pad_code!r}")

    def normalize(self, sequence: Sequence[int]) -> List[int]:
        codes = list(sequence[: self.length])
        if len(codes) < self.length:
            codes.extend([self.pad_code] * (self.length - len(codes)))
        return codes

    __call__ = normalize

    def normalize_batch(self, sequences: Iterable[Sequence[int]]) -> List[List[int]]:
        """Normalize every sequence independently, preserving batch order."""
        return [self.normalize(seq) for seq in sequences]

    def to_tensor(self, sequences: Iterable[Sequence[int]]) -> torch.Tensor:
        """Stack normalized sequences into a ``(N, length)`` LongTensor for the model."""
        rows = self.normalize_batch(sequences)
        if not rows:
            return torch.empty((0, self.length), dtype=torch.long)
        return torch.tensor(rows, dtype=torch.long)


def normalize(sequence: Sequence[int], length: int, pad_code: int = PAD_CODE) -> List[int]:
    """Truncate or right-pad ``sequence`` to ``length`` codes."""
    return SequenceNormalizer(length=length, pad_code=pad_code).normalize(sequence)
