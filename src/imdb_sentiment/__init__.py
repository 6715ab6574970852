"""Sentiment classification of pre-tokenized IMDB movie reviews."""
from .sequences import InvalidLengthError, SequenceNormalizer, normalize
from .vocab import (
    DuplicateCodeError,
    UnknownTokenError,
    VocabularyError,
    VocabularyIndex,
)

__all__ = [
    "DuplicateCodeError",
    "InvalidLengthError",
    "SequenceNormalizer",
    "UnknownTokenError",
    "VocabularyError",
    "VocabularyIndex",
    "normalize",
]
