from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class TrainConfig(BaseModel):
    """Settings for one training run; defaults follow the classic IMDB tutorial setup."""

    data_dir: Path = Path("./data")
    out_dir: Path = Path("./checkpoints")
    download: bool = False
    cpu: bool = False

    # Vocabulary / sequences. max_len is checked by SequenceNormalizer.
    num_words: int = Field(10_000, gt=4)
    max_len: int = 256

    # Model
    embed_dim: int = Field(16, gt=0)
    hidden_dim: int = Field(16, gt=0)
    dropout: float = Field(0.0, ge=0.0, lt=1.0)

    # Training
    epochs: int = Field(40, gt=0)
    batch_size: int = Field(512, gt=0)
    lr: float = Field(1e-3, gt=0.0)
    validation_split: float = Field(0.4, ge=0.0, lt=1.0)
    # Permutation applied to the stored reviews, as in the Keras loader; None keeps file order.
    shuffle_seed: Optional[int] = 113
    seed: Optional[int] = 42

    # Reporting
    num_samples: int = Field(2, ge=0)
    plot: bool = True
