from __future__ import annotations

from pathlib import Path
from typing import ClassVar, Dict, Iterable, Tuple

import requests
from loguru import logger

from .processor import Processor

KERAS_DATASETS = "https://storage.googleapis.com/tensorflow/tf-keras-datasets"
REVIEWS_FILE = "imdb.npz"
WORD_INDEX_FILE = "imdb_word_index.json"


class ImdbDownloader(Processor):
    """Fetch the pre-tokenized IMDB reviews and their raw word index."""

    data_dir: Path = Path("./data")
    timeout: float = 30.0
    chunk_size: int = 64 * 1024

    _datasources: ClassVar[Dict[str, str]] = {
        REVIEWS_FILE: f"{KERAS_DATASETS}/{REVIEWS_FILE}",
        WORD_INDEX_FILE: f"{KERAS_DATASETS}/{WORD_INDEX_FILE}",
    }

    @classmethod
    def get_datasources(cls) -> Iterable[Tuple[str, str]]:
        return cls._datasources.items()

    @staticmethod
    def is_cached(path: Path) -> bool:
        """A previous download counts only if it left a non-empty file behind."""
        return path.is_file() and path.stat().st_size > 0

    def fetch(self, url: str, path: Path) -> int:
        """Stream ``url`` into ``path`` through a ``.tmp`` sibling; returns bytes written."""
        tmp = path.with_suffix(path.suffix + ".tmp")
        written = 0
        try:
            with requests.get(url, stream=True, timeout=self.timeout) as r:
                r.raise_for_status()
                with open(tmp, "wb") as f:
                    for chunk in r.iter_content(self.chunk_size):
                        if chunk:
                            written += f.write(chunk)
            if written == 0:
                raise IOError(f"Empty response body from {url}")
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
        tmp.replace(path)
        return written

    def compute(self) -> Path:
        ddir = Path(self.data_dir)
        ddir.mkdir(parents=True, exist_ok=True)
        for filename, url in self.get_datasources():
            path = ddir / filename
            if self.is_cached(path):
                logger.debug("Found {}, skipping download", path)
                continue
            if path.exists():
                logger.warning("Discarding empty cached file {}", path)
            logger.info("Downloading {} from {}", filename, url)
            size = self.fetch(url, path)
            logger.info("Saved {} ({} bytes)", path, size)
        return ddir
