import argparse
import re
import sys
from pathlib import Path
from typing import List, Tuple

import torch
from loguru import logger

from .models import SentimentClassifier
from .sequences import SequenceNormalizer
from .vocab import START, UNK_CODE, VocabularyIndex

WORD_RE = re.compile(r"[a-z0-9']+")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Score a movie review with a trained sentiment checkpoint.")
    parser.add_argument("review", type=str, help="Review text to classify.")
    parser.add_argument("--checkpoint", type=str, default="checkpoints/model.pt", help="Path to model checkpoint.")
    parser.add_argument("--cpu", action="store_true", help="Force CPU inference.")
    return parser


def tokenize(text: str) -> List[str]:
    """Lower-case and split review text, prefixed with the <START> marker."""
    return [START] + WORD_RE.findall(text.lower())


def load_checkpoint(path: Path, device: torch.device) -> Tuple[VocabularyIndex, SequenceNormalizer, SentimentClassifier]:
    ckpt = torch.load(path, map_location=device)
    config = ckpt["config"]
    vocab = VocabularyIndex.build(ckpt["word_index"])
    normalizer = SequenceNormalizer(**ckpt["normalizer"])
    model = SentimentClassifier(
        vocab_size=config["vocab_size"],
        embed_dim=config["embed_dim"],
        hidden_dim=config["hidden_dim"],
        pad_code=config["pad_code"],
    )
    model.load_state_dict(ckpt["model_state"])
    model.to(device)
    model.eval()
    return vocab, normalizer, model


def score_review(
    text: str, vocab: VocabularyIndex, normalizer: SequenceNormalizer, model: SentimentClassifier
) -> Tuple[float, List[int]]:
    """Return the positive-class probability and the normalized codes fed to the model."""
    codes = vocab.encode_words(tokenize(text))
    vocab_size = model.embedding.num_embeddings
    codes = normalizer.normalize([code if code < vocab_size else UNK_CODE for code in codes])
    device = next(model.parameters()).device
    ids = torch.tensor([codes], dtype=torch.long, device=device)
    return model.predict_proba(ids).item(), codes


def main(argv=None):
    logger.remove()
    logger.add(sys.stderr, level="INFO")
    args = build_parser().parse_args(argv)
    device = torch.device("cuda" if torch.cuda.is_available() and not args.cpu else "cpu")
    logger.info("Loading checkpoint {} on {}", args.checkpoint, device)

    path = Path(args.checkpoint)
    if not path.exists():
        raise FileNotFoundError(f"Checkpoint not found at {path}")

    vocab, normalizer, model = load_checkpoint(path, device=device)
    prob, codes = score_review(args.review, vocab, normalizer, model)
    logger.info("Model input: {}", vocab.decode(codes))
    label = "positive" if prob >= 0.5 else "negative"
    print(f"{label} ({prob:.4f})")


if __name__ == "__main__":
    main()
