import argparse
import sys

from loguru import logger

from .config import TrainConfig
from .trainer import Trainer


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Train a small embedding-bag sentiment classifier on IMDB movie reviews."
    )

    # General setup
    parser.add_argument("--data_dir", type=str, default="./data", help="Directory holding imdb.npz and the word index.")
    parser.add_argument("--out_dir", type=str, default="./checkpoints", help="Where to save checkpoints and plots.")
    parser.add_argument("--download", action="store_true", help="Download the IMDB files into --data_dir if missing.")
    parser.add_argument("--cpu", action="store_true", help="Force CPU even if CUDA is available.")
    parser.add_argument("--log_level", type=str, default="INFO", help="Loguru level for stderr output.")

    # Vocabulary / sequences
    parser.add_argument("--num_words", type=int, default=10_000, help="Keep the most frequent words; rarer ones become <UNK>.")
    parser.add_argument("--max_len", type=int, default=256, help="Pad or truncate every review to this many tokens.")

    # Model
    parser.add_argument("--embed_dim", type=int, default=16, help="Embedding dimension.")
    parser.add_argument("--hidden_dim", type=int, default=16, help="Width of the hidden dense layer.")
    parser.add_argument("--dropout", type=float, default=0.0, help="Dropout probability after pooling.")

    # Training
    parser.add_argument("--epochs", type=int, default=40, help="Training epochs.")
    parser.add_argument("--batch_size", type=int, default=512, help="Reviews per optimisation step.")
    parser.add_argument("--lr", type=float, default=1e-3, help="Adam learning rate.")
    parser.add_argument(
        "--validation_split", type=float, default=0.4, help="Fraction of training reviews held out for validation."
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed for weight init and shuffling.")
    parser.add_argument(
        "--shuffle_seed", type=int, default=113, help="Seed for permuting the stored reviews before splitting."
    )

    # Reporting
    parser.add_argument("--num_samples", type=int, default=2, help="Decoded training reviews to log before training.")
    parser.add_argument("--no_plot", action="store_true", help="Skip writing learning-curve plots.")

    return parser


def parse_args(argv=None) -> argparse.Namespace:
    return build_arg_parser().parse_args(argv)


def config_from_args(args: argparse.Namespace) -> TrainConfig:
    values = vars(args).copy()
    values.pop("log_level", None)
    values["plot"] = not values.pop("no_plot", False)
    return TrainConfig(**values)


def main(argv=None) -> None:
    args = parse_args(argv)
    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper())
    trainer = Trainer(config_from_args(args))
    trainer.run()


if __name__ == "__main__":
    main()
