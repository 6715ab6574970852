import copy
import json
import math
import random
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

import torch
import torch.nn as nn
from loguru import logger
from torch.utils.data import DataLoader

from . import data
from .config import TrainConfig
from .models import SentimentClassifier
from .plotting import plot_history
from .sequences import SequenceNormalizer
from .vocab import VocabularyIndex


@dataclass
class History:
    loss: List[float] = field(default_factory=list)
    accuracy: List[float] = field(default_factory=list)
    val_loss: List[float] = field(default_factory=list)
    val_accuracy: List[float] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[float]]:
        return asdict(self)


@dataclass
class TrainingArtifacts:
    vocab: VocabularyIndex
    normalizer: SequenceNormalizer
    model: SentimentClassifier
    history: History
    best_epoch: int = 0


class Trainer:
    """Orchestrates data preparation, training, evaluation, checkpointing and plotting."""

    def __init__(self, config: TrainConfig):
        """Validate the sequence settings up front and choose the device."""
        self.config = config
        self.normalizer = SequenceNormalizer(length=config.max_len)
        self.device = torch.device("cuda" if torch.cuda.is_available() and not config.cpu else "cpu")
        self.loss_fn = nn.BCEWithLogitsLoss()

    def run(self) -> Dict[str, float]:
        """End-to-end driver: load data, train with a validation split, score the test split."""
        cfg = self.config
        logger.info("device: {}", self.device)
        if cfg.seed is not None:
            random.seed(cfg.seed)
            torch.manual_seed(cfg.seed)

        word_index, train_raw, test_raw = data.load_imdb(
            cfg.data_dir, download=cfg.download, shuffle_seed=cfg.shuffle_seed
        )
        vocab = VocabularyIndex.build(word_index)
        train_examples = data.encode_reviews(train_raw, num_words=cfg.num_words)
        test_examples = data.encode_reviews(test_raw, num_words=cfg.num_words)
        self._log_samples(vocab, train_examples)

        train_part, val_part = data.split_validation(train_examples, cfg.validation_split)
        train_set = data.ReviewDataset(train_part, self.normalizer)
        val_set = data.ReviewDataset(val_part, self.normalizer)
        test_set = data.ReviewDataset(test_examples, self.normalizer)
        logger.info("train={} val={} test={} (max_len={})", len(train_set), len(val_set), len(test_set), cfg.max_len)

        artifacts = self.train(train_set, val_set, vocab)
        metrics = self.evaluate(artifacts.model, test_set)
        logger.info("test loss={:.4f} accuracy={:.4f}", metrics["loss"], metrics["accuracy"])

        self._save_report(artifacts.history, metrics, artifacts.best_epoch)
        if cfg.plot:
            plot_history(artifacts.history, cfg.out_dir)
        return metrics

    def train(self, train_set: data.ReviewDataset, val_set: data.ReviewDataset, vocab: VocabularyIndex) -> TrainingArtifacts:
        """Fit a fresh classifier, checkpointing whenever the monitored loss improves.

        Validation loss is monitored; with an empty validation set the
        training loss is used instead. The returned model carries the weights
        of the best epoch, i.e. the ones stored in ``model.pt``.
        """
        cfg = self.config
        model = SentimentClassifier(
            vocab_size=cfg.num_words,
            embed_dim=cfg.embed_dim,
            hidden_dim=cfg.hidden_dim,
            dropout=cfg.dropout,
            pad_code=self.normalizer.pad_code,
        ).to(self.device)
        artifacts = TrainingArtifacts(vocab=vocab, normalizer=self.normalizer, model=model, history=History())
        train_loader, val_loader, _ = data.build_dataloaders(train_set, val_set, cfg.batch_size, seed=cfg.seed)
        optimizer = torch.optim.Adam(model.parameters(), lr=cfg.lr)

        best = float("inf")
        best_state = None
        for epoch in range(1, cfg.epochs + 1):
            start_time = time.time()
            loss, acc = self._run_epoch(model, train_loader, optimizer)
            val_loss, val_acc = self._run_epoch(model, val_loader, None)
            history = artifacts.history
            history.loss.append(loss)
            history.accuracy.append(acc)
            history.val_loss.append(val_loss)
            history.val_accuracy.append(val_acc)
            logger.info(
                "[epoch {:03d}] loss={:.4f} acc={:.4f} val_loss={:.4f} val_acc={:.4f} ({:.1f}s)",
                epoch, loss, acc, val_loss, val_acc, time.time() - start_time,
            )

            monitored = loss if math.isnan(val_loss) else val_loss
            if monitored < best:
                best = monitored
                best_state = copy.deepcopy(model.state_dict())
                artifacts.best_epoch = epoch
                self._save_checkpoint(artifacts)

        if best_state is not None:
            model.load_state_dict(best_state)
            logger.info("restored weights from epoch {} (monitored loss {:.4f})", artifacts.best_epoch, best)
        return artifacts

    def evaluate(self, model: SentimentClassifier, dataset: data.ReviewDataset) -> Dict[str, float]:
        loader = DataLoader(dataset, batch_size=self.config.batch_size, shuffle=False)
        loss, acc = self._run_epoch(model.to(self.device), loader, None)
        return {"loss": loss, "accuracy": acc}

    def _run_epoch(self, model, loader, optimizer) -> Tuple[float, float]:
        """One pass over ``loader``; parameters are updated only when an optimizer is given."""
        train_mode = optimizer is not None
        model.train(train_mode)
        total_loss, correct, seen = 0.0, 0, 0
        with torch.set_grad_enabled(train_mode):
            for x, y in loader:
                x = x.to(self.device)
                y = y.to(self.device)
                logits = model(x)
                loss = self.loss_fn(logits, y)

                if train_mode:
                    optimizer.zero_grad(set_to_none=True)
                    loss.backward()
                    optimizer.step()

                total_loss += loss.item() * y.numel()
                correct += ((logits > 0).float() == y).sum().item()
                seen += y.numel()
        if seen == 0:
            return float("nan"), float("nan")
        return total_loss / seen, correct / seen

    def _log_samples(self, vocab: VocabularyIndex, examples) -> None:
        for codes, label in examples[: self.config.num_samples]:
            logger.info("label={} review: {}", label, vocab.decode(codes))

    def _save_checkpoint(self, artifacts: TrainingArtifacts) -> None:
        """Persist weights plus everything needed to rebuild vocabulary and normalizer."""
        out_dir = Path(self.config.out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        ckpt_path = out_dir / "model.pt"
        model = artifacts.model
        torch.save(
            {
                "model_state": model.state_dict(),
                "config": {
                    "vocab_size": model.embedding.num_embeddings,
                    "embed_dim": model.embedding.embedding_dim,
                    "hidden_dim": model.hidden.out_features,
                    "pad_code": model.pad_code,
                },
                "normalizer": {
                    "length": artifacts.normalizer.length,
                    "pad_code": artifacts.normalizer.pad_code,
                },
                "word_index": artifacts.vocab.raw_mapping(),
            },
            ckpt_path,
        )
        logger.debug("saved checkpoint to {}", ckpt_path)

    def _save_report(self, history: History, metrics: Dict[str, float], best_epoch: int) -> None:
        out_dir = Path(self.config.out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        report_path = out_dir / "history.json"
        with open(report_path, "w", encoding="utf-8") as handle:
            json.dump({"history": history.to_dict(), "best_epoch": best_epoch, "test": metrics}, handle, indent=2)
        logger.info("wrote training report to {}", report_path)
