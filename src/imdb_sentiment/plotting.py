from pathlib import Path
from typing import Tuple

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
from loguru import logger  # noqa: E402


def _plot_curve(train, val, label: str, out: Path) -> None:
    epochs = range(1, len(train) + 1)
    plt.figure()
    plt.plot(epochs, train, "o-", label=f"Training {label}")
    plt.plot(epochs, val, "s-", label=f"Validation {label}")
    plt.title(f"Training and validation {label}")
    plt.xlabel("Epoch")
    plt.ylabel(label.capitalize())
    plt.legend()
    out.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(out, bbox_inches="tight")
    plt.close()


def plot_history(history, out_dir) -> Tuple[Path, Path]:
    """Write loss.png and accuracy.png learning curves into ``out_dir``."""
    out_dir = Path(out_dir)
    loss_path = out_dir / "loss.png"
    acc_path = out_dir / "accuracy.png"
    _plot_curve(history.loss, history.val_loss, "loss", loss_path)
    _plot_curve(history.accuracy, history.val_accuracy, "accuracy", acc_path)
    logger.info("saved learning curves to {} and {}", loss_path, acc_path)
    return loss_path, acc_path
