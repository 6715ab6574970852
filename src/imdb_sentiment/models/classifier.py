import torch
import torch.nn as nn

from ..vocab import PAD_CODE


class SentimentClassifier(nn.Module):
    """Embedding -> masked average pooling -> dense ReLU -> single logit."""

    def __init__(
        self,
        vocab_size: int,
        embed_dim: int = 16,
        hidden_dim: int = 16,
        dropout: float = 0.0,
        pad_code: int = PAD_CODE,
    ):
        super().__init__()
        self.pad_code = pad_code
        self.embedding = nn.Embedding(vocab_size, embed_dim, padding_idx=pad_code)
        self.dropout = nn.Dropout(dropout)
        self.hidden = nn.Linear(embed_dim, hidden_dim)
        self.out = nn.Linear(hidden_dim, 1)

    def pool(self, ids: torch.Tensor) -> torch.Tensor:
        """Average token embeddings over the non-pad positions of each review."""
        mask = (ids != self.pad_code).unsqueeze(-1).float()
        summed = (self.embedding(ids) * mask).sum(dim=1)
        return summed / mask.sum(dim=1).clamp(min=1.0)

    def forward(self, ids: torch.Tensor) -> torch.Tensor:
        """Return one raw logit per review, shape ``(batch,)``."""
        x = self.dropout(self.pool(ids))
        x = torch.relu(self.hidden(x))
        return self.out(x).squeeze(-1)

    @torch.no_grad()
    def predict_proba(self, ids: torch.Tensor) -> torch.Tensor:
        """Probability that each review is positive."""
        self.eval()
        return torch.sigmoid(self.forward(ids))
