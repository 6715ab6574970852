import torch

from imdb_sentiment.models import SentimentClassifier


def test_forward_shape_and_probabilities():
    torch.manual_seed(0)
    model = SentimentClassifier(vocab_size=50, embed_dim=8, hidden_dim=4)
    ids = torch.randint(0, 50, (3, 12))
    logits = model(ids)
    assert logits.shape == (3,)
    probs = model.predict_proba(ids)
    assert probs.shape == (3,)
    assert torch.all((probs >= 0) & (probs <= 1))


def test_padding_does_not_change_prediction():
    torch.manual_seed(0)
    model = SentimentClassifier(vocab_size=20, embed_dim=8, hidden_dim=4)
    short = torch.tensor([[1, 5, 6, 7]])
    padded = torch.tensor([[1, 5, 6, 7, 0, 0, 0, 0]])
    assert torch.allclose(model.predict_proba(short), model.predict_proba(padded))


def test_all_padding_row_is_finite():
    model = SentimentClassifier(vocab_size=10, embed_dim=4, hidden_dim=4)
    assert torch.isfinite(model(torch.zeros((2, 5), dtype=torch.long))).all()
