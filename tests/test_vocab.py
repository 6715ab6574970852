import pytest
from loguru import logger

from imdb_sentiment.vocab import (
    SENTINELS,
    UNK_CODE,
    DuplicateCodeError,
    UnknownTokenError,
    VocabularyError,
    VocabularyIndex,
)


def test_sentinels_are_fixed(word_index):
    vocab = VocabularyIndex.build(word_index)
    assert vocab.encode_token("<PAD>") == 0
    assert vocab.encode_token("<START>") == 1
    assert vocab.encode_token("<UNK>") == 2
    assert vocab.encode_token("<UNUSED>") == 3
    assert [vocab.token_for(c) for c in range(4)] == ["<PAD>", "<START>", "<UNK>", "<UNUSED>"]


def test_sentinels_present_for_empty_vocabulary():
    vocab = VocabularyIndex.build({})
    assert dict(vocab.token_to_code) == dict(SENTINELS)
    assert len(vocab) == 4


def test_raw_codes_are_shifted_by_three(word_index):
    vocab = VocabularyIndex.build(word_index)
    for token, raw in word_index.items():
        assert vocab.encode_token(token) == raw + 3
    assert len(vocab) == len(word_index) + 4


def test_sentinel_in_raw_mapping_is_ignored():
    vocab = VocabularyIndex.build({"<PAD>": 10, "film": 1})
    assert vocab.encode_token("<PAD>") == 0
    assert vocab.token_for(13) == "?"
    assert vocab.encode_token("film") == 4


def test_duplicate_raw_codes_rejected():
    with pytest.raises(DuplicateCodeError):
        VocabularyIndex.build({"good": 5, "bad": 5})


def test_raw_code_zero_collides_with_sentinel():
    with pytest.raises(DuplicateCodeError):
        VocabularyIndex.build({"zero": 0})


@pytest.mark.parametrize("bad", [-1, 1.5, "3", None, True])
def test_malformed_raw_code_rejected(bad):
    with pytest.raises(VocabularyError):
        VocabularyIndex.build({"word": bad})


def test_encode_unknown_token_raises(word_index):
    vocab = VocabularyIndex.build(word_index)
    with pytest.raises(UnknownTokenError):
        vocab.encode_token("nonexistent")


def test_encode_words_maps_oov_to_unk(word_index):
    vocab = VocabularyIndex.build(word_index)
    assert vocab.encode_words(["<START>", "the", "zzz", "movie"]) == [1, 4, UNK_CODE, 5]


def test_decode_in_order_with_placeholder(word_index):
    vocab = VocabularyIndex.build(word_index)
    assert vocab.decode([1, 4, 5, 6, 7]) == "<START> the movie was great"
    assert vocab.decode([4, 9999, 5]) == "the ? movie"
    assert vocab.decode([9999], placeholder="<UNK>") == "<UNK>"
    assert vocab.decode([]) == ""


def test_decode_round_trip_for_in_vocabulary_codes(word_index):
    vocab = VocabularyIndex.build(word_index)
    codes = [1, 4, 5, 6, 7, 2, 11, 0, 0]
    words = vocab.decode(codes).split(" ")
    assert [vocab.encode_token(w) for w in words] == codes


def test_decode_is_deterministic(word_index):
    vocab = VocabularyIndex.build(word_index)
    codes = [1, 7, 8, 123, 9]
    assert vocab.decode(codes) == vocab.decode(codes)


def test_index_is_read_only(word_index):
    vocab = VocabularyIndex.build(word_index)
    with pytest.raises(TypeError):
        vocab.token_to_code["new"] = 99
    with pytest.raises(TypeError):
        vocab.code_to_token[99] = "new"


def test_raw_mapping_rebuilds_same_index(word_index):
    vocab = VocabularyIndex.build(word_index)
    assert vocab.raw_mapping() == word_index
    rebuilt = VocabularyIndex.build(vocab.raw_mapping())
    assert dict(rebuilt.token_to_code) == dict(vocab.token_to_code)


@pytest.mark.parametrize("token", ["new york", "tab\tword", "", " ", 42])
def test_tokens_that_cannot_round_trip_are_rejected(token):
    with pytest.raises(VocabularyError):
        VocabularyIndex.build({token: 1})


def test_placeholder_token_logs_warning():
    messages = []
    sink = logger.add(messages.append, level="WARNING")
    try:
        vocab = VocabularyIndex.build({"?": 1})
    finally:
        logger.remove(sink)
    assert vocab.encode_token("?") == 4
    assert any("placeholder" in str(m) for m in messages)


def test_constructor_copies_tables():
    token_to_code = {"<PAD>": 0, "film": 4}
    code_to_token = {0: "<PAD>", 4: "film"}
    vocab = VocabularyIndex(token_to_code, code_to_token)
    token_to_code["extra"] = 5
    code_to_token[5] = "extra"
    assert "extra" not in vocab
    assert vocab.token_for(5) == "?"
    assert len(vocab) == 2
