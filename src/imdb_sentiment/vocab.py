from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping

from loguru import logger

PAD = "<PAD>"
START = "<START>"
UNK = "<UNK>"
UNUSED = "<UNUSED>"

SENTINELS: Mapping[str, int] = MappingProxyType({PAD: 0, START: 1, UNK: 2, UNUSED: 3})
PAD_CODE = SENTINELS[PAD]
START_CODE = SENTINELS[START]
UNK_CODE = SENTINELS[UNK]
INDEX_OFFSET = 3
UNKNOWN_PLACEHOLDER = "?"


class VocabularyError(ValueError):
    """Raised when a raw word index cannot be turned into a vocabulary."""


class DuplicateCodeError(VocabularyError):
    """Two tokens would share a code after shifting."""


class UnknownTokenError(VocabularyError):
    """Lookup of a token that the vocabulary does not contain."""


class VocabularyIndex:
    """Bidirectional token/code table with four reserved sentinel codes.

    Codes 0-3 always belong to ``<PAD>``, ``<START>``, ``<UNK>`` and
    ``<UNUSED>``; every other token keeps its raw code shifted by three.
    Instances are never modified after :meth:`build`.
    """

    def __init__(self, token_to_code: Dict[str, int], code_to_token: Dict[int, str]):
        """Wrap pre-validated lookup tables; use :meth:`build` instead of calling this directly."""
        self._token_to_code = dict(token_to_code)
        self._code_to_token = dict(code_to_token)
        self.token_to_code: Mapping[str, int] = MappingProxyType(self._token_to_code)
        self.code_to_token: Mapping[int, str] = MappingProxyType(self._code_to_token)

    @classmethod
    def build(cls, raw_mapping: Mapping[str, int]) -> "VocabularyIndex":
        """Shift every raw code by three and reserve the sentinel codes.

        Tokens must be non-empty and free of whitespace so that decoded
        text splits back into the same tokens.
        """
        token_to_code: Dict[str, int] = {}
        code_to_token: Dict[int, str] = {}
        for token, raw_code in raw_mapping.items():
            if isinstance(raw_code, bool) or not isinstance(raw_code, int) or raw_code < 0:
                raise VocabularyError(f"Raw code for {token!r} must be a non-negative integer, got {raw_code!r}")
            if not isinstance(token, str) or not token or token.split() != [token]:
                raise VocabularyError(f"Token {token!r} must be a non-empty string without whitespace")
            if token == UNKNOWN_PLACEHOLDER:
                logger.warning("Token {!r} is also the placeholder for unknown codes", token)
            if token in SENTINELS:
                logger.warning("Ignoring raw entry for reserved token {} (code {})", token, raw_code)
                continue
            code = raw_code + INDEX_OFFSET
            if code in SENTINELS.values():
                raise DuplicateCodeError(f"Token {token!r} shifts to reserved code {code}")
            if code in code_to_token:
                raise DuplicateCodeError(
                    f"Tokens {code_to_token[code]!r} and {token!r} both map to code {code}"
                )
            token_to_code[token] = code
            code_to_token[code] = token

        for token, code in SENTINELS.items():
            token_to_code[token] = code
            code_to_token[code] = token
        logger.debug("Built vocabulary with {} entries", len(token_to_code))
        return cls(token_to_code, code_to_token)

    def __len__(self) -> int:
        return len(self._token_to_code)

    def __contains__(self, token: object) -> bool:
        return token in self._token_to_code

    def encode_token(self, token: str) -> int:
        try:
            return self._token_to_code[token]
        except KeyError:
            raise UnknownTokenError(f"Token {token!r} is not in the vocabulary") from None

    def encode_words(self, words: Iterable[str]) -> List[int]:
        """Map words to codes, sending out-of-vocabulary words to ``<UNK>``."""
        return [self._token_to_code.get(word, UNK_CODE) for word in words]

    def token_for(self, code: int, placeholder: str = UNKNOWN_PLACEHOLDER) -> str:
        return self._code_to_token.get(code, placeholder)

    def decode(self, codes: Iterable[int], placeholder: str = UNKNOWN_PLACEHOLDER) -> str:
        """Render codes as space-separated words for inspection.

        Codes missing from the table (out-of-vocabulary ids) become
        ``placeholder``; decoding never raises.
        """
        return " ".join(self._code_to_token.get(int(code), placeholder) for code in codes)

    def raw_mapping(self) -> Dict[str, int]:
        """Return the unshifted word index this vocabulary was built from, minus sentinels."""
        return {
            token: code - INDEX_OFFSET
            for token, code in self._token_to_code.items()
            if token not in SENTINELS
        }
