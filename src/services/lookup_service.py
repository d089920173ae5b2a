"""Dictionary lookup service — validates input and drives the dictionary port.

The service owns no connection itself; each call to the port is one
short-lived DICT session.
"""

import logging
from dataclasses import dataclass

from domain.model.dictionary import CatalogEntry, LookupResult
from domain.model.errors import ValidationError
from port.dictionary import DictionaryPort

logger = logging.getLogger(__name__)


@dataclass
class LookupRequest:
    """Request for dictionary lookup."""
    word: str
    suggest: bool = False


def normalize_word(raw: str) -> str:
    """Collapse runs of whitespace and reject input that cannot be sent.

    Raises:
        ValidationError: empty input or embedded line breaks.
    """
    if "\r" in raw or "\n" in raw:
        raise ValidationError("Word must be a single line")
    word = " ".join(raw.split())
    if not word:
        raise ValidationError("No word provided")
    return word


class LookupService:
    """Looks words up through a DictionaryPort."""

    def __init__(self, dictionary: DictionaryPort, suggest: bool = False):
        self.dictionary = dictionary
        self.suggest = suggest

    def lookup(self, request: LookupRequest | str) -> LookupResult:
        if isinstance(request, str):
            request = LookupRequest(word=request, suggest=self.suggest)

        word = normalize_word(request.word)
        result = self.dictionary.lookup(word, suggest=request.suggest)

        if result.found:
            logger.info("Definitions found", extra={
                "word": word,
                "entry_count": len(result.entries),
                "databases": [entry.database for entry in result.entries],
            })
        else:
            logger.info("No definition found", extra={
                "word": word,
                "suggestion_count": len(result.suggestions),
            })
        return result

    def databases(self) -> list[CatalogEntry]:
        return self.dictionary.list_databases()

    def strategies(self) -> list[CatalogEntry]:
        return self.dictionary.list_strategies()
