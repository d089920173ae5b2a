"""In-memory implementation of DictionaryPort for testing."""

from domain.model.dictionary import CatalogEntry, DefinitionEntry, LookupResult, MatchEntry
from domain.model.errors import DictError


class FakeDictionaryAdapter:
    """Fake dictionary adapter that returns preconfigured responses."""

    def __init__(
        self,
        definitions: dict[str, list[DefinitionEntry]] | None = None,
        suggestions: dict[str, list[MatchEntry]] | None = None,
        databases: list[CatalogEntry] | None = None,
        strategies: list[CatalogEntry] | None = None,
        error: DictError | None = None,
    ):
        self.definitions = definitions or {}
        self.suggestions = suggestions or {}
        self.databases = databases or []
        self.strategies = strategies or []
        self.error = error
        self.last_word: str | None = None
        self.last_suggest: bool | None = None

    def lookup(self, word: str, suggest: bool = False) -> LookupResult:
        self.last_word = word
        self.last_suggest = suggest
        if self.error:
            raise self.error
        entries = tuple(self.definitions.get(word, []))
        matches = tuple(self.suggestions.get(word, [])) if suggest and not entries else ()
        return LookupResult(word=word, entries=entries, suggestions=matches)

    def list_databases(self) -> list[CatalogEntry]:
        if self.error:
            raise self.error
        return list(self.databases)

    def list_strategies(self) -> list[CatalogEntry]:
        if self.error:
            raise self.error
        return list(self.strategies)
