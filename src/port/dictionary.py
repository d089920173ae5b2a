"""Dictionary port — outbound interface for dictionary data sources."""

from typing import Protocol

from domain.model.dictionary import CatalogEntry, LookupResult


class DictionaryPort(Protocol):
    """Port for looking words up in a dictionary source.

    lookup() returns a LookupResult whose entries are empty when the
    source has no definition. With suggest=True an empty lookup also
    carries the source's closest matches. Failures are raised as
    DictError subclasses; nothing is swallowed at this boundary.
    """

    def lookup(self, word: str, suggest: bool = False) -> LookupResult: ...

    def list_databases(self) -> list[CatalogEntry]: ...

    def list_strategies(self) -> list[CatalogEntry]: ...
