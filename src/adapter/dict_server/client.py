"""DICT server adapter.

Implements DictionaryPort against an RFC 2229 server. Every call opens
its own connection and session and releases both before returning.
"""

import logging
from typing import Callable

from adapter.dict_server.session import DictSession
from adapter.network.socket_transport import DEFAULT_TIMEOUT_SECONDS, SocketTransport
from domain.model.dictionary import (
    ALL_DATABASES,
    DEFAULT_STRATEGY,
    CatalogEntry,
    LookupResult,
    ServerAddress,
)
from port.transport import TransportPort

logger = logging.getLogger(__name__)

TransportFactory = Callable[[ServerAddress, float], TransportPort]


class DictServerAdapter:
    """Adapter that looks words up on a DICT server."""

    def __init__(
        self,
        address: ServerAddress = ServerAddress(),
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        database: str = ALL_DATABASES,
        strategy: str = DEFAULT_STRATEGY,
        client_name: str | None = None,
        transport_factory: TransportFactory = SocketTransport.connect,
    ):
        self.address = address
        self.timeout = timeout
        self.database = database
        self.strategy = strategy
        self.client_name = client_name
        self._transport_factory = transport_factory

    def _session(self) -> DictSession:
        transport = self._transport_factory(self.address, self.timeout)
        return DictSession(transport, client_name=self.client_name)

    def lookup(self, word: str, suggest: bool = False) -> LookupResult:
        """Define ``word``; optionally MATCH it when nothing is defined."""
        with self._session() as session:
            entries = session.define(word, database=self.database)
            suggestions = []
            if not entries and suggest:
                suggestions = session.match(word, strategy=self.strategy, database=self.database)

        logger.debug("DICT lookup finished", extra={
            "word": word,
            "server": str(self.address),
            "entry_count": len(entries),
            "suggestion_count": len(suggestions),
        })
        return LookupResult(word=word, entries=tuple(entries), suggestions=tuple(suggestions))

    def list_databases(self) -> list[CatalogEntry]:
        with self._session() as session:
            return session.show_databases()

    def list_strategies(self) -> list[CatalogEntry]:
        with self._session() as session:
            return session.show_strategies()
