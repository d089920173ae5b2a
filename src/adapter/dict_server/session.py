"""DICT protocol driver.

The session lifecycle is an explicit SessionState plus the pure
``transition`` function, so the handshake / command / quit sequencing can
be checked by feeding status codes without a socket. DictSession drives
a transport through that machine, one command at a time.

Typical use::

    with DictSession(transport) as session:
        entries = session.define("ubiquitous")
"""

import logging
import re
from enum import Enum

from adapter.dict_server.parser import (
    parse_catalog_lines,
    parse_definition_count,
    parse_definitions,
    parse_match_lines,
)
from adapter.dict_server.reader import TEXT_FOLLOWS_CODES, read_reply
from domain.model.dictionary import (
    ALL_DATABASES,
    DEFAULT_STRATEGY,
    CatalogEntry,
    ClientCommand,
    Command,
    DefineCommand,
    DefinitionEntry,
    MatchCommand,
    MatchEntry,
    QuitCommand,
    ShowDatabasesCommand,
    ShowStrategiesCommand,
    StatusReply,
)
from domain.model.errors import (
    DictConnectionError,
    HandshakeError,
    MalformedReplyError,
    ProtocolError,
    ReadError,
    ServerError,
)
from port.transport import TransportPort

logger = logging.getLogger(__name__)

GREETING = 220
DEFINITIONS_FOLLOW = 150
DEFINITION_TEXT = 151
MATCHES_FOLLOW = 152
DATABASES_FOLLOW = 110
STRATEGIES_FOLLOW = 111
OK = 250
CONNECTION_CLOSING = 221
# 552 no match, 554 no databases present, 555 no strategies available
EMPTY_RESULT_CODES = frozenset({552, 554, 555})

_BANNER = re.compile(r"<([^<>]*)>\s*(<[^<>]+>)\s*$")


class SessionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AWAITING_GREETING = "awaiting_greeting"
    READY = "ready"
    AWAITING_REPLY = "awaiting_reply"
    CLOSING = "closing"


class SessionEvent(Enum):
    GREETED = "greeted"
    HANDSHAKE_FAILED = "handshake_failed"
    DEFINITIONS_FOLLOW = "definitions_follow"
    TEXT_RECEIVED = "text_received"
    COMPLETED = "completed"
    NO_MATCH = "no_match"
    SERVER_ERROR = "server_error"
    CLOSED = "closed"
    UNEXPECTED = "unexpected"


def transition(state: SessionState, code: int) -> tuple[SessionState, SessionEvent]:
    """Next state and event for a status code received in ``state``."""
    if state is SessionState.AWAITING_GREETING:
        if code == GREETING:
            return SessionState.READY, SessionEvent.GREETED
        return SessionState.CLOSING, SessionEvent.HANDSHAKE_FAILED

    if state is SessionState.AWAITING_REPLY:
        if code == DEFINITIONS_FOLLOW:
            return SessionState.AWAITING_REPLY, SessionEvent.DEFINITIONS_FOLLOW
        if code in TEXT_FOLLOWS_CODES:
            return SessionState.AWAITING_REPLY, SessionEvent.TEXT_RECEIVED
        if code == OK:
            return SessionState.READY, SessionEvent.COMPLETED
        if code in EMPTY_RESULT_CODES:
            return SessionState.READY, SessionEvent.NO_MATCH
        if 400 <= code < 600:
            return SessionState.READY, SessionEvent.SERVER_ERROR
        return SessionState.READY, SessionEvent.UNEXPECTED

    if state is SessionState.CLOSING:
        if code == CONNECTION_CLOSING:
            return SessionState.DISCONNECTED, SessionEvent.CLOSED
        return SessionState.DISCONNECTED, SessionEvent.UNEXPECTED

    return state, SessionEvent.UNEXPECTED


class DictSession:
    """One DICT conversation over an already connected transport."""

    def __init__(self, transport: TransportPort, client_name: str | None = None):
        self._transport = transport
        self.client_name = client_name
        self.state = SessionState.CONNECTED
        self.capabilities: list[str] = []
        self.message_id: str | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Consume and validate the server greeting."""
        self.state = SessionState.AWAITING_GREETING
        try:
            reply = read_reply(self._transport)
        except MalformedReplyError as e:
            raise HandshakeError("Unexpected greeting", raw_line=e.raw_line) from e
        self.state, event = transition(self.state, reply.code)
        if event is not SessionEvent.GREETED:
            raise HandshakeError(
                "Unexpected greeting", raw_line=f"{reply.code} {reply.message}"
            )
        self._record_banner(reply.message)
        logger.debug("DICT session ready", extra={
            "capabilities": self.capabilities,
            "message_id": self.message_id,
        })

        if self.client_name:
            self.client(self.client_name)

    def quit(self) -> None:
        """Send QUIT and wait for the 221 acknowledgment.

        Every command has completed by now, so a dead or garbled
        connection at this point is logged rather than raised.
        """
        try:
            self._transport.send_line(QuitCommand().to_line())
            self.state = SessionState.CLOSING
            reply = read_reply(self._transport)
        except (DictConnectionError, MalformedReplyError) as e:
            self.state = SessionState.DISCONNECTED
            logger.warning("QUIT was not acknowledged", extra={
                "error": str(e),
                "error_type": type(e).__name__,
            })
            return
        self.state, event = transition(self.state, reply.code)
        if event is not SessionEvent.CLOSED:
            logger.warning("Unexpected reply to QUIT", extra={
                "code": reply.code,
                "server_message": reply.message,
            })

    def close(self) -> None:
        """Send QUIT when the session is idle, then close the transport."""
        try:
            if self.state is SessionState.READY:
                self.quit()
        finally:
            self.state = SessionState.DISCONNECTED
            self._transport.close()

    def __enter__(self) -> "DictSession":
        try:
            self.open()
        except BaseException as e:
            self.__exit__(type(e), e, e.__traceback__)
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def define(self, word: str, database: str = ALL_DATABASES) -> list[DefinitionEntry]:
        """Send DEFINE and return the definitions in server order.

        An empty list means no match (552).
        """
        reply, event = self._command(DefineCommand(word=word, database=database))
        if event is SessionEvent.NO_MATCH:
            return []
        if event is not SessionEvent.DEFINITIONS_FOLLOW:
            raise self._unexpected(reply)

        count = parse_definition_count(reply.message)
        texts: list[StatusReply] = []
        while True:
            reply, event = self._next_reply(continuation=True)
            if event is SessionEvent.COMPLETED:
                break
            if reply.code != DEFINITION_TEXT:
                raise self._unexpected(reply)
            texts.append(reply)

        entries = parse_definitions(count, texts)
        logger.debug("DEFINE completed", extra={"word": word, "entry_count": len(entries)})
        return entries

    def match(
        self,
        word: str,
        strategy: str = DEFAULT_STRATEGY,
        database: str = ALL_DATABASES,
    ) -> list[MatchEntry]:
        """Send MATCH and return matching words in server order."""
        reply, event = self._command(
            MatchCommand(word=word, strategy=strategy, database=database)
        )
        if event is SessionEvent.NO_MATCH:
            return []
        if reply.code != MATCHES_FOLLOW:
            raise self._unexpected(reply)
        matches = parse_match_lines(reply.lines)
        self._expect_completion()
        return matches

    def show_databases(self) -> list[CatalogEntry]:
        return self._show(ShowDatabasesCommand(), DATABASES_FOLLOW)

    def show_strategies(self) -> list[CatalogEntry]:
        return self._show(ShowStrategiesCommand(), STRATEGIES_FOLLOW)

    def client(self, text: str) -> None:
        """Identify this client; the server answers 250."""
        reply, event = self._command(ClientCommand(text=text))
        if event is not SessionEvent.COMPLETED:
            raise self._unexpected(reply)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _show(self, command: Command, expected_code: int) -> list[CatalogEntry]:
        reply, event = self._command(command)
        if event is SessionEvent.NO_MATCH:
            return []
        if reply.code != expected_code:
            raise self._unexpected(reply)
        catalog = parse_catalog_lines(reply.lines)
        self._expect_completion()
        return catalog

    def _command(self, command: Command) -> tuple[StatusReply, SessionEvent]:
        if self.state is not SessionState.READY:
            raise ProtocolError(
                f"Cannot send command while session is {self.state.value}"
            )
        line = command.to_line()
        self._transport.send_line(line)
        self.state = SessionState.AWAITING_REPLY
        logger.debug("Sent DICT command", extra={"command": line.split(" ", 1)[0]})
        return self._next_reply()

    def _next_reply(self, continuation: bool = False) -> tuple[StatusReply, SessionEvent]:
        """Read the next reply and advance the state machine.

        With ``continuation`` the reply belongs to an exchange that is
        already under way (after 150, 152, 110 or 111), so the server
        closing the stream here is a truncated reply.
        """
        try:
            reply = read_reply(self._transport)
        except ReadError as e:
            if not (continuation and e.eof):
                raise
            self.state = SessionState.DISCONNECTED
            raise MalformedReplyError("Stream ended before the closing 250 reply") from e
        self.state, event = transition(self.state, reply.code)
        if event is SessionEvent.SERVER_ERROR:
            raise ServerError(reply.code, reply.message)
        if event is SessionEvent.UNEXPECTED:
            raise self._unexpected(reply)
        return reply, event

    def _expect_completion(self) -> None:
        reply, event = self._next_reply(continuation=True)
        if event is not SessionEvent.COMPLETED:
            raise self._unexpected(reply)

    def _unexpected(self, reply: StatusReply) -> MalformedReplyError:
        # The reply stream is out of step; QUIT would read stale lines
        self.state = SessionState.DISCONNECTED
        return MalformedReplyError(
            "Unexpected reply", raw_line=f"{reply.code} {reply.message}"
        )

    def _record_banner(self, message: str) -> None:
        match = _BANNER.search(message)
        if not match:
            return
        capabilities, self.message_id = match.groups()
        self.capabilities = [c for c in capabilities.split(".") if c]
