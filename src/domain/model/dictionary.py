"""Dictionary domain models.

Value objects shared by the DICT session, the lookup service and the
launcher output: server address, protocol commands, status replies and
the parsed definition records.
"""

import re
from dataclasses import dataclass

from domain.model.errors import ValidationError

DEFAULT_HOST = "dict.org"
DEFAULT_PORT = 2628
ALL_DATABASES = "*"
DEFAULT_STRATEGY = "."

# RFC 2229 §2.2: command lines are at most 1024 octets including CRLF
MAX_COMMAND_LENGTH = 1024 - 2

# Characters that force a parameter to be sent as a quoted string
_ATOM_UNSAFE = re.compile(r'[\s"\'\\]')


def quote_param(value: str) -> str:
    """Render a command parameter as an atom or a double-quoted string.

    Atoms are used when the value is non-empty and holds no whitespace,
    quotes or backslashes. Otherwise the value is wrapped in double quotes
    with ``"`` and ``\\`` escaped.
    """
    if "\r" in value or "\n" in value:
        raise ValidationError("Command parameters must not contain line breaks")
    if value and not _ATOM_UNSAFE.search(value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


@dataclass(frozen=True)
class ServerAddress:
    """Host and port of a DICT server."""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


# ── Commands ─────────────────────────────────────────────────


class Command:
    """Base class for DICT commands. Subclasses render their own wire line."""

    def params(self) -> tuple[str, ...]:
        raise NotImplementedError

    def to_line(self) -> str:
        line = " ".join(self.params())
        if len(line.encode("utf-8")) > MAX_COMMAND_LENGTH:
            raise ValidationError(
                f"Command exceeds {MAX_COMMAND_LENGTH} octets"
            )
        return line


@dataclass(frozen=True)
class DefineCommand(Command):
    word: str
    database: str = ALL_DATABASES

    def params(self) -> tuple[str, ...]:
        return ("DEFINE", quote_param(self.database), quote_param(self.word))


@dataclass(frozen=True)
class MatchCommand(Command):
    word: str
    strategy: str = DEFAULT_STRATEGY
    database: str = ALL_DATABASES

    def params(self) -> tuple[str, ...]:
        return (
            "MATCH",
            quote_param(self.database),
            quote_param(self.strategy),
            quote_param(self.word),
        )


@dataclass(frozen=True)
class ShowDatabasesCommand(Command):
    def params(self) -> tuple[str, ...]:
        return ("SHOW", "DB")


@dataclass(frozen=True)
class ShowStrategiesCommand(Command):
    def params(self) -> tuple[str, ...]:
        return ("SHOW", "STRAT")


@dataclass(frozen=True)
class ClientCommand(Command):
    """Identifies the client software to the server."""
    text: str

    def params(self) -> tuple[str, ...]:
        return ("CLIENT", quote_param(self.text))


@dataclass(frozen=True)
class QuitCommand(Command):
    def params(self) -> tuple[str, ...]:
        return ("QUIT",)


# ── Replies and records ──────────────────────────────────────


@dataclass(frozen=True)
class StatusReply:
    """One framed server reply: status code, message and optional payload.

    ``lines`` holds the unescaped text block for text-bearing codes
    (110-114, 151, 152) and is empty for single-line replies.
    """
    code: int
    message: str
    lines: tuple[str, ...] = ()


@dataclass(frozen=True)
class DefinitionEntry:
    """A definition of one headword from one server database."""
    headword: str
    database: str
    description: str
    body: tuple[str, ...] = ()

    @property
    def text(self) -> str:
        return "\n".join(self.body)


@dataclass(frozen=True)
class MatchEntry:
    """A MATCH result: a word the server knows in a given database."""
    database: str
    word: str


@dataclass(frozen=True)
class CatalogEntry:
    """One line of a SHOW DB / SHOW STRAT listing."""
    name: str
    description: str


@dataclass(frozen=True)
class LookupResult:
    """Immutable result of one dictionary lookup (Value Object).

    An empty ``entries`` tuple means the server had no definition;
    ``suggestions`` is only filled when a MATCH was requested.
    """
    word: str
    entries: tuple[DefinitionEntry, ...] = ()
    suggestions: tuple[MatchEntry, ...] = ()

    @property
    def found(self) -> bool:
        return bool(self.entries)
