"""DICT reply framing.

Turns the transport's line stream into StatusReply objects: one status
line, plus a dot-terminated text block for the text-bearing codes.
"""

import re
from enum import Enum

from domain.model.dictionary import StatusReply
from domain.model.errors import MalformedReplyError, ReadError
from port.transport import TransportPort

_STATUS_LINE = re.compile(r"^(\d{3})(?: (.*))?$")

# RFC 2229 §3: codes followed by a text block terminated by "."
TEXT_FOLLOWS_CODES = frozenset({
    110,  # n databases present
    111,  # n strategies available
    112,  # database information follows
    113,  # help text follows
    114,  # server information follows
    151,  # word database name (definition text)
    152,  # n matches found
})

TERMINATOR = "."


class LineKind(Enum):
    """Classification of one payload line."""
    TERMINATOR = "terminator"
    ESCAPED = "escaped"
    TEXT = "text"


def classify_line(line: str) -> tuple[LineKind, str]:
    """Classify a payload line and return its unescaped text.

    "." ends the block, a leading ".." is a dot-stuffed line whose first
    dot is dropped, anything else is literal text.
    """
    if line == TERMINATOR:
        return LineKind.TERMINATOR, ""
    if line.startswith(".."):
        return LineKind.ESCAPED, line[1:]
    return LineKind.TEXT, line


def parse_status_line(line: str) -> tuple[int, str]:
    """Split ``"<3-digit code> <message>"`` into its parts."""
    match = _STATUS_LINE.match(line)
    if not match:
        raise MalformedReplyError("Invalid status line", raw_line=line)
    return int(match.group(1)), match.group(2) or ""


def read_text_block(transport: TransportPort) -> tuple[str, ...]:
    """Read payload lines up to the terminator."""
    lines: list[str] = []
    while True:
        try:
            raw = transport.read_line()
        except ReadError as e:
            if e.eof:
                raise MalformedReplyError(
                    f"Stream ended after {len(lines)} payload lines without terminator"
                ) from e
            raise

        kind, text = classify_line(raw)
        if kind is LineKind.TERMINATOR:
            return tuple(lines)
        lines.append(text)


def read_reply(transport: TransportPort) -> StatusReply:
    """Read exactly one reply from the transport."""
    code, message = parse_status_line(transport.read_line())
    if code in TEXT_FOLLOWS_CODES:
        return StatusReply(code=code, message=message, lines=read_text_block(transport))
    return StatusReply(code=code, message=message)
