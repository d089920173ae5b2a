"""Domain-level exceptions.

The DICT session raises these errors to express transport failures,
protocol violations and server-side error statuses.
The launcher catches them and maps each family to an exit code.
"""


class DictError(Exception):
    """Base class for all dictionary client errors."""


class ValidationError(DictError):
    """Input violates a validation rule (word, command or configuration)."""


# ── Transport ────────────────────────────────────────────────


class DictConnectionError(DictError):
    """Could not reach the DICT server (DNS failure, refused, timed out)."""


class WriteError(DictConnectionError):
    """Connection broke while sending a command line."""


class ReadError(DictConnectionError):
    """Reading a line failed.

    ``eof`` is True when the server closed the stream and False
    when the read timed out.
    """

    def __init__(self, message: str, eof: bool = False):
        self.eof = eof
        super().__init__(message)


# ── Protocol ─────────────────────────────────────────────────


class ProtocolError(DictError):
    """Server reply does not follow the DICT protocol."""

    def __init__(self, message: str, raw_line: str | None = None):
        self.raw_line = raw_line
        if raw_line is not None:
            message = f"{message}: {raw_line!r}"
        super().__init__(message)


class HandshakeError(ProtocolError):
    """Greeting banner was not a 220 status."""


class MalformedReplyError(ProtocolError):
    """Status line unparseable, unexpected code, or stream ended before '.'."""


class ParseError(ProtocolError):
    """Payload does not match the expected definition / listing grammar."""


# ── Server ───────────────────────────────────────────────────


class ServerError(DictError):
    """Server answered with an error status (4xx/5xx other than no-match)."""

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(f"{code} {message}")
