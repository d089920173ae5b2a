"""Port definition for a line-oriented transport."""

from typing import Protocol


class TransportPort(Protocol):
    """A connected text stream carrying CRLF-terminated lines.

    send_line() raises WriteError, read_line() raises ReadError.
    close() must be safe to call more than once.
    """

    def send_line(self, line: str) -> None: ...

    def read_line(self) -> str: ...

    def close(self) -> None: ...
