"""In-memory implementation of TransportPort for testing."""

from domain.model.errors import ReadError, WriteError


class FakeTransport:
    """Fake transport that replays scripted server lines.

    Lines sent by the client are recorded in ``sent``. When the script
    runs out, read_line() behaves like a closed stream.
    """

    def __init__(self, lines: list[str] | None = None, fail_on_send: bool = False):
        self._lines = list(lines or [])
        self.sent: list[str] = []
        self.closed = False
        self.fail_on_send = fail_on_send

    def send_line(self, line: str) -> None:
        if self.closed:
            raise WriteError("Transport is closed")
        if self.fail_on_send:
            raise WriteError("Broken pipe")
        self.sent.append(line)

    def read_line(self) -> str:
        if self.closed or not self._lines:
            raise ReadError("Connection closed by fake server", eof=True)
        return self._lines.pop(0)

    def close(self) -> None:
        self.closed = True

    @property
    def remaining(self) -> list[str]:
        return list(self._lines)
