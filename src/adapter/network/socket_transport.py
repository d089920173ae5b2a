"""TCP socket transport.

Implements TransportPort over a blocking socket with a mandatory timeout.
Lines are UTF-8, terminated by CRLF on the wire.
"""

import logging
import socket

from domain.model.dictionary import ServerAddress
from domain.model.errors import DictConnectionError, MalformedReplyError, ReadError, WriteError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 8.0
ENCODING = "utf-8"
LINE_TERMINATOR = b"\r\n"
# Longest line accepted from the server, terminator included
MAX_LINE_BYTES = 65536


class SocketTransport:
    """Line transport over one TCP connection.

    Use as a context manager, or call close() on every exit path.
    """

    def __init__(self, sock: socket.socket, address: ServerAddress):
        self._sock = sock
        self._reader = sock.makefile("rb")
        self.address = address
        self.closed = False

    @classmethod
    def connect(
        cls,
        address: ServerAddress,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> "SocketTransport":
        """Open a TCP connection to the server.

        Raises:
            DictConnectionError: DNS failure, refused connection or timeout.
        """
        try:
            sock = socket.create_connection((address.host, address.port), timeout=timeout)
        except socket.timeout as e:
            raise DictConnectionError(
                f"Connection to {address} timed out after {timeout:g}s"
            ) from e
        except OSError as e:
            raise DictConnectionError(f"Cannot connect to {address}: {e}") from e

        # create_connection only bounds the connect; keep it for reads too
        sock.settimeout(timeout)
        logger.debug("Connected to DICT server", extra={"server": str(address)})
        return cls(sock, address)

    def send_line(self, line: str) -> None:
        try:
            self._sock.sendall(line.encode(ENCODING) + LINE_TERMINATOR)
        except socket.timeout as e:
            raise WriteError(f"Timed out sending to {self.address}") from e
        except OSError as e:
            raise WriteError(f"Connection to {self.address} broke while sending: {e}") from e

    def read_line(self) -> str:
        try:
            raw = self._reader.readline(MAX_LINE_BYTES)
        except socket.timeout as e:
            raise ReadError(f"Timed out waiting for {self.address}", eof=False) from e
        except OSError as e:
            raise ReadError(f"Connection to {self.address} broke while reading: {e}", eof=True) from e

        if not raw.endswith(b"\n"):
            if len(raw) >= MAX_LINE_BYTES:
                raise MalformedReplyError(
                    f"Line from {self.address} exceeds {MAX_LINE_BYTES} bytes",
                    raw_line=raw[:80].decode(ENCODING, errors="replace"),
                )
            raise ReadError(f"Connection closed by {self.address}", eof=True)

        return raw.decode(ENCODING, errors="replace").rstrip("\r\n")

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self._reader.close()
        finally:
            self._sock.close()
        logger.debug("Connection closed", extra={"server": str(self.address)})

    def __enter__(self) -> "SocketTransport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
