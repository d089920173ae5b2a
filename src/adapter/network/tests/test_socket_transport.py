"""Tests for SocketTransport against a local listening socket."""

import socket
import threading
import time
import unittest

from adapter.dict_server.client import DictServerAdapter
from adapter.network.socket_transport import MAX_LINE_BYTES, SocketTransport
from domain.model.dictionary import ServerAddress
from domain.model.errors import DictConnectionError, MalformedReplyError, ReadError


class LocalServer:
    """One-shot TCP server that writes a canned byte script and records input."""

    def __init__(self, script: bytes = b"", hold_open: bool = False, close_after_send: bool = False):
        self.script = script
        self.hold_open = hold_open
        self.close_after_send = close_after_send
        self.received = b""
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._listener.bind(("127.0.0.1", 0))
        self._listener.listen(1)
        self.address = ServerAddress("127.0.0.1", self._listener.getsockname()[1])
        self._release = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self) -> None:
        conn, _ = self._listener.accept()
        with conn:
            conn.settimeout(2.0)
            conn.sendall(self.script)
            if self.close_after_send:
                return
            if self.hold_open:
                self._release.wait(5.0)
                return
            try:
                while True:
                    chunk = conn.recv(4096)
                    if not chunk:
                        break
                    self.received += chunk
            except OSError:
                pass

    def stop(self) -> None:
        self._release.set()
        self._thread.join(timeout=5.0)
        self._listener.close()


class TestSocketTransport(unittest.TestCase):
    """Test line I/O over a real socket."""

    def test_reads_crlf_lines(self):
        server = LocalServer(b"220 hello\r\nline two\r\n")
        try:
            with SocketTransport.connect(server.address, timeout=2.0) as transport:
                self.assertEqual(transport.read_line(), "220 hello")
                self.assertEqual(transport.read_line(), "line two")
        finally:
            server.stop()

    def test_send_appends_crlf(self):
        server = LocalServer(b"")
        try:
            transport = SocketTransport.connect(server.address, timeout=2.0)
            transport.send_line("DEFINE * cat")
            transport.close()
        finally:
            server.stop()
        self.assertEqual(server.received, b"DEFINE * cat\r\n")

    def test_utf8_round_trip(self):
        server = LocalServer("151 \"café\" fd-fra-eng \"French-English\"\r\n".encode("utf-8"))
        try:
            with SocketTransport.connect(server.address, timeout=2.0) as transport:
                self.assertIn("café", transport.read_line())
        finally:
            server.stop()

    def test_eof_raises_read_error(self):
        """Test a closed stream is reported with eof=True."""
        server = LocalServer(b"partial line without newline", close_after_send=True)
        try:
            with SocketTransport.connect(server.address, timeout=2.0) as transport:
                with self.assertRaises(ReadError) as ctx:
                    transport.read_line()
                self.assertTrue(ctx.exception.eof)
        finally:
            server.stop()

    def test_overlong_line_rejected(self):
        """Test a line past the length bound is refused instead of buffered."""
        server = LocalServer(b"220 " + b"x" * (MAX_LINE_BYTES + 16) + b"\r\n", close_after_send=True)
        try:
            with SocketTransport.connect(server.address, timeout=2.0) as transport:
                with self.assertRaises(MalformedReplyError) as ctx:
                    transport.read_line()
                self.assertTrue(ctx.exception.raw_line.startswith("220 xxx"))
        finally:
            server.stop()

    def test_line_at_bound_accepted(self):
        line = b"x" * (MAX_LINE_BYTES - 2)
        server = LocalServer(line + b"\r\n", close_after_send=True)
        try:
            with SocketTransport.connect(server.address, timeout=2.0) as transport:
                self.assertEqual(transport.read_line(), line.decode())
        finally:
            server.stop()

    def test_read_timeout(self):
        """Test a silent server hits the read timeout instead of hanging."""
        server = LocalServer(b"", hold_open=True)
        try:
            with SocketTransport.connect(server.address, timeout=0.3) as transport:
                started = time.monotonic()
                with self.assertRaises(ReadError) as ctx:
                    transport.read_line()
                self.assertFalse(ctx.exception.eof)
                self.assertLess(time.monotonic() - started, 3.0)
        finally:
            server.stop()

    def test_connection_refused(self):
        probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        probe.bind(("127.0.0.1", 0))
        port = probe.getsockname()[1]
        probe.close()
        with self.assertRaises(DictConnectionError):
            SocketTransport.connect(ServerAddress("127.0.0.1", port), timeout=1.0)

    def test_unresolvable_host(self):
        with self.assertRaises(DictConnectionError):
            SocketTransport.connect(ServerAddress("nonexistent.invalid", 2628), timeout=1.0)

    def test_close_is_idempotent(self):
        server = LocalServer(b"")
        try:
            transport = SocketTransport.connect(server.address, timeout=2.0)
            transport.close()
            transport.close()
            self.assertTrue(transport.closed)
        finally:
            server.stop()


class TestEndToEnd(unittest.TestCase):
    """Test a full lookup against a scripted local DICT server."""

    def test_ubiquitous(self):
        script = (
            b"220 local dictd <mime> <1.1@local>\r\n"
            b"150 1 definitions retrieved\r\n"
            b'151 "ubiquitous" wn "WordNet (r) 3.0 (2006)"\r\n'
            b"ubiquitous\r\n"
            b"    adj 1: being present everywhere at once\r\n"
            b"..\r\n"
            b".\r\n"
            b"250 ok\r\n"
            b"221 bye\r\n"
        )
        server = LocalServer(script)
        try:
            result = DictServerAdapter(address=server.address, timeout=2.0).lookup("ubiquitous")
        finally:
            server.stop()

        self.assertEqual(len(result.entries), 1)
        self.assertEqual(result.entries[0].body, (
            "ubiquitous",
            "    adj 1: being present everywhere at once",
            ".",
        ))
        self.assertEqual(server.received, b"DEFINE * ubiquitous\r\nQUIT\r\n")


if __name__ == "__main__":
    unittest.main()
