"""A small WSGI HTTP server that runs until asked to stop."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

_READ_HEADER_TIMEOUT = 60.0
_POLL_INTERVAL = 0.1

WSGIApp = Callable[..., Any]


class _QuietHandler(WSGIRequestHandler):
    timeout = _READ_HEADER_TIMEOUT

    def log_message(self, format: str, *args: Any) -> None:
        logging.getLogger(__name__).debug(format, *args)


def _parse_addr(addr: str) -> tuple[str, int]:
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address {addr!r}")
    return host.strip("[]"), int(port)


class Server:
    """Serves a WSGI application until a stop event is set or shutdown is called."""

    def __init__(
        self, addr: str, handler: WSGIApp, logger: logging.Logger | None = None
    ) -> None:
        self.addr = addr
        self._handler = handler
        self._log = logger or logging.getLogger(__name__)
        self._httpd: WSGIServer | None = None
        self._stopped = threading.Event()
        self._lock = threading.Lock()
        self.started = threading.Event()

    @property
    def address(self) -> tuple[str, int] | None:
        """The bound (host, port), once the server is listening."""
        if self._httpd is None:
            return None
        host, port = self._httpd.server_address[:2]
        return str(host), int(port)

    def serve(self, stop_event: threading.Event) -> None:
        """Serve requests; block until stop_event is set or shutdown is called."""
        try:
            host, port = _parse_addr(self.addr)
            httpd = make_server(host, port, self._handler, handler_class=_QuietHandler)
        except (OSError, ValueError) as err:
            raise RuntimeError(f"while starting server: {err}") from err

        with self._lock:
            self._httpd = httpd
        watcher = threading.Thread(target=self._watch, args=(stop_event,), daemon=True)
        watcher.start()

        self._log.info("Starting server on address %r", self.addr)
        self.started.set()
        try:
            if not self._stopped.is_set():
                httpd.serve_forever(poll_interval=_POLL_INTERVAL)
        finally:
            httpd.server_close()
            self._stopped.set()
            watcher.join()

    def shutdown(self) -> None:
        """Stop serving; serve returns once running requests finish."""
        with self._lock:
            if self._stopped.is_set():
                return
            self._stopped.set()
            httpd = self._httpd
        if httpd is not None:
            try:
                httpd.shutdown()
            except Exception:
                self._log.exception("while shutting down server")

    def _watch(self, stop_event: threading.Event) -> None:
        while not self._stopped.is_set():
            if stop_event.wait(_POLL_INTERVAL):
                self._log.info("Shutdown requested. Finishing...")
                self.shutdown()
                return