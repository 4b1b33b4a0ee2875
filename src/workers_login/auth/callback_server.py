"""Ephemeral localhost HTTP listener that receives the authorization redirect.

The listener is scoped to one login attempt::

    channel = ResultChannel()
    with CallbackServer(channel, port=8976) as server:
        webbrowser.open(session.authorization_url)
        outcome = channel.receive(timeout=120)
    # socket released here, whichever way the block was left

Binding happens in the constructor, so the port is accepting connections
before the browser is opened. Each connection is handled on its own daemon
thread with a read timeout, so an idle socket cannot hold up the redirect;
every request to the callback path is classified and offered to the
:class:`~workers_login.auth.channel.ResultChannel`, which keeps only the
first. Requests to other paths get a 404 and are never forwarded.

The handler only classifies and echoes. It never sees the session secrets
and never compares the CSRF token.
"""

from __future__ import annotations

import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Optional, cast
from urllib.parse import urlsplit

from workers_login.auth.channel import ResultChannel
from workers_login.auth.outcome import (
    Denied,
    Granted,
    Malformed,
    Unmatched,
    classify_request,
)
from workers_login.exceptions import ListenerBindError
from workers_login.models import DEFAULT_CONSENT_DENIED_URL, DEFAULT_CONSENT_GRANTED_URL

logger = logging.getLogger(__name__)

_MALFORMED_HTML = (
    "<html><body><h2>Login failed</h2>"
    "<p>The authorization server sent an incomplete response. "
    "Return to the terminal and try again.</p></body></html>"
)
_NOT_FOUND_HTML = "<html><body><h2>Not found</h2></body></html>"


class _CallbackHandler(BaseHTTPRequestHandler):
    # A connection that never sends a request line must not pin its thread.
    timeout = 5

    def do_GET(self) -> None:
        server = cast(CallbackServer, self.server)
        outcome = classify_request(self.path, server.callback_path)

        if isinstance(outcome, Unmatched):
            logger.debug("Ignoring request for unregistered path %s", outcome.path)
            self._send_html(404, _NOT_FOUND_HTML)
            return

        accepted = server.channel.send(outcome)
        logger.debug(
            "Callback classified as %s (%s)",
            type(outcome).__name__,
            "forwarded" if accepted else "already have a result",
        )

        if isinstance(outcome, Granted):
            self._redirect(server.granted_url)
        elif isinstance(outcome, Denied):
            self._redirect(server.denied_url)
        else:
            assert isinstance(outcome, Malformed)
            self._send_html(400, _MALFORMED_HTML)

    def _redirect(self, location: str) -> None:
        self.send_response(302)
        self.send_header("Location", location)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def _send_html(self, status: int, body: str) -> None:
        payload = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_request(self, code: Any = "-", size: Any = "-") -> None:
        logger.debug("%s %s -> %s", self.command, urlsplit(self.path).path, code)

    def log_message(self, format: str, *args: Any) -> None:
        # The default request line includes the authorization code.
        pass


class CallbackServer(ThreadingHTTPServer):
    """Localhost listener for the OAuth redirect.

    Args:
        channel: Where classified outcomes are offered.
        host: Interface to bind. Defaults to ``localhost``.
        port: Port to bind. ``0`` picks a free port (see :attr:`server_port`).
        callback_path: The registered redirect path.
        granted_url: Where the browser is sent after a grant.
        denied_url: Where the browser is sent after a denial.

    Raises:
        ListenerBindError: If the address cannot be bound (e.g. port in use).
    """

    daemon_threads = True

    def __init__(
        self,
        channel: ResultChannel,
        host: str = "localhost",
        port: int = 8976,
        callback_path: str = "/oauth/callback",
        granted_url: str = DEFAULT_CONSENT_GRANTED_URL,
        denied_url: str = DEFAULT_CONSENT_DENIED_URL,
    ) -> None:
        self.channel = channel
        self.callback_path = callback_path
        self.granted_url = granted_url
        self.denied_url = denied_url
        self._thread: Optional[threading.Thread] = None
        self._closed = False

        try:
            super().__init__((host, port), _CallbackHandler)
        except OSError as exc:
            raise ListenerBindError(host, port, exc.strerror or str(exc)) from exc
        logger.debug("Callback listener bound to %s:%d", host, self.server_port)

    @property
    def callback_url(self) -> str:
        host = self.server_address[0]
        return f"http://{host}:{self.server_port}{self.callback_path}"

    def start(self) -> None:
        """Begin serving requests on a daemon thread."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self.serve_forever,
            kwargs={"poll_interval": 0.1},
            name="callback-server",
            daemon=True,
        )
        self._thread.start()

    def close(self) -> None:
        """Stop serving and release the socket. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self._thread is not None:
            self.shutdown()
            self._thread.join()
            self._thread = None
        self.server_close()
        logger.debug("Callback listener closed")

    def __enter__(self) -> CallbackServer:
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
