"""Redirect capture for the interactive login.

A loopback HTTP server receives the provider's redirect and hands the full
callback URL to a :class:`PendingAuthorization`, a single-resolution handle that
the login flow waits on. The handle is resolved exactly once: with the callback
URL, with a failure, or by cancellation when the user gives up.
"""

from __future__ import annotations
import logging
import threading
import webbrowser
from concurrent.futures import Future, TimeoutError as FutureTimeout
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Callable, Optional
from urllib.parse import urlparse

from ..errors import SessionFailed

logger = logging.getLogger(__name__)


class PendingAuthorization:
    """Cancellable, resolve-once handle for one in-flight browser login."""

    def __init__(self) -> None:
        self._future: Future = Future()
        self._lock = threading.Lock()

    @property
    def done(self) -> bool:
        return self._future.done()

    def resolve(self, callback_url: str | None) -> bool:
        with self._lock:
            if self._future.done():
                return False
            self._future.set_result(callback_url)
            return True

    def fail(self, error: BaseException) -> bool:
        with self._lock:
            if self._future.done():
                return False
            self._future.set_exception(error)
            return True

    def cancel(self) -> bool:
        return self.fail(SessionFailed("Login was cancelled."))

    def wait(self, timeout: float | None = None) -> Optional[str]:
        try:
            return self._future.result(timeout=timeout)
        except FutureTimeout:
            self.fail(SessionFailed("Timed out waiting for Spotify authorization."))
            return self._future.result()


class OAuthServer(HTTPServer):
    def __init__(self, server_address, RequestHandlerClass, redirect_uri: str, redirect_path: str, pending: PendingAuthorization):
        super().__init__(server_address, RequestHandlerClass)
        self.redirect_uri = redirect_uri
        self.redirect_path = redirect_path
        self.pending = pending


class OAuthHandler(BaseHTTPRequestHandler):
    server: OAuthServer

    def do_GET(self):  # type: ignore[override]
        parsed = urlparse(self.path)
        # Browsers also ask for /favicon.ico and friends; only the redirect path counts
        if parsed.path != self.server.redirect_path:
            self.send_response(404)
            self.end_headers()
            return
        base = self.server.redirect_uri.split('?', 1)[0]
        callback_url = f"{base}?{parsed.query}" if parsed.query else base
        accepted = self.server.pending.resolve(callback_url)
        logger.debug(f"Callback received (accepted={accepted})")
        self.send_response(200)
        self.send_header('Content-Type', 'text/plain; charset=utf-8')
        self.end_headers()
        if 'error=' in parsed.query:
            self.wfile.write(b"Authorization failed. You may close this window.")
        else:
            self.wfile.write(b"TrackSaver is signed in. You may close this window.")

    def log_message(self, format, *args):  # silence default logging
        return


class LoopbackCallbackCapture:
    """Opens the browser and captures the redirect on a local port."""

    def __init__(
        self,
        redirect_uri: str,
        open_browser: Callable[[str], bool] = webbrowser.open,
    ):
        parsed = urlparse(redirect_uri)
        self.redirect_uri = redirect_uri
        self.host = parsed.hostname or "127.0.0.1"
        self.port = parsed.port or 80
        self.path = parsed.path or "/"
        self.open_browser = open_browser
        self._server: OAuthServer | None = None
        self._thread: threading.Thread | None = None

    def start(self, authorize_url: str, pending: PendingAuthorization) -> None:
        try:
            self._server = OAuthServer((self.host, self.port), OAuthHandler, self.redirect_uri, self.path, pending)
        except OSError as e:
            raise SessionFailed(f"Could not listen on {self.host}:{self.port} for the Spotify redirect: {e}") from e
        self._thread = threading.Thread(target=self._server.serve_forever, name="oauth-callback", daemon=True)
        self._thread.start()
        logger.debug(f"Callback server listening on {self.host}:{self.port}{self.path}")
        try:
            opened = self.open_browser(authorize_url)
        except webbrowser.Error:
            opened = False
        if not opened:
            logger.info(f"Open this URL in a browser to sign in:\n{authorize_url}")

    def stop(self) -> None:
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None


__all__ = ["PendingAuthorization", "OAuthServer", "OAuthHandler", "LoopbackCallbackCapture"]
