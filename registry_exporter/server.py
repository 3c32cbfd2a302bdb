"""TLS HTTP server for the metrics endpoint.

The server has two states: STARTING (certificate setup and binding) and
SERVING (accepting connections until the process exits). Each inbound
connection is handled on its own thread by werkzeug's threaded WSGI server.
The listening socket stays plain; the TLS handshake runs on the connection
thread under a timeout, so a silent client cannot stall the accept loop.
"""

import logging
import socket
import ssl
import threading
from enum import Enum

from werkzeug.serving import ThreadedWSGIServer

from registry_exporter.app import App
from registry_exporter.config import Settings
from registry_exporter.exceptions import CertificateError, ServerBindError
from registry_exporter.utils.tls import load_server_context, write_ephemeral_pair

logger = logging.getLogger(__name__)


class ServerState(str, Enum):
    STARTING = "starting"
    SERVING = "serving"


class TLSWSGIServer(ThreadedWSGIServer):
    """Threaded WSGI server that performs the TLS handshake per connection."""

    def __init__(
        self,
        host: str,
        port: int,
        app: App,
        ssl_context: ssl.SSLContext,
        handshake_timeout: float,
        fd: int | None = None,
    ):
        # Passing ssl_context to werkzeug would wrap the listening socket and
        # handshake inside accept()
        super().__init__(host, port, app, fd=fd)
        self.ssl_context = ssl_context
        self.handshake_timeout = handshake_timeout

    def process_request_thread(self, request, client_address):  # type: ignore[no-untyped-def]
        try:
            request.settimeout(self.handshake_timeout)
            tls_request = self.ssl_context.wrap_socket(request, server_side=True)
            tls_request.settimeout(None)
        except OSError as e:
            logger.debug(
                "TLS handshake failed",
                extra={"client": client_address[0], "error": str(e)},
            )
            self.shutdown_request(request)
            return

        super().process_request_thread(tls_request, client_address)


class MetricsServer:
    """Serves a Flask app over TLS on the configured host and port."""

    def __init__(self, app: App, settings: Settings):
        self.app = app
        self.settings = settings
        self.state = ServerState.STARTING
        self._server: TLSWSGIServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def port(self) -> int:
        """The bound port; differs from settings.port when that is 0."""
        if self._server is None:
            raise RuntimeError("Metrics server is not bound")
        return self._server.port

    def start(self) -> None:
        """Bind and serve on a background daemon thread.

        Raises:
            StartupFailure: If the certificate or the listen address is unusable.
        """
        if self._thread is not None and self._thread.is_alive():
            logger.warning("Metrics server already running")
            return

        server = self._bind()
        self._thread = threading.Thread(
            target=server.serve_forever,
            daemon=True,
            name="MetricsServer",
        )
        self._thread.start()
        self._mark_serving()

    def serve_forever(self) -> None:
        """Bind and serve on the calling thread until the process exits."""
        server = self._bind()
        self._mark_serving()
        server.serve_forever()

    def _bind(self) -> TLSWSGIServer:
        context = self._ssl_context()
        sock = self._listen_socket()

        try:
            self._server = TLSWSGIServer(
                self.settings.host,
                self.settings.port,
                self.app,
                ssl_context=context,
                handshake_timeout=self.settings.tls_handshake_timeout,
                fd=sock.fileno(),
            )
        finally:
            # werkzeug works on a duplicate of the descriptor
            sock.close()

        return self._server

    def _ssl_context(self) -> ssl.SSLContext:
        cert_file = self.settings.tls_cert_file
        key_file = self.settings.tls_key_file

        if self.settings.tls_generate_ephemeral:
            try:
                cert_file, key_file = write_ephemeral_pair(
                    self.settings.tls_ephemeral_hostname
                )
            except (OSError, ValueError) as e:
                raise CertificateError(cert_file, key_file, str(e)) from e

        return load_server_context(cert_file, key_file)

    def _listen_socket(self) -> socket.socket:
        host = self.settings.host
        port = self.settings.port
        family = socket.AF_INET6 if ":" in host else socket.AF_INET

        try:
            return socket.create_server((host, port), family=family)
        except OSError as e:
            raise ServerBindError(host, port, e.strerror or str(e)) from e

    def _mark_serving(self) -> None:
        self.state = ServerState.SERVING
        logger.info(
            "Metrics server listening",
            extra={"host": self.settings.host, "port": self.port},
        )


def run_server(app: App, settings: Settings) -> None:
    """Serve the metrics endpoint for the life of the process."""
    MetricsServer(app, settings).serve_forever()
