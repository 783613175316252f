"""A small HTTP server that connectivity checks can target."""

from __future__ import annotations

import argparse
import logging
import os
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

PORT = 8080

logger = logging.getLogger(__name__)


def greeting(client: str, server: str, node_name: str) -> str:
    """Return the reply sent to ``client`` by ``server`` on ``node_name``."""
    return f"Hello, {client}. You have reached {server} on {node_name}"


def _handler_for(node_name: str) -> type[BaseHTTPRequestHandler]:
    class _Handler(BaseHTTPRequestHandler):
        def _respond(self) -> None:
            if isinstance(self.client_address, tuple) and self.client_address:
                client = str(self.client_address[0])
            else:
                client = str(self.client_address)
            try:
                server = str(self.connection.getsockname()[0])
            except (OSError, IndexError, TypeError):
                server = "unknown IP"
            body = greeting(client, server, node_name).encode()
            self.send_response(200)
            self.send_header("Content-Type", "text/plain; charset=utf-8")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        do_GET = do_POST = do_PUT = do_DELETE = do_PATCH = _respond

        def log_message(self, format: str, *args) -> None:
            logger.debug("%s - %s", self.address_string(), format % args)

    return _Handler


def make_server(port: int, node_name: str) -> ThreadingHTTPServer:
    """Return a server bound to ``port`` on all interfaces, not yet serving."""
    return ThreadingHTTPServer(("", port), _handler_for(node_name))


def main(argv: list[str] | None = None) -> None:
    """Serve the greeting on port 8080 until interrupted."""
    parser = argparse.ArgumentParser(
        description="Answer every HTTP request with the client, server and node names."
    )
    parser.parse_args(argv)
    server = make_server(PORT, os.environ.get("K8S_NODE_NAME", ""))
    print(f"serving on {PORT}", flush=True)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()


if __name__ == "__main__":
    main()