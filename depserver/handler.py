"""HTTP service that relays dependency metadata stored in a bucket."""

from __future__ import annotations

import argparse
import logging
import os
import urllib.error
import urllib.request
from dataclasses import dataclass
from http import HTTPStatus
from socketserver import ThreadingMixIn
from typing import Any, Callable, Iterable, Mapping
from urllib.parse import parse_qs
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

DEFAULT_BUCKET_URL = "https://deps.paketo.io"
DEPENDENCY_PATH = "/v1/dependency"

_log = logging.getLogger(__name__)


def _first_param(query: str | Mapping[str, Any], key: str) -> str:
    if isinstance(query, str):
        values = parse_qs(query).get(key) or [""]
        return values[0]
    value = query.get(key, "")
    if isinstance(value, (list, tuple)):
        return value[0] if value else ""
    return value or ""


def _error(status: int, message: str) -> tuple[int, bytes]:
    return status, f'{{"error": "{message}"}}'.encode()


@dataclass(frozen=True)
class Handler:
    """Serves the metadata file of a dependency from the bucket."""

    bucket_url: str = DEFAULT_BUCKET_URL

    def dependency_handler(
        self, method: str, query: str | Mapping[str, Any]
    ) -> tuple[int, bytes]:
        """Answer a dependency request; return the status code and body."""
        if method != "GET":
            return _error(
                HTTPStatus.METHOD_NOT_ALLOWED, f"request method {method} not supported"
            )

        name = _first_param(query, "name")
        if not name:
            return _error(HTTPStatus.BAD_REQUEST, "must provide param 'name'")

        url = f"{self.bucket_url}/metadata/{name.lower()}.json"
        try:
            with urllib.request.urlopen(url) as response:
                if response.status != HTTPStatus.OK:
                    return _error(
                        HTTPStatus.INTERNAL_SERVER_ERROR, "error getting dependency metadata"
                    )
                try:
                    body = response.read()
                except OSError as err:
                    return _error(
                        HTTPStatus.INTERNAL_SERVER_ERROR,
                        f"error returning dependency metadata: {err}",
                    )
        except urllib.error.HTTPError as err:
            err.close()
            return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "error getting dependency metadata")
        except (urllib.error.URLError, OSError, ValueError) as err:
            return _error(
                HTTPStatus.INTERNAL_SERVER_ERROR,
                f"error requesting dependency metadata: {err}",
            )
        return HTTPStatus.OK, body

    def __call__(
        self, environ: Mapping[str, Any], start_response: Callable[..., Any]
    ) -> Iterable[bytes]:
        if environ.get("PATH_INFO", "") == DEPENDENCY_PATH:
            status, body = self.dependency_handler(
                environ.get("REQUEST_METHOD", "GET"), environ.get("QUERY_STRING", "")
            )
        else:
            status, body = HTTPStatus.NOT_FOUND, b"404 page not found\n"
        phrase = HTTPStatus(status).phrase
        start_response(
            f"{int(status)} {phrase}",
            [
                ("Content-Type", "text/plain; charset=utf-8"),
                ("Content-Length", str(len(body))),
            ],
        )
        return [body]


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = True


class _LoggingRequestHandler(WSGIRequestHandler):
    """Sends request log lines to the module logger instead of stderr."""

    def log_message(self, format: str, *args: Any) -> None:
        _log.debug("%s - %s", self.address_string(), format % args)


def main(argv: list[str] | None = None) -> None:
    """Run the metadata service on the port named by PORT (8080 by default)."""
    parser = argparse.ArgumentParser(description="Serve dependency metadata.")
    parser.add_argument(
        "-bucket-url",
        "--bucket-url",
        dest="bucket_url",
        default=DEFAULT_BUCKET_URL,
        help="URL of Metadata Bucket",
    )
    args = parser.parse_args(argv)

    port = os.environ.get("PORT") or "8080"
    with make_server(
        "",
        int(port),
        Handler(bucket_url=args.bucket_url),
        server_class=_ThreadingWSGIServer,
        handler_class=_LoggingRequestHandler,
    ) as server:
        server.serve_forever()