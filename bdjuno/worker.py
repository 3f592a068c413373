"""The HTTP worker that serves the registered actions."""

from __future__ import annotations

import json
import logging
import time
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Optional, Union
from urllib.parse import urlsplit

from bdjuno.action_models import GraphQLError, Payload, to_json_object
from bdjuno.handlers import ActionHandler
from bdjuno.metrics import ACTION_METRICS, ActionMetrics

_log = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"

Reply = tuple[int, str, bytes]


def _text(status: HTTPStatus, message: str) -> Reply:
    return status, TEXT_CONTENT_TYPE, (message + "\n").encode("utf-8")


def _dumps(value: Any) -> bytes:
    return json.dumps(value, separators=(",", ":"), allow_nan=False).encode("utf-8")


class ActionsWorker:
    """Routes action requests to their handlers and records metrics about them."""

    def __init__(self, context: Any, metrics: Optional[ActionMetrics] = None) -> None:
        self.context = context
        self.metrics = ACTION_METRICS if metrics is None else metrics
        self._handlers: dict[str, ActionHandler] = {}

    def register_handler(self, path: str, handler: ActionHandler) -> None:
        """Use handler for every request made to path."""
        _log.debug("registering actions handler for %s", path)
        self._handlers[path] = handler

    def handle(self, path: str, body: Union[bytes, str]) -> Reply:
        """Serve one request; return its status, content type and body."""
        handler = self._handlers.get(path)
        if handler is None:
            return _text(HTTPStatus.NOT_FOUND, "404 page not found")

        start = time.monotonic()
        try:
            payload = Payload.from_json(body)
        except ValueError:
            return _text(
                HTTPStatus.INTERNAL_SERVER_ERROR, "invalid payload: failed to unmarshal json"
            )

        try:
            data = _dumps(to_json_object(handler(self.context, payload)))
        except Exception as exc:
            self.metrics.error(path)
            return self._handle_error(path, exc)

        self.metrics.success(path)
        self.metrics.observe_response_time(path, start)
        return HTTPStatus.OK, JSON_CONTENT_TYPE, data

    @staticmethod
    def _handle_error(path: str, error: Exception) -> Reply:
        _log.error("error while executing action %s: %s", path, error)
        body = _dumps(to_json_object(GraphQLError(message=str(error))))
        return HTTPStatus.BAD_REQUEST, JSON_CONTENT_TYPE, body

    def make_server(self, port: int) -> ThreadingHTTPServer:
        """Build an HTTP server listening on every interface at the given port."""
        worker = self

        class _RequestHandler(BaseHTTPRequestHandler):
            def _serve(self) -> None:
                path = urlsplit(self.path).path
                if path not in worker._handlers:
                    reply = worker.handle(path, b"")
                else:
                    try:
                        length = int(self.headers.get("Content-Length") or 0)
                        if length < 0:
                            raise ValueError(length)
                        body = self.rfile.read(length)
                    except (ValueError, OSError):
                        reply = _text(HTTPStatus.BAD_REQUEST, "invalid payload")
                    else:
                        reply = worker.handle(path, body)
                status, content_type, data = reply
                self.send_response(status)
                self.send_header("Content-Type", content_type)
                self.send_header("Content-Length", str(len(data)))
                self.end_headers()
                self.wfile.write(data)

            do_GET = do_POST = do_PUT = do_PATCH = do_DELETE = _serve

            def log_message(self, format: str, *args: Any) -> None:
                _log.debug(format, *args)

        return ThreadingHTTPServer(("", port), _RequestHandler)

    def start(self, port: int) -> None:
        """Serve the registered actions until the process is stopped."""
        with self.make_server(port) as server:
            server.serve_forever()