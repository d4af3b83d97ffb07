"""Request and response logging middleware

Logs every HTTP request and response with method, path, status, duration
and a request id. In DEBUG mode JSON request and response bodies are logged
too, with long string values shortened.
"""
import json
import time
import uuid
from typing import Any

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from backend.config import settings
from backend.utils.logger import get_logger

logger = get_logger(__name__)

MAX_LOGGED_STRING = 200
MAX_LOGGED_BODY = 2000


def _shorten_strings(data: Any, max_length: int = MAX_LOGGED_STRING) -> Any:
    """Copy of ``data`` with long strings (prompts, data URLs) cut to ``max_length``"""
    if isinstance(data, dict):
        return {key: _shorten_strings(value, max_length) for key, value in data.items()}
    if isinstance(data, list):
        return [_shorten_strings(item, max_length) for item in data]
    if isinstance(data, str) and len(data) > max_length:
        return f"{data[:max_length]}... [truncated, length={len(data)}]"
    return data


def _format_body(body: bytes) -> str:
    text = body.decode("utf-8", errors="replace")
    try:
        return json.dumps(_shorten_strings(json.loads(text)), ensure_ascii=False)
    except json.JSONDecodeError:
        return text[:MAX_LOGGED_BODY] + "..." if len(text) > MAX_LOGGED_BODY else text


class LoggingMiddleware:
    """Pure ASGI middleware for logging HTTP requests and responses

    Adds ``x-request-id`` and ``x-process-time`` response headers. An
    incoming ``x-request-id`` header is reused as the request id.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        request_id = headers.get("x-request-id") or f"req_{uuid.uuid4().hex[:12]}"
        method = scope["method"]
        path = scope["path"]
        client_ip = scope["client"][0] if scope.get("client") else "unknown"
        debug = settings.log_level.upper() == "DEBUG"
        start_time = time.time()

        logger.info(f"API Request | {method} {path} | client_ip={client_ip} | request_id={request_id}")
        if scope.get("query_string"):
            logger.debug(f"Query string | request_id={request_id} | query={scope['query_string'].decode('utf-8')}")

        request_chunks = []

        async def receive_logged() -> Message:
            message = await receive()
            if message["type"] == "http.request":
                request_chunks.append(message.get("body", b""))
                if not message.get("more_body", False):
                    body = b"".join(request_chunks)
                    if body:
                        logger.debug(f"Request body | request_id={request_id} | body={_format_body(body)}")
            return message

        status_code = 500
        response_chunks = []

        async def send_logged(message: Message) -> None:
            nonlocal status_code

            if message["type"] == "http.response.start":
                status_code = message["status"]
                message["headers"] = list(message.get("headers", [])) + [
                    (b"x-request-id", request_id.encode()),
                    (b"x-process-time", f"{time.time() - start_time:.3f}".encode()),
                ]

            elif message["type"] == "http.response.body":
                if debug:
                    response_chunks.append(message.get("body", b""))

                if not message.get("more_body", False):
                    duration = time.time() - start_time
                    logger.info(
                        f"API Response | {method} {path} | status={status_code} | "
                        f"duration={duration:.3f}s | request_id={request_id}"
                    )
                    body = b"".join(response_chunks)
                    if debug and body:
                        logger.debug(
                            f"Response body | request_id={request_id} | status={status_code} | "
                            f"body={_format_body(body)}"
                        )

            await send(message)

        try:
            await self.app(scope, receive_logged if debug and method in ("POST", "PUT", "PATCH") else receive, send_logged)
        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"API Error | {method} {path} | error={type(e).__name__} | message={str(e)} | "
                f"duration={duration:.3f}s | request_id={request_id}"
            )
            raise
