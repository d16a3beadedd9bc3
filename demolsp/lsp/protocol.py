import json
import asyncio
from typing import Any


class ErrorCodes:
    ParseError = -32700
    InvalidRequest = -32600
    MethodNotFound = -32601
    InvalidParams = -32602
    InternalError = -32603
    ServerNotInitialized = -32002


class LSPProtocolError(Exception):
    pass


class LSPParseError(LSPProtocolError):
    """The frame was read completely but its body is not valid JSON."""


class LSPHeaderError(LSPProtocolError):
    """The header block was read completely but does not describe a body."""


class LSPResponseError(Exception):
    code: int
    message: str
    data: object | None

    def __init__(self, code: int, message: str, data: object | None = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"LSP Error {code}: {message}")

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


def encode_message(obj: dict[str, Any]) -> bytes:
    content = json.dumps(obj).encode("utf-8")
    header = f"Content-Length: {len(content)}\r\n\r\n".encode("ascii")
    return header + content


def make_response(request_id: int | str | None, result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def make_error_response(request_id: int | str | None, error: LSPResponseError) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": error.to_dict()}


def make_notification(method: str, params: dict | list | None) -> dict[str, Any]:
    message: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
    if params is not None:
        message["params"] = params
    return message


async def read_message(reader: asyncio.StreamReader) -> dict[str, Any]:
    headers: dict[str, str] = {}

    while True:
        line = await reader.readline()
        if not line:
            raise LSPProtocolError("Connection closed")

        line_str = line.decode("ascii", errors="replace").strip()
        if not line_str:
            break

        if ":" in line_str:
            key, value = line_str.split(":", 1)
            headers[key.strip()] = value.strip()

    if "Content-Length" not in headers:
        raise LSPHeaderError("Missing Content-Length header")

    try:
        content_length = int(headers["Content-Length"])
    except ValueError:
        raise LSPHeaderError(f"Invalid Content-Length header: {headers['Content-Length']!r}")
    if content_length < 0:
        raise LSPHeaderError(f"Negative Content-Length header: {content_length}")

    try:
        content = await reader.readexactly(content_length)
    except asyncio.IncompleteReadError:
        raise LSPProtocolError("Connection closed")

    try:
        message = json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise LSPParseError(f"Malformed message body: {e}")

    if not isinstance(message, dict):
        raise LSPParseError(f"Expected a JSON object, got {type(message).__name__}")
    return message
