import asyncio
import logging
import sys
from typing import Any, Callable

from pydantic import ValidationError

from .. import __version__
from .session import Session
from ..lsp.capabilities import choose_position_encoding, get_server_capabilities
from ..lsp.protocol import (
    ErrorCodes,
    LSPHeaderError,
    LSPParseError,
    LSPProtocolError,
    LSPResponseError,
    encode_message,
    make_error_response,
    make_notification,
    make_response,
    read_message,
)
from ..lsp.types import (
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    InitializeParams,
    InitializeResult,
    Location,
    PositionEncodingKind,
    PublishDiagnosticsParams,
    ReferenceParams,
    RenameParams,
    ServerCapabilities,
    ServerInfo,
    TextDocumentPositionParams,
)
from ..utils.config import get_log_dir, get_log_level, load_config

logger = logging.getLogger(__name__)

SERVER_NAME = "demolsp"


class LanguageServer:
    """Serves one LSP client over a pair of byte streams.

    Messages are handled strictly one at a time, in arrival order. None of the
    handlers await, so a request always runs against the document state left
    by the messages before it.
    """

    def __init__(self, reader: asyncio.StreamReader, writer: Any, config: dict | None = None):
        self.reader = reader
        self.writer = writer
        self.config = config or {}
        # UTF-16 until the client offers something else in initialize.
        self.session = Session.from_config(
            self.config,
            publish=self._publish_diagnostics,
            position_encoding=PositionEncodingKind.UTF16,
        )
        self._initialized = False
        self._shutdown_requested = False
        self._exited = False

        self._request_handlers: dict[str, Callable[[dict], Any]] = {
            "initialize": self._handle_initialize,
            "shutdown": self._handle_shutdown,
            "textDocument/hover": self._handle_hover,
            "textDocument/definition": self._handle_definition,
            "textDocument/references": self._handle_references,
            "textDocument/rename": self._handle_rename,
            "textDocument/completion": self._handle_completion,
        }
        self._notification_handlers: dict[str, Callable[[dict], None]] = {
            "initialized": self._handle_initialized,
            "textDocument/didOpen": self._handle_did_open,
            "textDocument/didChange": self._handle_did_change,
            "textDocument/didClose": self._handle_did_close,
            "textDocument/didSave": self._ignore,
            "$/cancelRequest": self._ignore,
            "$/setTrace": self._ignore,
        }

    async def serve(self) -> int:
        """Run until exit or end of input. Returns the process exit code."""
        while not self._exited:
            try:
                message = await read_message(self.reader)
            except LSPParseError as e:
                logger.error(f"Parse error: {e}")
                self._write(make_error_response(None, LSPResponseError(ErrorCodes.ParseError, str(e))))
                await self.writer.drain()
                continue
            except LSPHeaderError as e:
                logger.error(f"Skipping frame: {e}")
                continue
            except LSPProtocolError as e:
                logger.info(f"Stopping: {e}")
                break

            await self.handle_message(message)
            await self.writer.drain()

        return 0 if self._shutdown_requested else 1

    async def handle_message(self, message: dict[str, Any]) -> None:
        method = message.get("method")
        if method is None:
            # We never send requests to the client, so nothing awaits a response.
            logger.warning(f"Ignoring unexpected response: id={message.get('id')}")
            return
        if not isinstance(method, str):
            logger.warning(f"Invalid method {method!r}")
            if "id" in message:
                error = LSPResponseError(ErrorCodes.InvalidRequest, "Method must be a string")
                self._write(make_error_response(message["id"], error))
            return

        params = message.get("params")
        if params is None:
            params = {}

        if "id" in message:
            self._handle_request(message["id"], method, params)
        else:
            self._handle_notification(method, params)

    def _handle_request(self, request_id: int | str | None, method: str, params: dict) -> None:
        logger.debug(f"Received request {request_id}: {method}")

        try:
            result = self._dispatch_request(method, params)
            response = make_response(request_id, result)
        except LSPResponseError as e:
            logger.info(f"Request {request_id} ({method}) failed: {e}")
            response = make_error_response(request_id, e)
        except ValidationError as e:
            logger.info(f"Invalid params for {method}: {e}")
            response = make_error_response(
                request_id,
                LSPResponseError(ErrorCodes.InvalidParams, f"Invalid params for {method}", str(e)),
            )
        except Exception as e:
            logger.exception(f"Error in handler {method}")
            response = make_error_response(request_id, LSPResponseError(ErrorCodes.InternalError, str(e)))

        self._write(response)

    def _dispatch_request(self, method: str, params: dict) -> Any:
        if not self._initialized and method != "initialize":
            raise LSPResponseError(ErrorCodes.ServerNotInitialized, "Server not initialized")
        if self._shutdown_requested:
            raise LSPResponseError(ErrorCodes.InvalidRequest, "Server is shutting down")

        handler = self._request_handlers.get(method)
        if handler is None:
            raise LSPResponseError(ErrorCodes.MethodNotFound, f"Method not found: {method}")
        return handler(params)

    def _handle_notification(self, method: str, params: dict) -> None:
        logger.debug(f"Received notification: {method}")

        if method == "exit":
            self._exited = True
            return
        if not self._initialized:
            logger.warning(f"Dropping notification before initialize: {method}")
            return

        handler = self._notification_handlers.get(method)
        if handler is None:
            logger.debug(f"No handler for notification: {method}")
            return

        try:
            handler(params)
        except ValidationError as e:
            logger.error(f"Invalid params for {method}: {e}")
        except Exception:
            logger.exception(f"Error in notification handler {method}")

    def _write(self, message: dict[str, Any]) -> None:
        self.writer.write(encode_message(message))

    def send_notification(self, method: str, params: dict | list | None) -> None:
        self._write(make_notification(method, params))
        logger.debug(f"Sent notification: {method}")

    def _publish_diagnostics(self, params: PublishDiagnosticsParams) -> None:
        self.send_notification("textDocument/publishDiagnostics", params.to_lsp())

    # Requests

    def _handle_initialize(self, params: dict) -> dict:
        if self._initialized:
            raise LSPResponseError(ErrorCodes.InvalidRequest, "Server already initialized")

        init = InitializeParams.model_validate(params)
        logger.info(f"Initialize from process {init.process_id}, root {init.root_uri}")
        general = init.capabilities.general
        encoding = choose_position_encoding(general.position_encodings if general else None)
        self.session.set_position_encoding(encoding)
        self._initialized = True

        return InitializeResult(
            capabilities=ServerCapabilities(**get_server_capabilities(encoding)),
            server_info=ServerInfo(name=SERVER_NAME, version=__version__),
        ).to_lsp()

    def _handle_shutdown(self, params: dict) -> None:
        logger.info("Shutdown requested")
        self._shutdown_requested = True
        return None

    def _handle_hover(self, params: dict) -> dict | None:
        p = TextDocumentPositionParams.model_validate(params)
        uri = p.text_document.uri
        hover = self.session.queries.hover(uri, self.session.position_from_client(uri, p.position))
        return hover.to_lsp() if hover else None

    def _handle_definition(self, params: dict) -> dict | None:
        p = TextDocumentPositionParams.model_validate(params)
        uri = p.text_document.uri
        location = self.session.queries.definition(uri, self.session.position_from_client(uri, p.position))
        if location is None:
            return None
        return self.session.locations_to_client([location])[0].to_lsp()

    def _handle_references(self, params: dict) -> list[dict]:
        p = ReferenceParams.model_validate(params)
        uri = p.text_document.uri
        locations = self.session.queries.references(
            uri, self.session.position_from_client(uri, p.position), p.context.include_declaration
        )
        return [loc.to_lsp() for loc in self.session.locations_to_client(locations)]

    def _handle_rename(self, params: dict) -> dict | None:
        p = RenameParams.model_validate(params)
        uri = p.text_document.uri
        edit = self.session.queries.rename(uri, self.session.position_from_client(uri, p.position), p.new_name)
        if edit is None:
            return None
        for edit_uri, edits in (edit.changes or {}).items():
            locations = self.session.locations_to_client([Location(uri=edit_uri, range=e.range) for e in edits])
            for text_edit, location in zip(edits, locations):
                text_edit.range = location.range
        return edit.to_lsp()

    def _handle_completion(self, params: dict) -> list[dict]:
        return [item.to_lsp() for item in self.session.queries.completion()]

    # Notifications

    def _handle_initialized(self, params: dict) -> None:
        logger.info("Client initialized")

    def _handle_did_open(self, params: dict) -> None:
        p = DidOpenTextDocumentParams.model_validate(params)
        self.session.open_document(p.text_document)

    def _handle_did_change(self, params: dict) -> None:
        p = DidChangeTextDocumentParams.model_validate(params)
        self.session.change_document(p.text_document.uri, p.content_changes, p.text_document.version)

    def _handle_did_close(self, params: dict) -> None:
        p = DidCloseTextDocumentParams.model_validate(params)
        self.session.close_document(p.text_document.uri)

    def _ignore(self, params: dict) -> None:
        pass


async def open_stdio_streams() -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    loop = asyncio.get_running_loop()

    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)

    transport, protocol = await loop.connect_write_pipe(asyncio.streams.FlowControlMixin, sys.stdout)
    writer = asyncio.StreamWriter(transport, protocol, reader, loop)
    return reader, writer


def setup_logging(level: str) -> None:
    log_dir = get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)

    # stdout carries the protocol, so logs only go to the file.
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(log_dir / "server.log"),
        ],
    )


async def run_server(log_level: str | None = None) -> int:
    config = load_config()
    setup_logging(log_level or get_log_level(config))

    reader, writer = await open_stdio_streams()
    server = LanguageServer(reader, writer, config)
    logger.info(f"{SERVER_NAME} {__version__} listening on stdio")

    try:
        return await server.serve()
    finally:
        writer.close()
        logger.info("Server stopped")
