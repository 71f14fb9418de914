"""lightningd plugin runtime: line-delimited JSON-RPC over stdio."""

from __future__ import annotations

import asyncio
import sys
import threading
from typing import Any, Callable, TextIO

from loguru import logger

from floresta_cln import __version__
from floresta_cln.backend.client import BackendRpcClient
from floresta_cln.config.schema import BackendConfig, Config
from floresta_cln.plugin.protocol import (
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    HostError,
    HostNotification,
    HostRequest,
    HostResponse,
)
from floresta_cln.plugin.registry import MethodDispatcher, MethodRegistry, build_registry
from floresta_cln.plugin.serialization import (
    FrameError,
    decode_request_line,
    encode_notification,
    encode_response,
    safe_dict,
    to_host_error,
)
from floresta_cln.utils.exceptions import BridgeError, PluginNotReadyError, sanitize_error_message

OPTION_RPC_URL = "floresta-rpc-url"
OPTION_RPC_TIMEOUT = "floresta-rpc-timeout"

_STDIN_LIMIT = 16 * 1024 * 1024

# loguru level name -> lightningd log level
_HOST_LOG_LEVELS = {
    "TRACE": "debug",
    "DEBUG": "debug",
    "INFO": "info",
    "SUCCESS": "info",
    "WARNING": "warn",
    "ERROR": "error",
    "CRITICAL": "error",
}

ClientFactory = Callable[[BackendConfig], Any]


class PluginHost:
    """Serves lightningd requests until `shutdown` or stdin EOF."""

    def __init__(
        self,
        config: Config | None = None,
        registry: MethodRegistry | None = None,
        *,
        client_factory: ClientFactory = BackendRpcClient,
        output: TextIO | None = None,
    ):
        self.config = config or Config()
        self.registry = registry or build_registry()
        self._client_factory = client_factory
        self._out = output or sys.stdout
        self._write_lock = threading.Lock()
        self._client: Any = None
        self._dispatcher: MethodDispatcher | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._log_sink_id: int | None = None
        self._stopping = False

    @property
    def initialized(self) -> bool:
        return self._dispatcher is not None

    def manifest(self) -> dict[str, Any]:
        backend = self.config.backend
        return {
            "options": [
                {
                    "name": OPTION_RPC_URL,
                    "type": "string",
                    "default": backend.url,
                    "description": "URL of the florestad JSON-RPC server",
                },
                {
                    "name": OPTION_RPC_TIMEOUT,
                    "type": "string",
                    "default": str(backend.timeout_seconds),
                    "description": "Seconds to wait for each florestad reply",
                },
            ],
            "rpcmethods": self.registry.manifest_entries(),
            "subscriptions": [],
            "hooks": [],
            "notifications": [],
            "dynamic": True,
        }

    def attach_log_sink(self, level: str = "INFO") -> int:
        """Forward loguru records to lightningd as `log` notifications."""
        if self._log_sink_id is None:
            self._log_sink_id = logger.add(self._log_sink, level=level, format="{message}")
        return self._log_sink_id

    def _log_sink(self, message: Any) -> None:
        record = message.record
        level = _HOST_LOG_LEVELS.get(record["level"].name, "info")
        self.send_notification("log", {"level": level, "message": record["message"]})

    async def run(self, reader: asyncio.StreamReader | None = None) -> None:
        """Read frames until shutdown; each method call runs as its own task."""
        reader = reader or await _stdin_reader()
        logger.debug("floresta-cln {} waiting for lightningd", __version__)
        try:
            while not self._stopping:
                line = await reader.readline()
                if not line:
                    logger.debug("stdin closed")
                    break
                text = line.decode("utf-8", errors="replace").strip()
                if text:
                    await self.handle_line(text)
        finally:
            await self.close()

    async def handle_line(self, text: str) -> None:
        try:
            request = decode_request_line(text)
        except FrameError as exc:
            if exc.request_id is None:
                logger.warning("ignoring frame from lightningd: {} ({})", exc, text[:200])
                return
            logger.warning("invalid request {} from lightningd: {}", exc.request_id, exc)
            self._respond(HostResponse(id=exc.request_id, error=HostError(INVALID_REQUEST, str(exc))))
            return

        if request.method == "getmanifest":
            self._respond(HostResponse(id=request.id, result=self.manifest()))
        elif request.method == "init":
            self._respond(HostResponse(id=request.id, result=await self._initialize(request)))
        elif request.method == "shutdown":
            logger.info("shutdown requested by lightningd")
            self._stopping = True
            if not request.is_notification:
                self._respond(HostResponse(id=request.id, result={}))
        elif request.method in self.registry:
            if request.is_notification:
                logger.debug("ignoring {} sent as a notification", request.method)
                return
            task = asyncio.create_task(self._run_method(request))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        elif request.is_notification:
            logger.debug("ignoring notification {}", request.method)
        else:
            self._respond(
                HostResponse(
                    id=request.id,
                    error=HostError(METHOD_NOT_FOUND, f"unknown method: {request.method}"),
                )
            )

    async def _initialize(self, request: HostRequest) -> dict[str, Any]:
        params = safe_dict(request.params)
        options = safe_dict(params.get("options"))
        raw_timeout = options.get(OPTION_RPC_TIMEOUT)
        try:
            timeout = float(raw_timeout) if raw_timeout not in (None, "") else None
            config = self.config.with_backend_overrides(
                url=str(options.get(OPTION_RPC_URL) or "") or None,
                timeout_seconds=timeout,
            )
        except ValueError as exc:
            reason = f"invalid floresta options: {sanitize_error_message(str(exc))}"
            logger.error(reason)
            return {"disable": reason}

        if self._client is not None:
            # Requests already in flight finish on the old client.
            await self._drain_tasks()
            await self._client.aclose()
        self.config = config
        self._client = self._client_factory(config.backend)
        self._dispatcher = self.registry.bind(self._client)
        logger.info(
            "floresta-cln {} using florestad at {}",
            __version__,
            sanitize_error_message(config.backend.url),
        )
        return {}

    async def _run_method(self, request: HostRequest) -> None:
        try:
            if self._dispatcher is None:
                raise PluginNotReadyError(request.method)
            result = await self._dispatcher.dispatch(request.method, request.params)
            response = HostResponse(id=request.id, result=result)
        except BridgeError as exc:
            logger.warning("{} failed with {}: {}", request.method, exc.code, exc.message)
            response = HostResponse(id=request.id, error=to_host_error(exc))
        except Exception as exc:
            logger.exception("{} failed unexpectedly", request.method)
            response = HostResponse(id=request.id, error=to_host_error(exc))
        self._respond(response)

    def _respond(self, response: HostResponse) -> None:
        self._write(encode_response(response))

    def send_notification(self, method: str, params: dict[str, Any]) -> None:
        self._write(encode_notification(HostNotification(method=method, params=params)))

    def _write(self, line: str) -> None:
        with self._write_lock:
            self._out.write(line + "\n\n")
            self._out.flush()

    async def close(self) -> None:
        """Wait for in-flight requests, then release the backend client."""
        await self._drain_tasks()
        if self._log_sink_id is not None:
            logger.remove(self._log_sink_id)
            self._log_sink_id = None
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            self._dispatcher = None

    async def _drain_tasks(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


async def _stdin_reader() -> asyncio.StreamReader:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=_STDIN_LIMIT)
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)
    return reader
