"""Method registry and dispatcher for the lightningd-facing RPC methods."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from loguru import logger

from floresta_cln.plugin import help_text, methods
from floresta_cln.utils.exceptions import BadRequestError, MethodNotFoundError

MethodHandler = Callable[[Any, dict[str, Any]], Awaitable[dict[str, Any]]]


@dataclass(slots=True)
class RpcMethod:
    """One registered method with its help text and parameter names."""

    name: str
    handler: MethodHandler
    description: str
    params: tuple[str, ...] = ()
    optional: tuple[str, ...] = ()

    @property
    def usage(self) -> str:
        parts = list(self.params) + [f"[{name}]" for name in self.optional]
        return " ".join(parts)

    def to_manifest(self) -> dict[str, Any]:
        summary = next((line.strip() for line in self.description.splitlines() if line.strip()), self.name)
        return {
            "name": self.name,
            "usage": self.usage,
            "description": summary,
            "long_description": self.description.strip(),
        }


class MethodRegistry:
    """
    Registry of RPC methods exposed to lightningd.

    Methods are registered once at startup; `bind` attaches the shared backend
    client and yields the dispatcher used for every request.
    """

    def __init__(self) -> None:
        self._methods: dict[str, RpcMethod] = {}

    def register(
        self,
        name: str,
        handler: MethodHandler,
        *,
        description: str,
        params: tuple[str, ...] = (),
        optional: tuple[str, ...] = (),
    ) -> None:
        """Register a method, replacing any previous one with the same name."""
        self._methods[name] = RpcMethod(
            name=name,
            handler=handler,
            description=description,
            params=params,
            optional=optional,
        )

    def rpcmethod(
        self,
        name: str,
        description: str,
        handler: MethodHandler,
        *,
        params: tuple[str, ...] = (),
        optional: tuple[str, ...] = (),
    ) -> "MethodRegistry":
        """Chainable form of `register`."""
        self.register(name, handler, description=description, params=params, optional=optional)
        return self

    def get(self, name: str) -> RpcMethod | None:
        return self._methods.get(name)

    @property
    def method_names(self) -> list[str]:
        return list(self._methods)

    def manifest_entries(self) -> list[dict[str, Any]]:
        """Render registered methods for lightningd's `getmanifest`."""
        return [method.to_manifest() for method in self._methods.values()]

    def normalize_params(self, name: str, params: dict[str, Any] | list[Any] | None) -> dict[str, Any]:
        """Map positional params onto the method's parameter names."""
        if params is None:
            return {}
        if isinstance(params, dict):
            return params
        method = self._methods.get(name)
        if method is None:
            raise MethodNotFoundError(name)
        names = method.params + method.optional
        if len(params) > len(names):
            raise BadRequestError(
                f"{name} takes at most {len(names)} parameter(s), got {len(params)}",
            )
        return dict(zip(names, params))

    def bind(self, client: Any) -> "MethodDispatcher":
        return MethodDispatcher(self, client)

    def __len__(self) -> int:
        return len(self._methods)

    def __contains__(self, name: str) -> bool:
        return name in self._methods


class MethodDispatcher:
    """Routes requests to handlers, all sharing one backend client."""

    def __init__(self, registry: MethodRegistry, client: Any):
        self.registry = registry
        self.client = client

    async def dispatch(self, name: str, params: dict[str, Any] | list[Any] | None = None) -> dict[str, Any]:
        """
        Run the handler registered under `name`.

        Raises:
            MethodNotFoundError: no such method.
            BadRequestError: params could not be mapped or failed validation.
            TransportError, MalformedResponseError: backend failures.
        """
        method = self.registry.get(name)
        if method is None:
            raise MethodNotFoundError(name)
        named = self.registry.normalize_params(name, params)
        logger.debug("dispatch {} params={}", name, named)
        return await method.handler(self.client, named)


def build_registry() -> MethodRegistry:
    """Registry with every method a lightningd Bitcoin backend needs."""
    return (
        MethodRegistry()
        .rpcmethod("getchaininfo", help_text.GET_CHAIN_INFO_HELP, methods.get_chain_info)
        .rpcmethod(
            "sendrawtransaction",
            help_text.SEND_RAW_TRANSACTION_HELP,
            methods.send_raw_transaction,
            params=("tx",),
            optional=("allowhighfees",),
        )
        .rpcmethod(
            "getutxout",
            help_text.GET_UTXOUT_HELP,
            methods.get_utxout,
            params=("txid", "vout"),
        )
        .rpcmethod("estimatefees", help_text.ESTIMATE_FEES_HELP, methods.estimate_fees)
        .rpcmethod(
            "getrawblockbyheight",
            help_text.GET_RAW_BLOCK_BY_HEIGHT_HELP,
            methods.get_raw_block_by_height,
            params=("height",),
        )
    )
