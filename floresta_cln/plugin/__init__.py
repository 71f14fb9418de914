"""lightningd-facing side: frame types, method handlers, registry and stdio runtime."""

from .host import PluginHost
from .protocol import HostError, HostNotification, HostRequest, HostResponse
from .registry import MethodDispatcher, MethodRegistry, RpcMethod, build_registry

__all__ = [
    "HostError",
    "HostNotification",
    "HostRequest",
    "HostResponse",
    "MethodDispatcher",
    "MethodRegistry",
    "PluginHost",
    "RpcMethod",
    "build_registry",
]
