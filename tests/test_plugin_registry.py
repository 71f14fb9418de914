import pytest

from floresta_cln.plugin.registry import MethodRegistry, build_registry
from floresta_cln.utils.exceptions import BadRequestError, MethodNotFoundError


class _RecordingClient:
    def __init__(self) -> None:
        self.calls: list[tuple[str, dict]] = []


def test_build_registry_exposes_backend_methods():
    registry = build_registry()
    assert registry.method_names == [
        "getchaininfo",
        "sendrawtransaction",
        "getutxout",
        "estimatefees",
        "getrawblockbyheight",
    ]
    assert len(registry) == 5
    assert "getutxout" in registry
    assert "getblock" not in registry


def test_manifest_entries_carry_usage_and_help():
    entries = {entry["name"]: entry for entry in build_registry().manifest_entries()}
    assert entries["getutxout"]["usage"] == "txid vout"
    assert entries["sendrawtransaction"]["usage"] == "tx [allowhighfees]"
    assert entries["getchaininfo"]["usage"] == ""
    assert entries["getchaininfo"]["description"] == "Returns general information about the chain we are in."
    assert "headercount" in entries["getchaininfo"]["long_description"]
    assert "placeholder" in entries["estimatefees"]["long_description"]


def test_positional_params_map_onto_usage_names():
    registry = build_registry()
    assert registry.normalize_params("getutxout", ["ab", 1]) == {"txid": "ab", "vout": 1}
    assert registry.normalize_params("sendrawtransaction", ["00", True]) == {"tx": "00", "allowhighfees": True}
    assert registry.normalize_params("getrawblockbyheight", {"height": 3}) == {"height": 3}
    assert registry.normalize_params("estimatefees", None) == {}
    with pytest.raises(BadRequestError, match="at most 1"):
        registry.normalize_params("getrawblockbyheight", [1, 2])


@pytest.mark.asyncio
async def test_dispatch_shares_one_client_across_handlers():
    seen_clients: list[object] = []

    async def _echo(client, params):
        seen_clients.append(client)
        return {"params": params}

    registry = MethodRegistry().rpcmethod("echo", "Echo params.", _echo, params=("value",))
    client = _RecordingClient()
    dispatcher = registry.bind(client)

    assert await dispatcher.dispatch("echo", ["x"]) == {"params": {"value": "x"}}
    assert await dispatcher.dispatch("echo", {"value": "y"}) == {"params": {"value": "y"}}
    assert seen_clients == [client, client]


@pytest.mark.asyncio
async def test_dispatch_unknown_method():
    dispatcher = build_registry().bind(_RecordingClient())
    with pytest.raises(MethodNotFoundError) as excinfo:
        await dispatcher.dispatch("getblock", {})
    assert excinfo.value.details == {"method": "getblock"}


@pytest.mark.asyncio
async def test_dispatch_estimatefees_needs_no_backend():
    dispatcher = build_registry().bind(None)
    out = await dispatcher.dispatch("estimatefees")
    assert [row["blocks"] for row in out["feerates"]] == [2, 6, 12, 100]


def test_register_replaces_existing_method():
    async def _first(client, params):
        return {"n": 1}

    async def _second(client, params):
        return {"n": 2}

    registry = MethodRegistry()
    registry.register("m", _first, description="first")
    registry.register("m", _second, description="second")
    method = registry.get("m")
    assert method is not None
    assert method.handler is _second
    assert len(registry) == 1
