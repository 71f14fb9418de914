import json
from pathlib import Path

from typer.testing import CliRunner

from floresta_cln import __version__
from floresta_cln.cli.commands import app

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_methods_lists_registry() -> None:
    result = runner.invoke(app, ["methods"])
    assert result.exit_code == 0
    for name in ("getchaininfo", "sendrawtransaction", "getutxout", "estimatefees", "getrawblockbyheight"):
        assert name in result.output


def test_call_estimatefees_prints_json() -> None:
    result = runner.invoke(app, ["call", "estimatefees"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["feerate_floor"] == 1000
    assert len(payload["feerates"]) == 4


def test_call_rejects_bad_params() -> None:
    result = runner.invoke(app, ["call", "getutxout", "{oops"])
    assert result.exit_code == 2


def test_call_reports_bridge_errors() -> None:
    result = runner.invoke(app, ["call", "getrawblockbyheight", '{"height": -4}'])
    assert result.exit_code == 1


def test_init_config_writes_once(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    first = runner.invoke(app, ["init-config", "--config", str(path)])
    assert first.exit_code == 0
    assert json.loads(path.read_text())["backend"]["url"] == "http://127.0.0.1:8080"

    second = runner.invoke(app, ["init-config", "--config", str(path)])
    assert second.exit_code == 1

    forced = runner.invoke(app, ["init-config", "--config", str(path), "--force"])
    assert forced.exit_code == 0


def test_broken_config_exits_with_usage_error(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json")
    result = runner.invoke(app, ["call", "estimatefees", "--config", str(path)])
    assert result.exit_code == 2
