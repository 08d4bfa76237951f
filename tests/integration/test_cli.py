"""
CLI integration tests using Click's test runner.

The JSON-RPC endpoint is an httpx.MockTransport, so the commands run end to
end (option parsing, registry loading, encoding, signing, decoding) without
network access.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable
from unittest.mock import patch

import httpx
import pytest
from click.testing import CliRunner

from invocant.cli import cli
from invocant.pneuma.rpc import TransportClient

DEV_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEV_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
CONTRACT = "0xC4CA13280b8EafD7A033670E620B1AF74950E147"
RPC_URL = "http://localhost:8547"
TX_HASH = "0x" + "ab" * 32


def endpoint(answers: dict[str, Any], seen: list[str]) -> Callable[..., TransportClient]:
    """A TransportClient factory whose endpoint answers by JSON-RPC method name."""

    def _respond(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        seen.append(payload["method"])
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": answers[payload["method"]]})

    def _factory(rpc_url: str, **kwargs: Any) -> TransportClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(_respond))
        return TransportClient(rpc_url, client=client)

    return _factory


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def key_file(tmp_path: Path) -> Path:
    path = tmp_path / ".dev.pri"
    path.write_text(DEV_PRIVATE_KEY[2:] + "\n", encoding="utf-8")
    return path


class TestVersionAndInfo:
    """Basic commands that need no endpoint."""

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_help_without_command(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "call" in result.output
        assert "send" in result.output

    def test_methods(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["methods", "--interface", "weth"])
        assert result.exit_code == 0
        assert "0x313ce567" in result.output
        assert "function deposit() payable" in result.output

    def test_methods_from_signature(self, runner: CliRunner) -> None:
        result = runner.invoke(
            cli, ["methods", "--signature", "function withdraw(uint256 amount) external"]
        )
        assert result.exit_code == 0
        assert "0x2e1a7d4d" in result.output

    def test_methods_needs_one_source(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["methods"])
        assert result.exit_code == 2
        assert "exactly one" in result.output


class TestWhoami:
    """Key file identity display."""

    def test_whoami(self, runner: CliRunner, key_file: Path) -> None:
        result = runner.invoke(cli, ["whoami", "--key-file", str(key_file)])
        assert result.exit_code == 0
        assert f"Address: {DEV_ADDRESS}" in result.output

    def test_whoami_empty_key(self, runner: CliRunner, tmp_path: Path) -> None:
        empty = tmp_path / "empty.pri"
        empty.write_text("", encoding="utf-8")
        result = runner.invoke(cli, ["whoami", "--key-file", str(empty)])
        assert result.exit_code == 1
        assert "ERROR" in result.output


class TestCall:
    """Read-only calls through `invocant call`."""

    def _base(self) -> list[str]:
        return ["--interface", "weth", "--address", CONTRACT, "--rpc-url", RPC_URL]

    def test_decimals(self, runner: CliRunner) -> None:
        seen: list[str] = []
        factory = endpoint({"eth_call": "0x" + "00" * 31 + "12"}, seen)
        with patch("invocant.theurgy.invoke.TransportClient", factory):
            result = runner.invoke(cli, ["call", "decimals", *self._base()])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == [18]
        assert seen == ["eth_call"]

    def test_sum(self, runner: CliRunner) -> None:
        seen: list[str] = []
        answer = "0x" + (0x40).to_bytes(32, "big").hex() + (16).to_bytes(32, "big").hex() + "00" * 32
        factory = endpoint({"eth_call": answer}, seen)
        with patch("invocant.theurgy.invoke.TransportClient", factory):
            result = runner.invoke(cli, ["call", "sum", "--args", "[[16]]", *self._base()])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == ["", 16]

    def test_mutating_method_refused(self, runner: CliRunner) -> None:
        seen: list[str] = []
        factory = endpoint({}, seen)
        with patch("invocant.theurgy.invoke.TransportClient", factory):
            result = runner.invoke(cli, ["call", "withdraw", "--args", "[1]", *self._base()])

        assert result.exit_code == 2
        assert "invocant send" in result.output
        assert seen == []

    def test_out_of_range_argument(self, runner: CliRunner) -> None:
        seen: list[str] = []
        factory = endpoint({}, seen)
        with patch("invocant.theurgy.invoke.TransportClient", factory):
            result = runner.invoke(
                cli,
                [
                    "call",
                    "small",
                    "--args",
                    "[300]",
                    "--signature",
                    "function small(uint8 x) external view returns (uint8)",
                    "--address",
                    CONTRACT,
                    "--rpc-url",
                    RPC_URL,
                ],
            )

        assert result.exit_code == 1
        assert "uint8" in result.output
        assert seen == []

    def test_bad_args_json(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["call", "decimals", "--args", "{", *self._base()])
        assert result.exit_code == 2

    def test_revert_reported(self, runner: CliRunner) -> None:
        def _respond(request: httpx.Request) -> httpx.Response:
            payload = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "jsonrpc": "2.0",
                    "id": payload["id"],
                    "error": {"code": -32000, "message": "execution reverted: paused"},
                },
            )

        def _factory(rpc_url: str, **kwargs: Any) -> TransportClient:
            return TransportClient(rpc_url, client=httpx.AsyncClient(transport=httpx.MockTransport(_respond)))

        with patch("invocant.theurgy.invoke.TransportClient", _factory):
            result = runner.invoke(cli, ["call", "decimals", *self._base()])

        assert result.exit_code == 1
        assert "paused" in result.output


class TestSend:
    """State-changing calls through `invocant send`."""

    def test_requires_key_file(self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PRIV_KEY_PATH", raising=False)
        result = runner.invoke(
            cli, ["send", "deposit", "--interface", "weth", "--address", CONTRACT, "--rpc-url", RPC_URL]
        )
        assert result.exit_code == 2
        assert "--key-file" in result.output

    def test_deposit(self, runner: CliRunner, key_file: Path) -> None:
        seen: list[str] = []
        answers = {
            "eth_chainId": "0x1",
            "eth_gasPrice": "0x5f5e100",
            "eth_estimateGas": "0xea60",
            "eth_getTransactionCount": "0x0",
            "eth_sendRawTransaction": TX_HASH,
        }
        with patch("invocant.theurgy.invoke.TransportClient", endpoint(answers, seen)):
            result = runner.invoke(
                cli,
                [
                    "send",
                    "deposit",
                    "--value",
                    "1000",
                    "--interface",
                    "weth",
                    "--address",
                    CONTRACT,
                    "--rpc-url",
                    RPC_URL,
                    "--key-file",
                    str(key_file),
                ],
            )

        assert result.exit_code == 0, result.output
        assert f"TX: {TX_HASH}" in result.output
        assert seen[-1] == "eth_sendRawTransaction"
        assert "eth_call" not in seen

    def test_wait_for_failed_receipt(self, runner: CliRunner, key_file: Path) -> None:
        seen: list[str] = []
        answers = {
            "eth_chainId": "0x1",
            "eth_gasPrice": "0x1",
            "eth_getTransactionCount": "0x3",
            "eth_sendRawTransaction": TX_HASH,
            "eth_getTransactionReceipt": {"status": "0x0"},
        }
        with patch("invocant.theurgy.invoke.TransportClient", endpoint(answers, seen)):
            result = runner.invoke(
                cli,
                [
                    "send",
                    "withdraw",
                    "--args",
                    "[1]",
                    "--gas-limit",
                    "100000",
                    "--wait",
                    "--interface",
                    "weth",
                    "--address",
                    CONTRACT,
                    "--rpc-url",
                    RPC_URL,
                    "--key-file",
                    str(key_file),
                ],
            )

        assert result.exit_code == 1
        assert "FAILED" in result.output
        assert "eth_estimateGas" not in seen

    def test_read_only_method_refused(self, runner: CliRunner, key_file: Path) -> None:
        seen: list[str] = []
        with patch("invocant.theurgy.invoke.TransportClient", endpoint({}, seen)):
            result = runner.invoke(
                cli,
                [
                    "send",
                    "decimals",
                    "--interface",
                    "weth",
                    "--address",
                    CONTRACT,
                    "--rpc-url",
                    RPC_URL,
                    "--key-file",
                    str(key_file),
                ],
            )

        assert result.exit_code == 2
        assert "invocant call" in result.output
        assert seen == []


class TestChainId:
    """`invocant chain-id`."""

    def test_chain_id(self, runner: CliRunner) -> None:
        seen: list[str] = []
        with patch("invocant.theurgy.divine.TransportClient", endpoint({"eth_chainId": "0x15f2249"}, seen)):
            result = runner.invoke(cli, ["chain-id", "--rpc-url", RPC_URL])

        assert result.exit_code == 0, result.output
        assert result.output.strip() == str(0x15F2249)
