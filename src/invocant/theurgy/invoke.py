"""
Theurgy Invoke - Call contract methods from the command line.

- call: run a read-only method (or dry-run any method with --simulate)
        and print the decoded return values as JSON
- send: sign and submit a state-changing method, print the transaction id
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import click

from ..contract import ContractHandle
from ..pneuma.rpc import TransportClient
from .options import (
    address_option,
    interface_options,
    key_file_option,
    load_registry,
    load_signer,
    parse_args_json,
    parse_types,
    reports_errors,
    rpc_option,
    run_async,
)


@click.command()
@click.argument("function")
@click.option("--args", "args_json", default="[]", help="Function args as JSON array")
@click.option("--types", "arg_types", default=None, help="Comma-separated argument types to pick an overload")
@click.option("--simulate", is_flag=True, help="Dry-run a state-changing method via eth_call")
@interface_options
@address_option
@rpc_option
@key_file_option(required=False)
@reports_errors
def call(
    function: str,
    args_json: str,
    arg_types: Optional[str],
    simulate: bool,
    abi_path: Optional[Path],
    interface_name: Optional[str],
    signatures: tuple[str, ...],
    address: str,
    rpc_url: str,
    key_file: Optional[Path],
) -> None:
    """
    Query a read-only contract method.

    Prints the decoded return values as a JSON array.

    \b
    Examples:
      invocant call decimals --interface weth
      invocant call sum --interface weth --args '[[16]]'
    """
    args = parse_args_json(args_json)
    registry = load_registry(abi_path, interface_name, signatures)
    signer = load_signer(key_file)

    async def _run() -> list[Any]:
        async with TransportClient(rpc_url) as transport:
            handle = ContractHandle(address, registry, transport, signer)
            method = handle.method(function, parse_types(arg_types))
            if simulate:
                return await method.simulate(*args)
            signature = method.select(len(args))
            if not signature.is_read_only:
                raise click.UsageError(
                    f"{signature.signature} is {signature.mutability.value}; "
                    "use 'invocant send' or pass --simulate"
                )
            return await method(*args)

    values = run_async(_run())
    click.echo(json.dumps([v.to_python() for v in values]))


@click.command()
@click.argument("function")
@click.option("--args", "args_json", default="[]", help="Function args as JSON array")
@click.option("--types", "arg_types", default=None, help="Comma-separated argument types to pick an overload")
@click.option("--value", default=0, type=int, help="Value in wei (payable methods only)")
@click.option("--gas-limit", default=None, type=int, help="Gas limit (default: estimate)")
@click.option("--wait/--no-wait", default=False, help="Wait for the transaction receipt")
@click.option("--timeout", default=120, type=int, help="Receipt wait timeout in seconds")
@interface_options
@address_option
@rpc_option
@key_file_option(required=True)
@reports_errors
def send(
    function: str,
    args_json: str,
    arg_types: Optional[str],
    value: int,
    gas_limit: Optional[int],
    wait: bool,
    timeout: int,
    abi_path: Optional[Path],
    interface_name: Optional[str],
    signatures: tuple[str, ...],
    address: str,
    rpc_url: str,
    key_file: Path,
) -> None:
    """
    Sign and send a state-changing contract method.

    Sends a transaction from the key file's account. The sender pays gas.
    """
    args = parse_args_json(args_json)
    registry = load_registry(abi_path, interface_name, signatures)
    signer = load_signer(key_file)

    async def _run() -> tuple[str, Optional[dict]]:
        async with TransportClient(rpc_url) as transport:
            handle = ContractHandle(address, registry, transport, signer, gas_limit=gas_limit)
            method = handle.method(function, parse_types(arg_types))
            signature = method.select(len(args))
            if signature.is_read_only:
                raise click.UsageError(
                    f"{signature.signature} is {signature.mutability.value}; use 'invocant call'"
                )
            tx_id = await method(*args, value=value)
            receipt = None
            if wait:
                receipt = await transport.wait_for_receipt(tx_id, timeout=timeout)
            return str(tx_id), receipt

    tx_hash, receipt = run_async(_run())
    click.echo(f"TX: {tx_hash}")

    if receipt is not None:
        if int(receipt.get("status", "0x0"), 16) == 1:
            click.secho("SUCCESS: Transaction confirmed!", fg="green")
        else:
            click.secho("FAILED: Transaction reverted", fg="red")
            raise SystemExit(1)
