"""
Theurgy Divine - Inspect interfaces and endpoints.

- methods:  list the declared methods with selector and mutability
- chain-id: show the chain id reported by the endpoint
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ..pneuma.rpc import TransportClient
from .options import interface_options, load_registry, reports_errors, rpc_option, run_async


@click.command()
@interface_options
@reports_errors
def methods(
    abi_path: Optional[Path],
    interface_name: Optional[str],
    signatures: tuple[str, ...],
) -> None:
    """List the methods of an interface."""
    registry = load_registry(abi_path, interface_name, signatures)

    for signature in registry:
        kind = "query" if signature.is_read_only else "send"
        click.echo(
            click.style(f"0x{signature.selector.hex()}  ", dim=True)
            + click.style(f"{kind:<5} ", fg="cyan")
            + str(signature)
        )


@click.command("chain-id")
@rpc_option
def chain_id(rpc_url: str) -> None:
    """Show the chain id of the RPC endpoint."""

    async def _run() -> int:
        async with TransportClient(rpc_url) as transport:
            return await transport.chain_id()

    click.echo(str(run_async(_run())))
