"""
Invocant CLI

Command-line interface for calling methods on deployed contracts through a
declared ABI.

Commands:
  call      - Query a read-only method and print the decoded values
  send      - Sign and submit a state-changing method
  methods   - List the methods of an interface
  chain-id  - Show the endpoint's chain id
  whoami    - Show the address of a key file
"""

from __future__ import annotations

from pathlib import Path

import click

from .logging_utils import configure_logging
from .theurgy.options import key_file_option, load_signer, reports_errors


# ============ Constants ============

VERSION = "0.1.0"


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="invocant")
@click.option("--verbose", "-v", is_flag=True, help="Log RPC traffic at DEBUG level")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Invocant - typed contract calls over JSON-RPC."""
    configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ============ Top-level Commands ============

from .theurgy.divine import chain_id, methods
from .theurgy.invoke import call, send

cli.add_command(call)
cli.add_command(send)
cli.add_command(methods)
cli.add_command(chain_id)


# ============ Identity ============


@cli.command()
@key_file_option(required=True)
@reports_errors
def whoami(key_file: Path) -> None:
    """Show the address of the signing key."""
    signer = load_signer(key_file)
    click.echo(f"Address: {signer.address}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
