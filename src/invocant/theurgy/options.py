"""
Shared CLI options and helpers for the theurgy commands.
"""

from __future__ import annotations

import asyncio
import functools
import json
import sys
from pathlib import Path
from typing import Any, Callable, Coroutine, Optional, TypeVar

import click

from ..errors import InvocantError
from ..pneuma.abi import InterfaceRegistry
from ..pneuma.interfaces import BUNDLED_INTERFACES, bundled_registry
from ..sigil.eth import SigningContext, read_private_key

T = TypeVar("T")


def rpc_option(func: Callable) -> Callable:
    return click.option(
        "--rpc-url",
        envvar="RPC_URL",
        required=True,
        help="JSON-RPC endpoint URL (env: RPC_URL)",
    )(func)


def address_option(func: Callable) -> Callable:
    return click.option(
        "--address",
        envvar="STYLUS_PROGRAM_ADDRESS",
        required=True,
        help="Deployed contract address (env: STYLUS_PROGRAM_ADDRESS)",
    )(func)


def key_file_option(required: bool) -> Callable[[Callable], Callable]:
    return click.option(
        "--key-file",
        envvar="PRIV_KEY_PATH",
        required=required,
        type=click.Path(dir_okay=False, path_type=Path),
        help="File holding the private key on its first line (env: PRIV_KEY_PATH)",
    )


def interface_options(func: Callable) -> Callable:
    """--abi / --interface / --signature: where the method declarations come from."""
    func = click.option(
        "--signature",
        "signatures",
        multiple=True,
        help="Human-readable function declaration (repeatable)",
    )(func)
    func = click.option(
        "--interface",
        "interface_name",
        type=click.Choice(sorted(BUNDLED_INTERFACES), case_sensitive=False),
        default=None,
        help="Bundled interface",
    )(func)
    func = click.option(
        "--abi",
        "abi_path",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help="ABI JSON or compiler artifact",
    )(func)
    return func


def load_registry(
    abi_path: Optional[Path],
    interface_name: Optional[str],
    signatures: tuple[str, ...],
) -> InterfaceRegistry:
    sources = [s for s in (abi_path, interface_name, signatures) if s]
    if len(sources) != 1:
        raise click.UsageError("Give exactly one of --abi, --interface or --signature.")
    if abi_path:
        return InterfaceRegistry.from_artifact(abi_path, skip_unsupported=True)
    if interface_name:
        return bundled_registry(interface_name)
    return InterfaceRegistry.from_human_readable(signatures)


def load_signer(key_file: Optional[Path]) -> Optional[SigningContext]:
    if key_file is None:
        return None
    return SigningContext(read_private_key(key_file))


def parse_args_json(args_json: str) -> list[Any]:
    try:
        args = json.loads(args_json)
        if not isinstance(args, list):
            raise ValueError("Args must be a JSON array")
    except (json.JSONDecodeError, ValueError) as exc:
        raise click.BadParameter(str(exc), param_hint="--args") from exc
    return args


def parse_types(types: Optional[str]) -> Optional[list[str]]:
    if types is None:
        return None
    return [t.strip() for t in types.split(",") if t.strip()]


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine, turning client errors into a red message and exit 1."""
    try:
        return asyncio.run(coro)
    except (InvocantError, TimeoutError) as exc:
        click.secho(f"ERROR: {exc}", fg="red", err=True)
        sys.exit(1)


def reports_errors(func: Callable) -> Callable:
    """Report client errors raised outside the event loop the same way."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (InvocantError, ValueError) as exc:
            click.secho(f"ERROR: {exc}", fg="red", err=True)
            sys.exit(1)

    return wrapper
