from __future__ import annotations

import logging
import os

_CONFIGURED = False


def _resolve_level(verbose: bool) -> int:
    if verbose:
        return logging.DEBUG
    level = os.getenv("LOG_LEVEL")
    if level:
        return getattr(logging, level.upper(), logging.WARNING)
    return logging.WARNING


def configure_logging(verbose: bool = False) -> None:
    """Set up root logging once for the CLI process."""
    global _CONFIGURED
    if _CONFIGURED:
        if verbose:
            logging.getLogger().setLevel(logging.DEBUG)
        return

    logging.basicConfig(
        level=_resolve_level(verbose),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _CONFIGURED = True
