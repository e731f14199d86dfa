"""
This module holds nufx-wide default settings which may be needed by some sub-modules.
Sub-modules which need it should load this module at their top level.
"""

# To handle machine config differences, settings should be queried through functions: environment variables are
# read at call-time, not import-time.

import os

import nufx.info.error as nxe

__all__ = [
    "workers",
    "max_block_size",
]

_defaults = dict(
    NUFX_WORKERS=2,
    NUFX_MAX_BLOCK_SIZE=10_000,
)


def _read_positive_int(name: str) -> int:
    raw = os.getenv(name)
    if raw is None:
        return _defaults[name]

    try:
        value = int(raw)
    except ValueError:
        raise nxe.ConfigurationError(f"[{name}] Expected an integer, got {raw!r}.")
    if value < 1:
        raise nxe.ConfigurationError(f"[{name}] Expected a positive integer, got {value}.")
    return value


def workers() -> int:
    # Threads used to spread/interpolate blocks and to compute FFTs.
    return _read_positive_int("NUFX_WORKERS")


def max_block_size() -> int:
    # Maximum number of non-uniform points handled per block.
    return _read_positive_int("NUFX_MAX_BLOCK_SIZE")
