# src/bffeval/platform_symbols.py
"""The built-in ``#define`` symbol identifying the host platform."""

import sys

from .config import config

PLATFORM_SYMBOLS = ('__LINUX__', '__OSX__', '__WINDOWS__')

_BY_SYS_PLATFORM = {
    'linux': '__LINUX__',
    'darwin': '__OSX__',
    'win32': '__WINDOWS__',
    'cygwin': '__WINDOWS__',
}


def get_platform_define_symbol(platform=None):
    """Return the platform symbol, honouring ``config.platform_symbol``."""
    if platform is None and config.platform_symbol:
        if config.platform_symbol not in PLATFORM_SYMBOLS:
            raise RuntimeError(f"Unsupported platform symbol '{config.platform_symbol}'")
        return config.platform_symbol
    platform = sys.platform if platform is None else platform
    for prefix, symbol in _BY_SYS_PLATFORM.items():
        if platform.startswith(prefix):
            return symbol
    raise RuntimeError(f"Unsupported platform '{platform}'")
