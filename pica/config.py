"""
Runtime configuration read from the environment.

The only tunable is the size of the locator plan cache. Set it before
importing pica:

    PICA_LOCATOR_CACHE_SIZE=4096 python my_script.py
    PICA_LOCATOR_CACHE_SIZE=0 python my_script.py    # disable caching
"""

import os

DEFAULT_LOCATOR_CACHE_SIZE = 1024

ENV_LOCATOR_CACHE_SIZE = "PICA_LOCATOR_CACHE_SIZE"


def _read_cache_size(environ=os.environ) -> int:
    raw = environ.get(ENV_LOCATOR_CACHE_SIZE, "").strip()
    if not raw:
        return DEFAULT_LOCATOR_CACHE_SIZE
    try:
        size = int(raw)
    except ValueError:
        raise ValueError(
            f"{ENV_LOCATOR_CACHE_SIZE} must be an integer, got {raw!r}"
        ) from None
    if size < 0:
        raise ValueError(f"{ENV_LOCATOR_CACHE_SIZE} must not be negative, got {size}")
    return size


LOCATOR_CACHE_SIZE = _read_cache_size()
