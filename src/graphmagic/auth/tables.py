from __future__ import annotations

from enum import Enum
from itertools import product
from typing import Hashable, Mapping, TypeVar

_V = TypeVar("_V")


def ensure_complete(
    table: Mapping[Hashable, _V], *enums: type[Enum]
) -> Mapping[Hashable, _V]:
    """Return ``table`` if it has an entry for every member (or member tuple) of ``enums``.

    Called at import time so that adding a flow, cloud or version without
    updating every lookup table fails as soon as the package is imported.

    Raises:
        RuntimeError: If any key is missing.
    """
    if len(enums) == 1:
        expected = set(enums[0])
    else:
        expected = set(product(*enums))
    missing = expected - set(table)
    if missing:
        names = ", ".join(sorted(repr(k) for k in missing))
        raise RuntimeError(f"Lookup table is missing entries for: {names}")
    return table
