"""Composite listing ids for upstream MarketCheck inventory.

MarketCheck has no fetch-by-id endpoint, so the platform id of an upstream
listing carries the VIN: ``mc-<VIN>-<residual>``. The VIN is always the second
``-`` field and is re-queried with a VIN search on lookup.
"""

from __future__ import annotations

from typing import Optional

PREFIX = "mc"
SEPARATOR = "-"
MISSING_VIN = "NOVIN"
MISSING_UPSTREAM_ID = "NOID"
MAX_VIN_LENGTH = 17


def encode(vin: Optional[str], upstream_id: Optional[str]) -> str:
    vin = vin or MISSING_VIN
    upstream_id = upstream_id or MISSING_UPSTREAM_ID
    # upstream ids usually look like "<VIN>-<uuid>"
    residual = upstream_id
    if upstream_id.startswith(vin + SEPARATOR):
        residual = upstream_id[len(vin) + 1 :]
    return f"{PREFIX}{SEPARATOR}{vin}{SEPARATOR}{residual}"


def is_composite_id(value: str) -> bool:
    return value.startswith(PREFIX + SEPARATOR)


def decode_vin(composite_id: Optional[str]) -> Optional[str]:
    """Return the VIN field of a composite id, or None when it is unusable.

    Decoding is positional: the second ``-`` field is the VIN, taken as is.
    Ids with an empty or placeholder VIN segment are not valid lookup keys.
    """
    if not composite_id:
        return None
    parts = composite_id.split(SEPARATOR)
    if len(parts) < 2 or parts[0] != PREFIX:
        return None
    vin = parts[1]
    if not vin or vin == MISSING_VIN or len(vin) > MAX_VIN_LENGTH:
        return None
    return vin
