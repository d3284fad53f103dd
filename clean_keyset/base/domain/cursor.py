# (c) Nelen & Schuurmans

import base64
import binascii
import json
from collections.abc import Sequence
from typing import Any

from .exceptions import MalformedCursorError

__all__ = ["to_cursor", "from_cursor"]


def to_cursor(values: Sequence[Any]) -> str:
    """Encode the sort key values of a record into an opaque cursor."""
    serialized = json.dumps(list(values), separators=(",", ":"))
    return base64.b64encode(serialized.encode("utf-8")).decode("ascii")


def from_cursor(cursor: str) -> list[Any]:
    """Decode a cursor that was produced by to_cursor.

    Raises:
        MalformedCursorError: when the cursor does not decode to a list of values.
    """
    try:
        decoded = base64.b64decode(cursor.encode("ascii"), validate=True)
        values = json.loads(decoded.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError):
        raise MalformedCursorError(cursor)
    if not isinstance(values, list):
        raise MalformedCursorError(cursor)
    return values
