"""
Response decoding with big-integer safety

Account, post and comment identifiers exceed 2**53 and are rounded by
clients that store every number as a double. The decoder keeps any integer
outside the safe range as its exact decimal string.
"""

import json
import logging
from typing import Any, Optional, Union

from .exceptions import DecodeError

logger = logging.getLogger(__name__)

MAX_SAFE_INTEGER = 2 ** 53 - 1
MIN_SAFE_INTEGER = -MAX_SAFE_INTEGER

RawBody = Optional[Union[bytes, bytearray, str]]


def parse_int(literal: str) -> Union[int, str]:
    """Parse a JSON integer literal, keeping unsafe values as strings."""
    # 2**53 - 1 has 16 digits; longer literals are unsafe and may exceed
    # the interpreter's int conversion limit
    if len(literal.lstrip('-')) > len(str(MAX_SAFE_INTEGER)):
        return literal

    value = int(literal)
    if MIN_SAFE_INTEGER <= value <= MAX_SAFE_INTEGER:
        return value
    return literal


def decode_response(raw: RawBody) -> Any:
    """
    Decode a response body.

    Args:
        raw: Raw response body

    Returns:
        Decoded JSON value, or ``raw`` itself when it is empty

    Raises:
        DecodeError: If the body is not valid JSON
    """
    if not raw:
        return raw

    try:
        if isinstance(raw, (bytes, bytearray)):
            text = bytes(raw).decode('utf-8')
        else:
            text = raw
        return json.loads(text, parse_int=parse_int)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.debug(f"Undecodable response body ({len(raw)} bytes): {e}")
        raise DecodeError(
            f"Invalid JSON response: {e}",
            details={'body_preview': repr(raw[:200])}
        ) from e
