"""
Reversible credential obfuscation

Login credentials are sent XOR-ed byte by byte with a fixed key and
hex-encoded. This is obfuscation expected by the backend, not encryption.
"""

from typing import Union

from ..exceptions import ValidationError

DEFAULT_XOR_KEY = 5


def encrypt_with_xor(value: Union[str, bytes], key: int = DEFAULT_XOR_KEY) -> str:
    """
    Obfuscate a credential for the login endpoints.

    Args:
        value: Plain credential (UTF-8 encoded when given as str)
        key: Single-byte XOR key

    Returns:
        str: Hex string of the XOR-ed bytes
    """
    if not 0 <= key <= 0xFF:
        raise ValidationError("XOR key must fit in one byte")

    data = value.encode('utf-8') if isinstance(value, str) else value
    return bytes(b ^ key for b in data).hex()


def decrypt_with_xor(value: str, key: int = DEFAULT_XOR_KEY) -> str:
    """Reverse ``encrypt_with_xor``."""
    if not 0 <= key <= 0xFF:
        raise ValidationError("XOR key must fit in one byte")

    try:
        data = bytes.fromhex(value)
    except ValueError as e:
        raise ValidationError(f"Invalid hex input: {e}")
    return bytes(b ^ key for b in data).decode('utf-8')
