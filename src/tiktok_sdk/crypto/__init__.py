"""
Credential obfuscation helpers for TikTok Python SDK
"""

from .xor import DEFAULT_XOR_KEY, encrypt_with_xor, decrypt_with_xor

__all__ = [
    'DEFAULT_XOR_KEY',
    'encrypt_with_xor',
    'decrypt_with_xor',
]
