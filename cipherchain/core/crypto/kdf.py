"""
Key Derivation Functions
========================

Password-style key stretching for the AES layer.

The AES layer treats its hex key as a passphrase and stretches it with
PBKDF2-HMAC-SHA256, using the iteration count of the security mode.
"""

from __future__ import annotations

from typing import Final

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

SALT_SIZE: Final[int] = 16  # 128 bits


def derive_key_pbkdf2(
    password: str,
    salt: bytes,
    length: int,
    iterations: int,
) -> bytes:
    """
    Derive a key from a passphrase using PBKDF2-HMAC-SHA256.

    Args:
        password: Passphrase (the serialized layer key)
        salt: Random salt stored alongside the ciphertext
        length: Output key length in bytes
        iterations: PBKDF2 iteration count

    Returns:
        Derived key bytes
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=length,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))
