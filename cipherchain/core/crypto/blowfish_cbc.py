"""
Blowfish-CBC Layer
==================

Blowfish in CBC mode with PKCS7 padding.

The hex key is used directly as the Blowfish key:
    high 448 bits, balanced 256 bits, lightweight 128 bits

Ciphertext layout (text):
    base64(iv, 8 bytes || ciphertext)

Blowfish lives in cryptography's "decrepit" namespace; it is kept here
because the chain demonstrates legacy ciphers next to modern ones.
"""

from __future__ import annotations

import base64
import secrets
from typing import Final

from cryptography.hazmat.decrepit.ciphers.algorithms import Blowfish
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, modes

from cipherchain.core.keys import SymmetricKey
from cipherchain.core.policy import key_strength_params
from cipherchain.core.types import Algorithm, SecurityMode

BLOWFISH_BLOCK_BITS: Final[int] = 64
BLOWFISH_IV_SIZE: Final[int] = 8
# 128..448 bits in 64-bit steps
BLOWFISH_KEY_SIZES: Final[tuple[int, ...]] = tuple(range(16, 57, 8))


class BlowfishCipher:
    """Blowfish-CBC with a random IV per message."""

    __slots__ = ()

    algorithm: Final = Algorithm.BLOWFISH

    def generate_key(self, mode: SecurityMode = SecurityMode.BALANCED) -> SymmetricKey:
        bits = key_strength_params(Algorithm.BLOWFISH, mode).bit_length
        return SymmetricKey(secrets.token_bytes(bits // 8))

    def parse_key(self, text: str) -> SymmetricKey:
        return SymmetricKey.parse(text, BLOWFISH_KEY_SIZES, "blowfish")

    def encrypt(self, plaintext: str, key: SymmetricKey, mode: SecurityMode = SecurityMode.BALANCED) -> str:
        iv = secrets.token_bytes(BLOWFISH_IV_SIZE)

        padder = padding.PKCS7(BLOWFISH_BLOCK_BITS).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

        encryptor = Cipher(Blowfish(key.material), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        return base64.b64encode(iv + ciphertext).decode("ascii")

    def decrypt(self, ciphertext: str, key: SymmetricKey, mode: SecurityMode = SecurityMode.BALANCED) -> str:
        try:
            raw = base64.b64decode(ciphertext, validate=True)
        except ValueError as e:
            raise ValueError(f"Blowfish ciphertext is not valid base64: {e}") from e
        if len(raw) < 2 * BLOWFISH_IV_SIZE:
            raise ValueError("Blowfish ciphertext is too short")

        iv, body = raw[:BLOWFISH_IV_SIZE], raw[BLOWFISH_IV_SIZE:]
        decryptor = Cipher(Blowfish(key.material), modes.CBC(iv)).decryptor()
        padded = decryptor.update(body) + decryptor.finalize()

        unpadder = padding.PKCS7(BLOWFISH_BLOCK_BITS).unpadder()
        data = unpadder.update(padded) + unpadder.finalize()
        return data.decode("utf-8")
