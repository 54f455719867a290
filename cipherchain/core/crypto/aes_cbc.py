"""
AES-CBC Layer
=============

AES in CBC mode with PKCS7 padding and a PBKDF2-stretched key.

Parameters by security mode:
    high         256-bit key, 10 000 PBKDF2 iterations
    balanced     192-bit key,  5 000 PBKDF2 iterations
    lightweight  128-bit key,  1 000 PBKDF2 iterations

Ciphertext layout (text):
    hex(salt, 16 bytes) | hex(iv, 16 bytes) | base64(ciphertext)

Decrypting under a different mode derives a different key and fails the
padding check, which surfaces as an adapter error.
"""

from __future__ import annotations

import base64
import secrets
from typing import Final

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from cipherchain.core.crypto.kdf import SALT_SIZE, derive_key_pbkdf2
from cipherchain.core.keys import SymmetricKey
from cipherchain.core.policy import key_strength_params
from cipherchain.core.types import Algorithm, SecurityMode

AES_IV_SIZE: Final[int] = 16  # 128-bit block
AES_KEY_SIZES: Final[tuple[int, ...]] = (16, 24, 32)
_HEADER_LENGTH: Final[int] = 2 * (SALT_SIZE + AES_IV_SIZE)


class AesCbcCipher:
    """
    AES-CBC with per-message salt and IV.

    Usage:
        cipher = AesCbcCipher()
        key = cipher.generate_key(SecurityMode.HIGH)
        ciphertext = cipher.encrypt("secret", key, SecurityMode.HIGH)
        plaintext = cipher.decrypt(ciphertext, key, SecurityMode.HIGH)
    """

    __slots__ = ()

    algorithm: Final = Algorithm.AES

    def generate_key(self, mode: SecurityMode = SecurityMode.BALANCED) -> SymmetricKey:
        """Random key of the mode's bit length from the OS CSPRNG."""
        bits = key_strength_params(Algorithm.AES, mode).bit_length
        return SymmetricKey(secrets.token_bytes(bits // 8))

    def parse_key(self, text: str) -> SymmetricKey:
        return SymmetricKey.parse(text, AES_KEY_SIZES, "aes")

    def _derive(self, key: SymmetricKey, salt: bytes, mode: SecurityMode) -> bytes:
        strength = key_strength_params(Algorithm.AES, mode)
        return derive_key_pbkdf2(
            key.serialize(),
            salt,
            length=strength.bit_length // 8,
            iterations=strength.iterations,
        )

    def encrypt(self, plaintext: str, key: SymmetricKey, mode: SecurityMode = SecurityMode.BALANCED) -> str:
        """
        Encrypt text; salt and IV are fresh for every call.

        Returns:
            hex(salt) + hex(iv) + base64(ciphertext)
        """
        salt = secrets.token_bytes(SALT_SIZE)
        iv = secrets.token_bytes(AES_IV_SIZE)
        derived = self._derive(key, salt, mode)

        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

        encryptor = Cipher(algorithms.AES(derived), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        return salt.hex() + iv.hex() + base64.b64encode(ciphertext).decode("ascii")

    def decrypt(self, ciphertext: str, key: SymmetricKey, mode: SecurityMode = SecurityMode.BALANCED) -> str:
        """
        Raises:
            ValueError: If the layout, padding or UTF-8 decoding is invalid
        """
        if len(ciphertext) <= _HEADER_LENGTH:
            raise ValueError("AES ciphertext is too short")
        try:
            salt = bytes.fromhex(ciphertext[:2 * SALT_SIZE])
            iv = bytes.fromhex(ciphertext[2 * SALT_SIZE:_HEADER_LENGTH])
            body = base64.b64decode(ciphertext[_HEADER_LENGTH:], validate=True)
        except ValueError as e:
            raise ValueError(f"AES ciphertext is not correctly encoded: {e}") from e

        derived = self._derive(key, salt, mode)
        decryptor = Cipher(algorithms.AES(derived), modes.CBC(iv)).decryptor()
        padded = decryptor.update(body) + decryptor.finalize()

        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        data = unpadder.update(padded) + unpadder.finalize()
        return data.decode("utf-8")
