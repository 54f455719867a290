"""
Caesar Cipher
=============

Alphabetic rotation by a fixed shift.

- Letters A-Z/a-z rotate, case preserved
- Every other character passes through unchanged
- Decryption rotates by 26 - (shift mod 26)
"""

from __future__ import annotations

import secrets
from typing import Final

from cipherchain.core.keys import CaesarKey
from cipherchain.core.policy import key_strength_params
from cipherchain.core.types import Algorithm, SecurityMode

ALPHABET_SIZE: Final[int] = 26


def rotate_letter(char: str, shift: int) -> str:
    """Rotate one ASCII letter by ``shift``; other characters are returned as-is."""
    if "A" <= char <= "Z":
        base = ord("A")
    elif "a" <= char <= "z":
        base = ord("a")
    else:
        return char
    return chr((ord(char) - base + shift) % ALPHABET_SIZE + base)


class CaesarCipher:
    """
    Caesar shift cipher.

    Usage:
        cipher = CaesarCipher()
        key = cipher.generate_key(SecurityMode.LIGHTWEIGHT)
        ciphertext = cipher.encrypt("Hello", key)
    """

    __slots__ = ()

    algorithm: Final = Algorithm.CAESAR

    def generate_key(self, mode: SecurityMode = SecurityMode.BALANCED) -> CaesarKey:
        """Draw a shift uniformly from the mode's range (never 0)."""
        low, high = key_strength_params(Algorithm.CAESAR, mode).shift_range
        return CaesarKey(low + secrets.randbelow(high - low + 1))

    def parse_key(self, text: str) -> CaesarKey:
        return CaesarKey.parse(text)

    def encrypt(self, plaintext: str, key: CaesarKey, mode: SecurityMode = SecurityMode.BALANCED) -> str:
        shift = key.shift % ALPHABET_SIZE
        return "".join(rotate_letter(c, shift) for c in plaintext)

    def decrypt(self, ciphertext: str, key: CaesarKey, mode: SecurityMode = SecurityMode.BALANCED) -> str:
        shift = ALPHABET_SIZE - (key.shift % ALPHABET_SIZE)
        return "".join(rotate_letter(c, shift) for c in ciphertext)
