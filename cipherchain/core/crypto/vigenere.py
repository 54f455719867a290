"""
Vigenère Cipher
===============

Repeating-key rotation. The key position advances only when a letter is
processed, so spaces and punctuation do not consume key letters.
"""

from __future__ import annotations

import secrets
import string
from typing import Final

from cipherchain.core.crypto.caesar import ALPHABET_SIZE, rotate_letter
from cipherchain.core.errors import EmptyKeyError
from cipherchain.core.keys import VigenereKey
from cipherchain.core.policy import key_strength_params
from cipherchain.core.types import Algorithm, SecurityMode


class VigenereCipher:
    """Polyalphabetic cipher over A-Z, case preserving."""

    __slots__ = ()

    algorithm: Final = Algorithm.VIGENERE

    def generate_key(self, mode: SecurityMode = SecurityMode.BALANCED) -> VigenereKey:
        length = key_strength_params(Algorithm.VIGENERE, mode).key_length
        return VigenereKey("".join(secrets.choice(string.ascii_uppercase) for _ in range(length)))

    def parse_key(self, text: str) -> VigenereKey:
        return VigenereKey.parse(text)

    def encrypt(self, plaintext: str, key: VigenereKey, mode: SecurityMode = SecurityMode.BALANCED) -> str:
        return self._process(plaintext, key, encrypt=True)

    def decrypt(self, ciphertext: str, key: VigenereKey, mode: SecurityMode = SecurityMode.BALANCED) -> str:
        return self._process(ciphertext, key, encrypt=False)

    @staticmethod
    def _process(text: str, key: VigenereKey, encrypt: bool) -> str:
        shifts = key.shifts()
        if not shifts:
            raise EmptyKeyError("Vigenère cipher requires a non-empty key")

        result = []
        key_index = 0
        for char in text:
            if char in string.ascii_letters:
                shift = shifts[key_index % len(shifts)]
                result.append(rotate_letter(char, shift if encrypt else ALPHABET_SIZE - shift))
                key_index += 1
            else:
                result.append(char)
        return "".join(result)
