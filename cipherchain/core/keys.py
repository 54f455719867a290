"""
Typed Keys
==========

Structured key objects with a string wire form.

Keys travel between the core and its callers as opaque strings. Inside the
core every key is parsed into one of the types below, so each cipher works
with validated structure instead of ad hoc string handling.

Wire formats:
    SymmetricKey   hex string (AES, Blowfish)
    RsaKeyPair     {"publicKey": "<PEM>", "privateKey": "<PEM>"}
    HillKey        [[a, b], [c, d]]
    VigenereKey    uppercase letters
    CaesarKey      SHIFT-<integer>
"""

from __future__ import annotations

import binascii
import json
import re
from dataclasses import dataclass
from typing import Final, Iterable, Union

from cipherchain.core.errors import (
    CorruptKeyError,
    EmptyKeyError,
    IncompleteKeyError,
    InvalidKeyFormatError,
)

CAESAR_KEY_PATTERN: Final[re.Pattern[str]] = re.compile(r"SHIFT-(-?\d+)")
_LETTERS_PATTERN: Final[re.Pattern[str]] = re.compile(r"[A-Za-z]+")
_HEX_PATTERN: Final[re.Pattern[str]] = re.compile(r"[0-9a-fA-F]+")


@dataclass(frozen=True, slots=True)
class SymmetricKey:
    """Raw key bytes for AES or Blowfish, hex encoded on the wire."""

    material: bytes

    def serialize(self) -> str:
        return self.material.hex()

    @classmethod
    def parse(cls, text: str, allowed_sizes: Iterable[int], algorithm: str) -> SymmetricKey:
        """
        Parse a hex key and check its byte length.

        Args:
            text: Hex encoded key
            allowed_sizes: Accepted key lengths in bytes
            algorithm: Algorithm name for error messages

        Raises:
            EmptyKeyError: If the key is empty
            InvalidKeyFormatError: If the key is not hex or has a bad length
        """
        if not text or not text.strip():
            raise EmptyKeyError(f"{algorithm.upper()} key is missing. Please regenerate keys.")
        text = text.strip()
        if len(text) % 2 or not _HEX_PATTERN.fullmatch(text):
            raise InvalidKeyFormatError(
                f"Invalid {algorithm.upper()} key format: must be a hexadecimal string"
            )
        material = binascii.unhexlify(text)
        sizes = sorted(set(allowed_sizes))
        if len(material) not in sizes:
            expected = ", ".join(str(size * 8) for size in sizes)
            raise InvalidKeyFormatError(
                f"Invalid {algorithm.upper()} key length: {len(material) * 8} bits "
                f"(expected one of {expected})"
            )
        return cls(material)

    def __repr__(self) -> str:
        """Safe representation without exposing key material."""
        return f"SymmetricKey(bits={len(self.material) * 8})"


@dataclass(frozen=True, slots=True)
class RsaKeyPair:
    """PEM encoded RSA key pair."""

    public_key: str
    private_key: str

    def serialize(self) -> str:
        return json.dumps({"publicKey": self.public_key, "privateKey": self.private_key})

    @classmethod
    def parse(cls, text: str) -> RsaKeyPair:
        """
        Parse the JSON key pair.

        Raises:
            EmptyKeyError: If the key string is empty
            CorruptKeyError: If the JSON cannot be decoded
            IncompleteKeyError: If either PEM is missing
        """
        if not text or not text.strip():
            raise EmptyKeyError("RSA key is missing. Please regenerate keys.")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptKeyError("RSA key is corrupted. Please regenerate keys.") from e
        if not isinstance(data, dict):
            raise CorruptKeyError("RSA key is corrupted. Please regenerate keys.")

        public_key = data.get("publicKey")
        private_key = data.get("privateKey")
        if not public_key or not private_key:
            raise IncompleteKeyError("RSA key is incomplete. Please regenerate keys.")
        if not isinstance(public_key, str) or not isinstance(private_key, str):
            raise InvalidKeyFormatError("Invalid RSA key format: PEM values must be strings")
        return cls(public_key=public_key, private_key=private_key)

    def __repr__(self) -> str:
        return "RsaKeyPair(<redacted>)"


@dataclass(frozen=True, slots=True)
class HillKey:
    """Square integer matrix, entries reduced modulo 26 by the cipher."""

    matrix: tuple[tuple[int, ...], ...]

    @property
    def size(self) -> int:
        return len(self.matrix)

    def rows(self) -> list[list[int]]:
        return [list(row) for row in self.matrix]

    def serialize(self) -> str:
        return json.dumps(self.rows())

    @classmethod
    def from_rows(cls, rows: list[list[int]]) -> HillKey:
        return cls(tuple(tuple(row) for row in rows))

    @classmethod
    def parse(cls, text: str) -> HillKey:
        """
        Parse a JSON matrix.

        Raises:
            EmptyKeyError: If the key string is empty
            InvalidKeyFormatError: If the value is not a square integer matrix
        """
        if not text or not text.strip():
            raise EmptyKeyError("Hill key is missing. Please regenerate keys.")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidKeyFormatError("Invalid Hill key format: must be a JSON matrix") from e

        if not isinstance(data, list) or not data:
            raise InvalidKeyFormatError("Invalid Hill key format: must be a non-empty square matrix")
        size = len(data)
        for row in data:
            if not isinstance(row, list) or len(row) != size:
                raise InvalidKeyFormatError("Invalid Hill key format: matrix must be square")
            for value in row:
                # bool is an int subclass; reject it explicitly
                if isinstance(value, bool) or not isinstance(value, int):
                    raise InvalidKeyFormatError("Invalid Hill key format: entries must be integers")
        return cls.from_rows(data)

    def __repr__(self) -> str:
        return f"HillKey(size={self.size})"


@dataclass(frozen=True, slots=True)
class VigenereKey:
    """Alphabetic key, stored uppercase."""

    letters: str

    def serialize(self) -> str:
        return self.letters

    def shifts(self) -> list[int]:
        return [ord(c) - ord("A") for c in self.letters]

    @classmethod
    def parse(cls, text: str) -> VigenereKey:
        """
        Raises:
            EmptyKeyError: If the key is empty
            InvalidKeyFormatError: If the key contains non-letters
        """
        if not text:
            raise EmptyKeyError("Vigenère cipher requires a non-empty key")
        if not _LETTERS_PATTERN.fullmatch(text):
            raise InvalidKeyFormatError("Invalid Vigenère key format: letters A-Z only")
        return cls(text.upper())

    def __repr__(self) -> str:
        return f"VigenereKey(length={len(self.letters)})"


@dataclass(frozen=True, slots=True)
class CaesarKey:
    """Rotation amount, formatted as SHIFT-<n> on the wire."""

    shift: int

    def serialize(self) -> str:
        return f"SHIFT-{self.shift}"

    @classmethod
    def parse(cls, text: str) -> CaesarKey:
        if not text:
            raise EmptyKeyError("Caesar key is missing. Please regenerate keys.")
        match = CAESAR_KEY_PATTERN.fullmatch(text.strip())
        if match is None:
            raise InvalidKeyFormatError(
                "Invalid Caesar key format: must be SHIFT-N where N is a number"
            )
        return cls(int(match.group(1)))

    def __repr__(self) -> str:
        return "CaesarKey(<redacted>)"


Key = Union[SymmetricKey, RsaKeyPair, HillKey, VigenereKey, CaesarKey]
