"""
Hill Cipher
===========

Block cipher over Z/26Z using an invertible N x N key matrix.

Text encoding:
    Every character code is written as three base-26 letters, so any code
    point in 0..17575 survives the round trip (punctuation, accents, most
    of the BMP below the CJK blocks). The letter stream is three times the
    length of the input before block encryption.

Ciphertext layout:
    PP | C1 C2 ... Ck
    PP  two letters, base-26 count of padding letters appended (0..675)
    Ci  encrypted N-letter blocks, Ci = K . Pi mod 26

Decryption multiplies by K^-1 mod 26, computed as adj(K) * det(K)^-1.
Determinants and cofactors use generic cofactor expansion, so N > 2 works
even though the shipped configuration uses N = 2.
"""

from __future__ import annotations

import math
import secrets
from typing import Final, Optional, Sequence

from cipherchain.core.config import ChainConfig
from cipherchain.core.errors import HillEncodingError, KeyNotInvertibleError
from cipherchain.core.keys import HillKey
from cipherchain.core.policy import key_strength_params
from cipherchain.core.types import Algorithm, SecurityMode

MODULUS: Final[int] = 26
SYMBOLS_PER_CHAR: Final[int] = 3
MAX_CHAR_CODE: Final[int] = MODULUS ** SYMBOLS_PER_CHAR - 1  # 17575
PREFIX_LENGTH: Final[int] = 2
MAX_PADDING: Final[int] = MODULUS ** PREFIX_LENGTH - 1  # 675
PAD_SYMBOL: Final[int] = ord("X") - ord("A")
FALLBACK_KEY: Final[tuple[tuple[int, ...], ...]] = ((3, 3), (2, 5))

Matrix = Sequence[Sequence[int]]


# =============================================================================
# Modular linear algebra
# =============================================================================

def minor(matrix: Matrix, row: int, col: int) -> list[list[int]]:
    """Matrix with ``row`` and ``col`` removed."""
    return [
        [value for j, value in enumerate(r) if j != col]
        for i, r in enumerate(matrix) if i != row
    ]


def determinant(matrix: Matrix) -> int:
    """Integer determinant by cofactor expansion along the first row."""
    size = len(matrix)
    if size == 1:
        return matrix[0][0]
    if size == 2:
        return matrix[0][0] * matrix[1][1] - matrix[0][1] * matrix[1][0]
    return sum(matrix[0][j] * cofactor(matrix, 0, j) for j in range(size))


def cofactor(matrix: Matrix, row: int, col: int) -> int:
    sign = -1 if (row + col) % 2 else 1
    return sign * determinant(minor(matrix, row, col))


def is_invertible(matrix: Matrix, modulus: int = MODULUS) -> bool:
    """True when det(matrix) mod ``modulus`` shares no factor with ``modulus``."""
    return math.gcd(determinant(matrix) % modulus, modulus) == 1


def mod_inverse(value: int, modulus: int = MODULUS) -> int:
    """
    Multiplicative inverse of ``value`` modulo ``modulus``.

    Raises:
        KeyNotInvertibleError: If no inverse exists
    """
    try:
        return pow(value % modulus, -1, modulus)
    except ValueError:
        raise KeyNotInvertibleError(
            f"{value % modulus} has no inverse modulo {modulus}"
        ) from None


def invert_matrix(matrix: Matrix, modulus: int = MODULUS) -> list[list[int]]:
    """
    Inverse of ``matrix`` modulo ``modulus`` via the adjugate.

    Raises:
        KeyNotInvertibleError: If the determinant is not coprime with the modulus
    """
    size = len(matrix)
    det = determinant(matrix) % modulus
    if math.gcd(det, modulus) != 1:
        raise KeyNotInvertibleError(
            f"Hill key is not invertible modulo {modulus} (determinant {det}). "
            "Please regenerate keys."
        )
    det_inv = mod_inverse(det, modulus)

    if size == 1:
        return [[det_inv]]

    # adj(M)[i][j] = C[j][i]
    return [
        [(cofactor(matrix, j, i) * det_inv) % modulus for j in range(size)]
        for i in range(size)
    ]


def multiply_vector(matrix: Matrix, vector: Sequence[int], modulus: int = MODULUS) -> list[int]:
    return [sum(m * v for m, v in zip(row, vector)) % modulus for row in matrix]


def reduce_matrix(matrix: Matrix, modulus: int = MODULUS) -> list[list[int]]:
    return [[value % modulus for value in row] for row in matrix]


# =============================================================================
# Text encoding
# =============================================================================

def encode_text(text: str) -> list[int]:
    """
    Write each character as three base-26 digits (most significant first).

    Raises:
        HillEncodingError: For characters above code point 17575
    """
    digits: list[int] = []
    for position, char in enumerate(text):
        code = ord(char)
        if code > MAX_CHAR_CODE:
            raise HillEncodingError(
                f"Character {char!r} at position {position} (U+{code:04X}) is outside "
                f"the Hill cipher range (max U+{MAX_CHAR_CODE:04X})"
            )
        digits.extend((code // (MODULUS * MODULUS), (code // MODULUS) % MODULUS, code % MODULUS))
    return digits


def decode_digits(digits: Sequence[int]) -> str:
    if len(digits) % SYMBOLS_PER_CHAR:
        raise HillEncodingError("Hill ciphertext does not decode to whole characters")
    chars = []
    for i in range(0, len(digits), SYMBOLS_PER_CHAR):
        high, mid, low = digits[i:i + SYMBOLS_PER_CHAR]
        chars.append(chr(high * MODULUS * MODULUS + mid * MODULUS + low))
    return "".join(chars)


def digits_to_letters(digits: Sequence[int]) -> str:
    return "".join(chr(d + ord("A")) for d in digits)


def letters_to_digits(letters: str) -> list[int]:
    digits = []
    for char in letters:
        if not "A" <= char <= "Z":
            raise HillEncodingError(f"Hill ciphertext contains invalid character {char!r}")
        digits.append(ord(char) - ord("A"))
    return digits


# =============================================================================
# Cipher
# =============================================================================

class HillCipher:
    """
    Hill cipher with full-text encoding and a self-describing padding prefix.

    Usage:
        cipher = HillCipher()
        key = cipher.generate_key()
        ciphertext = cipher.encrypt("Attack at dawn!", key)
        assert cipher.decrypt(ciphertext, key) == "Attack at dawn!"
    """

    __slots__ = ("_max_attempts",)

    algorithm: Final = Algorithm.HILL

    def __init__(self, max_attempts: Optional[int] = None) -> None:
        """
        Args:
            max_attempts: Random matrices tried before using the fallback key
                (defaults to ChainConfig cipher.hill_max_attempts)
        """
        if max_attempts is None:
            max_attempts = ChainConfig.get_instance().cipher.hill_max_attempts
        self._max_attempts = max_attempts

    def generate_key(self, mode: SecurityMode = SecurityMode.BALANCED, size: Optional[int] = None) -> HillKey:
        """
        Sample random matrices until one is invertible modulo 26.

        After ``max_attempts`` failures the known-good matrix [[3, 3], [2, 5]]
        is returned (only when the requested size is 2).
        """
        size = size or key_strength_params(Algorithm.HILL, mode).matrix_size
        for _ in range(self._max_attempts):
            candidate = [[secrets.randbelow(MODULUS) for _ in range(size)] for _ in range(size)]
            if is_invertible(candidate):
                return HillKey.from_rows(candidate)

        if size != len(FALLBACK_KEY):
            raise KeyNotInvertibleError(
                f"No invertible {size}x{size} Hill key found in {self._max_attempts} attempts"
            )
        return HillKey(FALLBACK_KEY)

    def parse_key(self, text: str) -> HillKey:
        return HillKey.parse(text)

    def encrypt(self, plaintext: str, key: HillKey, mode: SecurityMode = SecurityMode.BALANCED) -> str:
        matrix = reduce_matrix(key.matrix)
        # Refuse keys that would make the ciphertext unrecoverable
        invert_matrix(matrix)

        size = len(matrix)
        digits = encode_text(plaintext)
        padding = (-len(digits)) % size
        if padding > MAX_PADDING:
            raise HillEncodingError(f"Padding of {padding} exceeds the prefix capacity")
        digits.extend([PAD_SYMBOL] * padding)

        encrypted: list[int] = []
        for i in range(0, len(digits), size):
            encrypted.extend(multiply_vector(matrix, digits[i:i + size]))

        prefix = [padding // MODULUS, padding % MODULUS]
        return digits_to_letters(prefix) + digits_to_letters(encrypted)

    def decrypt(self, ciphertext: str, key: HillKey, mode: SecurityMode = SecurityMode.BALANCED) -> str:
        inverse = invert_matrix(reduce_matrix(key.matrix))
        size = len(inverse)

        if len(ciphertext) < PREFIX_LENGTH:
            raise HillEncodingError("Hill ciphertext is missing its padding prefix")
        high, low = letters_to_digits(ciphertext[:PREFIX_LENGTH])
        padding = high * MODULUS + low
        body = letters_to_digits(ciphertext[PREFIX_LENGTH:])

        if len(body) % size:
            raise HillEncodingError(
                f"Hill ciphertext body length {len(body)} is not a multiple of the block size {size}"
            )
        if padding >= size or padding > len(body):
            raise HillEncodingError(f"Hill ciphertext has an invalid padding length ({padding})")

        decrypted: list[int] = []
        for i in range(0, len(body), size):
            decrypted.extend(multiply_vector(inverse, body[i:i + size]))

        if padding:
            decrypted = decrypted[:-padding]
        return decode_digits(decrypted)
