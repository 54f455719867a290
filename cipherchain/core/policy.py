"""
Security-Mode Policy
====================

Fixed lookup tables mapping a security mode to its algorithm chain and to
per-algorithm key strength.

Chains:
    high        -> aes, rsa, vigenere, blowfish, caesar   (5 layers)
    balanced    -> aes, vigenere, blowfish                (3 layers)
    lightweight -> caesar, vigenere                       (2 layers)

Hill is not part of any recommended chain. It stays available for custom
chains through the registry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Mapping, Optional

from cipherchain.core.types import Algorithm, SecurityMode

_RECOMMENDED_CHAINS: Final[Mapping[SecurityMode, tuple[Algorithm, ...]]] = {
    SecurityMode.HIGH: (
        Algorithm.AES,
        Algorithm.RSA,
        Algorithm.VIGENERE,
        Algorithm.BLOWFISH,
        Algorithm.CAESAR,
    ),
    SecurityMode.BALANCED: (
        Algorithm.AES,
        Algorithm.VIGENERE,
        Algorithm.BLOWFISH,
    ),
    SecurityMode.LIGHTWEIGHT: (
        Algorithm.CAESAR,
        Algorithm.VIGENERE,
    ),
}

AES_KEY_BITS: Final[Mapping[SecurityMode, int]] = {
    SecurityMode.HIGH: 256,
    SecurityMode.BALANCED: 192,
    SecurityMode.LIGHTWEIGHT: 128,
}

AES_PBKDF2_ITERATIONS: Final[Mapping[SecurityMode, int]] = {
    SecurityMode.HIGH: 10_000,
    SecurityMode.BALANCED: 5_000,
    SecurityMode.LIGHTWEIGHT: 1_000,
}

RSA_MODULUS_BITS: Final[Mapping[SecurityMode, int]] = {
    SecurityMode.HIGH: 4096,
    SecurityMode.BALANCED: 2048,
    SecurityMode.LIGHTWEIGHT: 1024,
}

BLOWFISH_KEY_BITS: Final[Mapping[SecurityMode, int]] = {
    SecurityMode.HIGH: 448,
    SecurityMode.BALANCED: 256,
    SecurityMode.LIGHTWEIGHT: 128,
}

VIGENERE_KEY_LENGTH: Final[Mapping[SecurityMode, int]] = {
    SecurityMode.HIGH: 32,
    SecurityMode.BALANCED: 16,
    SecurityMode.LIGHTWEIGHT: 8,
}

CAESAR_SHIFT_RANGE: Final[Mapping[SecurityMode, tuple[int, int]]] = {
    SecurityMode.HIGH: (1, 25),
    SecurityMode.BALANCED: (1, 20),
    SecurityMode.LIGHTWEIGHT: (1, 13),
}

HILL_MATRIX_SIZE: Final[int] = 2

_DISPLAY_NAMES: Final[Mapping[Algorithm, str]] = {
    Algorithm.AES: "AES (Advanced Encryption Standard)",
    Algorithm.RSA: "RSA (Rivest-Shamir-Adleman)",
    Algorithm.HILL: "Hill Cipher",
    Algorithm.VIGENERE: "Vigenère Cipher",
    Algorithm.BLOWFISH: "Blowfish",
    Algorithm.CAESAR: "Caesar Cipher",
}


@dataclass(frozen=True, slots=True)
class KeyStrength:
    """
    Strength parameters consumed by key generation.

    Only the fields relevant to the algorithm are set.
    """

    algorithm: Algorithm
    mode: SecurityMode
    bit_length: Optional[int] = None
    key_length: Optional[int] = None
    shift_range: Optional[tuple[int, int]] = None
    iterations: Optional[int] = None
    matrix_size: Optional[int] = None


def recommended_algorithms(mode: SecurityMode | str) -> list[Algorithm]:
    """Return the ordered chain for a mode. The list is a fresh copy."""
    return list(_RECOMMENDED_CHAINS[SecurityMode.parse(mode)])


def key_strength_params(algorithm: Algorithm | str, mode: SecurityMode | str) -> KeyStrength:
    """
    Look up the strength parameters for an algorithm in a mode.

    Args:
        algorithm: Algorithm identifier
        mode: Security mode

    Returns:
        KeyStrength with the algorithm's parameters filled in
    """
    algorithm = Algorithm.parse(algorithm)
    mode = SecurityMode.parse(mode)

    if algorithm is Algorithm.AES:
        return KeyStrength(
            algorithm, mode,
            bit_length=AES_KEY_BITS[mode],
            iterations=AES_PBKDF2_ITERATIONS[mode],
        )
    if algorithm is Algorithm.RSA:
        return KeyStrength(algorithm, mode, bit_length=RSA_MODULUS_BITS[mode])
    if algorithm is Algorithm.BLOWFISH:
        return KeyStrength(algorithm, mode, bit_length=BLOWFISH_KEY_BITS[mode])
    if algorithm is Algorithm.VIGENERE:
        return KeyStrength(algorithm, mode, key_length=VIGENERE_KEY_LENGTH[mode])
    if algorithm is Algorithm.CAESAR:
        return KeyStrength(algorithm, mode, shift_range=CAESAR_SHIFT_RANGE[mode])
    return KeyStrength(algorithm, mode, matrix_size=HILL_MATRIX_SIZE)


def algorithm_display_name(algorithm: Algorithm | str) -> str:
    return _DISPLAY_NAMES[Algorithm.parse(algorithm)]


def key_description(algorithm: Algorithm | str, mode: SecurityMode | str) -> str:
    """Human readable description of how a key is generated in a mode."""
    strength = key_strength_params(algorithm, mode)

    if strength.algorithm is Algorithm.AES:
        return (
            f"{strength.bit_length}-bit random hexadecimal key, "
            f"stretched with PBKDF2 ({strength.iterations} iterations)"
        )
    if strength.algorithm is Algorithm.RSA:
        return f"{strength.bit_length}-bit public/private key pair using OAEP padding"
    if strength.algorithm is Algorithm.BLOWFISH:
        return f"{strength.bit_length}-bit random hexadecimal key"
    if strength.algorithm is Algorithm.VIGENERE:
        return f"{strength.key_length}-character random uppercase alphabetic key"
    if strength.algorithm is Algorithm.CAESAR:
        low, high = strength.shift_range
        return f"Random shift value ({low}-{high})"
    size = strength.matrix_size
    return f"{size}x{size} random matrix invertible modulo 26"
