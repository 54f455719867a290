"""
Cipher Chain Errors
===================

Every failure raised by the chain derives from CipherChainError.

Propagation:
- Key validation errors are raised at the dispatch boundary, before any
  cipher work runs
- Primitive failures are wrapped in AdapterError with the algorithm name
- Failures during a chain run are wrapped in LayerError with the layer
  position and the security mode in effect
- Nothing is retried or silently downgraded
"""

from __future__ import annotations

from typing import Iterable


class CipherChainError(Exception):
    """Base class for all cipher chain failures."""
    pass


class UnknownAlgorithmError(CipherChainError, ValueError):
    """Raised when an algorithm identifier is not supported."""

    def __init__(self, algorithm: object) -> None:
        self.algorithm = algorithm
        super().__init__(f"Unknown algorithm: {algorithm}")


class UnknownSecurityModeError(CipherChainError, ValueError):
    """Raised when a security mode identifier is not supported."""

    def __init__(self, mode: object) -> None:
        self.mode = mode
        super().__init__(f"Unknown security mode: {mode}")


class KeyFormatError(CipherChainError, ValueError):
    """Base class for keys rejected at the dispatch boundary."""
    pass


class InvalidKeyFormatError(KeyFormatError):
    """Raised when a key does not have the structure its algorithm needs."""
    pass


class IncompleteKeyError(KeyFormatError):
    """Raised when an RSA key pair is missing its public or private half."""
    pass


class CorruptKeyError(KeyFormatError):
    """Raised when a serialized key cannot be decoded at all."""
    pass


class EmptyKeyError(KeyFormatError):
    """Raised when an algorithm that needs key material receives none."""
    pass


class KeyNotInvertibleError(KeyFormatError):
    """Raised when a Hill matrix has no inverse modulo 26."""
    pass


class HillEncodingError(CipherChainError, ValueError):
    """Raised for plaintext the Hill encoding cannot carry or malformed Hill ciphertext."""
    pass


class MissingKeysError(CipherChainError):
    """
    Raised before decryption when the key map lacks keys for the chain.

    Attributes:
        algorithms: Every algorithm whose key is absent or empty, in chain order
    """

    def __init__(self, algorithms: Iterable[str]) -> None:
        self.algorithms = list(algorithms)
        names = ", ".join(name.upper() for name in self.algorithms)
        super().__init__(
            f"Missing keys for: {names}. Clear the key set and regenerate all keys."
        )


class AdapterError(CipherChainError):
    """
    Raised when an underlying cipher primitive fails.

    Attributes:
        algorithm: Algorithm whose primitive failed
        operation: "encrypt", "decrypt" or "generate_key"
        cause: The original exception
    """

    def __init__(self, algorithm: str, operation: str, cause: BaseException) -> None:
        self.algorithm = algorithm
        self.operation = operation
        self.cause = cause
        super().__init__(f"{algorithm.upper()} {operation} failed: {cause}")


class LayerError(CipherChainError):
    """
    Raised when one layer of a chain run fails; the rest of the chain is skipped.

    The pipeline cannot tell a wrong key from a wrong mode or corrupted
    ciphertext, so the message lists all three causes.
    """

    def __init__(
        self,
        order: int,
        total: int,
        algorithm: str,
        mode: str,
        operation: str,
        cause: BaseException,
    ) -> None:
        self.order = order
        self.total = total
        self.algorithm = algorithm
        self.mode = mode
        self.operation = operation
        self.cause = cause
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        layer_info = f"Layer {self.order}/{self.total} ({self.algorithm.upper()})"
        if self.operation == "encrypt":
            return (
                f"Encryption failed at {layer_info}: {self.cause}\n"
                f"Security mode: {self.mode.upper()}. "
                "Check the key for this layer or regenerate keys."
            )
        return (
            f"Decryption failed at {layer_info}: {self.cause}\n\n"
            "Common causes:\n"
            "1. The keys don't match the ones used for encryption\n"
            "2. The ciphertext was encrypted with a different security mode\n"
            "3. The ciphertext is corrupted or modified\n\n"
            "Solution:\n"
            "- Use the exact keys that encrypted this text, or regenerate keys and re-encrypt\n"
            f"- Verify the security mode matches (currently: {self.mode.upper()})"
        )


def describe_cause(error: BaseException) -> str:
    """Short ``Type: message`` description of an exception for logs."""
    message = str(error)
    return f"{type(error).__name__}: {message}" if message else type(error).__name__
