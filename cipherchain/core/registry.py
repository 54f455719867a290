"""
Algorithm Registry
==================

Maps every Algorithm to its cipher adapter and is the single dispatch
boundary for key generation, encryption and decryption.

Boundary rules:
    - Keys arrive as strings and are parsed into typed keys before any
      cipher work runs; key errors (KeyFormatError) propagate unchanged
    - Any other failure inside an adapter is wrapped in AdapterError,
      tagged with the algorithm and operation
    - Every encrypt/decrypt call is timed and returns a PerformanceSample
"""

from __future__ import annotations

import time
from typing import Any, Callable, Mapping, Optional, Protocol, TypeVar

from cipherchain.core.config import ChainConfig
from cipherchain.core.crypto import (
    AesCbcCipher,
    BlowfishCipher,
    CaesarCipher,
    HillCipher,
    RsaOaepCipher,
    VigenereCipher,
)
from cipherchain.core.errors import AdapterError, KeyFormatError
from cipherchain.core.logging import get_secure_logger
from cipherchain.core.metrics import MemorySampler, default_sampler, measure, utf8_size
from cipherchain.core.types import (
    Algorithm,
    DecryptionResult,
    EncryptionResult,
    PerformanceSample,
    SecurityMode,
)

T = TypeVar("T")


class CipherAdapter(Protocol):
    """Call contract shared by every cipher layer."""

    algorithm: Algorithm

    def generate_key(self, mode: SecurityMode) -> Any:
        ...

    def parse_key(self, text: str) -> Any:
        ...

    def encrypt(self, plaintext: str, key: Any, mode: SecurityMode) -> str:
        ...

    def decrypt(self, ciphertext: str, key: Any, mode: SecurityMode) -> str:
        ...


def default_adapters(config: Optional[ChainConfig] = None) -> dict[Algorithm, CipherAdapter]:
    """One adapter per Algorithm, configured from ChainConfig."""
    config = config or ChainConfig.get_instance()
    return {
        Algorithm.AES: AesCbcCipher(),
        Algorithm.RSA: RsaOaepCipher(public_exponent=config.cipher.rsa_public_exponent),
        Algorithm.HILL: HillCipher(max_attempts=config.cipher.hill_max_attempts),
        Algorithm.VIGENERE: VigenereCipher(),
        Algorithm.BLOWFISH: BlowfishCipher(),
        Algorithm.CAESAR: CaesarCipher(),
    }


class CipherRegistry:
    """
    Dispatcher over the closed set of algorithms.

    Usage:
        registry = CipherRegistry()
        key = registry.generate_key("caesar", "lightweight")
        result = registry.encrypt("Hello", "caesar", key, "lightweight")
        plain = registry.decrypt(result.text, "caesar", key, "lightweight").text

    The registry holds no per-call state and is safe to share between
    concurrent callers.
    """

    __slots__ = ("_adapters", "_sampler", "_logger")

    def __init__(
        self,
        adapters: Optional[Mapping[Algorithm | str, CipherAdapter]] = None,
        sampler: Optional[MemorySampler] = None,
        config: Optional[ChainConfig] = None,
    ) -> None:
        """
        Args:
            adapters: Adapter per algorithm (defaults to default_adapters())
            sampler: Memory sampler for performance samples
            config: Configuration (defaults to the global instance)

        Raises:
            UnknownAlgorithmError: If an adapter is registered under an unknown name
            ValueError: If any Algorithm has no adapter
        """
        config = config or ChainConfig.get_instance()
        if adapters is None:
            adapters = default_adapters(config)

        resolved = {Algorithm.parse(name): adapter for name, adapter in adapters.items()}
        missing = [a.value for a in Algorithm if a not in resolved]
        if missing:
            raise ValueError(f"No adapter registered for: {', '.join(missing)}")

        self._adapters: dict[Algorithm, CipherAdapter] = resolved
        self._sampler = sampler or default_sampler(config.cipher.trace_memory)
        self._logger = get_secure_logger(__name__)

    @property
    def algorithms(self) -> list[Algorithm]:
        return list(self._adapters)

    @property
    def sampler(self) -> MemorySampler:
        return self._sampler

    def close(self) -> None:
        """Release the memory sampler (stops tracemalloc if this registry started it)."""
        stop = getattr(self._sampler, "stop", None)
        if stop is not None:
            stop()

    def adapter(self, algorithm: Algorithm | str) -> CipherAdapter:
        """
        Raises:
            UnknownAlgorithmError: If the identifier is not an Algorithm
        """
        return self._adapters[Algorithm.parse(algorithm)]

    def parse_key(self, algorithm: Algorithm | str, key: str) -> Any:
        """
        Validate a serialized key for an algorithm.

        Raises:
            KeyFormatError: Subclass describing what is wrong with the key
        """
        return self.adapter(algorithm).parse_key(key)

    def generate_key(self, algorithm: Algorithm | str, mode: SecurityMode | str = SecurityMode.BALANCED) -> str:
        """Generate and serialize a fresh key for ``algorithm`` in ``mode``."""
        algorithm = Algorithm.parse(algorithm)
        mode = SecurityMode.parse(mode)
        adapter = self._adapters[algorithm]

        key = self._guard(algorithm, "generate_key", lambda: adapter.generate_key(mode))
        self._logger.debug("Generated %s key (%s mode)", algorithm.value.upper(), mode.value)
        return key.serialize()

    def encrypt(
        self,
        plaintext: str,
        algorithm: Algorithm | str,
        key: str,
        mode: SecurityMode | str = SecurityMode.BALANCED,
    ) -> EncryptionResult:
        """
        Encrypt with one algorithm.

        Raises:
            UnknownAlgorithmError, UnknownSecurityModeError: Bad identifiers
            KeyFormatError: Key rejected before encryption
            AdapterError: The cipher itself failed
        """
        algorithm = Algorithm.parse(algorithm)
        mode = SecurityMode.parse(mode)
        adapter = self._adapters[algorithm]
        typed_key = adapter.parse_key(key)

        text, sample = self._timed(
            algorithm, "encrypt",
            lambda: adapter.encrypt(plaintext, typed_key, mode),
            utf8_size(plaintext),
        )
        return EncryptionResult(
            text=text,
            key=key,
            algorithm=algorithm,
            timestamp=time.time(),
            sample=sample,
        )

    def decrypt(
        self,
        ciphertext: str,
        algorithm: Algorithm | str,
        key: str,
        mode: SecurityMode | str = SecurityMode.BALANCED,
    ) -> DecryptionResult:
        """
        Decrypt with one algorithm.

        Raises:
            UnknownAlgorithmError, UnknownSecurityModeError: Bad identifiers
            KeyFormatError: Key rejected before decryption
            AdapterError: The cipher itself failed (wrong key, wrong mode,
                corrupted ciphertext)
        """
        algorithm = Algorithm.parse(algorithm)
        mode = SecurityMode.parse(mode)
        adapter = self._adapters[algorithm]
        typed_key = adapter.parse_key(key)

        text, sample = self._timed(
            algorithm, "decrypt",
            lambda: adapter.decrypt(ciphertext, typed_key, mode),
            utf8_size(ciphertext),
        )
        return DecryptionResult(
            text=text,
            algorithm=algorithm,
            timestamp=time.time(),
            sample=sample,
        )

    def _timed(
        self,
        algorithm: Algorithm,
        operation: str,
        fn: Callable[[], str],
        data_size: int,
    ) -> tuple[str, PerformanceSample]:
        return self._guard(algorithm, operation, lambda: measure(fn, data_size, self._sampler))

    def _guard(self, algorithm: Algorithm, operation: str, fn: Callable[[], T]) -> T:
        """Run ``fn``; wrap anything but key errors in AdapterError."""
        try:
            return fn()
        except (KeyFormatError, AdapterError):
            raise
        except Exception as e:
            self._logger.debug("%s %s failed: %s", algorithm.value.upper(), operation, type(e).__name__)
            raise AdapterError(algorithm.value, operation, e) from e
