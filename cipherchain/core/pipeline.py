"""
Layer Pipeline Engine
=====================

Runs text through an ordered chain of ciphers.

Encryption Flow:
    plaintext
        ↓ layer 1 (algorithms[0], key generated or reused)
    ...
        ↓ layer N (algorithms[N-1])
    ciphertext + key map + layer manifest

Decryption Flow:
    all chain keys present? (checked up front, every missing one reported)
        ↓ layer 1 = algorithms[N-1]
    ...
        ↓ layer N = algorithms[0]
    plaintext

Each operation moves Idle -> Running(layer i) -> Complete, or stops at
Failed(layer i). A failed layer aborts the chain; nothing is retried.

The pipeline owns no per-call state, so one instance can serve concurrent
callers. Decryption needs the exact chain (same algorithms, same order),
the exact keys and the same security mode used for encryption.
"""

from __future__ import annotations

from typing import Iterator, Mapping, Optional, Sequence

from cipherchain.core.errors import LayerError, MissingKeysError, describe_cause
from cipherchain.core.logging import get_secure_logger
from cipherchain.core.policy import recommended_algorithms
from cipherchain.core.registry import CipherRegistry
from cipherchain.core.types import (
    Algorithm,
    EncryptionLayer,
    PerformanceSample,
    PipelineResult,
    SecurityMode,
)

KeyMap = Mapping[str, str]


def _resolve_chain(algorithms: Sequence[Algorithm | str]) -> list[Algorithm]:
    chain = [Algorithm.parse(a) for a in algorithms]
    if not chain:
        raise ValueError("A cipher chain needs at least one algorithm")
    return chain


def _existing_key(keys: Optional[KeyMap], algorithm: Algorithm) -> Optional[str]:
    if not keys:
        return None
    return keys.get(algorithm.value) or None


class LayerPipeline:
    """
    Multi-layer encryption and decryption over a CipherRegistry.

    Usage:
        pipeline = LayerPipeline()

        # Encrypt with the chain recommended for a mode
        result = pipeline.encrypt_for_mode("Hello World", "lightweight")

        # Decrypt with the same chain, keys and mode
        plain = pipeline.decrypt(result.text, result.algorithms, result.keys, "lightweight")
        assert plain.text == "Hello World"
    """

    __slots__ = ("_registry", "_logger")

    def __init__(self, registry: Optional[CipherRegistry] = None) -> None:
        self._registry = registry or CipherRegistry()
        self._logger = get_secure_logger(__name__)

    @property
    def registry(self) -> CipherRegistry:
        return self._registry

    # =========================================================================
    # Keys
    # =========================================================================

    def iter_generate_keys(
        self,
        algorithms: Sequence[Algorithm | str],
        mode: SecurityMode | str = SecurityMode.HIGH,
        existing_keys: Optional[KeyMap] = None,
    ) -> Iterator[tuple[Algorithm, str]]:
        """
        Yield ``(algorithm, key)`` for the chain, one key at a time.

        Existing non-empty keys are yielded as-is. Because RSA generation can
        block for seconds, callers can report progress between items.
        Algorithms appearing twice in the chain get a single key.
        """
        mode = SecurityMode.parse(mode)
        seen: set[Algorithm] = set()
        for algorithm in _resolve_chain(algorithms):
            if algorithm in seen:
                continue
            seen.add(algorithm)
            key = _existing_key(existing_keys, algorithm)
            if key is None:
                key = self._registry.generate_key(algorithm, mode)
            yield algorithm, key

    def generate_keys(
        self,
        algorithms: Sequence[Algorithm | str],
        mode: SecurityMode | str = SecurityMode.HIGH,
        existing_keys: Optional[KeyMap] = None,
    ) -> dict[str, str]:
        """Key map (algorithm value -> serialized key) for the whole chain."""
        return {
            algorithm.value: key
            for algorithm, key in self.iter_generate_keys(algorithms, mode, existing_keys)
        }

    # =========================================================================
    # Encryption
    # =========================================================================

    def encrypt(
        self,
        plaintext: str,
        algorithms: Sequence[Algorithm | str],
        mode: SecurityMode | str = SecurityMode.HIGH,
        existing_keys: Optional[KeyMap] = None,
    ) -> PipelineResult:
        """
        Encrypt through every layer in chain order.

        A caller-supplied key is used when present, otherwise a key is
        generated for that layer. The returned key map always holds every
        key used, so the caller can persist the full set.

        Args:
            plaintext: Text to encrypt
            algorithms: Chain in application order
            mode: Security mode driving key strength
            existing_keys: Optional key map to reuse

        Returns:
            PipelineResult with the final ciphertext, keys, layers (order 1..N)
            and per-layer samples

        Raises:
            LayerError: If any layer fails; later layers are not attempted
        """
        chain = _resolve_chain(algorithms)
        mode = SecurityMode.parse(mode)
        total = len(chain)

        self._logger.info(
            "Starting multi-layer encryption: %d layers (%s mode), chain=%s",
            total, mode.value.upper(), ",".join(a.value for a in chain),
        )

        text = plaintext
        keys: dict[str, str] = {}
        layers: list[EncryptionLayer] = []
        samples: list[PerformanceSample] = []

        for order, algorithm in enumerate(chain, start=1):
            self._logger.debug("Layer %d/%d: encrypting with %s", order, total, algorithm.value.upper())
            try:
                key = keys.get(algorithm.value) or _existing_key(existing_keys, algorithm)
                if key is None:
                    self._logger.debug("Layer %d/%d: generating new %s key", order, total, algorithm.value.upper())
                    key = self._registry.generate_key(algorithm, mode)
                result = self._registry.encrypt(text, algorithm, key, mode)
            except Exception as e:
                self._logger.error(
                    "Encryption failed at layer %d/%d (%s): %s",
                    order, total, algorithm.value.upper(), describe_cause(e),
                )
                raise LayerError(order, total, algorithm.value, mode.value, "encrypt", e) from e

            text = result.text
            keys[algorithm.value] = key
            samples.append(result.sample)
            layers.append(EncryptionLayer(algorithm=algorithm, key=key, order=order))

        self._logger.info("Multi-layer encryption complete: %d layers, output %d chars", total, len(text))
        return PipelineResult(
            text=text,
            mode=mode,
            algorithms=chain,
            keys=keys,
            layers=layers,
            samples=samples,
        )

    def encrypt_for_mode(
        self,
        plaintext: str,
        mode: SecurityMode | str,
        existing_keys: Optional[KeyMap] = None,
    ) -> PipelineResult:
        """Encrypt with the chain recommended for ``mode``."""
        return self.encrypt(plaintext, recommended_algorithms(mode), mode, existing_keys)

    # =========================================================================
    # Decryption
    # =========================================================================

    def check_keys(self, algorithms: Sequence[Algorithm | str], keys: Optional[KeyMap]) -> None:
        """
        Raises:
            MissingKeysError: Naming every chain algorithm without a non-empty key
        """
        missing: list[str] = []
        for algorithm in _resolve_chain(algorithms):
            if _existing_key(keys, algorithm) is None and algorithm.value not in missing:
                missing.append(algorithm.value)
        if missing:
            raise MissingKeysError(missing)

    def decrypt(
        self,
        ciphertext: str,
        algorithms: Sequence[Algorithm | str],
        keys: KeyMap,
        mode: SecurityMode | str = SecurityMode.HIGH,
    ) -> PipelineResult:
        """
        Decrypt through every layer in strict reverse chain order.

        Args:
            ciphertext: Output of encrypt()
            algorithms: The chain exactly as used for encryption
            keys: Key map containing every chain algorithm
            mode: Security mode used for encryption

        Returns:
            PipelineResult with the plaintext; layers record processing
            order (order 1 is the last encryption layer)

        Raises:
            MissingKeysError: Before any work, if keys are absent
            LayerError: If a layer fails; remaining layers are not attempted
        """
        chain = _resolve_chain(algorithms)
        mode = SecurityMode.parse(mode)
        self.check_keys(chain, keys)
        total = len(chain)

        self._logger.info(
            "Starting multi-layer decryption: %d layers (%s mode), reverse chain=%s",
            total, mode.value.upper(), ",".join(a.value for a in reversed(chain)),
        )

        text = ciphertext
        layers: list[EncryptionLayer] = []
        samples: list[PerformanceSample] = []

        for order, algorithm in enumerate(reversed(chain), start=1):
            key = keys[algorithm.value]
            self._logger.debug(
                "Layer %d/%d: decrypting with %s, input %d chars",
                order, total, algorithm.value.upper(), len(text),
            )
            try:
                result = self._registry.decrypt(text, algorithm, key, mode)
            except Exception as e:
                self._logger.error(
                    "Decryption failed at layer %d/%d (%s): %s",
                    order, total, algorithm.value.upper(), describe_cause(e),
                )
                raise LayerError(order, total, algorithm.value, mode.value, "decrypt", e) from e

            text = result.text
            samples.append(result.sample)
            layers.append(EncryptionLayer(algorithm=algorithm, key=key, order=order))

        self._logger.info("Multi-layer decryption complete: %d layers", total)
        return PipelineResult(
            text=text,
            mode=mode,
            algorithms=chain,
            keys={a.value: keys[a.value] for a in chain},
            layers=layers,
            samples=samples,
        )

    def decrypt_for_mode(self, ciphertext: str, keys: KeyMap, mode: SecurityMode | str) -> PipelineResult:
        """Decrypt with the chain recommended for ``mode``."""
        return self.decrypt(ciphertext, recommended_algorithms(mode), keys, mode)
