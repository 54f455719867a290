"""
Chain Data Model
================

Identifiers and immutable records shared by the registry and the pipeline.

Algorithm and SecurityMode are str-valued enums, so ``Algorithm.AES == "aes"``
and either form can be used to index a key map.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Final, Optional

from cipherchain.core.errors import UnknownAlgorithmError, UnknownSecurityModeError

# Floor for elapsed time so throughput never divides by zero
MIN_ELAPSED_MS: Final[float] = 0.001


class Algorithm(str, Enum):
    """Supported cipher algorithms."""
    AES = "aes"
    RSA = "rsa"
    HILL = "hill"
    VIGENERE = "vigenere"
    BLOWFISH = "blowfish"
    CAESAR = "caesar"

    @classmethod
    def parse(cls, value: Algorithm | str) -> Algorithm:
        """Resolve an identifier (case-insensitive) or raise UnknownAlgorithmError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownAlgorithmError(value) from None

    def __str__(self) -> str:
        return self.value


class SecurityMode(str, Enum):
    """Strength/speed tiers."""
    HIGH = "high"
    BALANCED = "balanced"
    LIGHTWEIGHT = "lightweight"

    @classmethod
    def parse(cls, value: SecurityMode | str) -> SecurityMode:
        """Resolve a mode name (case-insensitive) or raise UnknownSecurityModeError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownSecurityModeError(value) from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class EncryptionLayer:
    """
    One algorithm's application within a chain.

    Attributes:
        algorithm: Algorithm applied at this layer
        key: Serialized key used (must be kept verbatim for decryption)
        order: 1-based processing position
    """

    algorithm: Algorithm
    key: str
    order: int

    def __repr__(self) -> str:
        """Safe representation without exposing key material."""
        return f"EncryptionLayer(order={self.order}, algorithm={self.algorithm.value})"


@dataclass(frozen=True, slots=True)
class PerformanceSample:
    """
    Timing and memory measurement for one cipher call.

    Attributes:
        elapsed_ms: Wall time in milliseconds (never below MIN_ELAPSED_MS)
        memory_bytes: Best-effort memory delta, 0 when unavailable
        data_size: Input size in UTF-8 bytes
        throughput: Bytes per second
    """

    elapsed_ms: float
    memory_bytes: int
    data_size: int
    throughput: float

    @classmethod
    def from_measurement(cls, elapsed_ms: float, memory_bytes: int, data_size: int) -> PerformanceSample:
        elapsed_ms = max(elapsed_ms, MIN_ELAPSED_MS)
        return cls(
            elapsed_ms=elapsed_ms,
            memory_bytes=max(0, memory_bytes),
            data_size=data_size,
            throughput=data_size / (elapsed_ms / 1000),
        )


@dataclass(frozen=True, slots=True)
class PerformanceSummary:
    """
    Aggregate of per-layer samples.

    mean_throughput is the plain average of per-layer throughputs, not a
    size-weighted figure; treat it as an approximation.
    """

    total_ms: float
    peak_memory_bytes: int
    mean_throughput: float
    layer_count: int

    @classmethod
    def from_samples(cls, samples: list[PerformanceSample]) -> PerformanceSummary:
        if not samples:
            return cls(total_ms=0.0, peak_memory_bytes=0, mean_throughput=0.0, layer_count=0)
        return cls(
            total_ms=sum(s.elapsed_ms for s in samples),
            peak_memory_bytes=max(s.memory_bytes for s in samples),
            mean_throughput=sum(s.throughput for s in samples) / len(samples),
            layer_count=len(samples),
        )


@dataclass(frozen=True, slots=True)
class EncryptionResult:
    """Result of a single-algorithm encryption."""

    text: str
    key: str
    algorithm: Algorithm
    timestamp: float
    sample: PerformanceSample

    def __repr__(self) -> str:
        return f"EncryptionResult(algorithm={self.algorithm.value}, text_len={len(self.text)})"


@dataclass(frozen=True, slots=True)
class DecryptionResult:
    """Result of a single-algorithm decryption."""

    text: str
    algorithm: Algorithm
    timestamp: float
    sample: PerformanceSample

    def __repr__(self) -> str:
        return f"DecryptionResult(algorithm={self.algorithm.value}, text_len={len(self.text)})"


@dataclass(frozen=True)
class PipelineResult:
    """
    Outcome of a full chain run.

    Attributes:
        text: Final ciphertext (encryption) or recovered plaintext (decryption)
        mode: Security mode in effect
        algorithms: Chain in encryption order
        keys: Serialized key per algorithm value, including freshly generated ones
        layers: Layer manifest in processing order
        samples: Per-layer samples, aligned with layers
    """

    text: str
    mode: SecurityMode
    algorithms: list[Algorithm]
    keys: dict[str, str] = field(default_factory=dict)
    layers: list[EncryptionLayer] = field(default_factory=list)
    samples: list[PerformanceSample] = field(default_factory=list)

    def aggregate(self) -> PerformanceSummary:
        return PerformanceSummary.from_samples(self.samples)

    def key_for(self, algorithm: Algorithm | str) -> Optional[str]:
        return self.keys.get(Algorithm.parse(algorithm).value)

    def __repr__(self) -> str:
        """Safe representation without exposing key material."""
        chain = ",".join(a.value for a in self.algorithms)
        return f"PipelineResult(mode={self.mode.value}, chain=[{chain}], text_len={len(self.text)})"
