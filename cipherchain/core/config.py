"""
Chain Configuration Module
==========================

Provides immutable, environment-aware configuration for the cipher chain.

Features:
- Immutable configuration after initialization
- Environment variable override support (CIPHERCHAIN_ prefix)
- No key material in configuration values
- Type-safe configuration access
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from typing import Final, Any, Optional


# Names that must never be sourced from the environment
_SENSITIVE_KEYS: Final[frozenset[str]] = frozenset({
    "password", "secret", "token", "api_key",
    "private", "credential", "auth", "salt",
})

_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "true", "yes", "y", "on"})


def _is_sensitive_key(key: str) -> bool:
    """Check if a configuration key might contain sensitive data."""
    key_lower = key.lower()
    return any(sensitive in key_lower for sensitive in _SENSITIVE_KEYS)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True, slots=True)
class CipherConfig:
    """
    Immutable cipher tuning shared by every adapter.

    trace_memory switches on process-wide tracemalloc when a registry is
    built (if it is not already on). It stays on until CipherRegistry.close()
    and slows every allocation while active.
    """

    hill_max_attempts: int = 100
    rsa_public_exponent: int = 65537
    trace_memory: bool = False

    def __post_init__(self) -> None:
        """Validate cipher settings."""
        if self.hill_max_attempts < 1:
            raise ValueError("hill_max_attempts must be at least 1")
        if self.rsa_public_exponent not in (3, 65537):
            raise ValueError("rsa_public_exponent must be 3 or 65537")


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Immutable logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    enable_console: bool = True
    enable_json: bool = False

    def __post_init__(self) -> None:
        """Validate logging settings."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.level.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {self.level}")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Immutable application metadata."""

    app_name: str = "CipherChain"
    version: str = "0.1.0"


class ChainConfig:
    """
    Centralized, immutable configuration loader with environment override support.

    Usage:
        config = ChainConfig.load()
        attempts = config.cipher.hill_max_attempts
        level = config.logging.level
    """

    __slots__ = ("_cipher", "_logging", "_app", "_frozen", "_config_hash")

    _instance: Optional[ChainConfig] = None

    def __init__(
        self,
        cipher: Optional[CipherConfig] = None,
        logging: Optional[LoggingConfig] = None,
        app: Optional[AppConfig] = None,
    ) -> None:
        """Initialize configuration. Use ChainConfig.load() for standard initialization."""
        object.__setattr__(self, "_frozen", False)
        object.__setattr__(self, "_cipher", cipher or CipherConfig())
        object.__setattr__(self, "_logging", logging or LoggingConfig())
        object.__setattr__(self, "_app", app or AppConfig())
        object.__setattr__(self, "_config_hash", self._compute_hash())
        object.__setattr__(self, "_frozen", True)

    def _compute_hash(self) -> str:
        """Compute a hash of the configuration for integrity checking."""
        config_str = f"{self._cipher}|{self._logging}|{self._app}"
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    @property
    def cipher(self) -> CipherConfig:
        """Get cipher configuration."""
        return self._cipher

    @property
    def logging(self) -> LoggingConfig:
        """Get logging configuration."""
        return self._logging

    @property
    def app(self) -> AppConfig:
        return self._app

    @property
    def config_hash(self) -> str:
        return self._config_hash

    @classmethod
    def load(cls, env_prefix: str = "CIPHERCHAIN") -> ChainConfig:
        """
        Load configuration with environment variable overrides.

        Environment variables use double underscores for nested values.

        Examples:
            CIPHERCHAIN_LOGGING__LEVEL=DEBUG
            CIPHERCHAIN_CIPHER__HILL_MAX_ATTEMPTS=50
            CIPHERCHAIN_CIPHER__TRACE_MEMORY=true

        Args:
            env_prefix: Prefix for environment variables (default: CIPHERCHAIN)

        Returns:
            Configured ChainConfig instance
        """
        env_overrides = cls._parse_env_overrides(env_prefix)

        cipher_kwargs: dict[str, Any] = {}
        if "cipher.hill_max_attempts" in env_overrides:
            cipher_kwargs["hill_max_attempts"] = int(env_overrides["cipher.hill_max_attempts"])
        if "cipher.rsa_public_exponent" in env_overrides:
            cipher_kwargs["rsa_public_exponent"] = int(env_overrides["cipher.rsa_public_exponent"])
        if "cipher.trace_memory" in env_overrides:
            cipher_kwargs["trace_memory"] = _parse_bool(env_overrides["cipher.trace_memory"])

        logging_kwargs: dict[str, Any] = {}
        if "logging.level" in env_overrides:
            logging_kwargs["level"] = env_overrides["logging.level"]
        if "logging.enable_console" in env_overrides:
            logging_kwargs["enable_console"] = _parse_bool(env_overrides["logging.enable_console"])
        if "logging.enable_json" in env_overrides:
            logging_kwargs["enable_json"] = _parse_bool(env_overrides["logging.enable_json"])

        return cls(
            cipher=CipherConfig(**cipher_kwargs) if cipher_kwargs else None,
            logging=LoggingConfig(**logging_kwargs) if logging_kwargs else None,
        )

    @staticmethod
    def _parse_env_overrides(prefix: str) -> dict[str, str]:
        """Parse environment variables with the given prefix."""
        overrides: dict[str, str] = {}
        prefix_upper = f"{prefix.upper()}_"

        for key, value in os.environ.items():
            if key.startswith(prefix_upper):
                # CIPHERCHAIN_SECTION__KEY -> section.key
                config_key = key[len(prefix_upper):].lower().replace("__", ".")

                if _is_sensitive_key(config_key):
                    continue

                overrides[config_key] = value

        return overrides

    @classmethod
    def get_instance(cls) -> ChainConfig:
        """
        Get or create the singleton configuration instance.

        Returns:
            The global ChainConfig instance
        """
        if cls._instance is None:
            cls._instance = cls.load()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance. Use only for testing."""
        cls._instance = None

    def __repr__(self) -> str:
        return f"ChainConfig(hash={self._config_hash}, app={self._app.app_name})"

    def __setattr__(self, name: str, value: Any) -> None:
        """Prevent modification after initialization."""
        if hasattr(self, "_frozen") and self._frozen:
            raise AttributeError("ChainConfig is immutable after initialization")
        super().__setattr__(name, value)
