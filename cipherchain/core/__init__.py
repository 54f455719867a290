"""
Core module - Configuration, logging, policy, registry and pipeline.
"""

from cipherchain.core.config import ChainConfig
from cipherchain.core.logging import get_secure_logger, SecureLogFilter
from cipherchain.core.policy import recommended_algorithms, key_strength_params

__all__ = [
    "ChainConfig",
    "get_secure_logger",
    "SecureLogFilter",
    "recommended_algorithms",
    "key_strength_params",
]
