"""
CipherChain - A Multi-Layer Cipher Pipeline
===========================================

Selects an ordered chain of ciphers from a security mode, generates a key
per layer, and runs text through the chain forward (encryption) or in
exact reverse (decryption).

Notice:
- Teaching tool: the classical layers provide no real security
- Keys are never logged
- Every failure is terminal; nothing is retried
"""

from cipherchain.core.config import ChainConfig
from cipherchain.core.logging import get_secure_logger
from cipherchain.core.pipeline import LayerPipeline
from cipherchain.core.registry import CipherRegistry
from cipherchain.core.types import Algorithm, SecurityMode

__version__ = "0.1.0"

__all__ = [
    "Algorithm",
    "ChainConfig",
    "CipherRegistry",
    "LayerPipeline",
    "SecurityMode",
    "get_secure_logger",
    "__version__",
]
