"""
RSA-OAEP Layer
==============

RSA public-key encryption with OAEP padding, chunked to carry text of any
length.

Parameters:
    Modulus        4096 / 2048 / 1024 bits (high / balanced / lightweight)
    Exponent       65537 (configurable)
    OAEP           SHA-256 label hash, MGF1 with SHA-1

Chunking:
    OAEP can carry at most k - 2*hLen - 2 bytes per block, where k is the
    modulus size in bytes. With SHA-256 that is k - 66, which is within the
    k - 42 SHA-1 bound. The UTF-8 plaintext is split into chunks of that
    size; each encrypted chunk is base64 encoded and the chunks are joined
    with "|", a character the base64 alphabet never produces.

Key generation for 4096-bit moduli can take seconds. Callers that care
should generate keys one at a time (see LayerPipeline.iter_generate_keys).
"""

from __future__ import annotations

import base64
from typing import Final, Optional

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from cipherchain.core.config import ChainConfig
from cipherchain.core.errors import InvalidKeyFormatError
from cipherchain.core.keys import RsaKeyPair
from cipherchain.core.policy import key_strength_params
from cipherchain.core.types import Algorithm, SecurityMode

CHUNK_SEPARATOR: Final[str] = "|"
OAEP_HASH: Final = hashes.SHA256
MGF1_HASH: Final = hashes.SHA1


def _oaep() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=MGF1_HASH()),
        algorithm=OAEP_HASH(),
        label=None,
    )


def max_chunk_size(key_size_bits: int) -> int:
    """Largest plaintext block OAEP can carry for a modulus of this size."""
    key_size_bytes = (key_size_bits + 7) // 8
    return key_size_bytes - 2 * OAEP_HASH.digest_size - 2


def split_chunks(data: bytes, chunk_size: int) -> list[bytes]:
    """Split data into chunks; empty input yields one empty chunk."""
    if not data:
        return [b""]
    return [data[i:i + chunk_size] for i in range(0, len(data), chunk_size)]


class RsaOaepCipher:
    """
    Chunked RSA-OAEP.

    Encryption uses the public half of the pair, decryption the private half.
    """

    __slots__ = ("_public_exponent",)

    algorithm: Final = Algorithm.RSA

    def __init__(self, public_exponent: Optional[int] = None) -> None:
        if public_exponent is None:
            public_exponent = ChainConfig.get_instance().cipher.rsa_public_exponent
        self._public_exponent = public_exponent

    def generate_key(self, mode: SecurityMode = SecurityMode.BALANCED) -> RsaKeyPair:
        """
        Generate a key pair with the mode's modulus size.

        This blocks for the duration of prime generation.
        """
        bits = key_strength_params(Algorithm.RSA, mode).bit_length
        private_key = rsa.generate_private_key(public_exponent=self._public_exponent, key_size=bits)

        private_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        public_pem = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return RsaKeyPair(public_key=public_pem.decode("ascii"), private_key=private_pem.decode("ascii"))

    def parse_key(self, text: str) -> RsaKeyPair:
        return RsaKeyPair.parse(text)

    @staticmethod
    def _load_public(key: RsaKeyPair) -> rsa.RSAPublicKey:
        try:
            public_key = serialization.load_pem_public_key(key.public_key.encode("utf-8"))
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise InvalidKeyFormatError(f"Invalid RSA public key: {e}. Please regenerate keys.") from e
        if not isinstance(public_key, rsa.RSAPublicKey):
            raise InvalidKeyFormatError("Invalid RSA public key: not an RSA key")
        return public_key

    @staticmethod
    def _load_private(key: RsaKeyPair) -> rsa.RSAPrivateKey:
        try:
            private_key = serialization.load_pem_private_key(key.private_key.encode("utf-8"), password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise InvalidKeyFormatError(f"Invalid RSA private key: {e}. Please regenerate keys.") from e
        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise InvalidKeyFormatError("Invalid RSA private key: not an RSA key")
        return private_key

    def encrypt(self, plaintext: str, key: RsaKeyPair, mode: SecurityMode = SecurityMode.BALANCED) -> str:
        public_key = self._load_public(key)
        chunk_size = max_chunk_size(public_key.key_size)
        if chunk_size < 1:
            raise InvalidKeyFormatError(
                f"RSA key of {public_key.key_size} bits is too small for OAEP with SHA-256. "
                "Please regenerate keys."
            )
        oaep = _oaep()

        chunks = split_chunks(plaintext.encode("utf-8"), chunk_size)
        encoded = [
            base64.b64encode(public_key.encrypt(chunk, oaep)).decode("ascii")
            for chunk in chunks
        ]
        return CHUNK_SEPARATOR.join(encoded)

    def decrypt(self, ciphertext: str, key: RsaKeyPair, mode: SecurityMode = SecurityMode.BALANCED) -> str:
        """
        Raises:
            ValueError: If a chunk is not valid base64, fails OAEP decoding,
                or the joined bytes are not UTF-8
        """
        private_key = self._load_private(key)
        oaep = _oaep()

        if not ciphertext:
            raise ValueError("RSA ciphertext is empty")

        parts = []
        for index, chunk in enumerate(ciphertext.split(CHUNK_SEPARATOR), start=1):
            try:
                raw = base64.b64decode(chunk, validate=True)
            except ValueError as e:
                raise ValueError(f"RSA chunk {index} is not valid base64") from e
            parts.append(private_key.decrypt(raw, oaep))

        return b"".join(parts).decode("utf-8")
