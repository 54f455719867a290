"""
CipherChain Cipher Layers
=========================

One class per algorithm, all sharing the same call contract:

    generate_key(mode) -> Key
    parse_key(text) -> Key
    encrypt(plaintext, key, mode) -> str
    decrypt(ciphertext, key, mode) -> str

Classical ciphers (implemented here):
    1. Caesar: alphabetic rotation
    2. Vigenère: repeating-key rotation
    3. Hill: modular matrix cipher over Z/26Z

Delegated ciphers (primitives from the cryptography library):
    4. AES-CBC with PBKDF2 key stretching
    5. RSA-OAEP, chunked
    6. Blowfish-CBC

WARNING: This is a teaching chain. The classical layers offer no real
         security, and nothing here is constant-time.
"""

from cipherchain.core.crypto.aes_cbc import AesCbcCipher
from cipherchain.core.crypto.blowfish_cbc import BlowfishCipher
from cipherchain.core.crypto.caesar import CaesarCipher
from cipherchain.core.crypto.hill import HillCipher
from cipherchain.core.crypto.rsa_oaep import RsaOaepCipher
from cipherchain.core.crypto.vigenere import VigenereCipher

__all__ = [
    "AesCbcCipher",
    "BlowfishCipher",
    "CaesarCipher",
    "HillCipher",
    "RsaOaepCipher",
    "VigenereCipher",
]
