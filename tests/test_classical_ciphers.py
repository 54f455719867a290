import string

import pytest

from cipherchain.core.crypto.caesar import CaesarCipher
from cipherchain.core.crypto.vigenere import VigenereCipher
from cipherchain.core.errors import EmptyKeyError, InvalidKeyFormatError
from cipherchain.core.keys import CaesarKey, VigenereKey
from cipherchain.core.types import SecurityMode

PRINTABLE = string.printable


# ---------------------------------------------------------------------------
# Caesar
# ---------------------------------------------------------------------------

def test_caesar_known_vector():
    cipher = CaesarCipher()
    assert cipher.encrypt("Hello World", CaesarKey(3)) == "Khoor Zruog"
    assert cipher.decrypt("Khoor Zruog", CaesarKey(3)) == "Hello World"


def test_caesar_wraps_and_preserves_case():
    cipher = CaesarCipher()
    assert cipher.encrypt("xyzXYZ", CaesarKey(3)) == "abcABC"


@pytest.mark.parametrize("shift", [1, 7, 13, 25, 26, 27, -3])
def test_caesar_roundtrip(shift):
    cipher = CaesarCipher()
    key = CaesarKey(shift)
    assert cipher.decrypt(cipher.encrypt(PRINTABLE, key), key) == PRINTABLE


def test_caesar_non_alphabetic_untouched():
    cipher = CaesarCipher()
    text = "12:34, héllo! ✓ [ok]"
    out = cipher.encrypt(text, CaesarKey(5))
    assert len(out) == len(text)
    for original, encrypted in zip(text, out):
        if original in string.ascii_letters:
            assert original.isupper() == encrypted.isupper()
        else:
            assert original == encrypted


def test_caesar_empty_string():
    cipher = CaesarCipher()
    assert cipher.encrypt("", CaesarKey(4)) == ""


@pytest.mark.parametrize(
    "mode, high",
    [(SecurityMode.HIGH, 25), (SecurityMode.BALANCED, 20), (SecurityMode.LIGHTWEIGHT, 13)],
)
def test_caesar_key_generation_respects_mode(mode, high):
    cipher = CaesarCipher()
    for _ in range(200):
        key = cipher.generate_key(mode)
        assert 1 <= key.shift <= high


@pytest.mark.parametrize("text", ["SHIFT-", "7", "shift-7", "SHIFT-abc", "SHIFT-7-1"])
def test_caesar_key_format_rejected(text):
    with pytest.raises(InvalidKeyFormatError):
        CaesarKey.parse(text)


def test_caesar_key_serialization():
    assert CaesarKey.parse("SHIFT-7") == CaesarKey(7)
    assert CaesarKey(12).serialize() == "SHIFT-12"


# ---------------------------------------------------------------------------
# Vigenère
# ---------------------------------------------------------------------------

def test_vigenere_known_vector():
    cipher = VigenereCipher()
    key = VigenereKey("LEMON")
    assert cipher.encrypt("ATTACKATDAWN", key) == "LXFOPVEFRNHR"
    assert cipher.decrypt("LXFOPVEFRNHR", key) == "ATTACKATDAWN"


def test_vigenere_key_advances_only_on_letters():
    cipher = VigenereCipher()
    assert cipher.encrypt("Attack at dawn!", VigenereKey("LEMON")) == "Lxfopv ef rnhr!"


def test_vigenere_roundtrip_printable():
    cipher = VigenereCipher()
    key = VigenereKey("SECRETKEY")
    assert cipher.decrypt(cipher.encrypt(PRINTABLE, key), key) == PRINTABLE


def test_vigenere_non_alphabetic_untouched():
    cipher = VigenereCipher()
    text = "Zürich 2024: ÄÖÜ & co."
    out = cipher.encrypt(text, VigenereKey("KEY"))
    for original, encrypted in zip(text, out):
        if original in string.ascii_letters:
            assert original.isupper() == encrypted.isupper()
        else:
            assert original == encrypted


def test_vigenere_lowercase_key_is_normalized():
    assert VigenereKey.parse("lemon").letters == "LEMON"


def test_vigenere_empty_key_rejected():
    with pytest.raises(EmptyKeyError):
        VigenereKey.parse("")
    with pytest.raises(EmptyKeyError):
        VigenereCipher().encrypt("text", VigenereKey(""))


@pytest.mark.parametrize("text", ["KEY1", "KEY\n", "KEY ", "K-E-Y"])
def test_vigenere_non_letter_key_rejected(text):
    with pytest.raises(InvalidKeyFormatError):
        VigenereKey.parse(text)


@pytest.mark.parametrize(
    "mode, length",
    [(SecurityMode.HIGH, 32), (SecurityMode.BALANCED, 16), (SecurityMode.LIGHTWEIGHT, 8)],
)
def test_vigenere_key_length_by_mode(mode, length):
    key = VigenereCipher().generate_key(mode)
    assert len(key.letters) == length
    assert key.letters.isalpha() and key.letters.isupper()
