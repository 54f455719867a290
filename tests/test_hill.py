import math
import string

import pytest

from cipherchain.core.crypto import hill
from cipherchain.core.crypto.hill import (
    HillCipher,
    determinant,
    encode_text,
    invert_matrix,
    is_invertible,
    multiply_vector,
)
from cipherchain.core.errors import (
    EmptyKeyError,
    HillEncodingError,
    InvalidKeyFormatError,
    KeyNotInvertibleError,
)
from cipherchain.core.keys import HillKey

FALLBACK = HillKey(((3, 3), (2, 5)))
KEY_3X3 = HillKey(((6, 24, 1), (13, 16, 10), (20, 17, 15)))


@pytest.fixture
def cipher():
    return HillCipher(max_attempts=100)


def test_known_vector_with_padding(cipher):
    # "A" = 65 -> digits [0, 2, 13] + pad X(23) -> blocks [0, 2], [13, 23]
    assert cipher.encrypt("A", FALLBACK) == "ABGKEL"
    assert cipher.decrypt("ABGKEL", FALLBACK) == "A"


def test_inverse_of_fallback_matrix():
    assert invert_matrix(FALLBACK.matrix) == [[15, 17], [20, 9]]


@pytest.mark.parametrize("matrix", [FALLBACK.matrix, KEY_3X3.matrix, ((1, 2), (3, 5))])
def test_double_inversion_is_identity(matrix):
    reduced = [[v % 26 for v in row] for row in matrix]
    assert invert_matrix(invert_matrix(reduced)) == reduced


def test_inverse_times_matrix_is_identity_3x3():
    inverse = invert_matrix(KEY_3X3.matrix)
    for col in range(3):
        unit = [1 if i == col else 0 for i in range(3)]
        assert multiply_vector(inverse, multiply_vector(KEY_3X3.matrix, unit)) == unit


def test_determinant_cofactor_expansion():
    assert determinant([[6, 24, 1], [13, 16, 10], [20, 17, 15]]) == 441
    assert determinant([[2, 0, 0, 0], [0, 3, 0, 0], [0, 0, 5, 0], [0, 0, 0, 7]]) == 210


def test_generated_keys_are_invertible(cipher):
    for _ in range(50):
        key = cipher.generate_key()
        assert key.size == 2
        assert all(0 <= v < 26 for row in key.matrix for v in row)
        assert math.gcd(determinant(key.matrix) % 26, 26) == 1


def test_generation_falls_back_when_attempts_exhausted(monkeypatch):
    monkeypatch.setattr(hill.secrets, "randbelow", lambda n: 0)
    key = HillCipher(max_attempts=3).generate_key()
    assert key == FALLBACK
    assert is_invertible(key.matrix)


@pytest.mark.parametrize("length", [0, 1, 2, 3, 4, 5])
def test_padding_prefix_restores_exact_length(cipher, length):
    text = "Qz9!@"[:length]
    ciphertext = cipher.encrypt(text, FALLBACK)
    padding = (-(3 * length)) % 2
    assert ciphertext[:2] == "A" + chr(ord("A") + padding)
    assert len(ciphertext) == 2 + 3 * length + padding
    assert cipher.decrypt(ciphertext, FALLBACK) == text


def test_empty_plaintext(cipher):
    assert cipher.encrypt("", FALLBACK) == "AA"
    assert cipher.decrypt("AA", FALLBACK) == ""


def test_roundtrip_printable_ascii(cipher):
    key = cipher.generate_key()
    text = string.printable
    assert cipher.decrypt(cipher.encrypt(text, key), key) == text


def test_roundtrip_unicode_in_range(cipher):
    key = cipher.generate_key()
    text = "Grüße, naïve café – 10€ ✓ Ωμέγα"
    assert cipher.decrypt(cipher.encrypt(text, key), key) == text


def test_roundtrip_3x3_key(cipher):
    text = "Hill ciphers generalize to N=3."
    ciphertext = cipher.encrypt(text, KEY_3X3)
    assert ciphertext[:2] == "AA"
    assert cipher.decrypt(ciphertext, KEY_3X3) == text


def test_ciphertext_is_uppercase_letters(cipher):
    ciphertext = cipher.encrypt("mixed CASE 123 !?", FALLBACK)
    assert ciphertext.isalpha() and ciphertext.isupper()


def test_max_code_point_encodes():
    assert encode_text(chr(17575)) == [25, 25, 25]


@pytest.mark.parametrize("char", ["\U0001F600", "中"])
def test_out_of_range_characters_rejected(cipher, char):
    with pytest.raises(HillEncodingError):
        cipher.encrypt(f"ok {char}", FALLBACK)


def test_non_invertible_key_fails_decrypt(cipher):
    singular = HillKey(((2, 4), (6, 8)))
    with pytest.raises(KeyNotInvertibleError):
        cipher.decrypt("AAGK", singular)


def test_non_invertible_key_refused_for_encrypt(cipher):
    with pytest.raises(KeyNotInvertibleError):
        cipher.encrypt("data", HillKey(((13, 0), (0, 1))))


@pytest.mark.parametrize("ciphertext", ["A", "ab", "AAB", "AZGK", "AB12"])
def test_malformed_ciphertext_rejected(cipher, ciphertext):
    with pytest.raises(HillEncodingError):
        cipher.decrypt(ciphertext, FALLBACK)


def test_key_parsing():
    assert HillKey.parse("[[3, 3], [2, 5]]") == FALLBACK
    assert HillKey.parse(FALLBACK.serialize()) == FALLBACK


@pytest.mark.parametrize(
    "text",
    ["not json", "[]", "[[1, 2], [3]]", "[[1.5, 2], [3, 4]]", "[[true, 0], [0, 1]]", '{"a": 1}', "[1, 2]"],
)
def test_key_parsing_rejects_non_square_integer_matrix(text):
    with pytest.raises(InvalidKeyFormatError):
        HillKey.parse(text)


def test_key_parsing_rejects_empty():
    with pytest.raises(EmptyKeyError):
        HillKey.parse("")
