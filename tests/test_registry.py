import json

import pytest

from cipherchain.core.config import ChainConfig
from cipherchain.core.errors import (
    AdapterError,
    CorruptKeyError,
    EmptyKeyError,
    HillEncodingError,
    IncompleteKeyError,
    InvalidKeyFormatError,
    KeyNotInvertibleError,
    UnknownAlgorithmError,
    UnknownSecurityModeError,
)
from cipherchain.core.registry import CipherRegistry, default_adapters
from cipherchain.core.types import Algorithm, MIN_ELAPSED_MS


@pytest.mark.parametrize("algorithm", ["caesar", "vigenere", "hill", "aes", "blowfish"])
@pytest.mark.parametrize("text", ["", "Hello, World!", "naïve café ✓"])
def test_roundtrip_through_registry(registry, algorithm, text):
    key = registry.generate_key(algorithm, "balanced")
    encrypted = registry.encrypt(text, algorithm, key, "balanced")
    decrypted = registry.decrypt(encrypted.text, algorithm, key, "balanced")
    assert decrypted.text == text
    assert encrypted.key == key
    assert encrypted.algorithm is Algorithm.parse(algorithm)


def test_rsa_roundtrip_through_registry(registry, rsa_key):
    encrypted = registry.encrypt("pipeline payload", "rsa", rsa_key, "lightweight")
    assert registry.decrypt(encrypted.text, "rsa", rsa_key, "lightweight").text == "pipeline payload"


def test_result_carries_performance_sample(registry):
    result = registry.encrypt("héllo", "caesar", "SHIFT-3", "high")
    assert result.sample.data_size == len("héllo".encode("utf-8"))
    assert result.sample.elapsed_ms >= MIN_ELAPSED_MS
    assert result.sample.throughput == pytest.approx(
        result.sample.data_size / (result.sample.elapsed_ms / 1000)
    )
    assert result.timestamp > 0


@pytest.mark.parametrize("algorithm", ["des", "", "rot13"])
def test_unknown_algorithm(registry, algorithm):
    with pytest.raises(UnknownAlgorithmError):
        registry.generate_key(algorithm)
    with pytest.raises(UnknownAlgorithmError):
        registry.encrypt("text", algorithm, "key")


def test_unknown_mode(registry):
    with pytest.raises(UnknownSecurityModeError):
        registry.generate_key("caesar", "paranoid")


def test_identifiers_are_case_insensitive(registry):
    result = registry.encrypt("abc", "CAESAR", "SHIFT-1", "Lightweight")
    assert result.text == "bcd"


@pytest.mark.parametrize(
    "key, error",
    [
        ("", EmptyKeyError),
        ("not json", CorruptKeyError),
        ("[1, 2", CorruptKeyError),
        ('"just a string"', CorruptKeyError),
        (json.dumps({"publicKey": "pem"}), IncompleteKeyError),
        (json.dumps({"privateKey": "pem"}), IncompleteKeyError),
        (json.dumps({"publicKey": "", "privateKey": "pem"}), IncompleteKeyError),
    ],
)
def test_rsa_key_validation(registry, key, error):
    with pytest.raises(error):
        registry.encrypt("text", "rsa", key, "lightweight")
    with pytest.raises(error):
        registry.decrypt("text", "rsa", key, "lightweight")


@pytest.mark.parametrize("key", ["7", "SHIFT-", "SHIFT-x", "ROT-13"])
def test_caesar_key_validation(registry, key):
    with pytest.raises(InvalidKeyFormatError):
        registry.encrypt("text", "caesar", key)


@pytest.mark.parametrize("key", ["[[1, 2], [3]]", "[[1, 2], [3, 'a']]", "{}"])
def test_hill_key_validation(registry, key):
    with pytest.raises(InvalidKeyFormatError):
        registry.decrypt("AAAA", "hill", key)


def test_hill_non_invertible_key_is_not_wrapped(registry):
    with pytest.raises(KeyNotInvertibleError):
        registry.decrypt("AAGK", "hill", "[[2, 4], [6, 8]]")


def test_vigenere_empty_key(registry):
    with pytest.raises(EmptyKeyError):
        registry.encrypt("text", "vigenere", "")


def test_key_errors_are_value_errors(registry):
    with pytest.raises(ValueError):
        registry.encrypt("text", "aes", "not-hex")


def test_adapter_failures_are_wrapped(registry):
    key = registry.generate_key("aes", "lightweight")
    with pytest.raises(AdapterError) as exc_info:
        registry.decrypt("garbage", "aes", key, "lightweight")
    assert exc_info.value.algorithm == "aes"
    assert exc_info.value.operation == "decrypt"
    assert isinstance(exc_info.value.cause, ValueError)
    assert "AES decrypt failed" in str(exc_info.value)


def test_hill_encoding_failure_is_wrapped(registry):
    with pytest.raises(AdapterError) as exc_info:
        registry.encrypt("emoji \U0001F600", "hill", "[[3, 3], [2, 5]]")
    assert isinstance(exc_info.value.cause, HillEncodingError)


def test_undersized_rsa_key_raises_instead_of_empty_ciphertext(registry, undersized_rsa_key):
    with pytest.raises(InvalidKeyFormatError):
        registry.encrypt("secret message", "rsa", undersized_rsa_key, "lightweight")


def test_wrong_rsa_key_pair_is_wrapped(registry, rsa_key):
    other = registry.generate_key("rsa", "lightweight")
    ciphertext = registry.encrypt("secret", "rsa", rsa_key, "lightweight").text
    with pytest.raises(AdapterError) as exc_info:
        registry.decrypt(ciphertext, "rsa", other, "lightweight")
    assert exc_info.value.algorithm == "rsa"


def test_registry_requires_every_algorithm():
    adapters = default_adapters(ChainConfig())
    del adapters[Algorithm.HILL]
    with pytest.raises(ValueError, match="hill"):
        CipherRegistry(adapters=adapters, config=ChainConfig())


def test_registry_rejects_unknown_adapter_name():
    adapters = {a.value: adapter for a, adapter in default_adapters(ChainConfig()).items()}
    adapters["des"] = adapters["aes"]
    with pytest.raises(UnknownAlgorithmError):
        CipherRegistry(adapters=adapters, config=ChainConfig())


def test_parse_key_exposes_typed_key(registry):
    key = registry.parse_key("caesar", "SHIFT-9")
    assert key.shift == 9
