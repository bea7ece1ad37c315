import pytest
from argon2.exceptions import HashingError

from aedura.passwords import CredentialHasher


def test_hash_is_salted_and_verifies(hasher):
    first = hasher.hash("CorrectHorseBattery1")
    second = hasher.hash("CorrectHorseBattery1")
    assert first != "CorrectHorseBattery1"
    assert first != second
    assert hasher.verify("CorrectHorseBattery1", first)
    assert hasher.verify("CorrectHorseBattery1", second)


def test_verify_mismatch_returns_false(hasher):
    digest = hasher.hash("CorrectHorseBattery1")
    assert hasher.verify("correcthorsebattery1", digest) is False


def test_verify_malformed_digest_returns_false(hasher):
    assert hasher.verify("whatever", "not-an-argon2-hash") is False
    assert hasher.verify("whatever", "") is False
    assert hasher.verify("", hasher.hash("whatever")) is False


def test_hash_rejects_empty_password(hasher):
    with pytest.raises(ValueError):
        hasher.hash("")


def test_cost_factors_are_encoded_in_digest():
    digest = CredentialHasher(time_cost=2, memory_cost=2048, parallelism=1).hash("pw-123456")
    assert digest.startswith("$argon2id$")
    assert "m=2048,t=2,p=1" in digest


class _FailingBackend:
    def hash(self, password):
        raise HashingError("out of memory")


def test_hashing_failure_propagates(hasher):
    hasher._ph = _FailingBackend()
    with pytest.raises(HashingError):
        hasher.hash("CorrectHorseBattery1")


def test_decoy_verification_never_succeeds(hasher):
    assert hasher.verify_decoy("decoy-password-for-timing") is False
    assert hasher.verify_decoy("anything") is False
