"""Tests for salted hashing helpers and the werkzeug verifier."""

from __future__ import annotations

import pytest

from ticketing.core.security import (
    WerkzeugCredentialVerifier,
    fingerprint,
    hash_secret,
    verify_secret,
)


class TestHashSecret:
    def test_same_secret_hashes_differently(self):
        assert hash_secret("correct horse") != hash_secret("correct horse")

    def test_uses_configured_method(self, app):
        assert hash_secret("pw").startswith("pbkdf2:sha256:1000$")

    def test_explicit_method_wins(self):
        assert hash_secret("pw", method="pbkdf2:sha256:2000").startswith("pbkdf2:sha256:2000$")

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            hash_secret("")


class TestVerifySecret:
    def test_match_and_mismatch(self):
        stored = hash_secret("s3cret-value")
        assert verify_secret("s3cret-value", stored) is True
        assert verify_secret("s3cret-valuE", stored) is False

    @pytest.mark.parametrize("stored", [None, "", "not-a-hash", "unknown$salt$digest"])
    def test_malformed_hash_is_a_mismatch(self, stored):
        assert verify_secret("anything", stored) is False

    def test_empty_candidate_is_a_mismatch(self):
        assert verify_secret("", hash_secret("x")) is False


def test_fingerprint_is_stable_sha256_hex():
    fp = fingerprint("abc")
    assert fp == fingerprint("abc")
    assert fp != fingerprint("abd")
    assert len(fp) == 64


def test_verifier_round_trip():
    verifier = WerkzeugCredentialVerifier()
    stored = verifier.hash("raw-token")
    assert verifier.verify("raw-token", stored)
    assert not verifier.verify("other-token", stored)
