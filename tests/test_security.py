"""
Tests for Webhook Signature Verification
"""

import hashlib
import hmac

import pytest

from repo_guardian.webhook.security import compute_signature, verify_signature

SECRET = "test_secret"
BODY = b'{"action": "created", "repository": {"full_name": "org/repo"}}'


def _header(body: bytes, secret: str = SECRET) -> str:
    return "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


class TestVerifySignature:
    """Test suite for verify_signature."""

    def test_valid_signature_is_accepted(self):
        assert verify_signature(BODY, _header(BODY), SECRET) is True

    def test_compute_signature_matches_hmac(self):
        expected = hmac.new(SECRET.encode(), BODY, hashlib.sha256).hexdigest()
        assert compute_signature(BODY, SECRET) == expected
        assert len(expected) == 64

    @pytest.mark.parametrize("index", [0, len(BODY) // 2, len(BODY) - 1])
    def test_body_mutation_is_rejected(self, index):
        mutated = bytearray(BODY)
        mutated[index] ^= 0x01

        assert verify_signature(bytes(mutated), _header(BODY), SECRET) is False

    @pytest.mark.parametrize("index", [0, 6, 7, 40, -1])
    def test_header_mutation_is_rejected(self, index):
        header = list(_header(BODY))
        header[index] = "0" if header[index] != "0" else "1"

        assert verify_signature(BODY, "".join(header), SECRET) is False

    def test_missing_header_is_rejected(self):
        assert verify_signature(BODY, None, SECRET) is False

    def test_empty_digest_is_rejected(self):
        assert verify_signature(BODY, "sha256=", SECRET) is False

    def test_header_without_separator_is_rejected(self):
        digest = compute_signature(BODY, SECRET)

        assert verify_signature(BODY, digest, SECRET) is False

    def test_sha1_prefix_is_rejected(self):
        digest = compute_signature(BODY, SECRET)

        assert verify_signature(BODY, f"sha1={digest}", SECRET) is False

    def test_wrong_secret_is_rejected(self):
        assert verify_signature(BODY, _header(BODY, "other"), SECRET) is False

    def test_non_ascii_header_does_not_crash(self):
        assert verify_signature(BODY, "sha256=éé", SECRET) is False
