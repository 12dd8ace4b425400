"""
Tests for bcrypt password hashing.
"""

import threading
from unittest.mock import patch

import pytest

from keeper.domains.user.errors import MalformedCredentialRecord
from keeper.domains.user.security import BCRYPT_MAX_BYTES, PasswordHasher


class TestHash:
    """Tests for PasswordHasher.hash."""

    def test_hash_is_self_describing_bcrypt_digest(self, hasher):
        """Test the digest carries the algorithm version and cost."""
        digest = hasher.hash("correct horse")
        assert digest.startswith("$2b$04$")
        assert len(digest) == 60

    def test_hash_never_contains_plaintext(self, hasher):
        digest = hasher.hash("correct horse")
        assert "correct horse" not in digest

    def test_same_password_gets_distinct_salts(self, hasher):
        """Test two hashes of one password differ but both verify."""
        first = hasher.hash("correct horse")
        second = hasher.hash("correct horse")
        assert first != second
        assert hasher.verify("correct horse", first)
        assert hasher.verify("correct horse", second)

    def test_empty_password_rejected(self, hasher):
        with pytest.raises(ValueError):
            hasher.hash("")

    def test_unicode_password(self, hasher):
        digest = hasher.hash("pässwörd-密码")
        assert hasher.verify("pässwörd-密码", digest)
        assert not hasher.verify("passwort-密码", digest)


class TestVerify:
    """Tests for PasswordHasher.verify."""

    def test_wrong_password(self, hasher):
        digest = hasher.hash("correct horse")
        assert hasher.verify("battery staple", digest) is False

    def test_empty_candidate_is_wrong_not_an_error(self, hasher):
        digest = hasher.hash("correct horse")
        assert hasher.verify("", digest) is False

    def test_digest_from_other_cost_still_verifies(self, hasher):
        """Test verification reads the cost from the digest, not the hasher."""
        digest = PasswordHasher(rounds=5).hash("correct horse")
        assert hasher.verify("correct horse", digest)

    def test_bytes_beyond_limit_are_ignored(self, hasher):
        """Test bcrypt only considers the first 72 bytes."""
        prefix = "a" * BCRYPT_MAX_BYTES
        digest = hasher.hash(prefix + "tail-one")
        assert hasher.verify(prefix + "tail-two", digest)

    @pytest.mark.parametrize(
        "digest",
        [
            "",
            None,
            "plaintext-password",
            "$2b$04$tooshort",
            "$argon2id$v=19$m=65536,t=3,p=4$c2FsdA$aGFzaA",
        ],
    )
    def test_malformed_digest_raises(self, hasher, digest):
        with pytest.raises(MalformedCredentialRecord):
            hasher.verify("correct horse", digest)


class TestNeedsRehash:
    """Tests for PasswordHasher.needs_rehash."""

    def test_lower_cost_needs_rehash(self):
        digest = PasswordHasher(rounds=4).hash("correct horse")
        assert PasswordHasher(rounds=5).needs_rehash(digest)

    def test_same_cost_does_not(self, hasher):
        assert not hasher.needs_rehash(hasher.hash("correct horse"))

    def test_malformed_digest_raises(self, hasher):
        with pytest.raises(MalformedCredentialRecord):
            hasher.needs_rehash("not-a-digest")


class TestAsyncHelpers:
    """Tests for the thread-offloaded variants."""

    @pytest.mark.asyncio
    async def test_hash_and_verify_async(self, hasher):
        digest = await hasher.hash_async("correct horse")
        assert await hasher.verify_async("correct horse", digest)
        assert not await hasher.verify_async("battery staple", digest)

    @pytest.mark.asyncio
    async def test_burn_verification_time_uses_dummy_digest(self, hasher):
        """Test the dummy digest is a real bcrypt digest and is reused."""
        await hasher.burn_verification_time("anything")
        dummy = hasher.dummy_digest
        assert dummy.startswith("$2b$04$")
        assert hasher.dummy_digest is dummy
        assert not hasher.verify("anything", dummy)

    @pytest.mark.asyncio
    async def test_first_burn_hashes_off_the_event_loop(self, hasher):
        """Test building the dummy digest happens in the worker thread."""
        hashing_threads = []
        real_hash = hasher.hash

        def recording_hash(password):
            hashing_threads.append(threading.get_ident())
            return real_hash(password)

        with patch.object(hasher, "hash", side_effect=recording_hash):
            await hasher.burn_verification_time("anything")

        assert len(hashing_threads) == 1
        assert threading.get_ident() not in hashing_threads
