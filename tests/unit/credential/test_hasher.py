"""Tests for password hashing."""

from coterie.core.modules.credential.hasher import hash_password, needs_rehash, verify_dummy, verify_password


class TestHashPassword:
    """Tests for argon2id hashing."""

    def test_hash_is_argon2id_phc_string(self):
        """Test that hashes carry the algorithm and parameters."""
        assert hash_password("correct horse").startswith("$argon2id$")

    def test_same_password_gets_different_salts(self):
        """Test that two hashes of one password differ."""
        assert hash_password("correct horse") != hash_password("correct horse")


class TestVerifyPassword:
    """Tests for password verification."""

    def test_correct_password_verifies(self):
        password_hash = hash_password("correct horse")
        assert verify_password("correct horse", password_hash) is True

    def test_wrong_password_fails(self):
        password_hash = hash_password("correct horse")
        assert verify_password("battery staple", password_hash) is False

    def test_malformed_hash_fails_closed(self):
        """Test that an unparseable stored hash is a failure, not an error."""
        assert verify_password("correct horse", "not-a-hash") is False
        assert verify_password("correct horse", "") is False

    def test_dummy_verification_does_not_raise(self):
        verify_dummy("anything")


class TestNeedsRehash:
    def test_fresh_hash_does_not_need_rehash(self):
        assert needs_rehash(hash_password("correct horse")) is False
