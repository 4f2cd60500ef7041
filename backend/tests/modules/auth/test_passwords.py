"""Tests for password hashing."""

from modules.auth.passwords import hash_password, verify_password


class TestPasswords:
    def test_hash_verifies(self):
        password_hash = hash_password("s3cret-pass")
        assert password_hash.startswith("$2")
        assert verify_password("s3cret-pass", password_hash)

    def test_wrong_password(self):
        password_hash = hash_password("s3cret-pass")
        assert not verify_password("s3cret-pasS", password_hash)

    def test_hashes_are_salted(self):
        """The same password should hash differently each time."""
        assert hash_password("same") != hash_password("same")

    def test_long_passwords_are_not_truncated(self):
        """Passwords differing only after 72 bytes must not collide."""
        base = "a" * 80
        password_hash = hash_password(base + "1")
        assert verify_password(base + "1", password_hash)
        assert not verify_password(base + "2", password_hash)

    def test_non_bcrypt_hash(self):
        """A stored value that is not a bcrypt hash never verifies."""
        assert not verify_password("anything", "plaintext")
