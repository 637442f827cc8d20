"""Unit tests for password hashing and refresh-secret helpers."""

from app.core.security import (
    generate_refresh_secret,
    hash_password,
    hash_token,
    looks_like_token_hash,
    verify_password,
)


class TestPasswordHashing:
    def test_hash_is_not_plaintext_and_verifies(self):
        hashed = hash_password("pikachu123")

        assert hashed != "pikachu123"
        assert hashed.startswith("$2")
        assert verify_password("pikachu123", hashed)

    def test_wrong_password_rejected(self):
        hashed = hash_password("pikachu123")
        assert not verify_password("raichu123", hashed)

    def test_same_password_hashes_differently(self):
        """bcrypt salts every hash."""
        assert hash_password("pikachu123") != hash_password("pikachu123")

    def test_garbage_stored_hash_is_a_mismatch(self):
        assert not verify_password("pikachu123", "not-a-bcrypt-hash")


class TestRefreshSecrets:
    def test_secrets_are_unique(self):
        secrets = {generate_refresh_secret() for _ in range(50)}
        assert len(secrets) == 50

    def test_secret_is_never_mistaken_for_a_hash(self):
        for _ in range(50):
            assert not looks_like_token_hash(generate_refresh_secret())

    def test_hash_is_deterministic_sha256_hex(self):
        digest = hash_token("abc")

        assert digest == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        assert hash_token("abc") == digest
        assert looks_like_token_hash(digest)

    def test_looks_like_token_hash(self):
        assert looks_like_token_hash("A" * 64)
        assert not looks_like_token_hash("a" * 63)
        assert not looks_like_token_hash("g" * 64)
        assert not looks_like_token_hash("")
