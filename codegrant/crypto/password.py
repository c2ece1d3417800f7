"""Client secret generation, hashing and verification using Argon2id."""

import secrets

import argon2

CLIENT_SECRET_LENGTH = 32

_hasher = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,
    parallelism=1,
)


def generate_client_secret() -> str:
    """Random URL-safe secret of CLIENT_SECRET_LENGTH characters."""
    return secrets.token_urlsafe(CLIENT_SECRET_LENGTH)[:CLIENT_SECRET_LENGTH]


def hash_secret(secret: str) -> str:
    """Hash a client secret using Argon2id."""
    return _hasher.hash(secret)


def verify_secret(plain: str, hashed: str) -> bool:
    """Verify a plaintext secret against its Argon2 hash."""
    try:
        return _hasher.verify(hashed, plain)
    except argon2.exceptions.VerifyMismatchError:
        return False
    except argon2.exceptions.InvalidHashError:
        return False
