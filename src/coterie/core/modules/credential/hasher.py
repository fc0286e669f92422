"""Password hashing with argon2id.

Hashes are self-describing PHC strings (algorithm, parameters, salt, digest),
so parameters can be raised later without invalidating stored hashes.
"""

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

_hasher = PasswordHasher(type=Type.ID)

# Verified against when no member matches the login identifier.
_DUMMY_HASH = _hasher.hash("coterie-timing-equalizer")


def hash_password(password: str) -> str:
    """Hash a password with a fresh random salt."""
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash.

    Fails closed: a mismatch, an unparseable hash or any other verification
    error yields False.
    """
    try:
        return _hasher.verify(password_hash, password)
    except VerifyMismatchError:
        return False
    except (VerificationError, InvalidHashError):
        return False


def verify_dummy(password: str) -> None:
    """Spend the same work as a real verification for an unknown account."""
    verify_password(password, _DUMMY_HASH)


def needs_rehash(password_hash: str) -> bool:
    try:
        return _hasher.check_needs_rehash(password_hash)
    except (InvalidHashError, ValueError):
        return False
