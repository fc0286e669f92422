import hashlib
import secrets
from datetime import UTC, datetime

TOKEN_BYTES = 32


def now() -> datetime:
    return datetime.now(UTC)


def generate_token() -> str:
    """Random bearer secret, 256 bits hex encoded."""
    return secrets.token_bytes(TOKEN_BYTES).hex()


def hash_token(token: str) -> str:
    """One-way hash used to store and look up bearer secrets."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
