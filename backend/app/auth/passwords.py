"""bcrypt password hashing.

The cost factor comes from ``settings.bcrypt_rounds``. Hashes made with a
different cost still verify; ``needs_rehash`` tells the login flow when to
upgrade them.
"""

import bcrypt

from app.config import settings


def hash_password(password: str, rounds: int | None = None) -> str:
    """Return a salted bcrypt hash of ``password`` at ``rounds`` (default: configured cost)."""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check ``plain_password`` against a stored hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def hash_cost(hashed_password: str) -> int | None:
    """Cost factor embedded in a ``$2b$NN$...`` hash, or ``None`` if unreadable."""
    parts = hashed_password.split("$")
    if len(parts) < 4 or not parts[2].isdigit():
        return None
    return int(parts[2])


def needs_rehash(hashed_password: str) -> bool:
    return hash_cost(hashed_password) != settings.bcrypt_rounds
