"""
Password hashing helpers (bcrypt).
"""

import bcrypt

from caffio.core.config import get_settings


def hash_password(password: str) -> str:
    rounds = get_settings().bcrypt_rounds
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False
