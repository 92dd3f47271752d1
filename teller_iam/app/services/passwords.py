from typing import Optional

import bcrypt

from config import ApplicationConfig

_dummy_hash: Optional[bytes] = None


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=ApplicationConfig.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time bcrypt comparison; a malformed stored hash never matches"""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def burn_password_check(password: str) -> None:
    """Spend one bcrypt comparison so an unknown email costs as much as a wrong password"""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = bcrypt.hashpw(
            b"dummy_password", bcrypt.gensalt(rounds=ApplicationConfig.BCRYPT_ROUNDS)
        )
    bcrypt.checkpw(password.encode("utf-8"), _dummy_hash)
