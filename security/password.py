import bcrypt
from flask import current_app

def _rounds() -> int:
    # BCRYPT_ROUNDS is lowered in tests
    return int(current_app.config.get("BCRYPT_ROUNDS", 12))

def password_problem(plain_password) -> str:
    """Return a message describing why the password is unacceptable, or an empty string."""
    if not isinstance(plain_password, str) or not plain_password:
        return "Password is required"
    min_len = int(current_app.config.get("PASSWORD_MIN_LENGTH", 8))
    if len(plain_password) < min_len:
        return f"Password must be at least {min_len} characters"
    # bcrypt only looks at the first 72 bytes
    if len(plain_password.encode("utf-8")) > 72:
        return "Password must be at most 72 bytes"
    return ""

def hash_password(plain_password: str) -> str:
    if not isinstance(plain_password, str) or len(plain_password) == 0:
        raise ValueError("Password must be a non-empty string")

    salt = bcrypt.gensalt(rounds=_rounds())
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), salt)
    return hashed.decode("utf-8")

def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            password_hash.encode("utf-8")
        )
    except ValueError:
        # malformed stored hash
        return False
