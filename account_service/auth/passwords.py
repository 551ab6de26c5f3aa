"""Password hashing with bcrypt."""
import bcrypt


def hash_password(password: str, work_factor: int = 12) -> str:
    """Generate a salted bcrypt hash using the given cost factor."""
    return bcrypt.hashpw(
        password.encode("utf-8"),
        bcrypt.gensalt(rounds=work_factor)
    ).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check if provided password matches the stored hash."""
    try:
        return bcrypt.checkpw(
            password.encode("utf-8"),
            password_hash.encode("utf-8")
        )
    except (ValueError, AttributeError):
        # Malformed hash, or a password past bcrypt's 72-byte limit.
        return False
