"""Password hashing for stored API users."""

import hashlib
import hmac


def hash_password(secret: str, password: str) -> str:
    """HMAC-SHA256 of the password keyed with the service secret, hex encoded."""
    return hmac.new(secret.encode(), password.encode(), hashlib.sha256).hexdigest()


def verify_password(secret: str, password: str, password_hash: str) -> bool:
    """Check a password against its stored hash in constant time."""
    return hmac.compare_digest(hash_password(secret, password), password_hash)
