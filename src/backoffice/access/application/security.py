"""Security utilities for invitations and passwords.

Provides secure token generation and bcrypt password hashing.
"""

import secrets

import bcrypt

MIN_TOKEN_BYTES = 40


def generate_invitation_token(num_bytes: int = 48) -> str:
    """Generate a URL-safe single-use invitation token.

    Args:
        num_bytes: Bytes of randomness, at least 40

    Returns:
        A URL-safe base64 string (64 characters for the default 48 bytes)

    Raises:
        ValueError: If num_bytes is below the minimum entropy
    """
    if num_bytes < MIN_TOKEN_BYTES:
        raise ValueError(f"Invitation tokens need at least {MIN_TOKEN_BYTES} bytes")
    return secrets.token_urlsafe(num_bytes)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Uses bcrypt with automatic salt generation. The work factor is
    determined by bcrypt's gensalt().

    Raises:
        ValueError: If the password is empty or longer than bcrypt accepts
    """
    encoded = password.encode()
    if not encoded:
        raise ValueError("Password must not be empty")
    if len(encoded) > 72:
        raise ValueError("Password must be at most 72 bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash using constant-time comparison.

    Returns:
        True if the password matches, False otherwise (including malformed
        hashes)
    """
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        return False
