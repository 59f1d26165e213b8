"""Salted one-way password hashing backed by bcrypt."""

from bcrypt import checkpw, gensalt, hashpw

from docmanager.errors import ValidationError

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    encoded = password.encode()
    if len(encoded) > MAX_PASSWORD_BYTES:
        msg = f"Password must be at most {MAX_PASSWORD_BYTES} bytes long"
        raise ValidationError(msg)
    return encoded


def hash_password(password: str) -> str:
    """Hash a cleartext password with a fresh salt.

    :param password: The cleartext password
    :return: The bcrypt hash, salt included
    """
    return hashpw(_encode(password), gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Check a cleartext password against a stored bcrypt hash.

    :param password: The cleartext password
    :param password_hash: Hash produced by :func:`hash_password`
    :return: True if the password matches
    """
    if not password_hash:
        return False
    try:
        return checkpw(_encode(password), password_hash.encode())
    except ValidationError:
        return False
