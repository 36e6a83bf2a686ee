"""Password hashing.

Stored values look like ``<salt>:<hash>``: a 128-bit random salt and a
64-byte scrypt key, both hex encoded. The salt is fed to scrypt as its
hex text, so values written by earlier deployments keep verifying.
"""

import hashlib
import hmac
import secrets

SALT_BYTES = 16
KEY_LENGTH = 64

# scrypt cost parameters (N, r, p)
SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1


def _derive(password: str, salt: str) -> bytes:
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=KEY_LENGTH,
    )


def hash_password(password: str) -> str:
    """Hash a password with a fresh random salt."""
    salt = secrets.token_hex(SALT_BYTES)
    return f"{salt}:{_derive(password, salt).hex()}"


def verify_password(password: str, stored: str) -> bool:
    """Check a password against a stored ``salt:hash`` value.

    Malformed stored values never match.
    """
    salt, sep, stored_hash = (stored or "").partition(":")
    if not sep or not salt or not stored_hash:
        return False

    try:
        expected = bytes.fromhex(stored_hash)
    except ValueError:
        return False

    return hmac.compare_digest(_derive(password, salt), expected)
