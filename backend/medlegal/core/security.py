"""
Password hashing and JWT helpers

Stored hashes look like pbkdf2_sha256$<iterations>$<salt>$<base64 digest>.
The iteration count is read back from each hash, so PBKDF2_ITERATIONS can be
raised without invalidating existing passwords; only new hashes use the new value.
"""
import base64
import hashlib
import hmac
import secrets
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import jwt

from medlegal.core.config import settings

PBKDF2_ALGORITHM = "sha256"
PBKDF2_ITERATIONS = 260000


def get_password_hash(password: str) -> str:
    """Hash a password as pbkdf2_sha256$<iterations>$<salt>$<digest>"""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        PBKDF2_ALGORITHM, password.encode("utf-8"), salt.encode("utf-8"), PBKDF2_ITERATIONS
    )
    encoded = base64.b64encode(digest).decode("ascii")
    return f"pbkdf2_{PBKDF2_ALGORITHM}${PBKDF2_ITERATIONS}${salt}${encoded}"


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        scheme, iterations, salt, encoded = password_hash.split("$", 3)
    except (AttributeError, ValueError):
        return False
    if scheme != f"pbkdf2_{PBKDF2_ALGORITHM}":
        return False

    digest = hashlib.pbkdf2_hmac(
        PBKDF2_ALGORITHM, plain_password.encode("utf-8"), salt.encode("utf-8"), int(iterations)
    )
    return hmac.compare_digest(base64.b64encode(digest).decode("ascii"), encoded)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    to_encode = dict(data)
    expire = datetime.utcnow() + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Raises jwt.PyJWTError on a bad or expired token."""
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
