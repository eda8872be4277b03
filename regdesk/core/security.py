# regdesk/core/security.py
"""
Security primitives shared by the persistence layer and the auth endpoints.

- Field encryption for personally identifiable data (Fernet, non-deterministic)
- Keyed lookup hashes so encrypted values can still be matched exactly
- Password hashing (bcrypt)
- Access token issuing (HS256 JWT)
"""

import base64
import hashlib
import hmac
import json
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

import bcrypt
from cryptography.fernet import Fernet, InvalidToken
from jose import jwt

from regdesk.core.config import settings

JWT_ALGORITHM = "HS256"


# =============================================================================
# FIELD ENCRYPTION
# =============================================================================

@lru_cache()
def _fernet() -> Fernet:
    # Fernet wants 32 url-safe base64 bytes; derive them from the configured secret.
    digest = hashlib.sha256(settings.PII_ENCRYPTION_SECRET.encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def encrypt_value(value: str) -> str:
    return _fernet().encrypt(value.encode("utf-8")).decode("utf-8")


def decrypt_value(token: str) -> str:
    try:
        return _fernet().decrypt(token.encode("utf-8")).decode("utf-8")
    except InvalidToken as exc:
        raise ValueError("Stored value could not be decrypted with the configured key") from exc


# =============================================================================
# LOOKUP HASHES
# =============================================================================

def normalize(value: Optional[str]) -> str:
    """Lowercase and trim, collapsing inner whitespace. None becomes ''."""
    if value is None:
        return ""
    return " ".join(value.strip().lower().split())


def lookup_hash(value: str) -> str:
    payload = value.encode("utf-8")
    secret = settings.LOOKUP_HASH_SECRET.encode("utf-8")
    return hmac.new(secret, payload, hashlib.sha256).hexdigest()


def email_lookup_hash(email: Optional[str]) -> Optional[str]:
    normalized = normalize(email)
    if not normalized:
        return None
    return lookup_hash(f"email:{normalized}")


def identity_lookup_hash(
    first_name: str, last_name: str, company_name: Optional[str] = None
) -> str:
    """Hash of the normalized (first, last, company) triple used for duplicate-person checks."""
    parts = [normalize(first_name), normalize(last_name), normalize(company_name)]
    return lookup_hash("identity:" + "|".join(parts))


def name_lookup_hash(first_name: str, last_name: str) -> str:
    """Hash of the normalized (first, last) pair. Staff channels match on the name alone."""
    return lookup_hash(f"name:{normalize(first_name)}|{normalize(last_name)}")


def request_fingerprint(payload: Dict[str, Any], actor_id: Optional[str]) -> str:
    """
    Binds an idempotency key to the caller and the exact request body, so a
    reused key can only replay the request it was first sent with.
    """
    body = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return lookup_hash(f"request:{actor_id or ''}:{body}")


# =============================================================================
# PASSWORDS & TOKENS
# =============================================================================

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": subject, "exp": int(expire.timestamp())}
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=JWT_ALGORITHM)
