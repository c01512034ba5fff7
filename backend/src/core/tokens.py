"""
Signing, verification and at-rest encryption of CLI tokens.

A CLI token is an HS256 JWT carrying {"userId", "email", "tokenId"}. The
database keeps only a Fernet-encrypted copy, which is decrypted and compared to
the presented token on every request.
"""
import base64
import hashlib
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any, TypedDict

import jwt
from cryptography.fernet import Fernet, InvalidToken

JWT_ALGORITHM = "HS256"
BEARER_PREFIX = "Bearer "


class InvalidTokenError(Exception):
    """Raised when a token's signature, expiry or claims do not verify."""


class TokenPayload(TypedDict):
    """Claims embedded in a CLI token."""

    userId: int
    email: str
    tokenId: str
    iat: int
    exp: int


def generate_token_id() -> str:
    """Return a random identifier distinguishing one issued token from another."""
    return secrets.token_hex(16)


def generate_token(
    user_id: int,
    email: str,
    token_id: str,
    secret: str,
    expires_in: timedelta,
) -> str:
    """Sign a CLI token for the given user."""
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "userId": user_id,
        "email": email,
        "tokenId": token_id,
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def verify_token(token: str, secret: str) -> TokenPayload:
    """
    Verify signature and expiry and return the token's claims.

    Raises:
        InvalidTokenError: If the token is malformed, expired, signed with
            another key, or missing required claims.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
    except jwt.PyJWTError as e:
        raise InvalidTokenError("Invalid or expired token") from e

    if not isinstance(payload.get("userId"), int) or not isinstance(
        payload.get("tokenId"), str,
    ):
        raise InvalidTokenError("Invalid or expired token")
    return payload  # type: ignore[return-value]


def _fernet(encryption_key: str) -> Fernet:
    # Any secret string works: derive the 32-byte key Fernet needs from it
    digest = hashlib.sha256(encryption_key.encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def hash_token(token: str, encryption_key: str) -> str:
    """Encrypt a token for storage."""
    return _fernet(encryption_key).encrypt(token.encode("utf-8")).decode("utf-8")


def verify_hashed_token(token: str, hashed_token: str, encryption_key: str) -> bool:
    """Return True if `hashed_token` decrypts to exactly `token`."""
    try:
        decrypted = _fernet(encryption_key).decrypt(hashed_token.encode("utf-8"))
    except InvalidToken:
        return False
    return secrets.compare_digest(decrypted, token.encode("utf-8"))


def extract_token_from_header(authorization: str | None) -> str | None:
    """Return the credential from an `Authorization: Bearer <token>` header."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    return authorization[len(BEARER_PREFIX):] or None
