"""
Access Token Codec

Signs and verifies HS256 JSON Web Tokens with PyJWT. Tokens are never
stored server-side; validity is signature + expiry only.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from app.core.errors import AuthError

DEFAULT_ALGORITHM = "HS256"


class TokenCodec:
    """
    Attributes:
        secret: HMAC signing secret
        algorithm: JWT algorithm (HS256)
    """

    def __init__(self, secret: str, algorithm: str = DEFAULT_ALGORITHM):
        if not secret:
            raise ValueError("A JWT secret must be provided")
        self.secret = secret
        self.algorithm = algorithm

    def sign(self, payload: dict[str, Any], expires_in: int) -> str:
        """
        Sign a payload.

        Args:
            payload: Claims to embed
            expires_in: Lifetime in seconds

        Returns:
            Encoded token string
        """
        now = datetime.now(timezone.utc)
        claims = {
            **payload,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> dict[str, Any]:
        """
        Verify signature and expiry.

        Raises:
            AuthError: If the token is expired or invalid
        """
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise AuthError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthError("Invalid token") from exc
