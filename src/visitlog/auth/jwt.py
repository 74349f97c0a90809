"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
The token payload is exactly {"email": ...}, signed HS256 with the
service's secret. There is no exp/aud/iss claim, so a token stays
valid until the secret is rotated.
"""

import jwt

from visitlog.config import settings


class TokenError(Exception):
    """Raised when token creation/verification fails."""


def create_token(email: str) -> str:
    """Create a signed bearer token carrying only the email claim."""
    if not email:
        raise TokenError("Token email must not be empty")
    try:
        return jwt.encode(
            {"email": email}, settings.jwt_secret, algorithm=settings.jwt_algorithm
        )
    except (jwt.PyJWTError, TypeError, ValueError) as e:
        raise TokenError(f"Couldn't create token: {e}")


def verify_token(token: str) -> str:
    """Verify a token and return its email claim.

    Raises TokenError if the signature doesn't verify or the email
    claim is missing or not a string.
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")

    email = payload.get("email")
    if not isinstance(email, str):
        raise TokenError("Token has no email claim")
    return email
