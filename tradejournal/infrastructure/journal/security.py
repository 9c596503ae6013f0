"""
Adapters: password hashing and session tokens.

Implements PasswordHasherPort with bcrypt and TokenServicePort with
signed JWTs (PyJWT). Tokens carry the user id in ``sub``.
"""

import logging
from datetime import timedelta

import bcrypt
import jwt

from tradejournal.domain.journal.entities import utcnow
from tradejournal.domain.journal.errors import AuthenticationRequiredError
from tradejournal.domain.journal.ports import PasswordHasherPort, TokenServicePort

logger = logging.getLogger(__name__)


class BcryptPasswordHasher(PasswordHasherPort):
    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            # Malformed stored hash.
            return False


class JwtTokenService(TokenServicePort):
    """Issues and validates HMAC-signed access tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 60) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    def issue(self, user_id: str) -> tuple[str, int]:
        now = utcnow()
        expires_in = self._expire_minutes * 60
        payload = {
            "sub": user_id,
            "iat": now,
            "exp": now + timedelta(seconds=expires_in),
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return token, expires_in

    def decode(self, token: str) -> str:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationRequiredError("Session expired") from None
        except jwt.InvalidTokenError:
            logger.warning("Rejected invalid session token")
            raise AuthenticationRequiredError() from None

        user_id = payload.get("sub")
        if not user_id:
            raise AuthenticationRequiredError()
        return user_id
