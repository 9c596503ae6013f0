"""
Use cases: account registration, sign-in and session resolution.

Input: SignUpCommand, SignInCommand, bearer token
Output: User, SessionResult
Side effects: Inserts users.
Failure cases: EmailAlreadyRegisteredError, InvalidCredentialsError,
AuthenticationRequiredError.
"""

import logging

from tradejournal.application.journal.dtos import (
    SessionResult,
    SignInCommand,
    SignUpCommand,
)
from tradejournal.domain.journal.entities import User
from tradejournal.domain.journal.errors import (
    AuthenticationRequiredError,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
)
from tradejournal.domain.journal.ports import (
    PasswordHasherPort,
    TokenServicePort,
    UserRepository,
)

logger = logging.getLogger(__name__)


class SignUpUseCase:
    """Registers a new user with a hashed password."""

    def __init__(self, user_repo: UserRepository, hasher: PasswordHasherPort) -> None:
        self._user_repo = user_repo
        self._hasher = hasher

    def execute(self, command: SignUpCommand) -> User:
        email = command.email.strip().lower()
        if self._user_repo.get_by_email(email) is not None:
            raise EmailAlreadyRegisteredError(email)

        user = User(
            email=email,
            password_hash=self._hasher.hash(command.password),
            name=command.name,
        )
        self._user_repo.add(user)
        logger.info("Registered user id=%s", user.id)
        return user


class SignInUseCase:
    """Verifies credentials and issues a bearer token."""

    def __init__(
        self,
        user_repo: UserRepository,
        hasher: PasswordHasherPort,
        tokens: TokenServicePort,
    ) -> None:
        self._user_repo = user_repo
        self._hasher = hasher
        self._tokens = tokens

    def execute(self, command: SignInCommand) -> SessionResult:
        """Run the sign-in use case.

        Args:
            command: Email and password as typed by the user.

        Returns:
            A signed token and the authenticated user.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password. The two
                cases are indistinguishable to the caller.
        """
        user = self._user_repo.get_by_email(command.email.strip().lower())
        if user is None or not self._hasher.verify(command.password, user.password_hash):
            logger.info("Rejected sign-in attempt")
            raise InvalidCredentialsError()

        token, expires_in = self._tokens.issue(user.id)
        logger.info("User id=%s signed in", user.id)
        return SessionResult(access_token=token, expires_in=expires_in, user=user)


class ResolveCurrentUserUseCase:
    """Maps a bearer token to the user it was issued for."""

    def __init__(self, user_repo: UserRepository, tokens: TokenServicePort) -> None:
        self._user_repo = user_repo
        self._tokens = tokens

    def execute(self, token: str | None) -> User:
        if not token:
            raise AuthenticationRequiredError()
        user_id = self._tokens.decode(token)
        user = self._user_repo.get_by_id(user_id)
        if user is None:
            raise AuthenticationRequiredError()
        return user
