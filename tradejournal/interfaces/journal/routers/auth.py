"""
Auth routes: registration and password sign-in.

All routes delegate to use cases. No business logic here.
"""

from fastapi import APIRouter, Depends, Request, status

from tradejournal.application.journal.auth import SignInUseCase, SignUpUseCase
from tradejournal.application.journal.dtos import SignInCommand, SignUpCommand
from tradejournal.core.config import settings
from tradejournal.interfaces.journal.dependencies import (
    get_sign_in_use_case,
    get_sign_up_use_case,
)
from tradejournal.interfaces.journal.schemas import (
    SessionResponse,
    SignInRequest,
    SignUpRequest,
    SignUpResponse,
    UserSummary,
)
from tradejournal.shared.security.rate_limiting import limiter

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/signup",
    response_model=SignUpResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account with email and password.",
)
@limiter.limit(settings.rate_limit_strict)
def sign_up(
    request: Request,
    payload: SignUpRequest,
    use_case: SignUpUseCase = Depends(get_sign_up_use_case),
) -> SignUpResponse:
    user = use_case.execute(
        SignUpCommand(email=payload.email, password=payload.password, name=payload.name)
    )
    return SignUpResponse(message="User created successfully", user=UserSummary.from_entity(user))


@router.post(
    "/signin",
    response_model=SessionResponse,
    summary="Sign in",
    description="Exchange email and password for a bearer token.",
)
@limiter.limit(settings.rate_limit_auth)
def sign_in(
    request: Request,
    payload: SignInRequest,
    use_case: SignInUseCase = Depends(get_sign_in_use_case),
) -> SessionResponse:
    result = use_case.execute(SignInCommand(email=payload.email, password=payload.password))
    return SessionResponse(
        access_token=result.access_token,
        expires_in=result.expires_in,
        user=UserSummary.from_entity(result.user),
    )
