"""
Profile routes: account details, password, reset, deposits and withdrawals.
"""

from fastapi import APIRouter, Depends, Request, status

from tradejournal.application.journal.dtos import (
    AddCapitalFlowCommand,
    ChangePasswordCommand,
    UpdateProfileCommand,
)
from tradejournal.application.journal.profile import (
    AddCapitalFlowUseCase,
    ChangePasswordUseCase,
    DeleteCapitalFlowUseCase,
    GetProfileUseCase,
    ListCapitalFlowsUseCase,
    ResetAccountUseCase,
    UpdateProfileUseCase,
)
from tradejournal.core.config import settings
from tradejournal.domain.journal.entities import CapitalFlowKind, User
from tradejournal.interfaces.journal.dependencies import (
    get_add_capital_flow_use_case,
    get_change_password_use_case,
    get_current_user,
    get_delete_capital_flow_use_case,
    get_list_capital_flows_use_case,
    get_profile_use_case,
    get_reset_account_use_case,
    get_update_profile_use_case,
)
from tradejournal.interfaces.journal.schemas import (
    CapitalFlowRequest,
    CapitalFlowResponse,
    ChangePasswordRequest,
    DepositListResponse,
    MessageResponse,
    ProfileResponse,
    UpdateProfileRequest,
    UserSummary,
    WithdrawalListResponse,
)
from tradejournal.shared.security.rate_limiting import limiter

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse, summary="Get profile")
@limiter.limit(settings.rate_limit_standard)
def get_profile(
    request: Request,
    user: User = Depends(get_current_user),
    use_case: GetProfileUseCase = Depends(get_profile_use_case),
) -> ProfileResponse:
    result = use_case.execute(user.id)
    return ProfileResponse(
        id=result.user.id,
        name=result.user.name,
        email=result.user.email,
        initial_capital=result.user.initial_capital,
        created_at=result.user.created_at,
        total_deposits=result.total_deposits,
        total_withdrawals=result.total_withdrawals,
        current_capital=result.current_capital,
        realized_pl=result.realized_pl,
    )


@router.put("", response_model=UserSummary, summary="Update profile")
@limiter.limit(settings.rate_limit_standard)
def update_profile(
    request: Request,
    payload: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    use_case: UpdateProfileUseCase = Depends(get_update_profile_use_case),
) -> UserSummary:
    updated = use_case.execute(
        UpdateProfileCommand(
            user_id=user.id, name=payload.name, initial_capital=payload.initial_capital
        )
    )
    return UserSummary.from_entity(updated)


@router.post("/change-password", response_model=MessageResponse, summary="Change password")
@limiter.limit(settings.rate_limit_strict)
def change_password(
    request: Request,
    payload: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    use_case: ChangePasswordUseCase = Depends(get_change_password_use_case),
) -> MessageResponse:
    use_case.execute(
        ChangePasswordCommand(
            user_id=user.id,
            current_password=payload.current_password,
            new_password=payload.new_password,
        )
    )
    return MessageResponse(message="Password updated successfully")


@router.delete(
    "/reset",
    response_model=MessageResponse,
    summary="Reset account",
    description="Delete every trade, holding, deposit and withdrawal and zero the initial capital.",
)
@limiter.limit(settings.rate_limit_strict)
def reset_account(
    request: Request,
    user: User = Depends(get_current_user),
    use_case: ResetAccountUseCase = Depends(get_reset_account_use_case),
) -> MessageResponse:
    use_case.execute(user.id)
    return MessageResponse(message="All data has been reset successfully")


# ------------------------------------------------------------------
# Deposits
# ------------------------------------------------------------------


@router.get("/deposits", response_model=DepositListResponse, summary="List deposits")
@limiter.limit(settings.rate_limit_standard)
def list_deposits(
    request: Request,
    user: User = Depends(get_current_user),
    use_case: ListCapitalFlowsUseCase = Depends(get_list_capital_flows_use_case),
) -> DepositListResponse:
    result = use_case.execute(user.id, CapitalFlowKind.DEPOSIT)
    return DepositListResponse(
        deposits=[CapitalFlowResponse.from_entity(f) for f in result.flows],
        total_deposits=result.total,
    )


@router.post(
    "/deposits",
    response_model=CapitalFlowResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a deposit",
)
@limiter.limit(settings.rate_limit_standard)
def add_deposit(
    request: Request,
    payload: CapitalFlowRequest,
    user: User = Depends(get_current_user),
    use_case: AddCapitalFlowUseCase = Depends(get_add_capital_flow_use_case),
) -> CapitalFlowResponse:
    flow = use_case.execute(
        AddCapitalFlowCommand(
            user_id=user.id,
            kind=CapitalFlowKind.DEPOSIT,
            amount=payload.amount,
            date=payload.date,
            reason=payload.reason or None,
        )
    )
    return CapitalFlowResponse.from_entity(flow)


@router.delete("/deposits/{flow_id}", response_model=MessageResponse, summary="Delete a deposit")
@limiter.limit(settings.rate_limit_standard)
def delete_deposit(
    request: Request,
    flow_id: str,
    user: User = Depends(get_current_user),
    use_case: DeleteCapitalFlowUseCase = Depends(get_delete_capital_flow_use_case),
) -> MessageResponse:
    use_case.execute(user.id, CapitalFlowKind.DEPOSIT, flow_id)
    return MessageResponse(message="Deposit deleted successfully")


# ------------------------------------------------------------------
# Withdrawals
# ------------------------------------------------------------------


@router.get("/withdrawals", response_model=WithdrawalListResponse, summary="List withdrawals")
@limiter.limit(settings.rate_limit_standard)
def list_withdrawals(
    request: Request,
    user: User = Depends(get_current_user),
    use_case: ListCapitalFlowsUseCase = Depends(get_list_capital_flows_use_case),
) -> WithdrawalListResponse:
    result = use_case.execute(user.id, CapitalFlowKind.WITHDRAWAL)
    return WithdrawalListResponse(
        withdrawals=[CapitalFlowResponse.from_entity(f) for f in result.flows],
        total_withdrawals=result.total,
    )


@router.post(
    "/withdrawals",
    response_model=CapitalFlowResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a withdrawal",
)
@limiter.limit(settings.rate_limit_standard)
def add_withdrawal(
    request: Request,
    payload: CapitalFlowRequest,
    user: User = Depends(get_current_user),
    use_case: AddCapitalFlowUseCase = Depends(get_add_capital_flow_use_case),
) -> CapitalFlowResponse:
    flow = use_case.execute(
        AddCapitalFlowCommand(
            user_id=user.id,
            kind=CapitalFlowKind.WITHDRAWAL,
            amount=payload.amount,
            date=payload.date,
            reason=payload.reason or None,
        )
    )
    return CapitalFlowResponse.from_entity(flow)


@router.delete(
    "/withdrawals/{flow_id}", response_model=MessageResponse, summary="Delete a withdrawal"
)
@limiter.limit(settings.rate_limit_standard)
def delete_withdrawal(
    request: Request,
    flow_id: str,
    user: User = Depends(get_current_user),
    use_case: DeleteCapitalFlowUseCase = Depends(get_delete_capital_flow_use_case),
) -> MessageResponse:
    use_case.execute(user.id, CapitalFlowKind.WITHDRAWAL, flow_id)
    return MessageResponse(message="Withdrawal deleted successfully")
