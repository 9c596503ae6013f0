"""
Portfolio routes: long-term holdings valued at the latest market price.
"""

from fastapi import APIRouter, Depends, Query, Request, status

from tradejournal.application.journal.dtos import AddHoldingCommand, UpdateHoldingCommand
from tradejournal.application.journal.portfolio import (
    AddHoldingUseCase,
    DeleteHoldingUseCase,
    ListPortfolioUseCase,
    UpdateHoldingUseCase,
)
from tradejournal.core.config import settings
from tradejournal.domain.journal.entities import User
from tradejournal.interfaces.journal.dependencies import (
    get_add_holding_use_case,
    get_current_user,
    get_delete_holding_use_case,
    get_list_portfolio_use_case,
    get_update_holding_use_case,
)
from tradejournal.interfaces.journal.schemas import (
    HoldingCreateRequest,
    HoldingResponse,
    HoldingUpdateRequest,
    MessageResponse,
)
from tradejournal.shared.security.rate_limiting import limiter

router = APIRouter(prefix="/portfolio", tags=["portfolio"])


@router.get(
    "",
    response_model=list[HoldingResponse],
    summary="List holdings",
    description="Holdings ordered by symbol. `updatePrices=true` refreshes every quote first.",
)
@limiter.limit(settings.rate_limit_standard)
def list_holdings(
    request: Request,
    update_prices: bool = Query(False, alias="updatePrices"),
    user: User = Depends(get_current_user),
    use_case: ListPortfolioUseCase = Depends(get_list_portfolio_use_case),
) -> list[HoldingResponse]:
    view = use_case.execute(user.id, update_prices=update_prices)
    return [HoldingResponse.from_entity(h) for h in view.holdings]


@router.post(
    "",
    response_model=HoldingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a holding",
    responses={409: {"description": "Symbol already in portfolio"}},
)
@limiter.limit(settings.rate_limit_standard)
def add_holding(
    request: Request,
    payload: HoldingCreateRequest,
    user: User = Depends(get_current_user),
    use_case: AddHoldingUseCase = Depends(get_add_holding_use_case),
) -> HoldingResponse:
    holding = use_case.execute(
        AddHoldingCommand(
            user_id=user.id,
            symbol=payload.symbol,
            quantity=payload.quantity,
            average_price=payload.price,
            name=payload.name,
            purchase_date=payload.purchase_date,
        )
    )
    return HoldingResponse.from_entity(holding)


@router.put("/{holding_id}", response_model=HoldingResponse, summary="Update a holding")
@limiter.limit(settings.rate_limit_standard)
def update_holding(
    request: Request,
    holding_id: str,
    payload: HoldingUpdateRequest,
    user: User = Depends(get_current_user),
    use_case: UpdateHoldingUseCase = Depends(get_update_holding_use_case),
) -> HoldingResponse:
    holding = use_case.execute(
        UpdateHoldingCommand(
            user_id=user.id,
            holding_id=holding_id,
            name=payload.name,
            quantity=payload.quantity,
            average_price=payload.price,
            purchase_date=payload.purchase_date,
        )
    )
    return HoldingResponse.from_entity(holding)


@router.delete("/{holding_id}", response_model=MessageResponse, summary="Delete a holding")
@limiter.limit(settings.rate_limit_standard)
def delete_holding(
    request: Request,
    holding_id: str,
    user: User = Depends(get_current_user),
    use_case: DeleteHoldingUseCase = Depends(get_delete_holding_use_case),
) -> MessageResponse:
    use_case.execute(user.id, holding_id)
    return MessageResponse(message="Stock removed from portfolio")
