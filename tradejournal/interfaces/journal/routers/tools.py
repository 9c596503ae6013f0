"""
Trading tool routes: P&L, position size, risk/reward and F&O lot size calculators.

The calculators are pure functions; there is no state to inject.
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Request

from tradejournal.core.config import settings
from tradejournal.domain.journal.calculators import (
    INSTRUMENTS,
    calculate_lot_size,
    calculate_position_size,
    calculate_profit_loss,
    calculate_risk_reward,
)
from tradejournal.domain.journal.entities import User
from tradejournal.interfaces.journal.dependencies import get_current_user
from tradejournal.interfaces.journal.schemas import (
    ChargesResponse,
    InstrumentResponse,
    LotSizeRequest,
    LotSizeResponse,
    PositionSizeRequest,
    PositionSizeResponse,
    ProfitLossRequest,
    ProfitLossResponse,
    RiskRewardRequest,
    RiskRewardResponse,
)
from tradejournal.shared.security.rate_limiting import limiter

router = APIRouter(prefix="/tools", tags=["tools"])


def _direction(is_long: bool) -> str:
    return "LONG" if is_long else "SHORT"


@router.post("/pl", response_model=ProfitLossResponse, summary="P&L with charges")
@limiter.limit(settings.rate_limit_standard)
def profit_loss(
    request: Request,
    payload: ProfitLossRequest,
    user: User = Depends(get_current_user),
) -> ProfitLossResponse:
    result = calculate_profit_loss(
        payload.entry_price, payload.exit_price, payload.quantity, payload.type
    )
    return ProfitLossResponse(
        gross_pl=result.gross_pl,
        net_pl=result.net_pl,
        gross_pl_percent=result.gross_pl_percent,
        net_pl_percent=result.net_pl_percent,
        total_charges=result.total_charges,
        charges=ChargesResponse(**asdict(result.charges), total=result.charges.total),
        turnover=result.turnover,
        buy_value=result.buy_value,
        sell_value=result.sell_value,
        is_profit=result.is_profit,
    )


@router.post("/position-size", response_model=PositionSizeResponse, summary="Position sizing")
@limiter.limit(settings.rate_limit_standard)
def position_size(
    request: Request,
    payload: PositionSizeRequest,
    user: User = Depends(get_current_user),
) -> PositionSizeResponse:
    result = calculate_position_size(
        payload.account_size, payload.risk_percent, payload.entry_price, payload.stop_loss
    )
    return PositionSizeResponse(**asdict(result), direction=_direction(result.is_long))


@router.post("/risk-reward", response_model=RiskRewardResponse, summary="Risk/reward ratio")
@limiter.limit(settings.rate_limit_standard)
def risk_reward(
    request: Request,
    payload: RiskRewardRequest,
    user: User = Depends(get_current_user),
) -> RiskRewardResponse:
    result = calculate_risk_reward(
        payload.entry_price, payload.stop_loss, payload.target_price, payload.quantity
    )
    return RiskRewardResponse(**asdict(result), direction=_direction(result.is_long))


@router.post("/lot-size", response_model=LotSizeResponse, summary="F&O lot size")
@limiter.limit(settings.rate_limit_standard)
def lot_size(
    request: Request,
    payload: LotSizeRequest,
    user: User = Depends(get_current_user),
) -> LotSizeResponse:
    result = calculate_lot_size(
        payload.instrument, payload.risk_amount, payload.stop_loss_points, payload.capital
    )
    return LotSizeResponse(**asdict(result))


@router.get("/instruments", response_model=list[InstrumentResponse], summary="F&O instruments")
@limiter.limit(settings.rate_limit_standard)
def instruments(
    request: Request,
    user: User = Depends(get_current_user),
) -> list[InstrumentResponse]:
    return [
        InstrumentResponse(
            symbol=symbol,
            name=contract.name,
            lot_size=contract.lot_size,
            margin_per_lot=contract.margin_per_lot,
        )
        for symbol, contract in INSTRUMENTS.items()
    ]
