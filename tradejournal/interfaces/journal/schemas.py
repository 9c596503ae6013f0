"""
Pydantic schemas for journal API request/response validation.

These schemas enforce input validation and define the API contract.
JSON field names are camelCase; Python attributes stay snake_case.
No business logic belongs here.
"""

import re
from datetime import date, datetime
from typing import Annotated, Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from tradejournal.domain.journal.entities import (
    Candle,
    CapitalFlow,
    IndicatorPoint,
    IntradayTrade,
    Mood,
    PortfolioStock,
    StockQuote,
    TradeType,
    User,
)

PASSWORD_MIN_LEN = 8
NAME_MAX_LEN = 100
SCRIPT_MAX_LEN = 50
REMARKS_MAX_LEN = 500

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=NAME_MAX_LEN)]
Script = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True, to_upper=True, min_length=1, max_length=SCRIPT_MAX_LEN
    ),
]
Remarks = Annotated[str, StringConstraints(strip_whitespace=True, max_length=REMARKS_MAX_LEN)]


def check_password_policy(value: str) -> str:
    """At least 8 characters with an upper-case letter, a lower-case letter and a digit."""
    if len(value) < PASSWORD_MIN_LEN:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LEN} characters")
    if not re.search(r"[A-Z]", value):
        raise ValueError("Password must contain an uppercase letter")
    if not re.search(r"[a-z]", value):
        raise ValueError("Password must contain a lowercase letter")
    if not re.search(r"\d", value):
        raise ValueError("Password must contain a number")
    return value


class CamelModel(BaseModel):
    """Base schema serialised with camelCase keys.

    Floats must be finite; infinity and NaN (including an overflowing
    literal such as ``1e309``) are rejected.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False
    )


# ------------------------------------------------------------------
# Health
# ------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str
    version: str
    database: str


class MessageResponse(BaseModel):
    message: str


# ------------------------------------------------------------------
# Auth
# ------------------------------------------------------------------


class SignUpRequest(BaseModel):
    """Request schema for registration.

    Attributes:
        name: Optional display name (1-100 chars).
        email: Login email, stored lower-case.
        password: Must satisfy the password policy.
    """

    name: Optional[Name] = None
    email: EmailStr
    password: str = Field(..., max_length=128)

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("password")
    @classmethod
    def _password_policy(cls, value: str) -> str:
        return check_password_policy(value)


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, value: str) -> str:
        return value.strip().lower()


class UserSummary(BaseModel):
    id: str
    name: Optional[str] = None
    email: str

    @classmethod
    def from_entity(cls, user: User) -> "UserSummary":
        return cls(id=user.id, name=user.name, email=user.email)


class SignUpResponse(BaseModel):
    message: str
    user: UserSummary


class SessionResponse(BaseModel):
    """OAuth2-style token response; keys stay snake_case."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserSummary


# ------------------------------------------------------------------
# Profile and capital
# ------------------------------------------------------------------


class ProfileResponse(CamelModel):
    id: str
    name: Optional[str]
    email: str
    initial_capital: float
    created_at: datetime
    total_deposits: float
    total_withdrawals: float
    current_capital: float
    realized_pl: float = Field(alias="realizedPL")


class UpdateProfileRequest(CamelModel):
    name: Name
    initial_capital: Optional[float] = Field(default=None, ge=0)


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., max_length=128)

    @field_validator("new_password")
    @classmethod
    def _password_policy(cls, value: str) -> str:
        return check_password_policy(value)


class CapitalFlowRequest(CamelModel):
    amount: float = Field(..., gt=0)
    date: date
    reason: Optional[Remarks] = None


class CapitalFlowResponse(CamelModel):
    id: str
    amount: float
    date: date
    reason: Optional[str]
    created_at: datetime

    @classmethod
    def from_entity(cls, flow: CapitalFlow) -> "CapitalFlowResponse":
        return cls(
            id=flow.id,
            amount=flow.amount,
            date=flow.date,
            reason=flow.reason,
            created_at=flow.created_at,
        )


class DepositListResponse(CamelModel):
    deposits: list[CapitalFlowResponse]
    total_deposits: float


class WithdrawalListResponse(CamelModel):
    withdrawals: list[CapitalFlowResponse]
    total_withdrawals: float


# ------------------------------------------------------------------
# Intraday trades
# ------------------------------------------------------------------


class TradeCreateRequest(CamelModel):
    """Request schema for logging a trade.

    Any P&L sent by the client is ignored; it is derived from the
    prices, quantity and charges.
    """

    trade_date: date
    script: Script
    type: TradeType
    quantity: int = Field(..., gt=0)
    buy_price: float = Field(..., gt=0)
    sell_price: float = Field(..., gt=0)
    charges: float = Field(default=0.0, ge=0)
    remarks: Optional[Remarks] = None
    follow_setup: bool = True
    mood: Mood = Mood.CALM


class TradeUpdateRequest(CamelModel):
    trade_date: Optional[date] = None
    script: Optional[Script] = None
    type: Optional[TradeType] = None
    quantity: Optional[int] = Field(default=None, gt=0)
    buy_price: Optional[float] = Field(default=None, gt=0)
    sell_price: Optional[float] = Field(default=None, gt=0)
    charges: Optional[float] = Field(default=None, ge=0)
    remarks: Optional[Remarks] = None
    follow_setup: Optional[bool] = None
    mood: Optional[Mood] = None


class TradeResponse(CamelModel):
    id: str
    trade_date: date
    day: str
    script: str
    type: TradeType
    quantity: int
    buy_price: float
    sell_price: float
    points: float
    profit_loss: float
    charges: float
    net_profit_loss: float
    follow_setup: bool
    mood: Mood
    remarks: Optional[str]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, trade: IntradayTrade) -> "TradeResponse":
        return cls(
            id=trade.id,
            trade_date=trade.trade_date,
            day=trade.day,
            script=trade.script,
            type=trade.trade_type,
            quantity=trade.quantity,
            buy_price=trade.buy_price,
            sell_price=trade.sell_price,
            points=trade.points,
            profit_loss=trade.profit_loss,
            charges=trade.charges,
            net_profit_loss=trade.net_profit_loss,
            follow_setup=trade.follow_setup,
            mood=trade.mood,
            remarks=trade.remarks,
            created_at=trade.created_at,
            updated_at=trade.updated_at,
        )


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class TradeListResponse(CamelModel):
    data: list[TradeResponse]
    pagination: Pagination


class ImportTradesRequest(CamelModel):
    """CSV text plus optional ``{column header: field}`` overrides.

    Field names: date, script, type, quantity, entryPrice, exitPrice,
    profitLoss, netProfitLoss, charges, followSetup, remarks, mood, ignore.
    """

    content: str = Field(..., min_length=1, max_length=5_000_000)
    mapping: Optional[dict[str, str]] = None


class ImportTradesResponse(CamelModel):
    imported: int
    failed: int
    errors: list[str]


# ------------------------------------------------------------------
# Portfolio
# ------------------------------------------------------------------


class HoldingCreateRequest(CamelModel):
    """Either ``buyPrice`` or ``averagePrice`` must be given."""

    symbol: Script
    name: Optional[Name] = None
    quantity: int = Field(..., gt=0)
    buy_price: Optional[float] = Field(default=None, gt=0)
    average_price: Optional[float] = Field(default=None, gt=0)
    purchase_date: Optional[date] = None

    @model_validator(mode="after")
    def _require_price(self) -> "HoldingCreateRequest":
        if self.buy_price is None and self.average_price is None:
            raise ValueError("buyPrice or averagePrice is required")
        return self

    @property
    def price(self) -> float:
        return self.average_price if self.average_price is not None else self.buy_price


class HoldingUpdateRequest(CamelModel):
    name: Optional[Annotated[str, StringConstraints(strip_whitespace=True, max_length=NAME_MAX_LEN)]] = None
    quantity: Optional[int] = Field(default=None, gt=0)
    buy_price: Optional[float] = Field(default=None, gt=0)
    average_price: Optional[float] = Field(default=None, gt=0)
    purchase_date: Optional[date] = None

    @property
    def price(self) -> Optional[float]:
        return self.average_price if self.average_price is not None else self.buy_price


class HoldingResponse(CamelModel):
    id: str
    symbol: str
    name: Optional[str]
    quantity: int
    buy_price: float
    average_price: float
    current_price: float
    invested_value: float
    current_value: float
    profit_loss: float
    profit_loss_percentage: float
    last_price_update: Optional[datetime]
    purchase_date: Optional[date]
    created_at: datetime

    @classmethod
    def from_entity(cls, holding: PortfolioStock) -> "HoldingResponse":
        return cls(
            id=holding.id,
            symbol=holding.symbol,
            name=holding.name,
            quantity=holding.quantity,
            buy_price=holding.average_price,
            average_price=holding.average_price,
            current_price=holding.current_price or 0.0,
            invested_value=holding.invested_value,
            current_value=holding.current_value,
            profit_loss=holding.profit_loss or 0.0,
            profit_loss_percentage=holding.profit_loss_percent or 0.0,
            last_price_update=holding.last_price_update,
            purchase_date=holding.purchase_date,
            created_at=holding.created_at,
        )


# ------------------------------------------------------------------
# Dashboard and reports
# ------------------------------------------------------------------


class DashboardStatsResponse(CamelModel):
    total_pl: float = Field(alias="totalPL")
    win_rate: float
    profit_factor: Optional[float]
    total_trades: int
    winning_trades: int
    losing_trades: int
    best_trade: float
    worst_trade: float
    portfolio_value: float
    portfolio_pl: float = Field(alias="portfolioPL")
    setup_adherence: float
    avg_trade_size: float
    trading_days: int
    period: str


class ReportStatsResponse(CamelModel):
    total_trades: int
    trading_days: int
    winning_trades: int
    losing_trades: int
    break_even_trades: int
    total_profit_loss: float
    total_profit: float
    total_loss: float
    win_rate: float
    follow_setup_count: int
    follow_setup_rate: float
    avg_profit_per_trade: float
    avg_winning_trade: float
    avg_losing_trade: float
    largest_win: float
    largest_loss: float
    profit_factor: Optional[float]
    traded_scripts: list[str]


class GroupPerformanceResponse(CamelModel):
    key: str
    trades: int
    wins: int
    win_rate: float
    total_pl: float = Field(alias="totalPL")
    avg_pl: float = Field(alias="avgPL")


class TrendPointResponse(CamelModel):
    date: date
    trades: int
    pl: float
    cumulative_pl: float = Field(alias="cumulativePL")


class StreakResponse(CamelModel):
    current_streak: int
    longest_streak: int
    last_trade_date: Optional[date]
    trading_days: int


class ReportResponse(CamelModel):
    period: str
    start_date: Optional[date]
    end_date: Optional[date]
    stats: ReportStatsResponse
    script_performance: list[GroupPerformanceResponse]
    mood_performance: list[GroupPerformanceResponse]
    weekday_performance: list[GroupPerformanceResponse]
    daily_trend: list[TrendPointResponse]
    streaks: StreakResponse


# ------------------------------------------------------------------
# Insights
# ------------------------------------------------------------------


class InsightsResponse(CamelModel):
    success: bool = True
    insights: dict[str, Any]
    trades_analyzed: int
    generated_at: datetime


# ------------------------------------------------------------------
# Stocks
# ------------------------------------------------------------------


class CandleResponse(BaseModel):
    time: int
    open: float
    high: float
    low: float
    close: float
    volume: int

    @classmethod
    def from_entity(cls, candle: Candle) -> "CandleResponse":
        return cls(
            time=candle.time,
            open=candle.open,
            high=candle.high,
            low=candle.low,
            close=candle.close,
            volume=candle.volume,
        )


class IndicatorPointResponse(BaseModel):
    time: int
    value: float

    @classmethod
    def from_entity(cls, point: IndicatorPoint) -> "IndicatorPointResponse":
        return cls(time=point.time, value=point.value)


class StockResponse(CamelModel):
    symbol: str
    price: float
    change: float
    change_percent: float
    open: float
    high: float
    low: float
    previous_close: float
    timestamp: int
    chart_data: list[CandleResponse]
    indicators: dict[str, list[IndicatorPointResponse]]

    @classmethod
    def build(
        cls,
        quote: StockQuote,
        candles: list[Candle],
        overlays: dict[str, list[IndicatorPoint]],
    ) -> "StockResponse":
        return cls(
            symbol=quote.symbol,
            price=quote.price,
            change=quote.change,
            change_percent=quote.change_percent,
            open=quote.open,
            high=quote.high,
            low=quote.low,
            previous_close=quote.previous_close,
            timestamp=quote.timestamp,
            chart_data=[CandleResponse.from_entity(c) for c in candles],
            indicators={
                name: [IndicatorPointResponse.from_entity(p) for p in points]
                for name, points in overlays.items()
            },
        )


class MarketStatusResponse(CamelModel):
    exchange: str
    is_open: bool
    checked_at: datetime


# ------------------------------------------------------------------
# Trading tools
# ------------------------------------------------------------------


class ProfitLossRequest(CamelModel):
    entry_price: float = Field(..., gt=0)
    exit_price: float = Field(..., gt=0)
    quantity: float = Field(..., gt=0)
    type: TradeType = TradeType.BUY


class ChargesResponse(CamelModel):
    brokerage: float
    stt: float
    exchange_charges: float
    sebi_charges: float
    stamp_duty: float
    gst: float
    total: float


class ProfitLossResponse(CamelModel):
    gross_pl: float = Field(alias="grossPL")
    net_pl: float = Field(alias="netPL")
    gross_pl_percent: float = Field(alias="grossPLPercent")
    net_pl_percent: float = Field(alias="netPLPercent")
    total_charges: float
    charges: ChargesResponse
    turnover: float
    buy_value: float
    sell_value: float
    is_profit: bool


class PositionSizeRequest(CamelModel):
    account_size: float = Field(..., gt=0)
    risk_percent: float = Field(..., gt=0, le=100)
    entry_price: float = Field(..., gt=0)
    stop_loss: float = Field(..., gt=0)


class PositionSizeResponse(CamelModel):
    risk_amount: float
    risk_per_share: float
    shares: int
    position_value: float
    position_percent: float
    actual_risk_amount: float
    capital_at_risk_percent: float
    is_long: bool
    direction: str
    risk_level: str


class RiskRewardRequest(CamelModel):
    entry_price: float = Field(..., gt=0)
    stop_loss: float = Field(..., gt=0)
    target_price: float = Field(..., gt=0)
    quantity: float = Field(default=1, gt=0)


class RiskRewardResponse(CamelModel):
    is_long: bool
    direction: str
    risk_per_share: float
    reward_per_share: float
    total_risk: float
    total_reward: float
    risk_reward_ratio: float
    risk_percent: float
    reward_percent: float
    breakeven: float
    position_value: float


class LotSizeRequest(CamelModel):
    instrument: str = Field(..., min_length=1, max_length=20)
    capital: float = Field(default=0.0, ge=0)
    risk_amount: float = Field(..., gt=0)
    stop_loss_points: float = Field(..., gt=0)


class LotSizeResponse(CamelModel):
    instrument: str
    instrument_name: str
    lot_size: int
    risk_per_lot: float
    lots_by_risk: int
    total_quantity: int
    actual_risk: float
    margin_per_lot: float
    total_margin_required: float
    is_capital_sufficient: bool
    lots_by_capital: Optional[int]
    recommended_lots: int
    recommended_quantity: int
    recommended_risk: float
    recommended_margin: float


class InstrumentResponse(CamelModel):
    symbol: str
    name: str
    lot_size: int
    margin_per_lot: float
