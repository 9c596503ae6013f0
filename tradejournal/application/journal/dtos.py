"""
Data Transfer Objects for the journal application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from tradejournal.domain.journal.entities import (
    Candle,
    CapitalFlow,
    CapitalFlowKind,
    IndicatorPoint,
    IntradayTrade,
    Mood,
    PortfolioStock,
    StockQuote,
    TradeType,
    User,
)
from tradejournal.domain.journal.statistics import (
    GroupPerformance,
    ReportStats,
    StreakSummary,
    TrendPoint,
)

# ------------------------------------------------------------------
# Auth DTOs
# ------------------------------------------------------------------


@dataclass(frozen=True)
class SignUpCommand:
    """Input DTO for registering a new user.

    Attributes:
        email: Login email, already normalised to lower case.
        password: Plain-text password that satisfied the password policy.
        name: Optional display name.
    """

    email: str
    password: str
    name: str | None = None


@dataclass(frozen=True)
class SignInCommand:
    email: str
    password: str


@dataclass(frozen=True)
class SessionResult:
    """Output DTO for a successful sign-in.

    Attributes:
        access_token: Signed bearer token.
        expires_in: Token lifetime in seconds.
        user: The authenticated user.
    """

    access_token: str
    expires_in: int
    user: User


# ------------------------------------------------------------------
# Profile DTOs
# ------------------------------------------------------------------


@dataclass(frozen=True)
class UpdateProfileCommand:
    user_id: str
    name: str
    initial_capital: float | None = None


@dataclass(frozen=True)
class ChangePasswordCommand:
    user_id: str
    current_password: str
    new_password: str


@dataclass(frozen=True)
class ProfileResult:
    """Output DTO for the profile page.

    Attributes:
        user: The profile owner.
        total_deposits: Sum of all deposits.
        total_withdrawals: Sum of all withdrawals.
        current_capital: Initial capital plus deposits minus withdrawals.
        realized_pl: Sum of net P&L over every intraday trade.
    """

    user: User
    total_deposits: float
    total_withdrawals: float
    current_capital: float
    realized_pl: float


@dataclass(frozen=True)
class AddCapitalFlowCommand:
    user_id: str
    kind: CapitalFlowKind
    amount: float
    date: date
    reason: str | None = None


@dataclass(frozen=True)
class CapitalFlowList:
    flows: list[CapitalFlow]
    total: float


# ------------------------------------------------------------------
# Intraday trade DTOs
# ------------------------------------------------------------------


@dataclass(frozen=True)
class ListTradesQuery:
    """Input DTO for paging through a user's trades.

    Attributes:
        user_id: Owner of the trades.
        page: 1-based page number.
        limit: Page size (1-100).
        all: Return every trade in a single page.
    """

    user_id: str
    page: int = 1
    limit: int = 50
    all: bool = False


@dataclass(frozen=True)
class TradePage:
    trades: list[IntradayTrade]
    page: int
    limit: int
    total: int
    total_pages: int


@dataclass(frozen=True)
class CreateTradeCommand:
    user_id: str
    trade_date: date
    script: str
    trade_type: TradeType
    quantity: int
    buy_price: float
    sell_price: float
    charges: float = 0.0
    follow_setup: bool = True
    mood: Mood = Mood.CALM
    remarks: str | None = None


@dataclass(frozen=True)
class UpdateTradeCommand:
    """Partial update of a trade. ``None`` leaves a field unchanged;
    an empty ``remarks`` string clears the remarks."""

    user_id: str
    trade_id: str
    trade_date: date | None = None
    script: str | None = None
    trade_type: TradeType | None = None
    quantity: int | None = None
    buy_price: float | None = None
    sell_price: float | None = None
    charges: float | None = None
    follow_setup: bool | None = None
    mood: Mood | None = None
    remarks: str | None = None


@dataclass(frozen=True)
class ImportTradesCommand:
    """Input DTO for a CSV import.

    Attributes:
        user_id: Owner of the imported trades.
        content: Raw CSV text including the header row.
        mapping: Optional column header to field overrides.
    """

    user_id: str
    content: str
    mapping: dict[str, str] | None = None


@dataclass(frozen=True)
class ImportTradesResult:
    imported: int
    failed: int
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ExportTradesQuery:
    user_id: str
    period: str = "all"
    start: date | None = None
    end: date | None = None


@dataclass(frozen=True)
class ExportResult:
    filename: str
    content: str


# ------------------------------------------------------------------
# Portfolio DTOs
# ------------------------------------------------------------------


@dataclass(frozen=True)
class AddHoldingCommand:
    user_id: str
    symbol: str
    quantity: int
    average_price: float
    name: str | None = None
    purchase_date: date | None = None


@dataclass(frozen=True)
class UpdateHoldingCommand:
    user_id: str
    holding_id: str
    name: str | None = None
    quantity: int | None = None
    average_price: float | None = None
    purchase_date: date | None = None


# ------------------------------------------------------------------
# Dashboard, report and insight DTOs
# ------------------------------------------------------------------


@dataclass(frozen=True)
class ReportQuery:
    user_id: str
    period: str = "monthly"
    start: date | None = None
    end: date | None = None


@dataclass(frozen=True)
class ReportResult:
    """Output DTO for a performance report.

    Attributes:
        period: The requested period keyword.
        start: First day included, or None when unbounded.
        end: Last day included, or None when unbounded.
        stats: Headline report figures.
        scripts: Per-instrument performance.
        moods: Per-mood performance.
        weekdays: Per-weekday performance.
        trend: Daily and cumulative net P&L.
        streaks: Trading streak summary over all of the user's trades.
    """

    period: str
    start: date | None
    end: date | None
    stats: ReportStats
    scripts: list[GroupPerformance]
    moods: list[GroupPerformance]
    weekdays: list[GroupPerformance]
    trend: list[TrendPoint]
    streaks: StreakSummary


@dataclass(frozen=True)
class CachedResult:
    """A payload together with whether it was served from cache."""

    data: Any
    cache_hit: bool


@dataclass(frozen=True)
class GenerateInsightsCommand:
    user_id: str
    refresh: bool = False


@dataclass(frozen=True)
class InsightsResult:
    insights: dict[str, Any]
    trades_analyzed: int
    generated_at: datetime


# ------------------------------------------------------------------
# Stock DTOs
# ------------------------------------------------------------------


@dataclass(frozen=True)
class StockChartQuery:
    symbol: str
    range: str = "3mo"
    interval: str = "1d"


@dataclass(frozen=True)
class StockChartResult:
    quote: StockQuote
    candles: list[Candle]
    overlays: dict[str, list[IndicatorPoint]]


@dataclass(frozen=True)
class PortfolioView:
    """Output DTO for the holdings list with per-holding valuation."""

    holdings: list[PortfolioStock]
    prices_updated: int = 0


@dataclass(frozen=True)
class MarketStatus:
    exchange: str
    is_open: bool
    checked_at: datetime
