"""
Domain entities for the journal bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid4().hex


def utcnow() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(timezone.utc)


class Mood(Enum):
    """Emotional state recorded with a trade."""

    CALM = "CALM"
    CONFIDENT = "CONFIDENT"
    ANXIOUS = "ANXIOUS"
    FOMO = "FOMO"
    PANICKED = "PANICKED"
    OVERCONFIDENT = "OVERCONFIDENT"


class TradeType(Enum):
    """Direction of an intraday trade."""

    BUY = "BUY"
    SELL = "SELL"


class CapitalFlowKind(Enum):
    """Direction of money moving in or out of the trading account."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


@dataclass
class User:
    """A journal owner. Every other record belongs to exactly one user."""

    email: str
    password_hash: str
    name: Optional[str] = None
    initial_capital: float = 0.0
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class IntradayTrade:
    """A closed intraday trade.

    ``points``, ``profit_loss``, ``net_profit_loss`` and ``day`` are derived
    from the prices, quantity, charges and date by :meth:`recalculate`.
    """

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
    remarks: Optional[str] = None
    day: str = ""
    points: float = 0.0
    profit_loss: float = 0.0
    net_profit_loss: float = 0.0
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def recalculate(self) -> None:
        """Derive weekday, points and P&L from the recorded figures."""
        self.day = self.trade_date.strftime("%A")
        self.points = self.sell_price - self.buy_price
        self.profit_loss = self.points * self.quantity
        self.net_profit_loss = self.profit_loss - self.charges

    @property
    def is_win(self) -> bool:
        return self.net_profit_loss > 0

    @property
    def is_loss(self) -> bool:
        return self.net_profit_loss < 0


@dataclass
class PortfolioStock:
    """A long-term holding in the user's portfolio."""

    user_id: str
    symbol: str
    average_price: float
    quantity: int
    name: Optional[str] = None
    current_price: Optional[float] = None
    profit_loss: Optional[float] = None
    profit_loss_percent: Optional[float] = None
    last_price_update: Optional[datetime] = None
    purchase_date: Optional[date] = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def invested_value(self) -> float:
        return self.average_price * self.quantity

    @property
    def current_value(self) -> float:
        return (self.current_price or 0.0) * self.quantity

    @property
    def market_value(self) -> float:
        """Value at the last known price, falling back to cost."""
        return (self.current_price or self.average_price) * self.quantity

    def recalculate(self) -> None:
        """Recompute P&L against the last fetched market price, if any."""
        if not self.current_price:
            return
        self.profit_loss = (self.current_price - self.average_price) * self.quantity
        self.profit_loss_percent = (
            (self.current_price - self.average_price) / self.average_price * 100
        )

    def reprice(self, price: float, at: datetime) -> None:
        """Record a freshly fetched market price."""
        self.current_price = price
        self.last_price_update = at
        self.recalculate()


@dataclass
class CapitalFlow:
    """A deposit into or withdrawal from the trading account."""

    user_id: str
    kind: CapitalFlowKind
    amount: float
    date: date
    reason: Optional[str] = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class StockQuote:
    """Latest market quote for a symbol."""

    symbol: str
    price: float
    change: float
    change_percent: float
    open: float
    high: float
    low: float
    previous_close: float
    timestamp: int  # epoch milliseconds


@dataclass(frozen=True)
class Candle:
    """A single OHLCV bar. ``time`` is epoch seconds."""

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: int


@dataclass(frozen=True)
class IndicatorPoint:
    """One value of an indicator series aligned to a candle time."""

    time: int
    value: float
