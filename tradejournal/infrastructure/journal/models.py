"""
SQLAlchemy ORM models for the journal schema.

Every journal row belongs to one user and is removed with it
(ON DELETE CASCADE). Derived trade and holding figures are stored.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from tradejournal.infrastructure.database import Base

ID_LENGTH = 32


def _owner_column() -> Mapped[str]:
    return mapped_column(
        String(ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    initial_capital: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint("initial_capital >= 0", name="initial_capital_non_negative"),
    )


class IntradayTradeModel(Base):
    __tablename__ = "intraday_trades"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True)
    user_id: Mapped[str] = _owner_column()
    trade_date: Mapped[date] = mapped_column(Date, nullable=False)
    day: Mapped[str] = mapped_column(String(10), nullable=False)
    script: Mapped[str] = mapped_column(String(50), nullable=False)
    trade_type: Mapped[str] = mapped_column(String(4), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    buy_price: Mapped[float] = mapped_column(Float, nullable=False)
    sell_price: Mapped[float] = mapped_column(Float, nullable=False)
    points: Mapped[float] = mapped_column(Float, nullable=False)
    profit_loss: Mapped[float] = mapped_column(Float, nullable=False)
    charges: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    net_profit_loss: Mapped[float] = mapped_column(Float, nullable=False)
    follow_setup: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    mood: Mapped[str] = mapped_column(String(20), nullable=False, default="CALM")
    remarks: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="quantity_positive"),
        CheckConstraint("buy_price > 0", name="buy_price_positive"),
        CheckConstraint("sell_price > 0", name="sell_price_positive"),
        CheckConstraint("charges >= 0", name="charges_non_negative"),
        Index("ix_intraday_trades_user_date", "user_id", "trade_date"),
        Index("ix_intraday_trades_user_script", "user_id", "script"),
    )


class PortfolioStockModel(Base):
    __tablename__ = "portfolio_stocks"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True)
    user_id: Mapped[str] = _owner_column()
    symbol: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(100))
    average_price: Mapped[float] = mapped_column(Float, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    current_price: Mapped[Optional[float]] = mapped_column(Float)
    profit_loss: Mapped[Optional[float]] = mapped_column(Float)
    profit_loss_percent: Mapped[Optional[float]] = mapped_column(Float)
    last_price_update: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    purchase_date: Mapped[Optional[date]] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "symbol", name="uq_portfolio_stocks_user_symbol"),
        CheckConstraint("quantity > 0", name="quantity_positive"),
        CheckConstraint("average_price > 0", name="average_price_positive"),
        Index("ix_portfolio_stocks_user", "user_id"),
    )


class _CapitalFlowColumns:
    """Columns shared by the deposits and withdrawals tables."""

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    flow_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    @declared_attr
    def user_id(cls) -> Mapped[str]:
        return _owner_column()

    @declared_attr.directive
    def __table_args__(cls) -> tuple:
        return (
            CheckConstraint("amount > 0", name="amount_positive"),
            Index(f"ix_{cls.__tablename__}_user_date", "user_id", "date"),
        )


class DepositModel(_CapitalFlowColumns, Base):
    __tablename__ = "deposits"


class WithdrawalModel(_CapitalFlowColumns, Base):
    __tablename__ = "withdrawals"
