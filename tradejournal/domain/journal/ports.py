"""
Port interfaces (ABCs) for the journal bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Optional

from tradejournal.domain.journal.entities import (
    Candle,
    CapitalFlow,
    CapitalFlowKind,
    IntradayTrade,
    PortfolioStock,
    StockQuote,
    User,
)


class UserRepository(ABC):
    """Port for persisting journal owners."""

    @abstractmethod
    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    def add(self, user: User) -> None:
        raise NotImplementedError

    @abstractmethod
    def save(self, user: User) -> None:
        raise NotImplementedError

    @abstractmethod
    def reset_data(self, user_id: str) -> None:
        """Delete every trade, holding and capital flow of a user and
        zero the initial capital, all in one transaction."""
        raise NotImplementedError


class TradeRepository(ABC):
    """Port for persisting intraday trades.

    Every query is scoped to a user; a trade owned by someone else
    is indistinguishable from a missing one.
    """

    @abstractmethod
    def list_for_user(
        self,
        user_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[IntradayTrade]:
        """Return the user's trades, newest first, optionally within a date range."""
        raise NotImplementedError

    @abstractmethod
    def page_for_user(
        self, user_id: str, offset: int, limit: int
    ) -> tuple[list[IntradayTrade], int]:
        """Return one page of trades (newest first) and the total count."""
        raise NotImplementedError

    @abstractmethod
    def get(self, user_id: str, trade_id: str) -> Optional[IntradayTrade]:
        raise NotImplementedError

    @abstractmethod
    def add(self, trade: IntradayTrade) -> None:
        raise NotImplementedError

    @abstractmethod
    def add_many(self, trades: list[IntradayTrade]) -> int:
        """Insert a batch of trades in one transaction. Returns rows written."""
        raise NotImplementedError

    @abstractmethod
    def save(self, trade: IntradayTrade) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, trade: IntradayTrade) -> None:
        raise NotImplementedError


class PortfolioRepository(ABC):
    """Port for persisting portfolio holdings."""

    @abstractmethod
    def list_for_user(self, user_id: str) -> list[PortfolioStock]:
        """Return the user's holdings ordered by symbol."""
        raise NotImplementedError

    @abstractmethod
    def get(self, user_id: str, holding_id: str) -> Optional[PortfolioStock]:
        raise NotImplementedError

    @abstractmethod
    def get_by_symbol(self, user_id: str, symbol: str) -> Optional[PortfolioStock]:
        raise NotImplementedError

    @abstractmethod
    def add(self, holding: PortfolioStock) -> None:
        raise NotImplementedError

    @abstractmethod
    def save(self, holding: PortfolioStock) -> None:
        raise NotImplementedError

    @abstractmethod
    def save_many(self, holdings: list[PortfolioStock]) -> None:
        """Persist several holdings in one transaction."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, holding: PortfolioStock) -> None:
        raise NotImplementedError


class CapitalFlowRepository(ABC):
    """Port for persisting deposits and withdrawals."""

    @abstractmethod
    def list_for_user(self, user_id: str, kind: CapitalFlowKind) -> list[CapitalFlow]:
        """Return the user's flows of one kind, newest first."""
        raise NotImplementedError

    @abstractmethod
    def get(
        self, user_id: str, kind: CapitalFlowKind, flow_id: str
    ) -> Optional[CapitalFlow]:
        raise NotImplementedError

    @abstractmethod
    def add(self, flow: CapitalFlow) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, flow: CapitalFlow) -> None:
        raise NotImplementedError


class QuoteProviderPort(ABC):
    """Port for market data from a third-party quote API."""

    @abstractmethod
    def get_quote(self, symbol: str) -> Optional[StockQuote]:
        """Return the latest quote, or None when the symbol is unknown or
        the provider is unreachable."""
        raise NotImplementedError

    @abstractmethod
    def get_chart(self, symbol: str, range_: str, interval: str) -> list[Candle]:
        """Return OHLCV candles ordered by time ascending."""
        raise NotImplementedError


class InsightModelPort(ABC):
    """Port for a hosted language model that answers with JSON text."""

    @abstractmethod
    def generate(self, variables: dict[str, str]) -> str:
        """Render the insight prompt with ``variables`` and return the raw
        model output.

        Raises:
            InsightGenerationError: If the provider call fails or returns nothing.
        """
        raise NotImplementedError


class PasswordHasherPort(ABC):
    """Port for one-way password hashing."""

    @abstractmethod
    def hash(self, password: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def verify(self, password: str, password_hash: str) -> bool:
        raise NotImplementedError


class TokenServicePort(ABC):
    """Port for issuing and validating session tokens."""

    @abstractmethod
    def issue(self, user_id: str) -> tuple[str, int]:
        """Return a signed token for the user and its lifetime in seconds."""
        raise NotImplementedError

    @abstractmethod
    def decode(self, token: str) -> str:
        """Return the user id carried by a token.

        Raises:
            AuthenticationRequiredError: If the token is invalid or expired.
        """
        raise NotImplementedError


class CachePort(ABC):
    """Port for a process-local key/value cache with expiry."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError
