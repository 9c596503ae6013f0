"""
Domain-specific errors for the journal bounded context.

All errors raised from the domain and application layers are defined here.
These are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""


class JournalDomainError(Exception):
    """Base error for all journal domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class AuthenticationRequiredError(JournalDomainError):
    """Raised when a request carries no valid session."""

    def __init__(self, reason: str = "Unauthorized") -> None:
        super().__init__(reason)
        self.reason = reason


class InvalidCredentialsError(JournalDomainError):
    """Raised when an email/password pair does not match."""

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class EmailAlreadyRegisteredError(JournalDomainError):
    """Raised on signup with an email that already has an account."""

    def __init__(self, email: str) -> None:
        super().__init__("User with this email already exists")
        self.email = email


class UserNotFoundError(JournalDomainError):
    """Raised when a user cannot be found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class TradeNotFoundError(JournalDomainError):
    """Raised when a trade does not exist or belongs to another user."""

    def __init__(self, trade_id: str) -> None:
        super().__init__(f"Trade not found: {trade_id}")
        self.trade_id = trade_id


class HoldingNotFoundError(JournalDomainError):
    """Raised when a portfolio holding does not exist or belongs to another user."""

    def __init__(self, holding_id: str) -> None:
        super().__init__(f"Stock not found: {holding_id}")
        self.holding_id = holding_id


class DuplicateHoldingError(JournalDomainError):
    """Raised when a user adds a symbol already held in the portfolio."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"Stock already exists in portfolio: {symbol}")
        self.symbol = symbol


class CapitalFlowNotFoundError(JournalDomainError):
    """Raised when a deposit or withdrawal cannot be found for the user."""

    def __init__(self, kind: str, flow_id: str) -> None:
        super().__init__(f"{kind.capitalize()} not found: {flow_id}")
        self.kind = kind
        self.flow_id = flow_id


class SymbolNotFoundError(JournalDomainError):
    """Raised when the quote provider knows nothing about a symbol."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"Stock not found: {symbol}")
        self.symbol = symbol


class NoTradesError(JournalDomainError):
    """Raised when an analysis needs trades and the user has none."""

    def __init__(self) -> None:
        super().__init__("Please log some trades first to generate AI insights.")


class InsightGenerationError(JournalDomainError):
    """Raised when the LLM call fails or returns unusable output."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class InvalidPeriodError(JournalDomainError):
    """Raised when a report period or date range is not valid."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class CsvImportError(JournalDomainError):
    """Raised when an uploaded CSV cannot be imported at all."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class InvalidCalculationError(JournalDomainError):
    """Raised when calculator inputs cannot produce a result."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
