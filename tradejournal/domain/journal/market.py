"""
NSE/BSE market conventions: symbol suffixes and trading hours.
"""

from datetime import datetime, time, timedelta, timezone

IST = timezone(timedelta(hours=5, minutes=30), name="IST")
MARKET_OPEN = time(9, 15)
MARKET_CLOSE = time(15, 30)
EXCHANGE_SUFFIXES = (".NS", ".BO")


def normalize_symbol(symbol: str) -> str:
    """Upper-case a ticker and default it to NSE when no exchange suffix is given."""
    normalized = symbol.strip().upper()
    if not any(suffix in normalized for suffix in EXCHANGE_SUFFIXES):
        normalized = f"{normalized}.NS"
    return normalized


def is_market_open(now: datetime) -> bool:
    """True during regular NSE hours, Monday to Friday 09:15-15:30 IST.

    Exchange holidays are not taken into account.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(IST)
    if local.weekday() >= 5:
        return False
    return MARKET_OPEN <= local.time().replace(second=0, microsecond=0) <= MARKET_CLOSE
