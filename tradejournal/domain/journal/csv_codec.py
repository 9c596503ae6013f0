"""
CSV import and export of intraday trades.

Import accepts broker statements and spreadsheets with loosely named
headers: each column is mapped to a trade field from its header text,
optionally overridden by an explicit mapping. Export writes one row per
trade followed by a summary block.
"""

import csv
import io
import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from tradejournal.domain.journal.entities import IntradayTrade, Mood, TradeType
from tradejournal.domain.journal.errors import CsvImportError
from tradejournal.domain.journal.statistics import ReportStats

logger = logging.getLogger(__name__)

IGNORE = "ignore"
IMPORT_FIELDS = (
    "date",
    "script",
    "trade_type",
    "quantity",
    "entry_price",
    "exit_price",
    "profit_loss",
    "net_profit_loss",
    "charges",
    "follow_setup",
    "remarks",
    "mood",
)
REQUIRED_FIELDS = ("date", "script", "quantity", "entry_price", "exit_price")
TRUTHY = {"yes", "true", "1", "y"}
# API clients may name mapping targets in camelCase.
FIELD_ALIASES = {
    "tradeDate": "date",
    "type": "trade_type",
    "buySell": "trade_type",
    "entryPrice": "entry_price",
    "buyPrice": "entry_price",
    "exitPrice": "exit_price",
    "sellPrice": "exit_price",
    "profitLoss": "profit_loss",
    "netProfitLoss": "net_profit_loss",
    "followSetup": "follow_setup",
}

SUMMARY_MARKER = "=== REPORT SUMMARY ==="

EXPORT_HEADERS = [
    "Date",
    "Script",
    "Type",
    "Quantity",
    "Buy Price",
    "Sell Price",
    "P&L",
    "Charges",
    "Net P&L",
    "Follow Setup",
    "Mood",
    "Remarks",
]


@dataclass
class ImportOutcome:
    """Trades parsed from a CSV plus a row-numbered account of what failed."""

    trades: list[IntradayTrade] = field(default_factory=list)
    failed: int = 0
    errors: list[str] = field(default_factory=list)


def auto_map_column(header: str) -> str:
    """Guess which trade field a CSV header refers to."""
    name = header.strip().lower()

    if "date" in name:
        return "date"
    if "script" in name or "symbol" in name or "stock" in name:
        return "script"
    if ("buy" in name and "sell" in name) or name in ("type", "side"):
        return "trade_type"
    if "quantity" in name or name in ("qty", "lot"):
        return "quantity"
    if "entry" in name or "buy price" in name:
        return "entry_price"
    if "exit" in name or "sell price" in name:
        return "exit_price"
    if "point" in name and "profit" not in name:
        return IGNORE
    if "charge" in name or "brokerage" in name or name in ("fees", "fee"):
        return "charges"
    if name.startswith("net ") and auto_map_column(name[4:]) == "profit_loss":
        return "net_profit_loss"
    if "profit" in name or "loss" in name or name in ("p&l", "p/l", "pl"):
        return "profit_loss"
    if "setup" in name or "follow" in name:
        return "follow_setup"
    if "remark" in name or "comment" in name or "note" in name:
        return "remarks"
    if "mood" in name or "emotion" in name:
        return "mood"
    return IGNORE


def parse_trade_date(text: str) -> date:
    """Parse YYYY-MM-DD, DD-MM-YYYY or MM-DD-YYYY ('-' or '/' separated).

    With the year last, a first part above 12 is the day; otherwise the
    date is read month first. Two-digit years are taken as 20YY.

    Raises:
        ValueError: If the text is not a valid date in one of these formats.
    """
    parts = text.strip().replace("/", "-").split("-")
    if len(parts) != 3 or not all(p.strip().isdigit() for p in parts):
        raise ValueError(f"Unrecognised date: {text!r}")

    first, second, third = (int(p) for p in parts)
    if len(parts[0].strip()) == 4 or first > 31:
        year, month, day = first, second, third
    elif len(parts[2].strip()) == 4 or third > 31:
        year = third
        if first > 12:
            day, month = first, second
        else:
            month, day = first, second
    else:
        day, month, year = first, second, third
    if year < 100:
        year += 2000
    try:
        return date(year, month, day)
    except ValueError:
        raise ValueError(f"Invalid date: {text!r}") from None


def _parse_number(text: str) -> float:
    cleaned = text.strip().replace(",", "").replace("₹", "")
    value = float(cleaned)
    if not math.isfinite(value):
        raise ValueError(f"not a finite number: {text!r}")
    return value


def _is_blank_row(row: list[str]) -> bool:
    return all(not cell.strip() or cell.strip() == "0" for cell in row)


def _column_index(
    headers: list[str], mapping: Optional[dict[str, str]]
) -> dict[str, int]:
    overrides = {
        column: FIELD_ALIASES.get(target, target)
        for column, target in (mapping or {}).items()
    }
    index: dict[str, int] = {}
    for position, header in enumerate(headers):
        target = overrides.get(header, auto_map_column(header))
        if target in IMPORT_FIELDS and target not in index:
            index[target] = position
    return index


def _build_trade(
    row: list[str], columns: dict[str, int], user_id: str
) -> IntradayTrade:
    def cell(name: str) -> str:
        position = columns.get(name)
        if position is None or position >= len(row):
            return ""
        return row[position].strip()

    script = cell("script").upper()
    if not script:
        raise ValueError("missing script")
    try:
        quantity = int(_parse_number(cell("quantity")))
        entry_price = _parse_number(cell("entry_price"))
        exit_price = _parse_number(cell("exit_price"))
    except ValueError:
        raise ValueError("invalid quantity or price") from None
    if quantity <= 0 or entry_price <= 0 or exit_price <= 0:
        raise ValueError("quantity and prices must be positive")

    trade_date = parse_trade_date(cell("date"))

    side = cell("trade_type").upper()
    trade_type = TradeType.SELL if side in ("SELL", "S", "SHORT") else TradeType.BUY

    setup_text = cell("follow_setup").lower()
    follow_setup = setup_text in TRUTHY if "follow_setup" in columns and setup_text else True

    mood_text = cell("mood").upper()
    mood = Mood(mood_text) if mood_text in Mood.__members__ else Mood.CALM

    trade = IntradayTrade(
        user_id=user_id,
        trade_date=trade_date,
        script=script[:50],
        trade_type=trade_type,
        quantity=quantity,
        buy_price=entry_price,
        sell_price=exit_price,
        follow_setup=follow_setup,
        mood=mood,
        remarks=cell("remarks")[:500] or None,
    )
    trade.recalculate()

    charges_text = cell("charges")
    # A lone P&L column is a statement's net P&L; "Net P&L" wins over gross.
    statement_text = cell("net_profit_loss") or cell("profit_loss")
    if charges_text:
        try:
            charges = _parse_number(charges_text)
        except ValueError:
            raise ValueError("invalid charges") from None
        if charges < 0:
            raise ValueError("charges must not be negative")
        trade.charges = charges
        trade.recalculate()
    elif statement_text:
        statement_pl = _parse_number(statement_text)
        trade.charges = max(trade.profit_loss - statement_pl, 0.0)
        trade.recalculate()
    return trade


def parse_trades_csv(
    content: str,
    user_id: str,
    mapping: Optional[dict[str, str]] = None,
) -> ImportOutcome:
    """Parse CSV text into trades for a user.

    Raises:
        CsvImportError: If the file is empty or a required column is missing.
    """
    rows = list(csv.reader(io.StringIO(content.lstrip("\ufeff"))))
    if not rows:
        raise CsvImportError("CSV file is empty")

    headers = [h.strip() for h in rows[0]]
    columns = _column_index(headers, mapping)
    missing = [name for name in REQUIRED_FIELDS if name not in columns]
    if missing:
        raise CsvImportError(f"Missing required columns: {', '.join(missing)}")

    outcome = ImportOutcome()
    for row_number, row in enumerate(rows[1:], start=2):
        if row and row[0].strip() == SUMMARY_MARKER:
            break
        if _is_blank_row(row):
            continue
        try:
            outcome.trades.append(_build_trade(row, columns, user_id))
        except ValueError as exc:
            outcome.failed += 1
            outcome.errors.append(f"Row {row_number}: {exc}")

    logger.info(
        "Parsed CSV import: %d trades, %d failed", len(outcome.trades), outcome.failed
    )
    return outcome


def export_trades_csv(
    trades: list[IntradayTrade], stats: ReportStats, period_label: str
) -> str:
    """Render trades and a report summary as CSV text."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for trade in trades:
        writer.writerow(
            [
                trade.trade_date.isoformat(),
                trade.script,
                trade.trade_type.value,
                trade.quantity,
                f"{trade.buy_price:.2f}",
                f"{trade.sell_price:.2f}",
                f"{trade.profit_loss:.2f}",
                f"{trade.charges:.2f}",
                f"{trade.net_profit_loss:.2f}",
                "Yes" if trade.follow_setup else "No",
                trade.mood.value,
                trade.remarks or "",
            ]
        )

    writer.writerow([])
    writer.writerow([SUMMARY_MARKER])
    writer.writerow(["Period", period_label])
    writer.writerow(["Total Trades", stats.total_trades])
    writer.writerow(["Winning Trades", stats.winning_trades])
    writer.writerow(["Losing Trades", stats.losing_trades])
    writer.writerow(["Win Rate", f"{stats.win_rate:.1f}%"])
    writer.writerow(["Total P&L", f"{stats.total_profit_loss:.2f}"])
    writer.writerow(["Follow Setup Rate", f"{stats.follow_setup_rate:.1f}%"])
    return buffer.getvalue()
