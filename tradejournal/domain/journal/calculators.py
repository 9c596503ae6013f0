"""
Trading calculators for Indian equity and index derivatives.

Implements the tools offered next to the journal:
- P&L with a full breakdown of statutory charges
- Position sizing from account risk
- Risk/reward of a planned trade
- F&O lot sizing from a risk budget and capital
"""

import math
from dataclasses import dataclass
from typing import Optional

from tradejournal.domain.journal.entities import TradeType
from tradejournal.domain.journal.errors import InvalidCalculationError

# Discount-broker charge schedule (fractions of traded value).
BROKERAGE_PER_ORDER = 20.0
STT_RATE = 0.001  # sell side
EXCHANGE_RATE = 0.0000345  # turnover
SEBI_RATE = 0.000001  # turnover, Rs 10 per crore
STAMP_DUTY_RATE = 0.00015  # buy side
GST_RATE = 0.18  # on brokerage + exchange charges

MARGIN_PERCENT = 12.0


@dataclass(frozen=True)
class Instrument:
    name: str
    lot_size: int
    approx_spot_price: float
    margin_percent: float = MARGIN_PERCENT
    tick_size: float = 0.05

    @property
    def margin_per_lot(self) -> float:
        return self.approx_spot_price * self.lot_size * self.margin_percent / 100


# Spot prices are rough levels used only for the margin estimate.
INSTRUMENTS: dict[str, Instrument] = {
    "NIFTY": Instrument("NIFTY 50", 75, 24000.0),
    "BANKNIFTY": Instrument("BANK NIFTY", 35, 52000.0),
    "FINNIFTY": Instrument("FIN NIFTY", 65, 24000.0),
    "MIDCPNIFTY": Instrument("MIDCAP NIFTY", 140, 13000.0),
    "NIFTYNXT50": Instrument("NIFTY NEXT 50", 25, 70000.0),
}


@dataclass(frozen=True)
class ChargesBreakdown:
    brokerage: float
    stt: float
    exchange_charges: float
    sebi_charges: float
    stamp_duty: float
    gst: float

    @property
    def total(self) -> float:
        return (
            self.brokerage
            + self.stt
            + self.exchange_charges
            + self.sebi_charges
            + self.stamp_duty
            + self.gst
        )


@dataclass(frozen=True)
class ProfitLossResult:
    gross_pl: float
    net_pl: float
    gross_pl_percent: float
    net_pl_percent: float
    total_charges: float
    charges: ChargesBreakdown
    turnover: float
    buy_value: float
    sell_value: float
    is_profit: bool


@dataclass(frozen=True)
class PositionSizeResult:
    risk_amount: float
    risk_per_share: float
    shares: int
    position_value: float
    position_percent: float
    actual_risk_amount: float
    capital_at_risk_percent: float
    is_long: bool
    risk_level: str


@dataclass(frozen=True)
class RiskRewardResult:
    is_long: bool
    risk_per_share: float
    reward_per_share: float
    total_risk: float
    total_reward: float
    risk_reward_ratio: float
    risk_percent: float
    reward_percent: float
    breakeven: float
    position_value: float


@dataclass(frozen=True)
class LotSizeResult:
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


def trade_charges(buy_value: float, sell_value: float) -> ChargesBreakdown:
    """Charges for one round trip (one buy order, one sell order)."""
    turnover = buy_value + sell_value
    brokerage = BROKERAGE_PER_ORDER * 2
    exchange = turnover * EXCHANGE_RATE
    return ChargesBreakdown(
        brokerage=brokerage,
        stt=sell_value * STT_RATE,
        exchange_charges=exchange,
        sebi_charges=turnover * SEBI_RATE,
        stamp_duty=buy_value * STAMP_DUTY_RATE,
        gst=(brokerage + exchange) * GST_RATE,
    )


def calculate_profit_loss(
    entry_price: float,
    exit_price: float,
    quantity: float,
    trade_type: TradeType = TradeType.BUY,
) -> ProfitLossResult:
    """P&L of a round trip after brokerage, taxes and exchange fees.

    For a SELL (short) trade the entry is the sell leg.

    Raises:
        InvalidCalculationError: If any input is not positive.
    """
    if entry_price <= 0 or exit_price <= 0 or quantity <= 0:
        raise InvalidCalculationError("Entry price, exit price and quantity must be positive")

    buy_value = entry_price * quantity
    sell_value = exit_price * quantity
    if trade_type is TradeType.BUY:
        gross = (exit_price - entry_price) * quantity
    else:
        gross = (entry_price - exit_price) * quantity

    charges = trade_charges(buy_value, sell_value)
    net = gross - charges.total
    return ProfitLossResult(
        gross_pl=gross,
        net_pl=net,
        gross_pl_percent=gross / buy_value * 100,
        net_pl_percent=net / buy_value * 100,
        total_charges=charges.total,
        charges=charges,
        turnover=buy_value + sell_value,
        buy_value=buy_value,
        sell_value=sell_value,
        is_profit=net > 0,
    )


def risk_level(risk_percent: float) -> str:
    if risk_percent <= 1:
        return "Conservative"
    if risk_percent <= 2:
        return "Moderate"
    if risk_percent <= 3:
        return "Aggressive"
    return "High Risk"


def calculate_position_size(
    account_size: float,
    risk_percent: float,
    entry_price: float,
    stop_loss: float,
) -> PositionSizeResult:
    """Largest whole-share position whose stop-out loses at most the risk budget.

    Raises:
        InvalidCalculationError: If entry equals stop loss or inputs are not positive.
    """
    if account_size <= 0 or risk_percent <= 0 or entry_price <= 0 or stop_loss <= 0:
        raise InvalidCalculationError("All inputs must be positive")
    risk_per_share = abs(entry_price - stop_loss)
    if risk_per_share == 0:
        raise InvalidCalculationError("Entry price and stop loss must differ")

    risk_amount = account_size * risk_percent / 100
    shares = math.floor(risk_amount / risk_per_share)
    position_value = shares * entry_price
    actual_risk = shares * risk_per_share
    return PositionSizeResult(
        risk_amount=risk_amount,
        risk_per_share=risk_per_share,
        shares=shares,
        position_value=position_value,
        position_percent=position_value / account_size * 100,
        actual_risk_amount=actual_risk,
        capital_at_risk_percent=actual_risk / account_size * 100,
        is_long=stop_loss < entry_price,
        risk_level=risk_level(risk_percent),
    )


def calculate_risk_reward(
    entry_price: float,
    stop_loss: float,
    target_price: float,
    quantity: float,
) -> RiskRewardResult:
    if entry_price <= 0 or stop_loss <= 0 or target_price <= 0 or quantity <= 0:
        raise InvalidCalculationError("All inputs must be positive")

    risk_per_share = abs(entry_price - stop_loss)
    reward_per_share = abs(target_price - entry_price)
    return RiskRewardResult(
        is_long=stop_loss < entry_price,
        risk_per_share=risk_per_share,
        reward_per_share=reward_per_share,
        total_risk=risk_per_share * quantity,
        total_reward=reward_per_share * quantity,
        risk_reward_ratio=reward_per_share / risk_per_share if risk_per_share > 0 else 0.0,
        risk_percent=risk_per_share / entry_price * 100,
        reward_percent=reward_per_share / entry_price * 100,
        breakeven=entry_price,
        position_value=entry_price * quantity,
    )


def calculate_lot_size(
    instrument: str,
    risk_amount: float,
    stop_loss_points: float,
    capital: float = 0.0,
) -> LotSizeResult:
    """Number of F&O lots that fit both a risk budget and the available margin.

    A capital of zero means "no capital limit".

    Raises:
        InvalidCalculationError: On an unknown instrument or non-positive risk inputs.
    """
    contract = INSTRUMENTS.get(instrument.upper())
    if contract is None:
        raise InvalidCalculationError(f"Unknown instrument: {instrument}")
    if risk_amount <= 0 or stop_loss_points <= 0:
        raise InvalidCalculationError("Risk amount and stop loss points must be positive")
    if capital < 0:
        raise InvalidCalculationError("Capital must not be negative")

    risk_per_lot = stop_loss_points * contract.lot_size
    lots_by_risk = math.floor(risk_amount / risk_per_lot)
    margin_per_lot = contract.margin_per_lot
    total_margin = lots_by_risk * margin_per_lot
    lots_by_capital = math.floor(capital / margin_per_lot) if capital > 0 else None
    recommended = (
        min(lots_by_risk, lots_by_capital) if lots_by_capital is not None else lots_by_risk
    )

    return LotSizeResult(
        instrument=instrument.upper(),
        instrument_name=contract.name,
        lot_size=contract.lot_size,
        risk_per_lot=risk_per_lot,
        lots_by_risk=lots_by_risk,
        total_quantity=lots_by_risk * contract.lot_size,
        actual_risk=lots_by_risk * risk_per_lot,
        margin_per_lot=margin_per_lot,
        total_margin_required=total_margin,
        is_capital_sufficient=capital == 0 or capital >= total_margin,
        lots_by_capital=lots_by_capital,
        recommended_lots=recommended,
        recommended_quantity=recommended * contract.lot_size,
        recommended_risk=recommended * risk_per_lot,
        recommended_margin=recommended * margin_per_lot,
    )
