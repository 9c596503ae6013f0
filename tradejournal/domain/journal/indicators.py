"""
Technical indicator overlays for price charts.

EMA and RSI are computed with pandas exponential smoothing, seeded with
the simple average of the first ``period`` values so the series match
the classic hand-rolled definitions:

- EMA:  ema = (x - ema) * 2 / (period + 1) + ema
- RSI:  Wilder smoothing of gains and losses, avg = (avg * (p - 1) + x) / p

Series that do not have enough input points come back empty.
"""

import logging

import pandas as pd

from tradejournal.domain.journal.entities import Candle, IndicatorPoint

logger = logging.getLogger(__name__)

EMA_FAST_PERIOD = 9
EMA_SLOW_PERIOD = 20
RSI_PERIOD = 14
RSI_EMA_PERIOD = 20


def _seeded_ewm(values: pd.Series, period: int, alpha: float) -> pd.Series:
    """Exponential smoothing whose first value is the SMA of ``period`` inputs.

    The result starts at the index of the last seed value.
    """
    seed = values.iloc[:period].mean()
    seeded = pd.concat(
        [pd.Series([seed], index=[values.index[period - 1]]), values.iloc[period:]]
    )
    return seeded.ewm(alpha=alpha, adjust=False).mean()


def ema_series(values: pd.Series, period: int) -> pd.Series:
    if period <= 0 or len(values) < period:
        return pd.Series(dtype=float)
    return _seeded_ewm(values.astype(float), period, alpha=2 / (period + 1))


def rsi_series(close: pd.Series, period: int = RSI_PERIOD) -> pd.Series:
    """Relative Strength Index with Wilder smoothing.

    Needs ``period + 1`` closes; the first value is aligned to the close at
    position ``period``. A zero average loss is treated as RS = 100.
    """
    if period <= 0 or len(close) < period + 1:
        return pd.Series(dtype=float)

    delta = close.astype(float).diff().iloc[1:]
    gains = delta.clip(lower=0)
    losses = (-delta).clip(lower=0)

    avg_gain = _seeded_ewm(gains, period, alpha=1 / period)
    avg_loss = _seeded_ewm(losses, period, alpha=1 / period)

    rs = (avg_gain / avg_loss.where(avg_loss != 0)).fillna(100.0)
    return 100 - (100 / (1 + rs))


def _to_points(series: pd.Series) -> list[IndicatorPoint]:
    return [IndicatorPoint(time=int(t), value=float(v)) for t, v in series.items()]


def _close_series(candles: list[Candle]) -> pd.Series:
    return pd.Series(
        [c.close for c in candles], index=[c.time for c in candles], dtype=float
    )


def ema(candles: list[Candle], period: int) -> list[IndicatorPoint]:
    """EMA of candle closes."""
    return _to_points(ema_series(_close_series(candles), period))


def rsi(candles: list[Candle], period: int = RSI_PERIOD) -> list[IndicatorPoint]:
    return _to_points(rsi_series(_close_series(candles), period))


def ema_of_points(points: list[IndicatorPoint], period: int) -> list[IndicatorPoint]:
    """EMA over an already computed indicator series (e.g. RSI)."""
    values = pd.Series(
        [p.value for p in points], index=[p.time for p in points], dtype=float
    )
    return _to_points(ema_series(values, period))


def chart_overlays(candles: list[Candle]) -> dict[str, list[IndicatorPoint]]:
    """Compute every overlay drawn on the stock chart."""
    rsi_points = rsi(candles, RSI_PERIOD)
    overlays = {
        "ema9": ema(candles, EMA_FAST_PERIOD),
        "ema20": ema(candles, EMA_SLOW_PERIOD),
        "rsi14": rsi_points,
        "rsiEma20": ema_of_points(rsi_points, RSI_EMA_PERIOD),
    }
    logger.debug(
        "Computed overlays for %d candles: %s",
        len(candles),
        {name: len(points) for name, points in overlays.items()},
    )
    return overlays
