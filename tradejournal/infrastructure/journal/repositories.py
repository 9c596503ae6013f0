"""
Adapters: Journal persistence.

Implements the UserRepository, TradeRepository, PortfolioRepository and
CapitalFlowRepository ports on a SQLAlchemy session.
Each write commits its own transaction; bulk writes commit once.
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from tradejournal.domain.journal.entities import (
    CapitalFlow,
    CapitalFlowKind,
    IntradayTrade,
    Mood,
    PortfolioStock,
    TradeType,
    User,
    utcnow,
)
from tradejournal.domain.journal.ports import (
    CapitalFlowRepository,
    PortfolioRepository,
    TradeRepository,
    UserRepository,
)
from tradejournal.infrastructure.journal.models import (
    DepositModel,
    IntradayTradeModel,
    PortfolioStockModel,
    UserModel,
    WithdrawalModel,
)

logger = logging.getLogger(__name__)


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops the offset on the way back.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class _SessionRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def _commit(self) -> None:
        try:
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


def _user_to_entity(row: UserModel) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        name=row.name,
        initial_capital=row.initial_capital,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


class SqlUserRepository(_SessionRepository, UserRepository):
    def get_by_id(self, user_id: str) -> Optional[User]:
        row = self._session.get(UserModel, user_id)
        return _user_to_entity(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        row = self._session.scalar(select(UserModel).where(UserModel.email == email))
        return _user_to_entity(row) if row else None

    def add(self, user: User) -> None:
        self._session.add(
            UserModel(
                id=user.id,
                email=user.email,
                password_hash=user.password_hash,
                name=user.name,
                initial_capital=user.initial_capital,
                created_at=user.created_at,
                updated_at=user.updated_at,
            )
        )
        self._commit()

    def save(self, user: User) -> None:
        row = self._session.get(UserModel, user.id)
        if row is None:
            return
        row.email = user.email
        row.password_hash = user.password_hash
        row.name = user.name
        row.initial_capital = user.initial_capital
        row.updated_at = user.updated_at
        self._commit()

    def reset_data(self, user_id: str) -> None:
        """Remove every journal record of the user and zero the initial
        capital, in one transaction."""
        for model in (IntradayTradeModel, PortfolioStockModel, DepositModel, WithdrawalModel):
            self._session.execute(delete(model).where(model.user_id == user_id))
        self._session.execute(
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(initial_capital=0.0, updated_at=utcnow())
        )
        self._commit()
        logger.info("Reset journal data for user id=%s", user_id)


# ---------------------------------------------------------------------------
# Intraday trades
# ---------------------------------------------------------------------------


def _trade_to_entity(row: IntradayTradeModel) -> IntradayTrade:
    return IntradayTrade(
        id=row.id,
        user_id=row.user_id,
        trade_date=row.trade_date,
        day=row.day,
        script=row.script,
        trade_type=TradeType(row.trade_type),
        quantity=row.quantity,
        buy_price=row.buy_price,
        sell_price=row.sell_price,
        points=row.points,
        profit_loss=row.profit_loss,
        charges=row.charges,
        net_profit_loss=row.net_profit_loss,
        follow_setup=row.follow_setup,
        mood=Mood(row.mood),
        remarks=row.remarks,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _copy_trade(trade: IntradayTrade, row: IntradayTradeModel) -> IntradayTradeModel:
    row.trade_date = trade.trade_date
    row.day = trade.day
    row.script = trade.script
    row.trade_type = trade.trade_type.value
    row.quantity = trade.quantity
    row.buy_price = trade.buy_price
    row.sell_price = trade.sell_price
    row.points = trade.points
    row.profit_loss = trade.profit_loss
    row.charges = trade.charges
    row.net_profit_loss = trade.net_profit_loss
    row.follow_setup = trade.follow_setup
    row.mood = trade.mood.value
    row.remarks = trade.remarks
    row.updated_at = trade.updated_at
    return row


def _new_trade_row(trade: IntradayTrade) -> IntradayTradeModel:
    row = IntradayTradeModel(id=trade.id, user_id=trade.user_id, created_at=trade.created_at)
    return _copy_trade(trade, row)


class SqlTradeRepository(_SessionRepository, TradeRepository):
    _newest_first = (IntradayTradeModel.trade_date.desc(), IntradayTradeModel.created_at.desc())

    def list_for_user(
        self,
        user_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[IntradayTrade]:
        stmt = select(IntradayTradeModel).where(IntradayTradeModel.user_id == user_id)
        if start is not None:
            stmt = stmt.where(IntradayTradeModel.trade_date >= start)
        if end is not None:
            stmt = stmt.where(IntradayTradeModel.trade_date <= end)
        rows = self._session.scalars(stmt.order_by(*self._newest_first)).all()
        return [_trade_to_entity(row) for row in rows]

    def page_for_user(
        self, user_id: str, offset: int, limit: int
    ) -> tuple[list[IntradayTrade], int]:
        owned = IntradayTradeModel.user_id == user_id
        total = self._session.scalar(
            select(func.count()).select_from(IntradayTradeModel).where(owned)
        )
        rows = self._session.scalars(
            select(IntradayTradeModel)
            .where(owned)
            .order_by(*self._newest_first)
            .offset(offset)
            .limit(limit)
        ).all()
        return [_trade_to_entity(row) for row in rows], total or 0

    def get(self, user_id: str, trade_id: str) -> Optional[IntradayTrade]:
        row = self._session.scalar(
            select(IntradayTradeModel).where(
                IntradayTradeModel.id == trade_id,
                IntradayTradeModel.user_id == user_id,
            )
        )
        return _trade_to_entity(row) if row else None

    def add(self, trade: IntradayTrade) -> None:
        self._session.add(_new_trade_row(trade))
        self._commit()

    def add_many(self, trades: list[IntradayTrade]) -> int:
        if not trades:
            return 0
        self._session.add_all([_new_trade_row(trade) for trade in trades])
        self._commit()
        return len(trades)

    def save(self, trade: IntradayTrade) -> None:
        row = self._session.get(IntradayTradeModel, trade.id)
        if row is None or row.user_id != trade.user_id:
            return
        _copy_trade(trade, row)
        self._commit()

    def delete(self, trade: IntradayTrade) -> None:
        self._session.execute(
            delete(IntradayTradeModel).where(
                IntradayTradeModel.id == trade.id,
                IntradayTradeModel.user_id == trade.user_id,
            )
        )
        self._commit()


# ---------------------------------------------------------------------------
# Portfolio
# ---------------------------------------------------------------------------


def _holding_to_entity(row: PortfolioStockModel) -> PortfolioStock:
    return PortfolioStock(
        id=row.id,
        user_id=row.user_id,
        symbol=row.symbol,
        name=row.name,
        average_price=row.average_price,
        quantity=row.quantity,
        current_price=row.current_price,
        profit_loss=row.profit_loss,
        profit_loss_percent=row.profit_loss_percent,
        last_price_update=_aware(row.last_price_update),
        purchase_date=row.purchase_date,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _copy_holding(holding: PortfolioStock, row: PortfolioStockModel) -> PortfolioStockModel:
    row.symbol = holding.symbol
    row.name = holding.name
    row.average_price = holding.average_price
    row.quantity = holding.quantity
    row.current_price = holding.current_price
    row.profit_loss = holding.profit_loss
    row.profit_loss_percent = holding.profit_loss_percent
    row.last_price_update = holding.last_price_update
    row.purchase_date = holding.purchase_date
    row.updated_at = holding.updated_at
    return row


class SqlPortfolioRepository(_SessionRepository, PortfolioRepository):
    def list_for_user(self, user_id: str) -> list[PortfolioStock]:
        rows = self._session.scalars(
            select(PortfolioStockModel)
            .where(PortfolioStockModel.user_id == user_id)
            .order_by(PortfolioStockModel.symbol)
        ).all()
        return [_holding_to_entity(row) for row in rows]

    def get(self, user_id: str, holding_id: str) -> Optional[PortfolioStock]:
        row = self._session.scalar(
            select(PortfolioStockModel).where(
                PortfolioStockModel.id == holding_id,
                PortfolioStockModel.user_id == user_id,
            )
        )
        return _holding_to_entity(row) if row else None

    def get_by_symbol(self, user_id: str, symbol: str) -> Optional[PortfolioStock]:
        row = self._session.scalar(
            select(PortfolioStockModel).where(
                PortfolioStockModel.user_id == user_id,
                PortfolioStockModel.symbol == symbol,
            )
        )
        return _holding_to_entity(row) if row else None

    def add(self, holding: PortfolioStock) -> None:
        row = PortfolioStockModel(
            id=holding.id, user_id=holding.user_id, created_at=holding.created_at
        )
        self._session.add(_copy_holding(holding, row))
        self._commit()

    def save(self, holding: PortfolioStock) -> None:
        self.save_many([holding])

    def save_many(self, holdings: list[PortfolioStock]) -> None:
        for holding in holdings:
            row = self._session.get(PortfolioStockModel, holding.id)
            if row is not None and row.user_id == holding.user_id:
                _copy_holding(holding, row)
        self._commit()

    def delete(self, holding: PortfolioStock) -> None:
        self._session.execute(
            delete(PortfolioStockModel).where(
                PortfolioStockModel.id == holding.id,
                PortfolioStockModel.user_id == holding.user_id,
            )
        )
        self._commit()


# ---------------------------------------------------------------------------
# Deposits and withdrawals
# ---------------------------------------------------------------------------

_FLOW_MODELS = {
    CapitalFlowKind.DEPOSIT: DepositModel,
    CapitalFlowKind.WITHDRAWAL: WithdrawalModel,
}


class SqlCapitalFlowRepository(_SessionRepository, CapitalFlowRepository):
    def list_for_user(self, user_id: str, kind: CapitalFlowKind) -> list[CapitalFlow]:
        model = _FLOW_MODELS[kind]
        rows = self._session.scalars(
            select(model)
            .where(model.user_id == user_id)
            .order_by(model.flow_date.desc(), model.created_at.desc())
        ).all()
        return [self._to_entity(row, kind) for row in rows]

    def get(
        self, user_id: str, kind: CapitalFlowKind, flow_id: str
    ) -> Optional[CapitalFlow]:
        model = _FLOW_MODELS[kind]
        row = self._session.scalar(
            select(model).where(model.id == flow_id, model.user_id == user_id)
        )
        return self._to_entity(row, kind) if row else None

    def add(self, flow: CapitalFlow) -> None:
        model = _FLOW_MODELS[flow.kind]
        self._session.add(
            model(
                id=flow.id,
                user_id=flow.user_id,
                amount=flow.amount,
                flow_date=flow.date,
                reason=flow.reason,
                created_at=flow.created_at,
            )
        )
        self._commit()

    def delete(self, flow: CapitalFlow) -> None:
        model = _FLOW_MODELS[flow.kind]
        self._session.execute(
            delete(model).where(model.id == flow.id, model.user_id == flow.user_id)
        )
        self._commit()

    @staticmethod
    def _to_entity(row, kind: CapitalFlowKind) -> CapitalFlow:
        return CapitalFlow(
            id=row.id,
            user_id=row.user_id,
            kind=kind,
            amount=row.amount,
            date=row.flow_date,
            reason=row.reason,
            created_at=_aware(row.created_at),
        )
