"""
Use cases: profile, password, capital flows and account reset.

Input: user id plus the profile/flow commands
Output: ProfileResult, User, CapitalFlow, CapitalFlowList
Side effects: Updates users, inserts/deletes deposits and withdrawals,
deletes all journal data on reset.
Failure cases: UserNotFoundError, AuthenticationRequiredError,
CapitalFlowNotFoundError.
"""

import logging

from tradejournal.application.journal.dtos import (
    AddCapitalFlowCommand,
    CapitalFlowList,
    ChangePasswordCommand,
    ProfileResult,
    UpdateProfileCommand,
)
from tradejournal.domain.journal.entities import CapitalFlow, CapitalFlowKind, User, utcnow
from tradejournal.domain.journal.errors import (
    AuthenticationRequiredError,
    CapitalFlowNotFoundError,
    UserNotFoundError,
)
from tradejournal.domain.journal.ports import (
    CapitalFlowRepository,
    PasswordHasherPort,
    TradeRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


def _require_user(user_repo: UserRepository, user_id: str) -> User:
    user = user_repo.get_by_id(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


class GetProfileUseCase:
    """Builds the profile summary: capital movements and realised P&L."""

    def __init__(
        self,
        user_repo: UserRepository,
        flow_repo: CapitalFlowRepository,
        trade_repo: TradeRepository,
    ) -> None:
        self._user_repo = user_repo
        self._flow_repo = flow_repo
        self._trade_repo = trade_repo

    def execute(self, user_id: str) -> ProfileResult:
        user = _require_user(self._user_repo, user_id)
        deposits = sum(
            f.amount for f in self._flow_repo.list_for_user(user_id, CapitalFlowKind.DEPOSIT)
        )
        withdrawals = sum(
            f.amount
            for f in self._flow_repo.list_for_user(user_id, CapitalFlowKind.WITHDRAWAL)
        )
        realized = sum(t.net_profit_loss for t in self._trade_repo.list_for_user(user_id))
        return ProfileResult(
            user=user,
            total_deposits=deposits,
            total_withdrawals=withdrawals,
            current_capital=user.initial_capital + deposits - withdrawals,
            realized_pl=realized,
        )


class UpdateProfileUseCase:
    def __init__(self, user_repo: UserRepository) -> None:
        self._user_repo = user_repo

    def execute(self, command: UpdateProfileCommand) -> User:
        user = _require_user(self._user_repo, command.user_id)
        user.name = command.name.strip()
        if command.initial_capital is not None:
            user.initial_capital = command.initial_capital
        user.updated_at = utcnow()
        self._user_repo.save(user)
        logger.info("Updated profile for user id=%s", user.id)
        return user


class ChangePasswordUseCase:
    """Replaces the password after verifying the current one."""

    def __init__(self, user_repo: UserRepository, hasher: PasswordHasherPort) -> None:
        self._user_repo = user_repo
        self._hasher = hasher

    def execute(self, command: ChangePasswordCommand) -> None:
        user = _require_user(self._user_repo, command.user_id)
        if not self._hasher.verify(command.current_password, user.password_hash):
            raise AuthenticationRequiredError("Current password is incorrect")
        user.password_hash = self._hasher.hash(command.new_password)
        user.updated_at = utcnow()
        self._user_repo.save(user)
        logger.info("Password changed for user id=%s", user.id)


class ResetAccountUseCase:
    """Wipes every trade, holding and capital flow of a user.

    The deletion and the capital reset happen in a single transaction.
    """

    def __init__(self, user_repo: UserRepository) -> None:
        self._user_repo = user_repo

    def execute(self, user_id: str) -> None:
        _require_user(self._user_repo, user_id)
        self._user_repo.reset_data(user_id)
        logger.warning("Reset all journal data for user id=%s", user_id)


class ListCapitalFlowsUseCase:
    def __init__(self, flow_repo: CapitalFlowRepository) -> None:
        self._flow_repo = flow_repo

    def execute(self, user_id: str, kind: CapitalFlowKind) -> CapitalFlowList:
        flows = self._flow_repo.list_for_user(user_id, kind)
        return CapitalFlowList(flows=flows, total=sum(f.amount for f in flows))


class AddCapitalFlowUseCase:
    def __init__(self, flow_repo: CapitalFlowRepository) -> None:
        self._flow_repo = flow_repo

    def execute(self, command: AddCapitalFlowCommand) -> CapitalFlow:
        flow = CapitalFlow(
            user_id=command.user_id,
            kind=command.kind,
            amount=command.amount,
            date=command.date,
            reason=command.reason,
        )
        self._flow_repo.add(flow)
        logger.info(
            "Recorded %s of %.2f for user id=%s", flow.kind.value, flow.amount, flow.user_id
        )
        return flow


class DeleteCapitalFlowUseCase:
    def __init__(self, flow_repo: CapitalFlowRepository) -> None:
        self._flow_repo = flow_repo

    def execute(self, user_id: str, kind: CapitalFlowKind, flow_id: str) -> None:
        flow = self._flow_repo.get(user_id, kind, flow_id)
        if flow is None:
            raise CapitalFlowNotFoundError(kind.value, flow_id)
        self._flow_repo.delete(flow)
