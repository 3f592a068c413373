"""The action handlers and the context they run in."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from bdjuno.action_models import (
    Address,
    Balance,
    DelegationReward,
    Payload,
    ValidatorCommissionAmount,
    convert_coins,
    convert_dec_coins,
)
from bdjuno.sources import Sources

_log = logging.getLogger(__name__)


class ActionError(Exception):
    """Raised when an action cannot be executed."""


@dataclass
class ActionContext:
    """What an action handler needs: the latest chain height and the data sources."""

    latest_height: Callable[[], int]
    sources: Sources

    def get_height(self, payload: Optional[Payload]) -> int:
        """Return the height asked by the payload, or the latest one when none is given."""
        if payload is None or payload.input.height == 0:
            try:
                return self.latest_height()
            except Exception as exc:
                raise ActionError(
                    f"error while getting chain latest block height: {exc}"
                ) from exc
        return payload.input.height


ActionHandler = Callable[[ActionContext, Payload], Any]


def account_balance_handler(ctx: ActionContext, payload: Payload) -> Balance:
    """Return the balance of the payload's address."""
    _log.debug(
        "executing account balance action: address=%s height=%d",
        payload.address(),
        payload.input.height,
    )
    height = ctx.get_height(payload)
    try:
        balance = ctx.sources.bank.get_account_balance(payload.address(), height)
    except Exception as exc:
        raise ActionError(f"error while getting account balance: {exc}") from exc
    return Balance(coins=convert_coins(balance))


def delegation_reward_handler(ctx: ActionContext, payload: Payload) -> list[DelegationReward]:
    """Return the rewards of the payload's delegator, one entry per validator."""
    _log.debug(
        "executing delegation rewards action: address=%s height=%d",
        payload.address(),
        payload.input.height,
    )
    height = ctx.get_height(payload)
    try:
        rewards = ctx.sources.distribution.delegator_total_rewards(payload.address(), height)
    except Exception as exc:
        raise ActionError(f"error while getting delegator total rewards: {exc}") from exc
    return [
        DelegationReward(
            coins=convert_dec_coins(reward.reward),
            validator_address=reward.validator_address,
        )
        for reward in rewards
    ]


def delegator_withdraw_address_handler(ctx: ActionContext, payload: Payload) -> Address:
    """Return the withdraw address of the payload's delegator at the latest height."""
    _log.debug("executing delegator withdraw address action: address=%s", payload.address())
    height = ctx.get_height(None)
    try:
        withdraw_address = ctx.sources.distribution.delegator_withdraw_address(
            payload.address(), height
        )
    except Exception as exc:
        raise ActionError(f"error while getting delegator withdraw address: {exc}") from exc
    return Address(address=withdraw_address)


def validator_commission_amount_handler(
    ctx: ActionContext, payload: Payload
) -> ValidatorCommissionAmount:
    """Return the commission of the payload's validator at the latest height."""
    _log.debug(
        "executing validator commission action: address=%s height=%d",
        payload.address(),
        payload.input.height,
    )
    height = ctx.get_height(None)
    try:
        commission = ctx.sources.distribution.validator_commission(payload.address(), height)
    except Exception as exc:
        raise ActionError(f"error while getting validator commission: {exc}") from exc
    return ValidatorCommissionAmount(coins=convert_dec_coins(commission))