from decimal import Decimal

import pytest

from bdjuno.action_models import (
    Address,
    Payload,
    PayloadArgs,
    ResponseCoin,
    convert_dec_coins,
)
from bdjuno.coins import Coin, DecCoin
from bdjuno.handlers import (
    ActionContext,
    ActionError,
    account_balance_handler,
    delegation_reward_handler,
    delegator_withdraw_address_handler,
    validator_commission_amount_handler,
)
from bdjuno.sources import BankSource, DelegationDelegatorReward, DistributionSource, Sources

DELEGATOR = "cosmos1delegator"
VALIDATOR = "cosmosvaloper1validator"
WITHDRAW = "cosmos1withdraw"
LATEST = 42


class FakeBank(BankSource):
    def __init__(self, coins=(), failure=None):
        self.coins = list(coins)
        self.failure = failure
        self.calls = []

    def get_balances(self, addresses, height):
        return [(address, self.coins, height) for address in addresses]

    def get_supply(self, height):
        return self.coins

    def get_account_balance(self, address, height):
        self.calls.append((address, height))
        if self.failure:
            raise self.failure
        return self.coins


class FakeDistribution(DistributionSource):
    def __init__(self, commission=(), rewards=(), failure=None):
        self.commission = list(commission)
        self.rewards = list(rewards)
        self.failure = failure
        self.calls = []

    def _record(self, name, address, height):
        self.calls.append((name, address, height))
        if self.failure:
            raise self.failure

    def validator_commission(self, val_oper_addr, height):
        self._record("commission", val_oper_addr, height)
        return self.commission

    def delegator_total_rewards(self, delegator, height):
        self._record("rewards", delegator, height)
        return self.rewards

    def delegator_withdraw_address(self, delegator, height):
        self._record("withdraw", delegator, height)
        return WITHDRAW

    def community_pool(self, height):
        return []

    def params(self, height):
        return {}


def make_context(bank=None, distribution=None, latest=lambda: LATEST):
    return ActionContext(
        latest_height=latest,
        sources=Sources(bank=bank or FakeBank(), distribution=distribution or FakeDistribution()),
    )


def payload(address, height=0):
    return Payload(input=PayloadArgs(address=address, height=height))


def failing_latest():
    raise RuntimeError("node down")


def test_get_height_prefers_payload_height():
    ctx = make_context(latest=failing_latest)
    assert ctx.get_height(payload(DELEGATOR, 7)) == 7


def test_get_height_falls_back_to_latest():
    ctx = make_context()
    assert ctx.get_height(None) == LATEST
    assert ctx.get_height(payload(DELEGATOR, 0)) == LATEST


def test_get_height_wraps_node_errors():
    ctx = make_context(latest=failing_latest)
    with pytest.raises(ActionError, match="error while getting chain latest block height: node down"):
        ctx.get_height(None)


def test_account_balance_uses_payload_height():
    bank = FakeBank([Coin("uatom", 100)])
    result = account_balance_handler(make_context(bank=bank), payload(DELEGATOR, 5))
    assert result.coins == [ResponseCoin(amount="100", denom="uatom")]
    assert bank.calls == [(DELEGATOR, 5)]


def test_account_balance_uses_latest_height_when_missing():
    bank = FakeBank()
    result = account_balance_handler(make_context(bank=bank), payload(DELEGATOR))
    assert result.coins == []
    assert bank.calls == [(DELEGATOR, LATEST)]


def test_account_balance_wraps_source_errors():
    bank = FakeBank(failure=RuntimeError("boom"))
    with pytest.raises(ActionError, match="error while getting account balance: boom"):
        account_balance_handler(make_context(bank=bank), payload(DELEGATOR, 5))


def test_account_balance_reports_height_errors_before_querying():
    bank = FakeBank()
    with pytest.raises(ActionError, match="latest block height"):
        account_balance_handler(make_context(bank=bank, latest=failing_latest), payload(DELEGATOR))
    assert bank.calls == []


def test_delegation_reward_lists_each_validator():
    coins = [DecCoin("uatom", Decimal("3")), DecCoin("ustake", Decimal("0.25"))]
    rewards = [
        DelegationDelegatorReward(VALIDATOR, coins),
        DelegationDelegatorReward("cosmosvaloper1other", []),
    ]
    distribution = FakeDistribution(rewards=rewards)
    result = delegation_reward_handler(make_context(distribution=distribution), payload(DELEGATOR, 9))
    assert [item.validator_address for item in result] == [VALIDATOR, "cosmosvaloper1other"]
    assert result[0].coins == convert_dec_coins(coins)
    assert result[1].coins == []
    assert distribution.calls == [("rewards", DELEGATOR, 9)]


def test_withdraw_address_always_uses_latest_height():
    distribution = FakeDistribution()
    result = delegator_withdraw_address_handler(
        make_context(distribution=distribution), payload(DELEGATOR, 5)
    )
    assert result == Address(address=WITHDRAW)
    assert distribution.calls == [("withdraw", DELEGATOR, LATEST)]


def test_validator_commission_uses_latest_height():
    distribution = FakeDistribution(commission=[DecCoin("uatom", Decimal("1.5"))])
    result = validator_commission_amount_handler(
        make_context(distribution=distribution), payload(VALIDATOR, 5)
    )
    assert result.coins == [ResponseCoin(amount="1.500000000000000000", denom="uatom")]
    assert distribution.calls == [("commission", VALIDATOR, LATEST)]


@pytest.mark.parametrize(
    "handler, message",
    [
        (delegation_reward_handler, "error while getting delegator total rewards: boom"),
        (delegator_withdraw_address_handler, "error while getting delegator withdraw address: boom"),
        (validator_commission_amount_handler, "error while getting validator commission: boom"),
    ],
)
def test_distribution_errors_are_wrapped(handler, message):
    distribution = FakeDistribution(failure=RuntimeError("boom"))
    with pytest.raises(ActionError) as info:
        handler(make_context(distribution=distribution), payload(DELEGATOR, 5))
    assert str(info.value) == message