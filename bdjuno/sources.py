"""Interfaces of the sources the actions query for chain data."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from bdjuno.coins import Coin, DecCoin


@dataclass(frozen=True)
class DelegationDelegatorReward:
    """The rewards a delegator has earned from one validator."""

    validator_address: str
    reward: tuple[DecCoin, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "reward", tuple(self.reward))


class BankSource(ABC):
    """Reads balances and supply from the chain."""

    @abstractmethod
    def get_balances(
        self, addresses: Iterable[str], height: int
    ) -> Sequence[tuple[str, Sequence[Coin], int]]:
        """Return, for each address, the address, its coins and the height they were read at."""

    @abstractmethod
    def get_supply(self, height: int) -> Sequence[Coin]:
        """Return the total supply at the given height."""

    @abstractmethod
    def get_account_balance(self, address: str, height: int) -> Sequence[Coin]:
        """Return the coins held by the address at the given height."""


class DistributionSource(ABC):
    """Reads rewards, commissions and the community pool from the chain."""

    @abstractmethod
    def validator_commission(self, val_oper_addr: str, height: int) -> Sequence[DecCoin]:
        """Return the commission accumulated by the validator."""

    @abstractmethod
    def delegator_total_rewards(
        self, delegator: str, height: int
    ) -> Sequence[DelegationDelegatorReward]:
        """Return the rewards of the delegator, one entry per validator."""

    @abstractmethod
    def delegator_withdraw_address(self, delegator: str, height: int) -> str:
        """Return the address the delegator's rewards are withdrawn to."""

    @abstractmethod
    def community_pool(self, height: int) -> Sequence[DecCoin]:
        """Return the coins held by the community pool."""

    @abstractmethod
    def params(self, height: int) -> Mapping[str, Any]:
        """Return the distribution parameters."""


@dataclass(frozen=True)
class Sources:
    """The sources available to the actions."""

    bank: BankSource
    distribution: DistributionSource

    def __post_init__(self) -> None:
        if not isinstance(self.bank, BankSource):
            raise TypeError(f"bank source expected, got {type(self.bank).__name__}")
        if not isinstance(self.distribution, DistributionSource):
            raise TypeError(
                f"distribution source expected, got {type(self.distribution).__name__}"
            )