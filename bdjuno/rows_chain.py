"""Rows of the chain-wide tables: consensus, blocks, supply, parameters and modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from bdjuno.coins import DbCoins, DbDecCoins


@dataclass(frozen=True)
class GenesisRow:
    """A row of the genesis table."""

    chain_id: str
    time: datetime
    initial_height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class ConsensusRow:
    """A row of the consensus table."""

    height: int
    round: int
    step: str
    one_row_id: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class AverageTimeRow:
    """The average block time over a period."""

    average_time: float
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class BlockRow:
    """A block stored inside the database."""

    height: int
    hash: str
    num_txs: int
    total_gas: int
    proposer_address: Optional[str]
    pre_commits: int
    timestamp: datetime


@dataclass(frozen=True)
class DistributionParamsRow:
    """A row of the distribution_params table."""

    params: str
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class CommunityPoolRow:
    """A row of the community_pool table."""

    coins: DbDecCoins
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class SupplyRow:
    """A row of the supply table."""

    coins: DbCoins
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class InflationRow:
    """A row of the inflation table."""

    value: float
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class MintParamsRow:
    """A row of the mint_params table."""

    params: str
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class StakingPoolRow:
    """A row of the staking_pool table."""

    bonded_tokens: int
    not_bonded_tokens: int
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class StakingParamsRow:
    """A row of the staking_params table."""

    params: str
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class AccountRow:
    """A row of the account table."""

    address: str


@dataclass(frozen=True)
class ModuleRow:
    """A row of the modules table."""

    module: str


def module_rows(names: Iterable[str]) -> list[ModuleRow]:
    """Build one module row per name, keeping their order."""
    return [ModuleRow(name) for name in names]