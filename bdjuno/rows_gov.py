"""Rows of the governance tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from bdjuno.coins import DbCoins


@dataclass(frozen=True)
class GovParamsRow:
    """A row of the gov_params table."""

    deposit_params: str
    voting_params: str
    tally_params: str
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class ProposalRow:
    """A row of the proposal table; the content takes no part in comparisons."""

    proposal_id: int
    proposal_route: str
    proposal_type: str
    title: str
    description: str
    content: str = field(compare=False)
    submit_time: datetime
    deposit_end_time: datetime
    voting_start_time: datetime
    voting_end_time: datetime
    proposer: str
    status: str


@dataclass(frozen=True)
class TallyResultRow:
    """A row of the proposal_tally_result table."""

    proposal_id: int
    yes: str
    abstain: str
    no: str
    no_with_veto: str
    height: int


@dataclass(frozen=True)
class VoteRow:
    """A row of the proposal_vote table."""

    proposal_id: int
    voter: str
    option: str
    height: int


@dataclass(frozen=True)
class DepositRow:
    """A row of the proposal_deposit table."""

    proposal_id: int
    depositor: str
    amount: DbCoins
    height: int

    def __post_init__(self) -> None:
        if not isinstance(self.amount, DbCoins):
            object.__setattr__(self, "amount", DbCoins(self.amount))


@dataclass(frozen=True)
class ProposalStakingPoolSnapshotRow:
    """The staking pool as it stood when a proposal was tallied."""

    proposal_id: int
    bonded_tokens: int
    not_bonded_tokens: int
    height: int


@dataclass(frozen=True)
class ProposalValidatorVotingPowerSnapshotRow:
    """A validator's voting power as it stood when a proposal was tallied."""

    id: int
    proposal_id: int
    validator_address: str
    voting_power: int
    status: int
    jailed: bool
    height: int