"""Rows of the validator tables and the validator data read back from them."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from bdjuno.coins import to_null_string

_INT64_RE = re.compile(r"[+-]?\d+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _parse_int64(value: str) -> int:
    if not isinstance(value, str) or not _INT64_RE.fullmatch(value):
        raise ValueError(f"invalid integer: {value!r}")
    number = int(value)
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise ValueError(f"integer out of range: {value!r}")
    return number


@dataclass(frozen=True)
class ValidatorData:
    """All the stored data of a single validator."""

    cons_address: str
    val_address: str
    cons_pub_key: str
    self_delegate_address: str
    max_rate: str
    max_change_rate: str
    height: int

    @property
    def operator(self) -> str:
        """The operator address of the validator."""
        return self.val_address

    def max_rate_value(self) -> Decimal:
        """Return the maximum commission rate, read as a whole number."""
        return Decimal(_parse_int64(self.max_rate))

    def max_change_rate_value(self) -> Decimal:
        """Return the maximum commission change rate, read as a whole number."""
        return Decimal(_parse_int64(self.max_change_rate))


@dataclass(frozen=True)
class ValidatorRow:
    """A row of the validator table."""

    cons_address: str
    cons_pub_key: str


@dataclass(frozen=True)
class ValidatorInfoRow:
    """A row of the validator_info table."""

    cons_address: str
    val_address: str
    self_delegate_address: str
    max_rate: str
    max_change_rate: str
    height: int


@dataclass(frozen=True)
class ValidatorDescriptionRow:
    """A row of the validator_description table.

    The avatar URL takes no part in comparisons.
    """

    val_address: str
    moniker: Optional[str]
    identity: Optional[str]
    avatar_url: Optional[str] = field(compare=False)
    website: Optional[str] = None
    security_contact: Optional[str] = None
    details: Optional[str] = None
    height: int = 0

    @classmethod
    def create(
        cls,
        val_address: str,
        moniker: str,
        identity: str,
        avatar_url: str,
        website: str,
        security_contact: str,
        details: str,
        height: int,
    ) -> "ValidatorDescriptionRow":
        """Build a row from plain strings, storing blank ones as NULL."""
        return cls(
            val_address=val_address,
            moniker=to_null_string(moniker),
            identity=to_null_string(identity),
            avatar_url=to_null_string(avatar_url),
            website=to_null_string(website),
            security_contact=to_null_string(security_contact),
            details=to_null_string(details),
            height=height,
        )


@dataclass(frozen=True)
class ValidatorCommissionRow:
    """A row of the validator_commission table."""

    operator_address: str
    commission: Optional[str]
    min_self_delegation: Optional[str]
    height: int

    @classmethod
    def create(
        cls, operator_address: str, commission: str, min_self_delegation: str, height: int
    ) -> "ValidatorCommissionRow":
        """Build a row from plain strings, storing blank ones as NULL."""
        return cls(
            operator_address=operator_address,
            commission=to_null_string(commission),
            min_self_delegation=to_null_string(min_self_delegation),
            height=height,
        )


@dataclass(frozen=True)
class ValidatorVotingPowerRow:
    """A row of the validator_voting_power table."""

    validator_address: str
    voting_power: int
    height: int


@dataclass(frozen=True)
class ValidatorStatusRow:
    """A row of the validator_status table."""

    status: int
    jailed: bool
    tombstoned: bool
    cons_address: str
    height: int


@dataclass(frozen=True)
class DoubleSignVoteRow:
    """A row of the double_sign_vote table."""

    id: int
    vote_type: int
    height: int
    round: int
    block_id: str
    validator_address: str
    validator_index: int
    signature: str


@dataclass(frozen=True)
class DoubleSignEvidenceRow:
    """A row of the double_sign_evidence table."""

    height: int
    vote_a_id: int
    vote_b_id: int