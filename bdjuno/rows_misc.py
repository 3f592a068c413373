"""Rows of the fee grant, price feed and slashing tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional


@dataclass(frozen=True)
class FeeAllowanceRow:
    """A row of the fee_grant_allowance table."""

    id: int
    grantee: str
    granter: str
    allowance: str
    height: int


@dataclass(frozen=True)
class TokenUnitRow:
    """A row of the token_unit table."""

    token_name: str
    denom: str
    exponent: int
    aliases: tuple[str, ...] = ()
    price_id: Optional[str] = None

    def __post_init__(self) -> None:
        aliases: Iterable[str] = self.aliases or ()
        object.__setattr__(self, "aliases", tuple(aliases))


@dataclass(frozen=True)
class TokenRow:
    """A row of the token table."""

    name: str
    traded_unit: str


@dataclass(frozen=True)
class TokenPriceRow:
    """A row of the token_price table; the id takes no part in comparisons."""

    name: str
    price: float
    market_cap: int
    timestamp: datetime
    id: str = field(default="", compare=False)


@dataclass(frozen=True)
class ValidatorSigningInfoRow:
    """A row of the validator_signing_info table."""

    validator_address: str
    start_height: int
    index_offset: int
    jailed_until: datetime
    tombstoned: bool
    missed_blocks_counter: int
    height: int


@dataclass(frozen=True)
class SlashingParamsRow:
    """A row of the slashing_params table."""

    params: str
    height: int
    one_row_id: bool = field(default=True, compare=False)