"""Payloads received by the actions server and the responses it sends back."""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional, Union

from bdjuno.coins import Coin, DecCoin, format_dec

_INT64 = (-(2**63), 2**63 - 1)
_UINT64 = (0, 2**64 - 1)


@dataclass(frozen=True)
class PageRequest:
    """Pagination requested for a query."""

    offset: int = 0
    limit: int = 0
    count_total: bool = False


def _field(mapping: Mapping[str, Any], key: str, kind: type, default: Any, bounds=None) -> Any:
    value = mapping.get(key)
    if value is None:
        return default
    if kind is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"invalid value for {key}: {value!r}")
        low, high = bounds
        if not low <= value <= high:
            raise ValueError(f"value out of range for {key}: {value!r}")
    elif not isinstance(value, kind):
        raise ValueError(f"invalid value for {key}: {value!r}")
    return value


@dataclass(frozen=True)
class PayloadArgs:
    """The input arguments of an action."""

    address: str = ""
    height: int = 0
    offset: int = 0
    limit: int = 0
    count_total: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PayloadArgs":
        return cls(
            address=_field(data, "address", str, ""),
            height=_field(data, "height", int, 0, _INT64),
            offset=_field(data, "offset", int, 0, _UINT64),
            limit=_field(data, "limit", int, 0, _UINT64),
            count_total=_field(data, "count_total", bool, False),
        )


@dataclass(frozen=True)
class Payload:
    """The body of an action request."""

    session_variables: dict = field(default_factory=dict)
    input: PayloadArgs = field(default_factory=PayloadArgs)

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> "Payload":
        """Parse a payload from its JSON text; raise ValueError if it is malformed."""
        try:
            if isinstance(data, (bytes, bytearray)):
                data = bytes(data).decode("utf-8")
            obj = json.loads(data)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ValueError(f"invalid payload: {exc}") from exc

        if obj is None:
            return cls()
        if not isinstance(obj, dict):
            raise ValueError("invalid payload: expected an object")

        session = _field(obj, "session_variables", dict, {})
        args = obj.get("input")
        if args is None:
            return cls(session_variables=session)
        if not isinstance(args, dict):
            raise ValueError("invalid payload: input must be an object")
        return cls(session_variables=session, input=PayloadArgs.from_mapping(args))

    def address(self) -> str:
        """Return the address the action is about, or an empty string."""
        return self.input.address

    def pagination(self) -> PageRequest:
        """Return the pagination requested by the payload."""
        return PageRequest(
            offset=self.input.offset,
            limit=self.input.limit,
            count_total=self.input.count_total,
        )


@dataclass(frozen=True)
class ResponseCoin:
    """A coin as sent in a response."""

    amount: str
    denom: str


def convert_coins(coins: Iterable[Coin]) -> list[ResponseCoin]:
    """Convert coins to their response form."""
    return [ResponseCoin(amount=str(coin.amount), denom=coin.denom) for coin in coins]


def convert_dec_coins(coins: Iterable[DecCoin]) -> list[ResponseCoin]:
    """Convert decimal coins to their response form."""
    return [ResponseCoin(amount=format_dec(coin.amount), denom=coin.denom) for coin in coins]


@dataclass(frozen=True)
class Address:
    address: str


@dataclass(frozen=True)
class Balance:
    coins: list[ResponseCoin]


@dataclass(frozen=True)
class Delegation:
    delegator_address: str
    validator_address: str
    coins: list[ResponseCoin]


@dataclass(frozen=True)
class DelegationResponse:
    delegations: list[Delegation]
    pagination: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class DelegationReward:
    coins: list[ResponseCoin]
    validator_address: str


@dataclass(frozen=True)
class ValidatorCommissionAmount:
    coins: list[ResponseCoin]


@dataclass(frozen=True)
class UnbondingDelegation:
    delegator_address: str
    validator_address: str
    entries: list[Any]


@dataclass(frozen=True)
class UnbondingDelegationResponse:
    unbonding_delegations: list[UnbondingDelegation]
    pagination: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class RedelegationEntry:
    completion_time: datetime
    balance: int = field(metadata={"string": True})


@dataclass(frozen=True)
class Redelegation:
    delegator_address: str
    validator_src_address: str
    validator_dst_address: str
    entries: list[RedelegationEntry] = field(default_factory=list)


@dataclass(frozen=True)
class RedelegationResponse:
    redelegations: list[Redelegation]
    pagination: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class GraphQLError:
    """The error body returned by a failing action."""

    message: str


def _format_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset()
    if not offset:
        return text + "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "+" if minutes >= 0 else "-"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def to_json_object(value: Any) -> Any:
    """Turn a response into plain objects ready for ``json.dumps``."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        result = {}
        for item in dataclasses.fields(value):
            attr = getattr(value, item.name)
            if item.metadata.get("string") and attr is not None:
                result[item.name] = str(attr)
            else:
                result[item.name] = to_json_object(attr)
        return result
    if isinstance(value, datetime):
        return _format_time(value)
    if isinstance(value, Decimal):
        return format_dec(value)
    if isinstance(value, Mapping):
        return {str(key): to_json_object(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_object(item) for item in value]
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("latin-1")
    return value