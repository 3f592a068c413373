"""Coin values and the textual forms they take inside the database."""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Iterable, Optional, Union

DEC_PRECISION = 18
_DEC_UNIT = Decimal(1).scaleb(-DEC_PRECISION)
_DENOM_RE = re.compile(r"[a-zA-Z][a-zA-Z0-9/:._-]{2,127}")
_INT_RE = re.compile(r"[+-]?\d+")
_DEC_RE = re.compile(r"-?(\d+\.?\d*|\.\d+)")

Source = Union[bytes, bytearray, memoryview, str]


def _validate_denom(denom: str) -> None:
    if not isinstance(denom, str) or not _DENOM_RE.fullmatch(denom):
        raise ValueError(f"invalid denom: {denom!r}")


def _to_decimal(value: object) -> Decimal:
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"invalid decimal value: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"invalid decimal value: {value!r}")
    return result


def _truncate(value: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(value.as_tuple().digits) + DEC_PRECISION + 2)
        result = value.quantize(_DEC_UNIT, rounding=ROUND_DOWN)
    return abs(result) if result.is_zero() else result


def format_dec(value: object) -> str:
    """Render a decimal with exactly 18 fractional digits, truncating any excess."""
    return f"{_truncate(_to_decimal(value)):f}"


def to_string(value: Optional[str]) -> str:
    """Return the string held by a nullable value, or an empty string for NULL."""
    return value if value is not None else ""


def to_null_string(value: str) -> Optional[str]:
    """Strip the value and map an empty result to NULL."""
    value = value.strip()
    return value or None


def remove_empty(values: Iterable[str]) -> list[str]:
    """Drop the empty strings from the given values."""
    return [value for value in values if value != ""]


def _decode(src: Source) -> str:
    if isinstance(src, str):
        return src
    if isinstance(src, (bytes, bytearray, memoryview)):
        return bytes(src).decode("utf-8")
    raise TypeError(f"cannot read a coin from {type(src).__name__}")


def _strip_chars(text: str, chars: str) -> str:
    return text.translate({ord(char): None for char in chars})


def _split_pair(text: str) -> tuple[str, str]:
    values = text.split(",")
    if len(values) < 2:
        raise ValueError(f"invalid coin value: {text!r}")
    return values[0], values[1]


def _split_many(src: Source) -> list[tuple[str, str]]:
    text = _strip_chars(_decode(src), '"{}')
    text = text.replace("),(", ") (")
    text = _strip_chars(text, "()")
    return [_split_pair(value) for value in remove_empty(text.split(" "))]


@dataclass(frozen=True)
class Coin:
    """An integer amount of a single denomination."""

    denom: str
    amount: int

    def __post_init__(self) -> None:
        _validate_denom(self.denom)
        if self.amount < 0:
            raise ValueError(f"negative coin amount: {self.amount}")

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


@dataclass(frozen=True)
class DecCoin:
    """A decimal amount of a single denomination, kept to 18 fractional digits."""

    denom: str
    amount: Decimal

    def __post_init__(self) -> None:
        _validate_denom(self.denom)
        amount = _to_decimal(self.amount)
        if amount < 0:
            raise ValueError(f"negative coin amount: {amount}")
        object.__setattr__(self, "amount", _truncate(amount))

    def __str__(self) -> str:
        return f"{format_dec(self.amount)}{self.denom}"


@dataclass(frozen=True)
class DbCoin:
    """A coin as stored inside the database."""

    denom: str
    amount: str

    @classmethod
    def from_coin(cls, coin: Coin) -> "DbCoin":
        return cls(denom=coin.denom, amount=str(coin.amount))

    def value(self) -> str:
        """Return the composite literal used to store this coin."""
        return f"({self.denom},{self.amount})"

    @classmethod
    def parse(cls, src: Source) -> "DbCoin":
        """Read a coin from its stored composite form."""
        return cls(*_split_pair(_strip_chars(_decode(src), '"{}()')))

    def to_coin(self) -> Coin:
        if not _INT_RE.fullmatch(self.amount):
            raise ValueError(f"invalid integer amount: {self.amount!r}")
        return Coin(self.denom, int(self.amount))


class DbCoins(tuple):
    """An ordered collection of stored coins."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"

    @classmethod
    def from_coins(cls, coins: Iterable[Coin]) -> "DbCoins":
        return cls(DbCoin.from_coin(coin) for coin in coins)

    @classmethod
    def parse(cls, src: Source) -> "DbCoins":
        """Read a list of coins from its stored array form."""
        return cls(DbCoin(denom, amount) for denom, amount in _split_many(src))

    def to_coins(self) -> list[Coin]:
        return [coin.to_coin() for coin in self]


@dataclass(frozen=True)
class DbDecCoin:
    """A decimal coin as stored inside the database."""

    denom: str
    amount: str

    @classmethod
    def from_dec_coin(cls, coin: DecCoin) -> "DbDecCoin":
        return cls(denom=coin.denom, amount=format_dec(coin.amount))

    def value(self) -> str:
        """Return the composite literal used to store this coin."""
        return f"({self.denom},{self.amount})"

    @classmethod
    def parse(cls, src: Source) -> "DbDecCoin":
        """Read a decimal coin from its stored composite form."""
        return cls(*_split_pair(_strip_chars(_decode(src), '"{}()')))

    def to_dec_coin(self) -> DecCoin:
        if not _DEC_RE.fullmatch(self.amount):
            raise ValueError(f"invalid decimal amount: {self.amount!r}")
        amount = Decimal(self.amount)
        if -amount.as_tuple().exponent > DEC_PRECISION:
            raise ValueError(f"too much precision in amount: {self.amount!r}")
        return DecCoin(self.denom, amount)


class DbDecCoins(tuple):
    """An ordered collection of stored decimal coins."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"

    @classmethod
    def from_dec_coins(cls, coins: Iterable[DecCoin]) -> "DbDecCoins":
        return cls(DbDecCoin.from_dec_coin(coin) for coin in coins)

    @classmethod
    def parse(cls, src: Source) -> "DbDecCoins":
        """Read a list of decimal coins from its stored array form."""
        return cls(DbDecCoin(denom, amount) for denom, amount in _split_many(src))

    def to_dec_coins(self) -> list[DecCoin]:
        return [coin.to_dec_coin() for coin in self]