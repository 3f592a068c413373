"""Storage of validators, their history and the enabled modules in an SQLite database."""

from __future__ import annotations

import dataclasses
import os
import sqlite3
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence, Union

from bdjuno.coins import format_dec, to_null_string, to_string
from bdjuno.rows_staking import ValidatorData

DO_NOT_MODIFY_DESC = "[do-not-modify]"

MAX_MONIKER_LENGTH = 70
MAX_IDENTITY_LENGTH = 3000
MAX_WEBSITE_LENGTH = 140
MAX_SECURITY_CONTACT_LENGTH = 140
MAX_DETAILS_LENGTH = 280

_LENGTH_LIMITS = (
    ("moniker", MAX_MONIKER_LENGTH),
    ("identity", MAX_IDENTITY_LENGTH),
    ("website", MAX_WEBSITE_LENGTH),
    ("security_contact", MAX_SECURITY_CONTACT_LENGTH),
    ("details", MAX_DETAILS_LENGTH),
)

_BECH32_CHARSET = frozenset("qpzry9x8gf2tvdw0s3jn54khce6mua7l")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS account
(
    address TEXT NOT NULL PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS validator
(
    consensus_address TEXT NOT NULL PRIMARY KEY,
    consensus_pubkey  TEXT NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS validator_info
(
    consensus_address     TEXT    NOT NULL PRIMARY KEY REFERENCES validator (consensus_address),
    operator_address      TEXT    NOT NULL UNIQUE,
    self_delegate_address TEXT REFERENCES account (address),
    max_change_rate       TEXT    NOT NULL,
    max_rate              TEXT    NOT NULL,
    height                INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS validator_description
(
    validator_address TEXT    NOT NULL PRIMARY KEY REFERENCES validator (consensus_address),
    moniker           TEXT,
    identity          TEXT,
    avatar_url        TEXT,
    website           TEXT,
    security_contact  TEXT,
    details           TEXT,
    height            INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS validator_commission
(
    validator_address   TEXT    NOT NULL PRIMARY KEY REFERENCES validator (consensus_address),
    commission          TEXT    NOT NULL,
    min_self_delegation TEXT    NOT NULL,
    height              INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS validator_voting_power
(
    validator_address TEXT    NOT NULL PRIMARY KEY REFERENCES validator (consensus_address),
    voting_power      INTEGER NOT NULL,
    height            INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS validator_status
(
    validator_address TEXT    NOT NULL PRIMARY KEY REFERENCES validator (consensus_address),
    status            INTEGER NOT NULL,
    jailed            BOOLEAN NOT NULL,
    tombstoned        BOOLEAN NOT NULL DEFAULT FALSE,
    height            INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS double_sign_vote
(
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    type              INTEGER NOT NULL,
    height            INTEGER NOT NULL,
    round             INTEGER NOT NULL,
    block_id          TEXT    NOT NULL,
    validator_address TEXT    NOT NULL REFERENCES validator (consensus_address),
    validator_index   INTEGER NOT NULL,
    signature         TEXT    NOT NULL,
    UNIQUE (block_id, validator_address)
);

CREATE TABLE IF NOT EXISTS double_sign_evidence
(
    height    INTEGER NOT NULL,
    vote_a_id INTEGER NOT NULL REFERENCES double_sign_vote (id),
    vote_b_id INTEGER NOT NULL REFERENCES double_sign_vote (id),
    UNIQUE (vote_a_id, vote_b_id)
);

CREATE TABLE IF NOT EXISTS modules
(
    module_name TEXT NOT NULL PRIMARY KEY
);
"""


class DatabaseError(Exception):
    """Raised when the database cannot store or find the requested data."""


@dataclass(frozen=True)
class Description:
    """The public description of a validator."""

    moniker: str = ""
    identity: str = ""
    website: str = ""
    security_contact: str = ""
    details: str = ""

    def ensure_length(self) -> "Description":
        """Return this description, or raise ValueError if a field is too long."""
        for name, limit in _LENGTH_LIMITS:
            length = len(getattr(self, name).encode("utf-8"))
            if length > limit:
                label = name.replace("_", " ")
                raise ValueError(f"invalid {label} length; got: {length}, max: {limit}")
        return self

    def update(self, other: "Description") -> "Description":
        """Return other with its do-not-modify fields taken from this description."""
        merged = {
            item.name: (
                getattr(self, item.name)
                if getattr(other, item.name) == DO_NOT_MODIFY_DESC
                else getattr(other, item.name)
            )
            for item in dataclasses.fields(self)
        }
        return Description(**merged).ensure_length()


@dataclass(frozen=True)
class ValidatorDescription:
    """A validator description as seen at a given height."""

    operator_address: str
    description: Description
    avatar_url: str
    height: int


@dataclass(frozen=True)
class ValidatorCommission:
    """A validator commission change; None marks a value that did not change."""

    val_address: str
    commission: Optional[Decimal]
    min_self_delegation: Optional[int]
    height: int


@dataclass(frozen=True)
class ValidatorVotingPower:
    """The voting power of a validator at a given height."""

    consensus_address: str
    voting_power: int
    height: int


@dataclass(frozen=True)
class ValidatorStatus:
    """The status of a validator at a given height."""

    consensus_address: str
    consensus_pub_key: str
    status: int
    jailed: bool
    tombstoned: bool
    height: int


@dataclass(frozen=True)
class DoubleSignVote:
    """One of the two conflicting votes of a double sign."""

    vote_type: int
    height: int
    round: int
    block_id: str
    validator_address: str
    validator_index: int
    signature: str


@dataclass(frozen=True)
class DoubleSignEvidence:
    """Evidence of a validator signing two different blocks at the same height."""

    height: int
    vote_a: DoubleSignVote
    vote_b: DoubleSignVote


def _check_bech32(address: str) -> str:
    if not address:
        raise ValueError("empty address string is not allowed")
    if address != address.lower() and address != address.upper():
        raise ValueError(f"mixed case in address: {address}")
    lowered = address.lower()
    separator = lowered.rfind("1")
    if separator < 1 or len(lowered) - separator - 1 < 6:
        raise ValueError(f"invalid bech32 address: {address}")
    if any(not 33 <= ord(char) <= 126 for char in lowered[:separator]):
        raise ValueError(f"invalid bech32 prefix: {address}")
    if any(char not in _BECH32_CHARSET for char in lowered[separator + 1:]):
        raise ValueError(f"invalid bech32 character in address: {address}")
    return address


def _values(rows: int, width: int) -> str:
    group = "(" + ",".join("?" * width) + ")"
    return ",".join([group] * rows)


class Database:
    """Access to the validator and module tables."""

    def __init__(self, path: Union[str, os.PathLike] = ":memory:") -> None:
        self.connection = sqlite3.connect(path)
        self.connection.row_factory = sqlite3.Row
        self.connection.execute("PRAGMA foreign_keys = ON")

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying connection."""
        self.connection.close()

    def _execute(self, sql: str, params: Sequence[Any], action: str) -> sqlite3.Cursor:
        try:
            return self.connection.execute(sql, params)
        except sqlite3.Error as exc:
            raise DatabaseError(f"error while {action}: {exc}") from exc

    def _select(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        try:
            return self.connection.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise DatabaseError(str(exc)) from exc

    def create_schema(self) -> None:
        """Create the tables, leaving existing ones untouched."""
        try:
            self.connection.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            raise DatabaseError(f"error while creating the schema: {exc}") from exc

    def save_account(self, address: str) -> None:
        """Store the given account address if it is not stored yet."""
        with self.connection:
            self._execute(
                "INSERT INTO account (address) VALUES (?) ON CONFLICT DO NOTHING",
                (address,),
                "storing account",
            )

    # ----------------------------------------------------------------------------------------------

    def save_validator_data(self, validator: ValidatorData) -> None:
        """Store the information about a single validator."""
        self.save_validators_data([validator])

    def save_validators_data(self, validators: Iterable[ValidatorData]) -> None:
        """Store the information about many validators at once."""
        validators = list(validators)
        if not validators:
            return

        accounts = [v.self_delegate_address for v in validators]
        identities = [item for v in validators for item in (v.cons_address, v.cons_pub_key)]
        infos = [
            item
            for v in validators
            for item in (
                v.cons_address,
                v.operator,
                v.self_delegate_address,
                format_dec(v.max_change_rate_value()),
                format_dec(v.max_rate_value()),
                v.height,
            )
        ]
        count = len(validators)

        with self.connection:
            self._execute(
                f"INSERT INTO account (address) VALUES {_values(count, 1)} ON CONFLICT DO NOTHING",
                accounts,
                "storing accounts",
            )
            self._execute(
                "INSERT INTO validator (consensus_address, consensus_pubkey) "
                f"VALUES {_values(count, 2)} ON CONFLICT DO NOTHING",
                identities,
                "storing validators",
            )
            self._execute(
                "INSERT INTO validator_info (consensus_address, operator_address, "
                "self_delegate_address, max_change_rate, max_rate, height) "
                f"VALUES {_values(count, 6)} "
                """
ON CONFLICT (consensus_address) DO UPDATE
    SET consensus_address = excluded.consensus_address,
        operator_address = excluded.operator_address,
        self_delegate_address = excluded.self_delegate_address,
        max_change_rate = excluded.max_change_rate,
        max_rate = excluded.max_rate,
        height = excluded.height
WHERE validator_info.height <= excluded.height""",
                infos,
                "storing validator infos",
            )

    def get_validator_consensus_address(self, address: str) -> str:
        """Return the consensus address of the validator with the given operator address."""
        rows = self._select(
            "SELECT consensus_address FROM validator_info WHERE operator_address = ?", (address,)
        )
        if not rows:
            raise DatabaseError(
                "cannot find the consensus address of validator having operator address "
                f"{address}"
            )
        return _check_bech32(rows[0]["consensus_address"])

    def get_validator_operator_address(self, cons_addr: str) -> str:
        """Return the operator address of the validator with the given consensus address."""
        rows = self._select(
            "SELECT operator_address FROM validator_info WHERE consensus_address = ?", (cons_addr,)
        )
        if not rows:
            raise DatabaseError(
                "cannot find the operator address of validator having consensus address "
                f"{cons_addr}"
            )
        return _check_bech32(rows[0]["operator_address"])

    @staticmethod
    def _to_validator(row: sqlite3.Row, height: int = 0) -> ValidatorData:
        return ValidatorData(
            cons_address=row["consensus_address"],
            val_address=row["operator_address"],
            cons_pub_key=row["consensus_pubkey"],
            self_delegate_address=row["self_delegate_address"],
            max_rate=row["max_rate"],
            max_change_rate=row["max_change_rate"],
            height=height,
        )

    def _find_validator(self, column: str, value: str) -> Optional[ValidatorData]:
        rows = self._select(
            f"""
SELECT validator.consensus_address,
       validator.consensus_pubkey,
       validator_info.operator_address,
       validator_info.max_change_rate,
       validator_info.max_rate,
       validator_info.self_delegate_address
FROM validator INNER JOIN validator_info
    ON validator.consensus_address = validator_info.consensus_address
WHERE validator_info.{column} = ?""",
            (value,),
        )
        return self._to_validator(rows[0]) if rows else None

    def get_validator(self, val_address: str) -> ValidatorData:
        """Return the validator with the given operator address."""
        validator = self._find_validator("operator_address", val_address)
        if validator is None:
            raise DatabaseError(f"no validator with validator address {val_address} could be found")
        return validator

    def get_validators(self) -> list[ValidatorData]:
        """Return all the stored validators, ordered by consensus address."""
        rows = self._select(
            """
SELECT validator.consensus_address,
       validator.consensus_pubkey,
       validator_info.operator_address,
       validator_info.self_delegate_address,
       validator_info.max_rate,
       validator_info.max_change_rate,
       validator_info.height
FROM validator INNER JOIN validator_info
    ON validator.consensus_address = validator_info.consensus_address
ORDER BY validator.consensus_address"""
        )
        return [self._to_validator(row, row["height"]) for row in rows]

    def get_validator_by_self_delegate_address(self, address: str) -> ValidatorData:
        """Return the validator whose self delegate address is the given one."""
        validator = self._find_validator("self_delegate_address", address)
        if validator is None:
            raise DatabaseError(f"no validator with self delegate address {address} could be found")
        return validator

    # ----------------------------------------------------------------------------------------------

    def _get_validator_description(self, cons_addr: str) -> Optional[ValidatorDescription]:
        try:
            rows = self._select(
                "SELECT * FROM validator_description WHERE validator_address = ?", (cons_addr,)
            )
        except DatabaseError:
            return None
        if not rows:
            return None
        row = rows[0]
        return ValidatorDescription(
            operator_address=row["validator_address"],
            description=Description(
                moniker=to_string(row["moniker"]),
                identity=to_string(row["identity"]),
                website=to_string(row["website"]),
                security_contact=to_string(row["security_contact"]),
                details=to_string(row["details"]),
            ),
            avatar_url=to_string(row["avatar_url"]),
            height=row["height"],
        )

    def save_validator_description(self, description: ValidatorDescription) -> None:
        """Store a validator description, merging it with the one already stored."""
        cons_addr = self.get_validator_consensus_address(description.operator_address)
        des = description.description.ensure_length()

        avatar_url = description.avatar_url
        existing = self._get_validator_description(cons_addr)
        if existing is not None:
            des = existing.description.update(des)
            if description.avatar_url == DO_NOT_MODIFY_DESC:
                avatar_url = existing.avatar_url

        with self.connection:
            self._execute(
                """
INSERT INTO validator_description (
    validator_address, moniker, identity, avatar_url, website, security_contact, details, height
)
VALUES (?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT (validator_address) DO UPDATE
    SET moniker = excluded.moniker,
        identity = excluded.identity,
        avatar_url = excluded.avatar_url,
        website = excluded.website,
        security_contact = excluded.security_contact,
        details = excluded.details,
        height = excluded.height
WHERE validator_description.height <= excluded.height""",
                (
                    to_null_string(cons_addr),
                    to_null_string(des.moniker),
                    to_null_string(des.identity),
                    to_null_string(avatar_url),
                    to_null_string(des.website),
                    to_null_string(des.security_contact),
                    to_null_string(des.details),
                    description.height,
                ),
                "storing validator description",
            )

    # ----------------------------------------------------------------------------------------------

    def save_validator_commission(self, data: ValidatorCommission) -> None:
        """Store a validator commission, keeping stored values that did not change."""
        if data.min_self_delegation is None and data.commission is None:
            return

        cons_addr = self.get_validator_consensus_address(data.val_address)

        commission = ""
        min_self_delegation = ""
        try:
            rows = self._select(
                "SELECT * FROM validator_commission WHERE validator_address = ?", (cons_addr,)
            )
        except DatabaseError:
            rows = []
        if rows:
            commission = to_string(rows[0]["commission"])
            min_self_delegation = to_string(rows[0]["min_self_delegation"])

        if data.commission is not None:
            commission = format_dec(data.commission)
        if data.min_self_delegation is not None:
            min_self_delegation = str(data.min_self_delegation)

        with self.connection:
            self._execute(
                """
INSERT INTO validator_commission (validator_address, commission, min_self_delegation, height)
VALUES (?, ?, ?, ?)
ON CONFLICT (validator_address) DO UPDATE
    SET commission = excluded.commission,
        min_self_delegation = excluded.min_self_delegation,
        height = excluded.height
WHERE validator_commission.height <= excluded.height""",
                (cons_addr, commission, min_self_delegation, data.height),
                "storing validator commission",
            )

    # ----------------------------------------------------------------------------------------------

    def save_validators_voting_powers(self, entries: Iterable[ValidatorVotingPower]) -> None:
        """Store the given voting powers, keeping newer ones already stored."""
        entries = list(entries)
        if not entries:
            return

        params = [
            item
            for entry in entries
            for item in (entry.consensus_address, entry.voting_power, entry.height)
        ]
        with self.connection:
            self._execute(
                "INSERT INTO validator_voting_power (validator_address, voting_power, height) "
                f"VALUES {_values(len(entries), 3)}"
                """
ON CONFLICT (validator_address) DO UPDATE
    SET voting_power = excluded.voting_power,
        height = excluded.height
WHERE validator_voting_power.height <= excluded.height""",
                params,
                "storing validators voting power",
            )

    def save_validators_statuses(self, statuses: Iterable[ValidatorStatus]) -> None:
        """Store the given statuses, keeping newer ones already stored."""
        statuses = list(statuses)
        if not statuses:
            return

        identities = [
            item for status in statuses for item in (status.consensus_address, status.consensus_pub_key)
        ]
        params = [
            item
            for status in statuses
            for item in (
                status.consensus_address,
                status.status,
                bool(status.jailed),
                bool(status.tombstoned),
                status.height,
            )
        ]
        count = len(statuses)
        with self.connection:
            self._execute(
                "INSERT INTO validator (consensus_address, consensus_pubkey) "
                f"VALUES {_values(count, 2)} ON CONFLICT DO NOTHING",
                identities,
                "storing validators",
            )
            self._execute(
                "INSERT INTO validator_status (validator_address, status, jailed, tombstoned, height) "
                f"VALUES {_values(count, 5)}"
                """
ON CONFLICT (validator_address) DO UPDATE
    SET status = excluded.status,
        jailed = excluded.jailed,
        tombstoned = excluded.tombstoned,
        height = excluded.height
WHERE validator_status.height <= excluded.height""",
                params,
                "storing validators statuses",
            )

    # ----------------------------------------------------------------------------------------------

    def _save_double_sign_vote(self, vote: DoubleSignVote) -> int:
        cursor = self._execute(
            """
INSERT INTO double_sign_vote
    (type, height, round, block_id, validator_address, validator_index, signature)
VALUES (?, ?, ?, ?, ?, ?, ?) ON CONFLICT DO NOTHING""",
            (
                vote.vote_type,
                vote.height,
                vote.round,
                vote.block_id,
                vote.validator_address,
                vote.validator_index,
                vote.signature,
            ),
            "storing double sign vote",
        )
        if cursor.rowcount == 0:
            raise DatabaseError("error while storing double sign vote: no rows in result set")
        return cursor.lastrowid

    def save_double_sign_evidence(self, evidence: DoubleSignEvidence) -> None:
        """Store the two votes of a double sign and the evidence linking them."""
        with self.connection:
            vote_a = self._save_double_sign_vote(evidence.vote_a)
            vote_b = self._save_double_sign_vote(evidence.vote_b)
            self._execute(
                "INSERT INTO double_sign_evidence (height, vote_a_id, vote_b_id) "
                "VALUES (?, ?, ?) ON CONFLICT DO NOTHING",
                (evidence.height, vote_a, vote_b),
                "storing double sign evidence",
            )

    # ----------------------------------------------------------------------------------------------

    def insert_enable_modules(self, modules: Iterable[str]) -> None:
        """Replace the stored list of enabled modules with the given one."""
        modules = list(modules)
        if not modules:
            return

        with self.connection:
            self._execute("DELETE FROM modules WHERE TRUE", (), "deleting modules")
            self._execute(
                f"INSERT INTO modules (module_name) VALUES {_values(len(modules), 1)} "
                "ON CONFLICT DO NOTHING",
                modules,
                "storing modules",
            )