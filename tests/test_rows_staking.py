from decimal import Decimal

import pytest

from bdjuno.coins import format_dec
from bdjuno.rows_staking import (
    DoubleSignEvidenceRow,
    DoubleSignVoteRow,
    ValidatorCommissionRow,
    ValidatorData,
    ValidatorDescriptionRow,
    ValidatorInfoRow,
    ValidatorRow,
    ValidatorStatusRow,
    ValidatorVotingPowerRow,
)

CONS = "cosmosvalcons1qqqqrezrl53hujmpdch6d805ac75n220ku09rl"
OPER = "cosmosvaloper1rcp29q3hpd246n6qak7jluqep4v006cdsc2kkl"
PUBKEY = "cosmosvalconspub1zcjduepq7mft6gfls57a0a42d7uhx656cckhfvtrlmw744jv4q0mvlv0dypskehfk8"
SELF = "cosmos1z4hfrxvlgl4s8u4n5ngjcw8kdqrcv43599amxs"


def _validator(max_rate="1", max_change_rate="2", height=1):
    return ValidatorData(CONS, OPER, PUBKEY, SELF, max_rate, max_change_rate, height)


def test_validator_data_fields():
    data = _validator()
    assert data.cons_address == CONS
    assert data.operator == OPER
    assert data.cons_pub_key == PUBKEY
    assert data.self_delegate_address == SELF
    assert data.height == 1


def test_validator_data_rates():
    data = _validator()
    assert data.max_rate_value() == Decimal(1)
    assert data.max_change_rate_value() == Decimal(2)
    assert format_dec(data.max_rate_value()) == "1.000000000000000000"


@pytest.mark.parametrize("bad", ["1.5", "", " 1", "abc", "1_000", str(2**63)])
def test_validator_data_invalid_rate(bad):
    with pytest.raises(ValueError):
        _validator(max_rate=bad).max_rate_value()
    with pytest.raises(ValueError):
        _validator(max_change_rate=bad).max_change_rate_value()


def test_validator_data_equality():
    assert _validator() == _validator()
    assert _validator(height=10) != _validator(height=9)


def test_validator_row_equality():
    assert ValidatorRow(CONS, PUBKEY) == ValidatorRow(CONS, PUBKEY)
    assert ValidatorRow(CONS, PUBKEY) != ValidatorRow(CONS, "other")


def test_validator_info_row_equality():
    row = ValidatorInfoRow(CONS, OPER, SELF, "1", "2", 10)
    assert row == ValidatorInfoRow(CONS, OPER, SELF, "1", "2", 10)
    assert row != ValidatorInfoRow(CONS, OPER, SELF, "2", "1", 10)
    assert row.max_rate == "1"
    assert row.max_change_rate == "2"


def test_description_row_create_nulls_blank_values():
    row = ValidatorDescriptionRow.create(
        CONS, "moniker", "identity", "avatar-url", "", "securityContact", "details", 10
    )
    assert row.moniker == "moniker"
    assert row.website is None
    assert row.avatar_url == "avatar-url"
    assert row.height == 10


def test_description_row_strips_values():
    row = ValidatorDescriptionRow.create(CONS, "  moniker ", "   ", "", "", "", "", 1)
    assert row.moniker == "moniker"
    assert row.identity is None


def test_description_row_ignores_avatar_in_comparison():
    a = ValidatorDescriptionRow.create(CONS, "moniker", "", "new-avatar-url", "", "", "", 10)
    b = ValidatorDescriptionRow.create(CONS, "moniker", "", "lower-avatar-url", "", "", "", 10)
    c = ValidatorDescriptionRow.create(CONS, "moniker", "higher-identity", "", "", "", "", 10)
    assert a == b
    assert a != c


def test_commission_row_create():
    row = ValidatorCommissionRow.create(CONS, "0.011000000000000000", "12", 10)
    assert row == ValidatorCommissionRow(CONS, "0.011000000000000000", "12", 10)
    empty = ValidatorCommissionRow.create(CONS, "", " ", 10)
    assert empty.commission is None
    assert empty.min_self_delegation is None


def test_voting_power_row_equality():
    assert ValidatorVotingPowerRow(CONS, 1000, 10) == ValidatorVotingPowerRow(CONS, 1000, 10)
    assert ValidatorVotingPowerRow(CONS, 1000, 10) != ValidatorVotingPowerRow(CONS, 10, 11)


def test_status_row_equality():
    row = ValidatorStatusRow(1, False, False, CONS, 10)
    assert row == ValidatorStatusRow(1, False, False, CONS, 10)
    assert row != ValidatorStatusRow(3, True, True, CONS, 10)


def test_double_sign_rows():
    vote = DoubleSignVoteRow(
        1,
        1,
        10,
        1,
        "A42C9492F5DE01BFA6117137102C3EF909F1A46C2F56915F542D12AC2D0A5BCA",
        CONS,
        1,
        "1qwPQjPrc7DH7+f6YAE3fOkq6phDAJ60dEyhmcZ7dx2ZgGvi9DbVLsn4leYqRNA/63ZeeH5kVly8zI1jCh4iBg==",
    )
    assert vote.block_id.startswith("A42C")
    assert vote == DoubleSignVoteRow(*[getattr(vote, n) for n in (
        "id", "vote_type", "height", "round", "block_id",
        "validator_address", "validator_index", "signature",
    )])
    assert DoubleSignEvidenceRow(10, 1, 2) == DoubleSignEvidenceRow(10, 1, 2)
    assert DoubleSignEvidenceRow(10, 1, 2) != DoubleSignEvidenceRow(10, 2, 1)


def test_rows_are_immutable():
    row = ValidatorRow(CONS, PUBKEY)
    with pytest.raises(AttributeError):
        row.cons_address = "other"  # type: ignore[misc]
    assert row.cons_address == CONS
    assert row == ValidatorRow(CONS, PUBKEY)