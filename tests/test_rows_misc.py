from datetime import datetime, timedelta, timezone

import pytest

from bdjuno.rows_misc import (
    FeeAllowanceRow,
    SlashingParamsRow,
    TokenPriceRow,
    TokenRow,
    TokenUnitRow,
    ValidatorSigningInfoRow,
)

CONS = "cosmosvalcons1qqqqrezrl53hujmpdch6d805ac75n220ku09rl"
GRANTER = "cosmos1z4hfrxvlgl4s8u4n5ngjcw8kdqrcv43599amxs"
GRANTEE = "cosmos184ma3twcfjqef6k95ne8w2hk80x2kah7vcwy4a"
WHEN = datetime(2020, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_fee_allowance_row():
    row = FeeAllowanceRow(1, GRANTEE, GRANTER, "{}", 10)
    assert row == FeeAllowanceRow(1, GRANTEE, GRANTER, "{}", 10)
    assert row.grantee == GRANTEE
    assert row != FeeAllowanceRow(1, GRANTER, GRANTEE, "{}", 10)


def test_token_unit_row_aliases_become_tuple():
    row = TokenUnitRow("atom", "uatom", 6, ["microatom", "uatom"])
    assert row.aliases == ("microatom", "uatom")
    assert row == TokenUnitRow("atom", "uatom", 6, ("microatom", "uatom"))
    assert hash(row) == hash(TokenUnitRow("atom", "uatom", 6, ("microatom", "uatom")))


def test_token_unit_row_defaults():
    row = TokenUnitRow("atom", "uatom", 6, None)  # type: ignore[arg-type]
    assert row.aliases == ()
    assert row.price_id is None


def test_token_row():
    assert TokenRow("atom", "uatom") == TokenRow("atom", "uatom")
    assert TokenRow("atom", "uatom").traded_unit == "uatom"


def test_token_price_row_ignores_id():
    a = TokenPriceRow("atom", 1.5, 100, WHEN, id="1")
    b = TokenPriceRow("atom", 1.5, 100, WHEN, id="2")
    assert a == b
    assert a != TokenPriceRow("atom", 2.5, 100, WHEN)


def test_token_price_row_compares_instants():
    other_zone = WHEN.astimezone(timezone(timedelta(hours=2)))
    assert TokenPriceRow("atom", 1.5, 100, WHEN) == TokenPriceRow("atom", 1.5, 100, other_zone)


def test_signing_info_row_equality():
    row = ValidatorSigningInfoRow(CONS, 10, 5, WHEN, False, 2, 10)
    assert row == ValidatorSigningInfoRow(CONS, 10, 5, WHEN, False, 2, 10)
    assert row != ValidatorSigningInfoRow(CONS, 10, 5, WHEN, True, 2, 10)
    assert row != ValidatorSigningInfoRow(CONS, 10, 5, WHEN + timedelta(seconds=1), False, 2, 10)


def test_slashing_params_row():
    row = SlashingParamsRow('{"signed_blocks_window": 100}', 10)
    assert row.one_row_id is True
    assert row == SlashingParamsRow('{"signed_blocks_window": 100}', 10, one_row_id=False)
    assert row != SlashingParamsRow('{"signed_blocks_window": 100}', 11)


def test_rows_are_immutable():
    row = TokenRow("atom", "uatom")
    with pytest.raises(AttributeError):
        row.name = "other"  # type: ignore[misc]
    assert row.name == "atom"
    assert row == TokenRow("atom", "uatom")