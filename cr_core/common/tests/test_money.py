# cr_core/common/tests/test_money.py
from decimal import Decimal

import pytest

from cr_core.common.money import clamp, divide, percent_of, round_half_up


@pytest.mark.parametrize(
    "value,expected",
    [
        (Decimal("2.5"), 3),
        (Decimal("2.49"), 2),
        (Decimal("-2.5"), -3),
        ("1649.5", 1650),
    ],
)
def test_round_half_up_goes_away_from_zero(value, expected):
    assert round_half_up(value) == expected


def test_percent_of():
    assert percent_of(15000, 25) == 3750
    assert percent_of(15000, Decimal("10")) == 1500
    assert percent_of(999, Decimal("12.5")) == 125


def test_divide_rounds_once():
    assert divide(10000, 3) == 3333
    assert divide(5, 2) == 3


def test_clamp():
    assert clamp(-5, 0) == 0
    assert clamp(500, 0, 400) == 400
    assert clamp(200, 0, 400) == 200
