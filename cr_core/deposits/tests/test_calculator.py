# cr_core/deposits/tests/test_calculator.py
from decimal import Decimal

import pytest

from cr_core.common.api.exceptions import InvalidDepositConfig
from cr_core.deposits.calculator import calculate_deposit
from cr_core.deposits.models import DepositApplyTo, DepositConfig, DepositRule


def _config(rule, **fields):
    return DepositConfig(rule=rule, **fields)


def test_no_config_means_no_deposit():
    assert calculate_deposit(total_cents=15000, config=None) == 0
    assert calculate_deposit(total_cents=15000, config=_config(DepositRule.NONE)) == 0


def test_twenty_five_percent_of_fifteen_thousand():
    config = _config(DepositRule.PERCENT, percentage=Decimal("25"))
    assert calculate_deposit(total_cents=15000, config=config) == 3750


def test_percent_rounds_half_up():
    config = _config(DepositRule.PERCENT, percentage=Decimal("50"))
    assert calculate_deposit(total_cents=1001, config=config) == 501


def test_flat_is_clamped_to_total():
    config = _config(DepositRule.FLAT, flat_cents=20000)
    assert calculate_deposit(total_cents=15000, config=config) == 15000


def test_first_night_rule_uses_first_night_rate():
    config = _config(DepositRule.FIRST_NIGHT)
    assert calculate_deposit(total_cents=15000, config=config, first_night_cents=6500) == 6500


def test_min_and_max_caps():
    config = _config(DepositRule.PERCENT, percentage=Decimal("10"), min_cents=2500, max_cents=5000)

    assert calculate_deposit(total_cents=10000, config=config) == 2500
    assert calculate_deposit(total_cents=100000, config=config) == 5000
    # never above the total, even with a minimum
    assert calculate_deposit(total_cents=1000, config=config) == 1000


@pytest.mark.parametrize(
    "config",
    [
        _config(DepositRule.PERCENT),
        _config(DepositRule.PERCENT, percentage=Decimal("120")),
        _config(DepositRule.PERCENT, percentage=Decimal("-1")),
        _config(DepositRule.FLAT),
        _config(DepositRule.FLAT, flat_cents=-100),
    ],
)
def test_invalid_configs_raise(config):
    with pytest.raises(InvalidDepositConfig):
        calculate_deposit(total_cents=15000, config=config)


@pytest.mark.parametrize("total", [0, 1, 999, 15000, 1234567])
def test_deposit_never_exceeds_total(total):
    for config in (
        _config(DepositRule.PERCENT, percentage=Decimal("100")),
        _config(DepositRule.FLAT, flat_cents=5000),
    ):
        assert 0 <= calculate_deposit(total_cents=total, config=config) <= total


def test_lodging_only_percent_ignores_fees_and_taxes():
    config = _config(DepositRule.PERCENT, percentage=Decimal("50"), apply_to=DepositApplyTo.LODGING_ONLY)

    assert calculate_deposit(total_cents=10000, config=config, lodging_cents=8000) == 4000


def test_lodging_plus_fees_percent_uses_total():
    config = _config(DepositRule.PERCENT, percentage=Decimal("50"))

    assert calculate_deposit(total_cents=10000, config=config, lodging_cents=8000) == 5000


def test_lodging_only_first_night_is_average_lodging_night():
    config = _config(DepositRule.FIRST_NIGHT, apply_to=DepositApplyTo.LODGING_ONLY)

    deposit = calculate_deposit(
        total_cents=27000, config=config, first_night_cents=6500, lodging_cents=24000, nights=3
    )

    assert deposit == 8000


def test_lodging_only_without_lodging_amount_falls_back_to_total():
    config = _config(DepositRule.PERCENT, percentage=Decimal("25"), apply_to=DepositApplyTo.LODGING_ONLY)

    assert calculate_deposit(total_cents=15000, config=config) == 3750
