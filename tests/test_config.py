# [TESTER] v1

from __future__ import annotations

import pytest

from pairswap import PairConfig, config_from_mapping, load_config
from pairswap.state.balances import ZERO_ADDRESS

FEE_TO = "0x" + "fe" * 20


def test_defaults_are_the_canonical_pair() -> None:
    config = PairConfig()
    assert (config.fee_numerator, config.fee_denominator) == (3, 1000)
    assert config.minimum_liquidity == 1000
    assert config.protocol_fee_divisor == 5
    assert not config.fee_on


def test_zero_fee_to_means_fee_off() -> None:
    assert not PairConfig(fee_to=ZERO_ADDRESS).fee_on
    assert PairConfig(fee_to=FEE_TO).fee_on


@pytest.mark.parametrize(
    "kwargs",
    [
        {"fee_denominator": 0},
        {"fee_numerator": 1000},
        {"minimum_liquidity": 0},
        {"protocol_fee_divisor": 0},
        {"fee_numerator": -1},
    ],
)
def test_invalid_values_rejected(kwargs) -> None:
    with pytest.raises(ValueError):
        PairConfig(**kwargs)


def test_non_int_values_rejected() -> None:
    with pytest.raises(TypeError):
        PairConfig(fee_numerator=True)  # type: ignore[arg-type]


def test_unknown_keys_rejected() -> None:
    with pytest.raises(ValueError, match="unknown pair config keys"):
        config_from_mapping({"fee": 3})


def test_load_config_from_yaml(tmp_path) -> None:
    path = tmp_path / "pair.yaml"
    path.write_text(f'fee_to: "{FEE_TO}"\nprotocol_fee_divisor: 4\n', encoding="utf-8")
    config = load_config(path)
    assert config.fee_to == FEE_TO
    assert config.protocol_fee_divisor == 4
    assert config.fee_numerator == 3


def test_load_empty_yaml_gives_defaults(tmp_path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == PairConfig()
