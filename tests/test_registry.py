"""Tests for the strategy catalogue."""

import pytest

from pension_compare.calculators.registry import StrategyType, default_registry
from pension_compare.errors import InvalidInputError


def test_catalogue_size_and_groups():
    reg = default_registry()
    assert len(reg.list_strategies()) == 15
    groups = reg.grouped_for_display()
    assert [d.id for d in groups["asset"]] == ["gold"]
    assert len(groups["wrapper"]) == 4
    assert len(groups["composed"]) == 10


def test_base_strategy_descriptor():
    gold = default_registry().get("gold")
    assert gold.name == "Physical Gold - Outside Pension"
    assert gold.type == StrategyType.ASSET
    assert gold.earliest_year == 1980
    assert default_registry().get("ftse100").type == StrategyType.WRAPPER


@pytest.mark.parametrize(
    "sid, name, earliest",
    [
        ("gold-sp500", "50% Gold + 50% S&P 500", 1980),
        ("gold-ftse100", "50% Gold + 50% FTSE 100", 1984),
        ("sp500-nasdaq100", "50% S&P 500 + 50% Nasdaq 100", 1985),
        ("gold-goldEtf", "50% Gold + 50% Gold ETF", 1980),
    ],
)
def test_blends(sid, name, earliest):
    d = default_registry().get(sid)
    assert d.type == StrategyType.COMPOSED
    assert d.name == name
    assert d.earliest_year == earliest
    assert len(d.components) == 2


def test_unknown_strategy():
    with pytest.raises(InvalidInputError):
        default_registry().get("bitcoin")


def test_available_for_year():
    ids = {d.id for d in default_registry().available_for_year(1983)}
    assert "gold" in ids and "sp500" in ids and "gold-sp500" in ids
    assert "nasdaq100" not in ids
    assert "ftse100" not in ids
    assert "gold-ftse100" not in ids


def test_can_compare():
    reg = default_registry()
    assert reg.can_compare("gold", "sp500", 2000) == (True, "", 1980)
    ok, reason, earliest = reg.can_compare("gold", "nasdaq100", 1984)
    assert not ok and earliest == 1985
    ok, reason, _ = reg.can_compare("gold", "gold")
    assert not ok and "itself" in reason
    assert reg.can_compare("gold", "bitcoin")[0] is False


def test_components_and_defaults():
    reg = default_registry()
    assert [d.id for d in reg.component_strategies("goldEtf-ftse100")] == ["goldEtf", "ftse100"]
    assert [d.id for d in reg.component_strategies("sp500")] == ["sp500"]
    assert [d.id for d in reg.default_strategies()] == ["gold", "sp500"]
    assert reg.get("gold-nasdaq100").asset_ids == ("gold", "nasdaq100")


def test_descriptor_to_dict():
    out = default_registry().get("gold-sp500").to_dict()
    assert out["type"] == "composed"
    assert out["components"] == ["gold", "sp500"]
