# -*- coding: utf-8 -*-
import pytest

from balancing.allocator import allocate
from balancing.equipment import Transformer
from balancing.models import AllocationConfig, TransformerType
from balancing.summary import overall_balance_score
from balancing.units import LoadUnit


def _unit(uid, cdl):
    return LoadUnit(id=uid, group_id="g", capacity=100, cdl=cdl,
                    category="residential", time_pattern="day", type_name="100A")


def _transformer(*loads, dedicated=False):
    t = Transformer.create(1, TransformerType(capacity=500, safe_load=577, breakers=len(loads)), AllocationConfig())
    for i, load in enumerate(loads):
        if load:
            t.breakers[i].add_meter(_unit(f"u{i}", load))
    t.is_dedicated = dedicated
    return t


def test_balance_score_no_transformers():
    assert overall_balance_score([]) == 0.0


def test_balance_score_only_dedicated_or_empty():
    assert overall_balance_score([_transformer(0, 0)]) == 100.0
    assert overall_balance_score([_transformer(300, 0, dedicated=True)]) == 100.0


def test_balance_score_uses_population_std():
    # utilizations 0%.. of 310: 62 -> 20%, 124 -> 40%; std = 10
    assert overall_balance_score([_transformer(62, 124, 0)]) == pytest.approx(80.0)


def test_balance_score_is_clamped():
    assert overall_balance_score([_transformer(1, 248)]) == pytest.approx(100 - 2 * (247 / 310 * 100) / 2)
    assert overall_balance_score([_transformer(1, 10_000)]) == 0.0


def test_balance_score_ignores_dedicated_transformers():
    shared = _transformer(100, 100)
    dedicated = _transformer(5, 300, dedicated=True)
    assert overall_balance_score([shared, dedicated]) == 100.0


def test_summary_fields(group):
    result = allocate([group("big", 1600, 1, 1000), group("m", 800, 2, 400), group("s", 100, 5, 40)])
    s = result.summary

    assert s.total_transformers == 2
    assert s.total_meters == 8
    assert s.total_load == "2000.0"
    assert s.total_load_kva == f"{2000 * 0.4 * 1.73:.1f}"
    assert s.overloaded_breakers == 0
    assert s.overloaded_transformers == 0
    assert s.transformer_details == "2x 1000 KVA"
    assert s.transformer_counts == {1000.0: 2}
    # dedicated breaker + 4 split halves + one regular breaker
    assert s.total_breakers == 6
    assert s.distribution_entries == 4
    assert s.efficiency == "86.6"
    assert s.balance_score == "100.0"
    assert s.max_utilization == "64.5"
    assert s.min_utilization == "62.5"
    assert isinstance(s.total_breakers, int)


def test_summary_counts_overloaded_breakers(group):
    result = allocate([group("odd", 2000, 1, 500)])
    s = result.summary
    assert s.overloaded_breakers == 1
    assert s.max_utilization == f"{500 / 310 * 100:.1f}"
    assert s.min_utilization == s.max_utilization


def test_result_to_dict(group):
    result = allocate([group("x", 100, 1, 300), group("s", 100, 2, 40)])
    d = result.to_dict()
    assert d["total_load"] == 380
    assert [u["id"] for u in d["dropped_units"]] == ["x_0"]
    assert d["summary"]["total_transformers"] == 1
    assert d["summary"]["transformer_counts"] == {"500": 1}
    assert d["transformers"][0]["assigned_load"] == 80
