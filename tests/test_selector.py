# -*- coding: utf-8 -*-
from balancing.models import AllocationConfig, DEFAULT_TRANSFORMER_TYPES, TransformerType
from balancing.selector import dedicated_transformer_type, select_transformer_type, widest_transformer_type
from balancing.units import LoadUnit


def _unit(capacity, cdl):
    return LoadUnit(id="u", group_id="g", capacity=capacity, cdl=cdl,
                    category="c", time_pattern="day", type_name="t")


def test_select_smallest_type_covering_load():
    assert select_transformer_type(0, DEFAULT_TRANSFORMER_TYPES).capacity == 300
    assert select_transformer_type(346, DEFAULT_TRANSFORMER_TYPES).capacity == 300
    assert select_transformer_type(347, DEFAULT_TRANSFORMER_TYPES).capacity == 500
    assert select_transformer_type(1700, DEFAULT_TRANSFORMER_TYPES).capacity == 1500


def test_select_falls_back_to_largest():
    assert select_transformer_type(10_000, DEFAULT_TRANSFORMER_TYPES).capacity == 1500


def test_dedicated_type_uses_capacity_mapping():
    cfg = AllocationConfig()
    assert dedicated_transformer_type(_unit(1600, 100), cfg).capacity == 1000
    assert dedicated_transformer_type(_unit(2500, 100), cfg).capacity == 1500


def test_dedicated_type_without_mapping_sizes_on_load():
    cfg = AllocationConfig()
    assert dedicated_transformer_type(_unit(2000, 500), cfg).capacity == 500


def test_dedicated_type_mapping_missing_from_catalog():
    cfg = AllocationConfig(transformer_types=[TransformerType(capacity=400, safe_load=500, breakers=2)])
    assert dedicated_transformer_type(_unit(1600, 100), cfg).capacity == 400


def test_widest_type_keeps_first_of_equal_breaker_counts():
    catalog = [
        TransformerType(capacity=100, safe_load=150, breakers=1),
        TransformerType(capacity=800, safe_load=900, breakers=6),
        TransformerType(capacity=1000, safe_load=1155, breakers=6),
    ]
    assert widest_transformer_type(catalog).capacity == 800
    assert widest_transformer_type(DEFAULT_TRANSFORMER_TYPES).capacity == 1500
