# -*- coding: utf-8 -*-
import json

import pandas as pd

from balancing.cli import load_groups, main


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


GROUPS = [
    {"id": "big", "capacity": 1600, "count": 1, "cdlPerMeter": 1000, "totalCDL": 1000,
     "category": "commercial", "timePattern": "day", "typeName": "1600A"},
    {"id": "flat", "capacity": 100, "count": 10, "cdlPerMeter": 40, "totalCDL": 400,
     "category": "residential", "timePattern": "night", "typeName": "100A"},
]


def test_load_groups_accepts_list_or_document(tmp_path):
    as_list = load_groups(_write(tmp_path / "a.json", GROUPS))
    as_doc = load_groups(_write(tmp_path / "b.json", {"groups": GROUPS}))
    assert as_list == as_doc
    assert as_list[1].time_pattern == "night"


def test_cli_writes_result_and_table(tmp_path, capsys):
    out = tmp_path / "out.json"
    table = tmp_path / "table.csv"
    rc = main(["-i", _write(tmp_path / "in.json", GROUPS), "-o", str(out), "--table-output", str(table)])

    assert rc == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["summary"]["total_transformers"] == 2
    assert data["summary"]["total_meters"] == 11
    assert data["dropped_units"] == []
    assert len(pd.read_csv(table)) == data["summary"]["distribution_entries"]
    assert "Balance score" in capsys.readouterr().out


def test_cli_uses_config(tmp_path):
    cfg = {"transformer_types": [{"capacity": 2000, "safe_load": 2900, "breakers": 12}]}
    out = tmp_path / "out.json"
    rc = main(["-i", _write(tmp_path / "in.json", GROUPS), "-c", _write(tmp_path / "cfg.json", cfg),
               "-o", str(out)])
    assert rc == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert {t["type"]["capacity"] for t in data["transformers"]} == {2000}


def test_cli_reports_dropped_units(tmp_path, capsys):
    groups = [{"id": "x", "capacity": 100, "count": 1, "cdlPerMeter": 300}]
    rc = main(["-i", _write(tmp_path / "in.json", groups), "-o", str(tmp_path / "out.json")])
    assert rc == 1
    assert "x_0" in capsys.readouterr().err


def test_cli_missing_input(tmp_path, capsys):
    rc = main(["-i", str(tmp_path / "nope.json"), "-o", str(tmp_path / "out.json")])
    assert rc == 2
    assert "Input error" in capsys.readouterr().err


def test_cli_invalid_group(tmp_path, capsys):
    groups = [{"id": "x", "capacity": 100, "count": -3, "cdlPerMeter": 30}]
    rc = main(["-i", _write(tmp_path / "in.json", groups), "-o", str(tmp_path / "out.json")])
    assert rc == 2
    assert "validation error" in capsys.readouterr().err


def test_cli_document_without_groups_key(tmp_path, capsys):
    rc = main(["-i", _write(tmp_path / "in.json", {"group": GROUPS}), "-o", str(tmp_path / "out.json")])
    assert rc == 2
    assert "Input error" in capsys.readouterr().err
    assert not (tmp_path / "out.json").exists()
