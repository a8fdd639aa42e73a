from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

from pydantic import TypeAdapter, ValidationError

from .allocator import allocate
from .logging_setup import init_logging
from .models import AllocationConfig, LoadGroupSpec
from .report import distribution_table

_GROUPS = TypeAdapter(List[LoadGroupSpec])


def _read_json(path: str, what: str) -> Any:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"{what} JSON not found: {path}")
    return json.loads(p.read_text(encoding="utf-8"))


def load_groups(path: str) -> List[LoadGroupSpec]:
    """Read load groups from a JSON list or a ``{"groups": [...]}`` document."""
    data = _read_json(path, "Input")
    if isinstance(data, dict):
        if "groups" not in data:
            raise ValueError(f"Input JSON object has no \"groups\" key: {path}")
        data = data["groups"]
    return _GROUPS.validate_python(data)


def load_config(path: str | None) -> AllocationConfig:
    if not path:
        return AllocationConfig()
    data: Dict[str, Any] = _read_json(path, "Config")
    return AllocationConfig.model_validate(data)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Distribute meters over transformers and breakers with balanced loading."
    )
    parser.add_argument("--input", "-i", required=True, help="Path to the load groups JSON.")
    parser.add_argument(
        "--config",
        "-c",
        help="Path to an allocation config JSON (breaker limits, transformer catalog).",
    )
    parser.add_argument(
        "--output",
        "-o",
        default="distribution_output.json",
        help="Path to write the distribution result JSON.",
    )
    parser.add_argument("--table-output", help="Optional path to write the distribution table as CSV.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...).")
    parser.add_argument("--log-file", help="Optional log file.")

    args = parser.parse_args(argv)
    init_logging(args.log_level, args.log_file)

    try:
        groups = load_groups(args.input)
        config = load_config(args.config)
    except ValidationError as e:
        print("Input validation error:", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2
    except (FileNotFoundError, ValueError) as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 2

    result = allocate(groups, config)

    Path(args.output).write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
    if args.table_output:
        distribution_table(result).to_csv(args.table_output, index=False)

    # Minimal console summary
    s = result.summary
    print(f"Transformers: {s.total_transformers} ({s.transformer_details})")
    print(f"Breakers used: {s.total_breakers}, distribution entries: {s.distribution_entries}")
    print(f"Meters: {s.total_meters}, total load: {s.total_load} A ({s.total_load_kva} kVA)")
    print(f"Utilization: min {s.min_utilization}%, avg {s.avg_utilization}%, max {s.max_utilization}%")
    print(f"Balance score: {s.balance_score}, efficiency: {s.efficiency}%")
    if s.overloaded_breakers or s.overloaded_transformers:
        print(
            f"\nOverloaded: {s.overloaded_breakers} breakers, {s.overloaded_transformers} transformers",
            file=sys.stderr,
        )
    if result.dropped_units:
        print("\nUnplaced meters:", file=sys.stderr)
        for u in result.dropped_units:
            print(f"- {u.id} ({u.capacity:g}A, {u.cdl:.1f} A)", file=sys.stderr)

    return 1 if result.dropped_units else 0


if __name__ == "__main__":
    raise SystemExit(main())
