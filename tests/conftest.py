# -*- coding: utf-8 -*-

"""Pytest configuration.

Adds ``src/`` to sys.path so ``import balancing`` works without installing
the package.
"""

from __future__ import annotations

import os
import sys

import pytest

SRC = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from balancing.models import LoadGroupSpec  # noqa: E402


@pytest.fixture
def group():
    """Factory for LoadGroupSpec with sensible defaults."""
    def _make(gid, capacity, count, cdl, category="residential", time_pattern="day", type_name=None):
        return LoadGroupSpec(
            id=gid,
            capacity=capacity,
            count=count,
            cdl_per_meter=cdl,
            category=category,
            time_pattern=time_pattern,
            type_name=type_name or f"{capacity:g}A",
        )
    return _make
