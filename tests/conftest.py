# tests/conftest.py
"""Shared fixtures."""

from datetime import datetime, timedelta
from decimal import Decimal

import numpy as np
import pytest


def _sample_values(type_name, n, seed=42):
    """Values that are not already in their type's stored form."""
    rng = np.random.default_rng(seed)
    if type_name == "int4":
        return rng.integers(-100, 100, size=n).tolist()
    if type_name == "float4":
        # float64 inputs, most not exactly representable in float32
        return [round(x, 3) for x in rng.normal(0, 10, size=n).tolist()]
    if type_name == "numeric":
        return [Decimal(str(round(x, 4))) for x in rng.normal(0, 100, size=n).tolist()]
    if type_name == "timestamptz":
        # naive datetimes are stored as UTC
        base = datetime(2024, 1, 1)
        return [base + timedelta(microseconds=int(us))
                for us in rng.integers(0, 10**12, size=n)]
    raise ValueError(f"No sample values for {type_name}")


@pytest.fixture
def sample_values():
    return _sample_values
