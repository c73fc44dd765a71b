from __future__ import annotations

import sys
from pathlib import Path

import pandas as pd
import pytest

# tests/ is one level under the repo root
PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def ana_base() -> pd.DataFrame:
    return pd.DataFrame(
        [{"RFC": "AAA", "NOMBRE": "Ana", "CUENTA": "1234567890123456", "BANCO": "BANAMEX"}]
    )


@pytest.fixture
def ana_beto_period() -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"RFC": "AAA", "NOMBRE": "Ana", "LIQUIDO": 100},
            {"RFC": "BBB", "NOMBRE": "Beto", "LIQUIDO": 50},
        ]
    )
