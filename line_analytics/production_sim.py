"""
Production Line Simulation Engine
=================================
Generates a daily production log for a three-line plant with:
- One record per day, lines drawn uniformly (Assembly, Painting, Welding)
- Downtime, defect rate, energy usage, cost and worker satisfaction draws
- A downtime penalty on high-defect days for Assembly and Painting

The output is a single flat table ready for CSV export, aggregation and
random-forest modelling.
"""

from datetime import datetime, timedelta
from typing import Optional

import numpy as np
import pandas as pd

from line_analytics.errors import InvalidArgument

# ---------------------------------------------------------------------------
# Configuration constants
# ---------------------------------------------------------------------------

RANDOM_SEED = 2025
DEFAULT_RECORDS = 1000

# First record's date; every further record is one day later
START_DATE = datetime(2024, 1, 1)

LINE_IDS = ["Assembly", "Painting", "Welding"]

# Drawn fields in draw order: (low, high, decimals)
FIELD_RANGES = {
    "Downtime_Hours": {"low": 0, "high": 10, "decimals": 1},
    "Defect_Rate": {"low": 0, "high": 10, "decimals": 1},
    "Energy_Usage_kWh": {"low": 50, "high": 200, "decimals": 1},
    "Production_Cost": {"low": 1000, "high": 5000, "decimals": 0},
    "Worker_Satisfaction": {"low": 50, "high": 100, "decimals": 0},
}

# Extra downtime hours on days where Defect_Rate exceeds the threshold.
# Welding is never adjusted.
DOWNTIME_ADJUSTMENTS = {"Assembly": 3.0, "Painting": 2.0}
DEFECT_RATE_THRESHOLD = 5.0

COLUMNS = [
    "Production_ID",
    "Date",
    "Line_ID",
    "Downtime_Hours",
    "Defect_Rate",
    "Energy_Usage_kWh",
    "Production_Cost",
    "Worker_Satisfaction",
]


def apply_downtime_adjustment(table: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of ``table`` with the high-defect downtime penalty applied.

    Must run exactly once, after every record has been sampled.
    """
    adjusted = table.copy()
    offsets = adjusted["Line_ID"].map(DOWNTIME_ADJUSTMENTS).fillna(0.0).astype(float)
    high_defect = adjusted["Defect_Rate"] > DEFECT_RATE_THRESHOLD
    adjusted["Downtime_Hours"] = (
        adjusted["Downtime_Hours"] + offsets.where(high_defect, 0.0)
    ).round(FIELD_RANGES["Downtime_Hours"]["decimals"])
    return adjusted


class ProductionSimulator:
    """Simulates daily production runs and produces a flat table."""

    def __init__(self, seed: int = RANDOM_SEED):
        if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
            raise InvalidArgument(f"seed must be an integer, got {seed!r}")
        if seed < 0:
            raise InvalidArgument(f"seed must be >= 0, got {seed}")
        self.seed = int(seed)
        self.rng: Optional[np.random.Generator] = None

        # Generated data container
        self.production: Optional[pd.DataFrame] = None

    @staticmethod
    def _check_count(n_records) -> int:
        if isinstance(n_records, bool) or not isinstance(n_records, (int, np.integer)):
            raise InvalidArgument(f"record count must be an integer, got {n_records!r}")
        if n_records < 0:
            raise InvalidArgument(f"record count must be >= 0, got {n_records}")
        return int(n_records)

    def _draw(self, field: str) -> float:
        spec = FIELD_RANGES[field]
        value = round(float(self.rng.uniform(spec["low"], spec["high"])), spec["decimals"])
        return int(value) if spec["decimals"] == 0 else value

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------

    def sample(self, n_records: int = DEFAULT_RECORDS) -> pd.DataFrame:
        """Draw ``n_records`` rows before the downtime adjustment.

        Starts a fresh generator from the seed, so repeated calls return
        identical tables.
        """
        n_records = self._check_count(n_records)
        self.rng = np.random.default_rng(self.seed)

        rows = []
        for pid in range(1, n_records + 1):
            line_id = LINE_IDS[int(self.rng.integers(len(LINE_IDS)))]
            row = {
                "Production_ID": pid,
                "Date": (START_DATE + timedelta(days=pid - 1)).strftime("%Y-%m-%d"),
                "Line_ID": line_id,
            }
            for field in FIELD_RANGES:
                row[field] = self._draw(field)
            rows.append(row)

        table = pd.DataFrame(rows, columns=COLUMNS)
        if n_records == 0:
            table = table.astype({
                "Production_ID": "int64",
                "Downtime_Hours": "float64",
                "Defect_Rate": "float64",
                "Energy_Usage_kWh": "float64",
                "Production_Cost": "int64",
                "Worker_Satisfaction": "int64",
            })
        return table

    # ------------------------------------------------------------------
    # Run simulation
    # ------------------------------------------------------------------

    def run(self, n_records: int = DEFAULT_RECORDS) -> pd.DataFrame:
        """Sample every record, then apply the downtime adjustment once."""
        n_records = self._check_count(n_records)
        print(f"Sampling {n_records:,} production records (seed {self.seed})...")
        raw = self.sample(n_records)

        print("Applying high-defect downtime adjustment...")
        self.production = apply_downtime_adjustment(raw)

        print("\n--- Simulation Summary ---")
        print(f"  production: {len(self.production):,} rows × {len(self.production.columns)} columns")
        return self.production
