import pandas as pd
import pytest

from line_analytics.production_sim import ProductionSimulator


@pytest.fixture
def production() -> pd.DataFrame:
    """A small seeded production table (300 days)."""
    return ProductionSimulator(seed=2025).run(n_records=300)


@pytest.fixture
def tiny_table() -> pd.DataFrame:
    return pd.DataFrame({
        "Production_ID": [1, 2, 3, 4, 5, 6],
        "Date": ["2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04", "2024-01-05", "2024-01-06"],
        "Line_ID": ["Assembly", "Assembly", "Painting", "Painting", "Welding", "Assembly"],
        "Downtime_Hours": [6.0, 8.0, 9.5, 2.0, 5.0, 1.0],
        "Defect_Rate": [2.0, 4.0, 7.0, 1.0, 9.0, 3.0],
        "Energy_Usage_kWh": [120.0, 80.5, 150.2, 60.0, 199.9, 75.0],
        "Production_Cost": [1500, 2200, 4100, 3000, 1800, 2600],
        "Worker_Satisfaction": [70, 82, 55, 91, 64, 77],
    })
