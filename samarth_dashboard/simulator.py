"""
Simulated district report generator.

Produces "Good Work Done" reports in the layout district units upload,
for seeding a fresh store and for demos. All values are synthetic.
"""

from pathlib import Path

import numpy as np
import pandas as pd

# ---------------------------------------------------------------------------
# District roster (name, zone)
# ---------------------------------------------------------------------------
_DISTRICTS = [
    ("Cuttack", "Central"),
    ("Khordha", "Central"),
    ("Puri", "Central"),
    ("Jagatsinghpur", "Central"),
    ("Balasore", "Northern"),
    ("Bhadrak", "Northern"),
    ("Mayurbhanj", "Northern"),
    ("Keonjhar", "Northern"),
    ("Ganjam", "Southern"),
    ("Koraput", "Southern"),
    ("Rayagada", "Southern"),
    ("Malkangiri", "Southern"),
    ("Sambalpur", "Western"),
    ("Sundargarh", "Western"),
    ("Bargarh", "Western"),
    ("Balangir", "Western"),
]

# Typical ranges per metric: (low, high)
_RANGES = {
    "hps_score": (45.0, 95.0),
    "nbws_executed": (20, 180),
    "conviction_ratio": (30.0, 90.0),
    "drug_seizure_kg": (0.5, 60.0),
    "cases_solved": (40, 400),
    "recognitions": (0, 25),
}

_INTEGER_FIELDS = {"nbws_executed", "cases_solved", "recognitions"}


def generate_district_report(
    districts: list[tuple[str, str]] | None = None,
    seed: int = 42,
) -> pd.DataFrame:
    """Generate one report with a row per district.

    Columns: District, zone, hps_score, nbws_executed, conviction_ratio,
    drug_seizure_kg, cases_solved, recognitions.
    """
    rng = np.random.default_rng(seed)
    roster = districts if districts is not None else _DISTRICTS

    rows = []
    for name, zone in roster:
        row = {"District": name, "zone": zone}
        for field, (low, high) in _RANGES.items():
            if field in _INTEGER_FIELDS:
                row[field] = int(rng.integers(low, high + 1))
            else:
                row[field] = round(float(rng.uniform(low, high)), 1)
        rows.append(row)

    return pd.DataFrame(rows)


def write_report(df: pd.DataFrame, path: str | Path) -> Path:
    """Write a report as .csv or .xlsx depending on the path's extension."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".xlsx":
        df.to_excel(path, index=False, engine="openpyxl")
    elif path.suffix.lower() == ".csv":
        df.to_csv(path, index=False)
    else:
        raise ValueError(f"Unsupported report extension: {path.suffix}")
    return path
