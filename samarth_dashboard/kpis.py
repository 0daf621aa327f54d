"""
Statistics over district documents. Nothing here touches the store.

Provides the statewide summary, the HPS leaderboard, risk-district
selection, templated insight text, and the monthly historical data point.
All ordering is stable: ties keep the order districts were scanned in.
"""

import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

import numpy as np
import pandas as pd

from .config import (
    DRUG_VALUE_PER_KG_INR,
    KEY_TOPICS,
    LEADERBOARD_SIZE,
    NUMERIC_FIELDS,
    RISK_CONVICTION_THRESHOLD,
    STABLE_ALERT,
)
from .loaders.utils import safe_float

logger = logging.getLogger(__name__)

_FRAME_COLUMNS = ["id", "district_name", "zone", *NUMERIC_FIELDS]


def build_district_frame(documents: list[dict]) -> pd.DataFrame:
    """Flatten district documents into a DataFrame, keeping scan order.

    Missing or non-numeric metrics become 0. A document without a
    district_name falls back to its id.
    """
    rows = []
    for doc in documents:
        row = {
            "id": doc.get("id"),
            "district_name": doc.get("district_name") or doc.get("name") or doc.get("id"),
            "zone": doc.get("zone"),
        }
        for field in NUMERIC_FIELDS:
            val = safe_float(doc.get(field))
            row[field] = val if val is not None else 0.0
        rows.append(row)

    df = pd.DataFrame(rows, columns=_FRAME_COLUMNS)
    for field in NUMERIC_FIELDS:
        df[field] = df[field].astype("float64")
    return df.reset_index(drop=True)


def round_half_up(val: float, places: int) -> float:
    """Round with halves going away from zero, so 52.25 -> 52.3 at one place."""
    step = Decimal(1).scaleb(-places)
    return float(Decimal(str(val)).quantize(step, rounding=ROUND_HALF_UP))


def clean_number(val: float) -> int | float:
    """Render whole numbers as int and everything else to two decimals."""
    val = float(val)
    if val.is_integer():
        return int(val)
    return round_half_up(val, 2)


def sort_descending(frame: pd.DataFrame, column: str) -> pd.DataFrame:
    """Stable descending sort: equal values keep their scan order."""
    order = np.argsort(-frame[column].to_numpy(), kind="stable")
    return frame.iloc[order]


def compute_summary(frame: pd.DataFrame) -> dict:
    """Statewide totals and averages.

    Rules
    -----
    - Drug seizure, NBWs executed: sum
    - Conviction ratio: mean, one decimal (0 when there are no districts)
    - Recovered value: drug seizure total x fixed per-kg value
    """
    if frame.empty:
        avg_conviction = 0.0
    else:
        avg_conviction = round_half_up(float(frame["conviction_ratio"].mean()), 1)

    total_drug = float(frame["drug_seizure_kg"].sum())
    total_nbws = float(frame["nbws_executed"].sum())

    return {
        "statewideConvictionRatio": avg_conviction,
        "totalDrugSeizureVolume_kg": clean_number(total_drug),
        "totalNbwsExecuted": clean_number(total_nbws),
        "totalValueRecovered_INR": clean_number(total_drug * DRUG_VALUE_PER_KG_INR),
        "districtCount": int(len(frame)),
    }


def rank_districts(
    frame: pd.DataFrame,
    n: int = LEADERBOARD_SIZE,
) -> tuple[list[str], list[str]]:
    """Return (top_performers, bottom_performers) by HPS score.

    top_performers runs highest first. bottom_performers holds the lowest
    n districts with the very lowest last.
    """
    if frame.empty:
        return [], []
    ranked = sort_descending(frame, "hps_score")
    top = ranked.head(n)["district_name"].tolist()
    bottom = ranked.tail(n)["district_name"].tolist()
    return top, bottom


def find_risk_districts(
    frame: pd.DataFrame,
    threshold: float = RISK_CONVICTION_THRESHOLD,
) -> list[str]:
    """Districts with conviction ratio strictly below `threshold`, in scan order.

    A ratio of 0 means the report did not carry one, so it is never flagged.
    """
    if frame.empty:
        return []
    ratio = frame["conviction_ratio"]
    return frame.loc[(ratio > 0) & (ratio < threshold), "district_name"].tolist()


def compose_summary_sentence(frame: pd.DataFrame) -> str:
    """Sentence naming the top NBW executor and the top drug-seizure district."""
    if frame.empty:
        return "No district data is available for this period."

    top_nbw = sort_descending(frame, "nbws_executed").iloc[0]
    top_drug = sort_descending(frame, "drug_seizure_kg").iloc[0]

    return (
        f"This period, {top_nbw['district_name']} led in NBW execution with "
        f"{clean_number(top_nbw['nbws_executed'])} warrants cleared, while "
        f"{top_drug['district_name']} was most effective in narcotics enforcement, "
        f"seizing {clean_number(top_drug['drug_seizure_kg'])}kg of drugs."
    )


def compose_alert(
    risk_districts: list[str],
    threshold: float = RISK_CONVICTION_THRESHOLD,
) -> str:
    if not risk_districts:
        return STABLE_ALERT
    return (
        f"Attention recommended for {', '.join(risk_districts)} due to conviction "
        f"ratios falling below the {clean_number(threshold)}% threshold."
    )


def compute_insights(
    frame: pd.DataFrame,
    threshold: float = RISK_CONVICTION_THRESHOLD,
    n: int = LEADERBOARD_SIZE,
) -> dict:
    """Insight report without its timestamp.

    risk_districts are the below-threshold districts when there are any,
    otherwise the bottom of the HPS leaderboard.
    """
    top_performers, bottom = rank_districts(frame, n)
    below_threshold = find_risk_districts(frame, threshold)
    logger.debug("%d districts below %s%% conviction", len(below_threshold), threshold)
    risk_districts = below_threshold if below_threshold else bottom

    return {
        "top_performers": top_performers,
        "risk_districts": risk_districts,
        "naturalLanguageSummary": compose_summary_sentence(frame),
        "predictiveAlert": compose_alert(below_threshold, threshold),
        "keyTopics": list(KEY_TOPICS),
    }


def parse_month(month: str) -> datetime:
    """Parse a 'YYYY-MM' key; raises ValueError for anything else."""
    return datetime.strptime(month, "%Y-%m")


def month_label(month: str) -> str:
    """Short month name for a 'YYYY-MM' key: '2025-10' -> 'Oct'."""
    return parse_month(month).strftime("%b")


def previous_month(today: date) -> str:
    """'YYYY-MM' key of the calendar month before `today`."""
    if today.month == 1:
        return f"{today.year - 1}-12"
    return f"{today.year}-{today.month - 1:02d}"


def compute_historical_point(frame: pd.DataFrame, month: str) -> dict:
    """Historical data point for one month's ingested batch."""
    summary = compute_summary(frame)
    return {
        "id": month,
        "month": month_label(month),
        "convictionRatio": summary["statewideConvictionRatio"],
        "nbwsExecuted": summary["totalNbwsExecuted"],
        "drugSeizure_kg": summary["totalDrugSeizureVolume_kg"],
    }
