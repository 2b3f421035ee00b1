"""
Batch screening and cohort reporting over child records.
"""

import logging
from typing import Any, Callable, Dict

import numpy as np
import pandas as pd

from .age import DateLike, calculate_age, parse_date
from .classification import (
    classify_height_for_age,
    classify_weight_for_age,
    classify_weight_for_height,
)
from .config import DEFAULT_COLUMNS, REQUIRED_COLUMNS, STUNTING_STATUSES
from .reference import DEFAULT_REFERENCE_TABLE, ReferenceTable
from .zscores import calculate_growth_metrics


def _classify_series(
    scores: np.ndarray, classify: Callable[[float], Any], index: pd.Index
) -> pd.Series:
    """Status labels per row as an object column; NaN scores stay missing."""
    labels = [classify(score).value if np.isfinite(score) else None for score in scores]
    return pd.Series(labels, index=index, dtype=object)


def screen_children(
    df: pd.DataFrame,
    today: DateLike = None,
    table: ReferenceTable = DEFAULT_REFERENCE_TABLE,
    age_col: str = DEFAULT_COLUMNS["age"],
    birth_date_col: str = DEFAULT_COLUMNS["birth_date"],
) -> pd.DataFrame:
    """
    Add Z-scores and statuses to a DataFrame of child records.

    Age comes from `age_col` when present, otherwise it is computed from
    `birth_date_col` relative to `today`.

    Parameters
    ----------
    df : pd.DataFrame
        Child records with sex, height_cm, weight_kg and an age source
    today : date-like, optional
        Reference date for age calculation
    table : ReferenceTable
        Reference table

    Returns
    -------
    pd.DataFrame
        Copy of df with age_months, haz, waz, whz, stunting_status,
        underweight_status, wasting_status and is_stunted columns
    """
    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"Child records are missing required columns: {missing}")

    screened = df.copy()
    if screened.empty:
        for col in ("haz", "waz", "whz", "stunting_status", "underweight_status", "wasting_status"):
            screened[col] = pd.Series(dtype=object if col.endswith("status") else float)
        screened["is_stunted"] = pd.Series(dtype=bool)
        return screened

    if age_col in screened.columns:
        ages = pd.to_numeric(screened[age_col], errors="coerce")
    elif birth_date_col in screened.columns:
        birth_dates = pd.Series(
            [None if pd.isna(d) else parse_date(d) for d in screened[birth_date_col]],
            index=screened.index,
            dtype=object,
        )
        no_birth_date = birth_dates.isna()
        if no_birth_date.any():
            logging.warning(
                f"{int(no_birth_date.sum())} records have a missing or unparseable birth date "
                "- they are not screened"
            )
        ages = pd.Series(np.nan, index=screened.index, dtype=np.float64)
        ages[~no_birth_date] = [
            float(calculate_age(d, today)) for d in birth_dates[~no_birth_date]
        ]
        screened[age_col] = ages
    else:
        raise ValueError(
            f"Child records need either '{age_col}' or '{birth_date_col}' column"
        )

    metrics = calculate_growth_metrics(
        agemos=ages.to_numpy(dtype=np.float64),
        sex=screened["sex"].to_numpy(dtype=object),
        height=pd.to_numeric(screened["height_cm"], errors="coerce").to_numpy(dtype=np.float64),
        weight=pd.to_numeric(screened["weight_kg"], errors="coerce").to_numpy(dtype=np.float64),
        table=table,
    )

    screened["haz"] = metrics["haz"]
    screened["waz"] = metrics["waz"]
    screened["whz"] = metrics["whz"]
    screened["stunting_status"] = _classify_series(metrics["haz"], classify_height_for_age, screened.index)
    screened["underweight_status"] = _classify_series(metrics["waz"], classify_weight_for_age, screened.index)
    screened["wasting_status"] = _classify_series(metrics["whz"], classify_weight_for_height, screened.index)
    screened["is_stunted"] = metrics["_stunted"]
    return screened


def _prevalence(stunting: int, total: int) -> float:
    return (stunting / total) * 100 if total > 0 else 0.0


def summarize_cohort(
    df: pd.DataFrame,
    status_col: str = DEFAULT_COLUMNS["status"],
    village_col: str = DEFAULT_COLUMNS["village"],
    date_col: str = DEFAULT_COLUMNS["recorded_at"],
) -> Dict[str, Any]:
    """
    Summarize stunting cases across a cohort.

    A record counts as a stunting case when its status is "Stunting" or
    "Stunting Berat". Records without a village are left out of the village
    table, records without a date out of the monthly table.

    Parameters
    ----------
    df : pd.DataFrame
        Child records with a stunting status column
    status_col, village_col, date_col : str
        Column names

    Returns
    -------
    dict
        total_children, stunting_cases, prevalence (%), villages (count),
        village_table (DataFrame: village, total, stunting, prevalence),
        monthly_table (DataFrame: month, total, stunting, prevalence) and
        trend (last month prevalence minus previous month, percentage points)
    """
    if status_col not in df.columns:
        raise ValueError(f"Column '{status_col}' does not exist in DataFrame")

    is_case = df[status_col].isin(STUNTING_STATUSES)
    total = len(df)
    cases = int(is_case.sum())

    village_table = pd.DataFrame(columns=["village", "total", "stunting", "prevalence"])
    if village_col in df.columns:
        has_village = df[village_col].notna() & (df[village_col].astype(str).str.strip() != "")
        if has_village.any():
            grouped = (
                pd.DataFrame({"village": df.loc[has_village, village_col], "case": is_case[has_village]})
                .groupby("village", sort=True)["case"]
                .agg(total="size", stunting="sum")
                .reset_index()
            )
            grouped["stunting"] = grouped["stunting"].astype(int)
            grouped["prevalence"] = [
                _prevalence(s, t) for s, t in zip(grouped["stunting"], grouped["total"])
            ]
            village_table = grouped

    monthly_table = pd.DataFrame(columns=["month", "total", "stunting", "prevalence"])
    if date_col in df.columns:
        dates = pd.to_datetime(df[date_col], errors="coerce", utc=True)
        has_date = dates.notna()
        if has_date.any():
            grouped = (
                pd.DataFrame({"month": dates[has_date].dt.strftime("%Y-%m"), "case": is_case[has_date]})
                .groupby("month", sort=True)["case"]
                .agg(total="size", stunting="sum")
                .reset_index()
            )
            grouped["stunting"] = grouped["stunting"].astype(int)
            grouped["prevalence"] = [
                _prevalence(s, t) for s, t in zip(grouped["stunting"], grouped["total"])
            ]
            monthly_table = grouped

    trend = 0.0
    if len(monthly_table) >= 2:
        last, previous = monthly_table.iloc[-1], monthly_table.iloc[-2]
        trend = float(last["prevalence"] - previous["prevalence"])

    return {
        "total_children": total,
        "stunting_cases": cases,
        "prevalence": _prevalence(cases, total),
        "villages": len(village_table),
        "village_table": village_table,
        "monthly_table": monthly_table,
        "trend": trend,
    }


def describe_trend(trend: float) -> str:
    """Narrative for the month-over-month stunting trend."""
    if trend > 0:
        return "Terdapat peningkatan kasus stunting dibandingkan bulan sebelumnya."
    if trend < 0:
        return "Terdapat penurunan kasus stunting dibandingkan bulan sebelumnya."
    return "Kasus stunting stabil dibandingkan bulan sebelumnya."
