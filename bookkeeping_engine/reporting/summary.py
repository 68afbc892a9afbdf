"""
Summaries of categorized transactions.

Turns (transaction, result) pairs into pandas DataFrames for review
screens and exports.
"""

from typing import List, Tuple

import pandas as pd

from ..categorisation.models import CategorizationResult, FlowDirection, Transaction


CategorizedPairs = List[Tuple[Transaction, CategorizationResult]]

RESULT_COLUMNS = [
    "Transaction ID",
    "Date",
    "Description",
    "Amount",
    "Category Code",
    "Category Name",
    "Merchant",
    "Confidence",
    "Flow",
    "Match Source",
    "Needs Review",
    "Reasoning",
]

SUMMARY_COLUMNS = [
    "Category Code",
    "Category Name",
    "Count",
    "Total Inflow",
    "Total Outflow",
    "Mean Confidence",
]


def results_to_dataframe(categorized: CategorizedPairs) -> pd.DataFrame:
    """
    Convert categorized transactions to a pandas DataFrame.

    Args:
        categorized: List of (transaction, result) tuples

    Returns:
        pandas DataFrame with one row per transaction, in input order
    """
    rows = []
    for txn, result in categorized:
        rows.append({
            "Transaction ID": txn.id,
            "Date": txn.date,
            "Description": txn.description,
            "Amount": float(txn.amount),
            "Category Code": result.category_code,
            "Category Name": result.category_name,
            "Merchant": result.merchant_label or "",
            "Confidence": result.confidence,
            "Flow": result.flow_direction.value,
            "Match Source": result.match_source.value,
            "Needs Review": result.needs_review,
            "Reasoning": result.reasoning,
        })

    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def build_category_summary(categorized: CategorizedPairs) -> pd.DataFrame:
    """
    Summarize categorized transactions by category code.

    Inflow and outflow totals are absolute amounts split by the assigned
    flow direction, not by the sign of the amount.

    Returns:
        DataFrame sorted by count (descending) then category code
    """
    df = results_to_dataframe(categorized)
    if df.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    df["Abs Amount"] = df["Amount"].abs()
    df["Inflow"] = df["Abs Amount"].where(df["Flow"] == FlowDirection.INFLOW.value, 0.0)
    df["Outflow"] = df["Abs Amount"].where(df["Flow"] == FlowDirection.OUTFLOW.value, 0.0)

    summary = (
        df.groupby(["Category Code", "Category Name"], dropna=False)
        .agg(
            **{
                "Count": ("Transaction ID", "count"),
                "Total Inflow": ("Inflow", "sum"),
                "Total Outflow": ("Outflow", "sum"),
                "Mean Confidence": ("Confidence", "mean"),
            }
        )
        .reset_index()
    )
    summary["Total Inflow"] = summary["Total Inflow"].round(2)
    summary["Total Outflow"] = summary["Total Outflow"].round(2)
    summary["Mean Confidence"] = summary["Mean Confidence"].round(1)

    summary = summary.sort_values(["Count", "Category Code"], ascending=[False, True])
    return summary.reset_index(drop=True)[SUMMARY_COLUMNS]


def build_source_summary(categorized: CategorizedPairs) -> pd.DataFrame:
    """Count transactions and mean confidence by cascade step."""
    df = results_to_dataframe(categorized)
    if df.empty:
        return pd.DataFrame(columns=["Match Source", "Count", "Mean Confidence"])

    summary = (
        df.groupby("Match Source")
        .agg(Count=("Transaction ID", "count"), **{"Mean Confidence": ("Confidence", "mean")})
        .reset_index()
    )
    summary["Mean Confidence"] = summary["Mean Confidence"].round(1)
    return summary.sort_values("Count", ascending=False).reset_index(drop=True)


def build_review_queue(categorized: CategorizedPairs, threshold: int = 40) -> pd.DataFrame:
    """
    Transactions whose confidence is below the review threshold.

    Args:
        categorized: List of (transaction, result) tuples
        threshold: Confidence below which a transaction needs review

    Returns:
        DataFrame of low-confidence rows, lowest confidence first
    """
    df = results_to_dataframe(categorized)
    if df.empty:
        return df

    queue = df[df["Confidence"] < threshold]
    return queue.sort_values(["Confidence", "Transaction ID"]).reset_index(drop=True)
