"""
recommendations.py — Diversification guidance derived from overlap results.
"""
from __future__ import annotations

from typing import Any

HIGH_OVERLAP_THRESHOLD = 50.0
MODERATE_OVERLAP_THRESHOLD = 30.0
COMMON_HOLDINGS_CONCENTRATION = 10


def get_overlap_level(average_overlap: float) -> str:
    """HIGH above 50%, MODERATE above 30%, LOW otherwise (boundaries fall to the lower band)."""
    if average_overlap > HIGH_OVERLAP_THRESHOLD:
        return "HIGH"
    if average_overlap > MODERATE_OVERLAP_THRESHOLD:
        return "MODERATE"
    return "LOW"


def diversification_score(average_overlap: float) -> float:
    """Lower overlap means a higher score, clamped to [0, 100]."""
    return round(max(0.0, min(100.0, 100.0 - average_overlap)), 2)


def generate_recommendations(
    holdings_overlap: dict[str, Any] | None,
    sector_overlap: dict[str, Any] | None,
) -> dict[str, Any]:
    advice: list[str] = []

    if holdings_overlap is None:
        return {
            "overlap_level": None,
            "diversification_score": None,
            "advice": ["Holdings data is unavailable for at least one fund; overlap could not be assessed."],
        }

    average_overlap = holdings_overlap["average_overlap"]
    level = get_overlap_level(average_overlap)

    if level == "HIGH":
        advice.append(
            "High overlap detected (>50%). Consider diversifying across different funds or categories."
        )
    elif level == "MODERATE":
        advice.append(
            "Moderate overlap (30-50%). The funds share some holdings but remain reasonably diversified."
        )
    else:
        advice.append("Low overlap (<30%). The funds are well diversified across different holdings.")

    common_count = len(holdings_overlap["common_holdings"])
    if common_count > COMMON_HOLDINGS_CONCENTRATION:
        advice.append(
            f"{common_count} holdings are common to more than one fund. "
            "Review whether this concentration matches your risk profile."
        )

    if sector_overlap is not None and sector_overlap.get("common_top_sector"):
        advice.append(
            f"Every fund has {sector_overlap['common_top_sector']} as its largest sector. "
            "Consider adding funds with a different sector tilt."
        )

    return {
        "overlap_level": level,
        "diversification_score": diversification_score(average_overlap),
        "advice": advice,
    }
