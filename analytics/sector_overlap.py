"""
sector_overlap.py — Sector-allocation similarity between two or more funds.

Each fund becomes a dense weight vector over the union of normalised sector
labels; pairs are compared with cosine similarity and min-weight overlap.
"""
from __future__ import annotations

import logging
from itertools import combinations
from typing import Any, Sequence

from analytics.models import FundProjection, SectorAllocation
from analytics.similarity import cosine_similarity, safe_divide


def build_sector_map(allocations: Sequence[SectorAllocation]) -> dict[str, float]:
    """Normalised label -> weight. Labels that normalise to the same sector are summed."""
    sectors: dict[str, float] = {}
    for allocation in allocations:
        label = allocation.label
        if label is None:
            continue
        sectors[label] = sectors.get(label, 0.0) + allocation.effective_weight
    return sectors


def _top_sector(sectors: dict[str, float]) -> str | None:
    if not sectors:
        return None
    # highest weight, alphabetical on ties
    return min(sectors, key=lambda label: (-sectors[label], label))


def compare_sector_pair(sectors_a: dict[str, float], sectors_b: dict[str, float]) -> dict[str, Any]:
    labels = sorted(sectors_a.keys() | sectors_b.keys())
    vec_a = [sectors_a.get(label, 0.0) for label in labels]
    vec_b = [sectors_b.get(label, 0.0) for label in labels]

    common_sectors = [
        {
            "sector": label,
            "weight_a": wa,
            "weight_b": wb,
            "difference": round(abs(wa - wb), 2),
        }
        for label, wa, wb in zip(labels, vec_a, vec_b)
        if wa > 0 and wb > 0
    ]
    common_sectors.sort(key=lambda s: (-(s["weight_a"] + s["weight_b"]) / 2, s["sector"]))

    return {
        "cosine_similarity": round(cosine_similarity(vec_a, vec_b), 4),
        "percent_overlap": round(sum(min(wa, wb) for wa, wb in zip(vec_a, vec_b)), 2),
        "common_sectors": common_sectors,
    }


def analyze_sectors(
    funds: Sequence[FundProjection],
    logger: logging.Logger,
) -> dict[str, Any] | None:
    """
    Compute per-sector exposure across funds and pairwise sector similarity.

    Returns None when fewer than two funds are given or any fund has no
    sector allocation.
    """
    if len(funds) < 2:
        return None

    sector_maps: list[dict[str, float]] = []
    for fund in funds:
        sectors = build_sector_map(fund.sector_allocation)
        if not sectors:
            logger.info("Fund %s has no sector allocation; skipping sector overlap.", fund.fund_id)
            return None
        sector_maps.append(sectors)

    all_labels = sorted(set().union(*sector_maps))
    sector_rows = []
    for label in all_labels:
        weights = [sectors.get(label, 0.0) for sectors in sector_maps]
        sector_rows.append(
            {
                "sector": label,
                "average_allocation": round(safe_divide(sum(weights), len(weights)), 2),
                "funds_with_sector": sum(1 for w in weights if w > 0),
                "allocations": [
                    {"fund_id": fund.fund_id, "fund_name": fund.name, "weight": weight}
                    for fund, weight in zip(funds, weights)
                ],
            }
        )
    sector_rows.sort(key=lambda r: (-r["funds_with_sector"], -r["average_allocation"], r["sector"]))

    pairwise_overlaps = [
        {
            "fund_a": funds[i].fund_id,
            "fund_b": funds[j].fund_id,
            **compare_sector_pair(sector_maps[i], sector_maps[j]),
        }
        for i, j in combinations(range(len(funds)), 2)
    ]

    top_sectors = {fund.fund_id: _top_sector(sectors) for fund, sectors in zip(funds, sector_maps)}
    distinct_tops = set(top_sectors.values())
    common_top_sector = distinct_tops.pop() if len(distinct_tops) == 1 else None

    result: dict[str, Any] = {
        "sectors": sector_rows,
        "pairwise_overlaps": pairwise_overlaps,
        "top_sectors": top_sectors,
        "common_top_sector": common_top_sector,
    }

    if len(funds) == 2:
        pair = pairwise_overlaps[0]
        result.update(
            {
                "cosine_similarity": pair["cosine_similarity"],
                "percent_overlap": pair["percent_overlap"],
                "common_sectors": pair["common_sectors"],
                "sectors_a": sector_maps[0],
                "sectors_b": sector_maps[1],
            }
        )

    logger.info(
        "Sector overlap: %d funds, %d sectors, common top sector=%s.",
        len(funds),
        len(all_labels),
        common_top_sector,
    )
    return result
