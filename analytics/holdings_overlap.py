"""
holdings_overlap.py — Stock-level overlap between two or more funds.

Holdings are keyed by a canonical identifier (ticker preferred, name
fallback, case-folded, non-alphanumerics stripped). Holdings with neither a
ticker nor a name are dropped rather than matched as empty strings.
"""
from __future__ import annotations

import logging
from itertools import combinations
from typing import Any, Sequence

from analytics.models import FundProjection, Holding
from analytics.similarity import jaccard_index, safe_divide, weighted_overlap


def build_weight_map(holdings: Sequence[Holding]) -> dict[str, Holding]:
    """Map canonical identifier -> holding. Duplicate identifiers: last one wins."""
    index: dict[str, Holding] = {}
    for holding in holdings:
        identifier = holding.identifier
        if identifier is None:
            continue
        index[identifier] = holding
    return index


def select_top_holdings(holdings: Sequence[Holding], top_n: int | None) -> dict[str, Holding]:
    """
    Identifier -> holding for the largest ``top_n`` identifiable holdings.

    Duplicates are resolved and unidentifiable holdings dropped before ranking,
    so neither takes up a top-N slot. Ties keep first-seen order.
    """
    ranked = sorted(
        build_weight_map(holdings).items(), key=lambda item: item[1].effective_weight, reverse=True
    )
    return dict(ranked if top_n is None else ranked[:top_n])


def analyze_holdings(
    funds: Sequence[FundProjection],
    logger: logging.Logger,
    top_n: int | None = None,
) -> dict[str, Any] | None:
    """
    Compute aggregate and pairwise holdings overlap.

    Args:
        funds:  Two or more fund projections.
        logger: Bound logger.
        top_n:  Number of largest holdings per fund to consider (None = all).

    Returns:
        Overlap dict, or None when fewer than two funds are given or any fund
        has no identifiable holding.
    """
    if len(funds) < 2:
        return None

    fund_holdings: list[dict[str, Holding]] = []
    for fund in funds:
        index = select_top_holdings(fund.holdings, top_n)
        if not index:
            logger.info("Fund %s has no usable holdings; skipping holdings overlap.", fund.fund_id)
            return None
        fund_holdings.append(index)

    # identifier -> indices of the funds holding it
    holders: dict[str, set[int]] = {}
    for fund_index, index in enumerate(fund_holdings):
        for identifier in index:
            holders.setdefault(identifier, set()).add(fund_index)

    total_distinct = len(holders)
    if total_distinct == 0:
        return None

    common_holdings: list[dict[str, Any]] = []
    unique_holdings: dict[str, list[str]] = {fund.fund_id: [] for fund in funds}

    for identifier, fund_indices in holders.items():
        if len(fund_indices) > 1:
            ordered = sorted(fund_indices)
            first = fund_holdings[ordered[0]][identifier]
            common_holdings.append(
                {
                    "identifier": identifier,
                    "name": first.display_name,
                    "appears_in": len(fund_indices),
                    "funds": [
                        {
                            "fund_id": funds[i].fund_id,
                            "fund_name": funds[i].name,
                            "weight": fund_holdings[i][identifier].effective_weight,
                            "raw_weight": fund_holdings[i][identifier].weight,
                        }
                        for i in ordered
                    ],
                }
            )
        else:
            (only,) = fund_indices
            unique_holdings[funds[only].fund_id].append(identifier)

    common_holdings.sort(key=lambda h: (-h["appears_in"], h["identifier"]))
    for identifiers in unique_holdings.values():
        identifiers.sort()

    pairwise_overlaps = []
    jaccards: list[float] = []
    for i, j in combinations(range(len(funds)), 2):
        weights_a = {k: h.effective_weight for k, h in fund_holdings[i].items()}
        weights_b = {k: h.effective_weight for k, h in fund_holdings[j].items()}
        jaccard = jaccard_index(weights_a, weights_b)
        jaccards.append(jaccard)
        pairwise_overlaps.append(
            {
                "fund_a": funds[i].fund_id,
                "fund_b": funds[j].fund_id,
                "jaccard": round(jaccard, 4),
                "overlap_percentage": round(jaccard * 100, 2),
                "weighted_overlap": round(weighted_overlap(weights_a, weights_b), 2),
                "common_stocks": len(weights_a.keys() & weights_b.keys()),
            }
        )

    average_overlap = round(safe_divide(sum(jaccards), len(jaccards)) * 100, 2)

    result: dict[str, Any] = {
        "total_distinct_holdings": total_distinct,
        "overlap_percentage": round(safe_divide(len(common_holdings), total_distinct) * 100, 2),
        "common_holdings": common_holdings,
        "unique_holdings": unique_holdings,
        "pairwise_overlaps": pairwise_overlaps,
        "average_overlap": average_overlap,
    }

    if len(funds) == 2:
        pair = pairwise_overlaps[0]
        result.update(
            {
                "jaccard": pair["jaccard"],
                "weighted_overlap": pair["weighted_overlap"],
                "common_stocks": pair["common_stocks"],
                "unique_to_fund_a": len(unique_holdings[funds[0].fund_id]),
                "unique_to_fund_b": len(unique_holdings[funds[1].fund_id]),
                "total_holdings_a": len(fund_holdings[0]),
                "total_holdings_b": len(fund_holdings[1]),
            }
        )

    logger.info(
        "Holdings overlap: %d funds, %d distinct holdings, %d common, average %.2f%%.",
        len(funds),
        total_distinct,
        len(common_holdings),
        average_overlap,
    )
    return result
