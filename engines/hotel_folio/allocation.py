"""
HotelSphere Hotel Folio Engine — Proportional Allocation
==========================================================
Splits an integer amount across weighted keys (largest remainder).

Guarantees, for amount ≥ 0:
- Σ shares == amount exactly (when any weight is positive)
- keys with weight ≤ 0 receive nothing
- no share exceeds its weight when amount ≤ Σ weights
- deterministic: remainder ties go to the earlier key
"""
from __future__ import annotations

from typing import List, Sequence, Tuple


def allocate_largest_remainder(
    amount: int,
    weights: Sequence[Tuple[str, int]],
) -> List[Tuple[str, int]]:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError("amount must be int (minor units).")
    if amount < 0:
        raise ValueError("amount must be non-negative.")

    positive = [(key, weight) for key, weight in weights if weight > 0]
    if amount == 0 or not positive:
        return []

    total = sum(weight for _, weight in positive)
    floors = []
    for index, (key, weight) in enumerate(positive):
        share, remainder = divmod(amount * weight, total)
        floors.append([key, share, remainder, index])

    leftover = amount - sum(entry[1] for entry in floors)
    for entry in sorted(floors, key=lambda e: (-e[2], e[3]))[:leftover]:
        entry[1] += 1

    return [(key, share) for key, share, _, _ in floors if share > 0]
