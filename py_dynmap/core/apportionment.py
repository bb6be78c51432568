"""
Largest-remainder (Hamilton) apportionment over exact integer weights.

Used for region cell counts, for the planetary population, and for the
urban/rural split inside each cell. All arithmetic is on Python integers,
so the allocated units always sum to the requested total.
"""

import heapq
from fractions import Fraction
from math import lcm
from typing import List, Sequence


def largest_remainder(weights: Sequence[int], total: int) -> List[int]:
    """
    Split ``total`` units across buckets proportionally to ``weights``.

    Each bucket receives ``floor(w * total / sum(w))``; the leftover units go
    one each to the buckets with the largest fractional remainder, ties going
    to the lower index. If every weight is zero the split is uniform.

    Args:
        weights: Non-negative integer weights
        total: Non-negative number of units to distribute

    Returns:
        Allocated units per bucket, summing to ``total``
    """
    if total < 0:
        raise ValueError(f"Cannot apportion a negative total: {total}")
    weights = [int(w) for w in weights]
    if not weights:
        if total:
            raise ValueError("Cannot apportion units over zero buckets")
        return []
    if any(w < 0 for w in weights):
        raise ValueError("Apportionment weights must be non-negative")

    weight_sum = sum(weights)
    if weight_sum == 0:
        weights = [1] * len(weights)
        weight_sum = len(weights)

    allocation = []
    remainders = []
    for w in weights:
        quotient, remainder = divmod(w * total, weight_sum)
        allocation.append(quotient)
        remainders.append(remainder)

    deficit = total - sum(allocation)
    if deficit:
        winners = heapq.nsmallest(
            deficit, range(len(weights)), key=lambda i: (-remainders[i], i)
        )
        for index in winners:
            allocation[index] += 1

    return allocation


def shares_to_weights(shares: Sequence[float]) -> List[int]:
    """
    Turn decimal shares into proportional integer weights.

    Shares are read through their shortest decimal repr, so 0.3 is taken as
    exactly 3/10 and not as the nearest binary float.
    """
    fractions = [Fraction(repr(float(s))) for s in shares]
    denominator = lcm(*(f.denominator for f in fractions)) if fractions else 1
    return [int(f * denominator) for f in fractions]
