"""Legal placement generation for Misfits."""

from __future__ import annotations

from collections import defaultdict
from itertools import combinations
from typing import Dict, List, Sequence, Tuple

from .cards import Card
from .placement import MIN_STRAIGHT_LENGTH, Placement, can_play_on_stack, validate_placement

Candidate = Tuple[Tuple[int, ...], Placement]


def _indexes_by_rank(hand: Sequence[Card]) -> Dict[int, List[int]]:
    by_rank: Dict[int, List[int]] = defaultdict(list)
    for index, card in enumerate(hand):
        by_rank[card.rank].append(index)
    return dict(by_rank)


def candidate_placements(
    hand: Sequence[Card], *, min_straight_length: int = MIN_STRAIGHT_LENGTH
) -> List[Candidate]:
    """Every distinct-shaped placement the hand can form, as (indexes, placement).

    Same-rank groups are enumerated over every subset. Straights take the
    first card of each rank in the run, since suits never affect legality.
    """
    by_rank = _indexes_by_rank(hand)
    found: List[Candidate] = []

    for rank in sorted(by_rank):
        indexes = by_rank[rank]
        for size in range(1, len(indexes) + 1):
            for group in combinations(indexes, size):
                placement = validate_placement([hand[i] for i in group])
                assert placement is not None
                found.append((group, placement))

    ranks = sorted(by_rank)
    for start in range(len(ranks)):
        run = [ranks[start]]
        for rank in ranks[start + 1 :]:
            if rank != run[-1] + 1:
                break
            run.append(rank)
            if len(run) >= min_straight_length:
                group = tuple(by_rank[r][0] for r in run)
                placement = validate_placement(
                    [hand[i] for i in group], min_straight_length=min_straight_length
                )
                assert placement is not None
                found.append((group, placement))
    return found


def legal_placements(
    hand: Sequence[Card],
    stack: Sequence[Card],
    *,
    min_straight_length: int = MIN_STRAIGHT_LENGTH,
) -> List[Candidate]:
    """Placements from the hand that may be played on the stack, lowest first."""
    legal = [
        (group, placement)
        for group, placement in candidate_placements(hand, min_straight_length=min_straight_length)
        if can_play_on_stack(placement, stack)
    ]
    legal.sort(key=lambda item: (item[1].low.rank, -len(item[1])))
    return legal
