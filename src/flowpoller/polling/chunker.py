"""Height-range chunking for event range queries.

All windows are inclusive on both ends: [start, end].
"""

from __future__ import annotations

from collections.abc import Generator


def iter_windows(
    last_height: int,
    head_height: int,
    max_range: int,
) -> Generator[tuple[int, int], None, None]:
    """Yield inclusive windows covering (last_height, head_height].

    Each window holds at most `max_range` heights. Nothing is yielded when the
    head has not moved past `last_height` (including a head behind it).
    """
    if max_range < 1:
        raise ValueError("max_range must be >= 1")
    lo = last_height
    while lo < head_height:
        hi = min(lo + max_range, head_height)
        yield (lo + 1, hi)
        lo = hi


def plan_windows(last_height: int, head_height: int, max_range: int) -> list[tuple[int, int]]:
    """List form of `iter_windows`."""
    return list(iter_windows(last_height, head_height, max_range))
