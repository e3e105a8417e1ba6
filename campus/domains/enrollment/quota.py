# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Seat quota arithmetic.

Pure functions, no I/O. The enrollment and subject services call these
while holding the subject row lock. Where a live enrollment count is
available it is passed in and takes precedence over the counter
difference, so a subject whose capacity was cut below occupancy does not
hand out seats it does not have.
"""


def _check_counters(max_quota: int, available_quota: int) -> None:
    if max_quota < 0 or not 0 <= available_quota <= max_quota:
        raise ValueError(
            f"Invalid quota counters: max={max_quota}, available={available_quota}"
        )


def occupied_seats(max_quota: int, available_quota: int) -> int:
    """Number of seats taken according to the quota counter.

    Args:
        max_quota: Subject capacity.
        available_quota: Free seats.

    Returns:
        max_quota - available_quota.

    Raises:
        ValueError: If the counters are outside 0 <= available <= max.
    """
    _check_counters(max_quota, available_quota)
    return max_quota - available_quota


def recalculate_available_quota(
    max_quota: int,
    available_quota: int,
    new_max_quota: int,
    enrolled: int | None = None,
) -> int:
    """Compute free seats after a capacity change.

    Occupied seats are preserved. When the new capacity is below the
    number of occupied seats nobody is evicted; the result is clamped to 0.

    Args:
        max_quota: Current capacity.
        available_quota: Current free seats.
        new_max_quota: Requested capacity.
        enrolled: Live enrollment count, if the caller has it.

    Returns:
        The new available_quota, between 0 and new_max_quota.

    Raises:
        ValueError: If the current counters are inconsistent or the new
            capacity is below 1.

    Example:
        >>> recalculate_available_quota(10, 5, 3)
        0
        >>> recalculate_available_quota(10, 5, 20)
        15
    """
    if new_max_quota < 1:
        raise ValueError(f"Capacity must be at least 1, got {new_max_quota}")

    taken = occupied_seats(max_quota, available_quota)
    if enrolled is not None:
        if enrolled < 0:
            raise ValueError(f"Enrollment count cannot be negative, got {enrolled}")
        taken = enrolled
    return max(new_max_quota - taken, 0)


def released_available_quota(
    max_quota: int,
    available_quota: int,
    enrolled_after: int,
) -> int:
    """Compute free seats after one enrollment leaves a subject.

    Normally this is available_quota + 1. It never exceeds max_quota, and
    never exceeds the seats actually free once the remaining enrollments
    are counted.

    Args:
        max_quota: Subject capacity.
        available_quota: Free seats before the release.
        enrolled_after: Live enrollments left on the subject.

    Returns:
        The new available_quota.
    """
    _check_counters(max_quota, available_quota)
    free = max(max_quota - enrolled_after, 0)
    return min(available_quota + 1, free)
