# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for seat quota arithmetic."""

import pytest

from campus.domains.enrollment.quota import (
    occupied_seats,
    recalculate_available_quota,
    released_available_quota,
)


class TestOccupiedSeats:
    """Tests for occupied_seats."""

    def test_difference(self) -> None:
        assert occupied_seats(30, 12) == 18
        assert occupied_seats(5, 5) == 0
        assert occupied_seats(5, 0) == 5

    @pytest.mark.parametrize("max_quota,available", [(5, 6), (5, -1), (-1, 0)])
    def test_invalid_counters(self, max_quota: int, available: int) -> None:
        with pytest.raises(ValueError):
            occupied_seats(max_quota, available)


class TestRecalculateAvailableQuota:
    """Tests for capacity changes."""

    def test_raise_capacity_keeps_occupied(self) -> None:
        """Test occupied seats are preserved when capacity grows."""
        assert recalculate_available_quota(10, 5, 20) == 15

    def test_lower_capacity_above_occupancy(self) -> None:
        assert recalculate_available_quota(10, 5, 8) == 3

    def test_lower_capacity_below_occupancy_clamps(self) -> None:
        """Test nobody is evicted and free seats floor at zero."""
        assert recalculate_available_quota(10, 5, 3) == 0

    def test_same_capacity(self) -> None:
        assert recalculate_available_quota(10, 4, 10) == 4

    def test_live_count_overrides_counter(self) -> None:
        """Test the enrollment count wins over a clamped counter."""
        # Capacity 3 with 5 students enrolled, counter clamped at 0
        assert recalculate_available_quota(3, 0, 10, enrolled=5) == 5
        assert recalculate_available_quota(3, 0, 4, enrolled=5) == 0

    def test_new_capacity_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            recalculate_available_quota(10, 5, 0)

    def test_negative_enrollment_count(self) -> None:
        with pytest.raises(ValueError):
            recalculate_available_quota(10, 5, 10, enrolled=-1)

    def test_result_within_bounds(self) -> None:
        for available in range(0, 11):
            for new_max in range(1, 15):
                result = recalculate_available_quota(10, available, new_max)
                assert 0 <= result <= new_max


class TestReleasedAvailableQuota:
    """Tests for giving a seat back."""

    def test_normal_release(self) -> None:
        # 30 seats, 27 taken, one leaves
        assert released_available_quota(30, 3, 26) == 4

    def test_never_exceeds_capacity(self) -> None:
        assert released_available_quota(30, 30, 0) == 30

    def test_capacity_cut_below_occupancy(self) -> None:
        """Test no seat is freed while enrollments still exceed capacity."""
        assert released_available_quota(2, 0, 4) == 0
        assert released_available_quota(2, 0, 2) == 0
        assert released_available_quota(2, 0, 1) == 1

    def test_invalid_counters(self) -> None:
        with pytest.raises(ValueError):
            released_available_quota(2, 3, 0)
