"""Tests for monthly sales trend and seasonality detection."""

from __future__ import annotations

import random
from datetime import date

import pytest

from src.config import TrendDirection
from src.engine.trend import (
    analyze_trends,
    calculate_growth_rate,
    classify_trend,
    daily_series,
    detect_seasonality,
    monthly_sales,
)
from src.models.item import ItemHistory
from tests.factories import make_history


class TestClassification:
    """Growth-rate thresholds are exclusive on both sides."""

    def test_just_above_up_threshold(self) -> None:
        assert classify_trend(5.01) == TrendDirection.UP

    def test_just_below_down_threshold(self) -> None:
        assert classify_trend(-5.01) == TrendDirection.DOWN

    def test_zero_is_stable(self) -> None:
        assert classify_trend(0.0) == TrendDirection.STABLE

    @pytest.mark.parametrize("growth", [5.0, -5.0])
    def test_exact_threshold_is_stable(self, growth: float) -> None:
        assert classify_trend(growth) == TrendDirection.STABLE

    def test_custom_thresholds(self) -> None:
        assert classify_trend(3.0, up_threshold=2.0) == TrendDirection.UP


class TestMonthlyGrowth:
    def test_growth_across_month_boundary(self) -> None:
        # Jan 30-31: 50 + 50, Feb 1-2: 60 + 60
        history = make_history("MLA1", [50, 50, 60, 60], start=date(2026, 1, 30))

        monthly = monthly_sales([history])

        assert monthly == {(2026, 1): 100, (2026, 2): 120}
        assert calculate_growth_rate(monthly) == pytest.approx(20.0)

    def test_months_summed_across_items(self) -> None:
        a = make_history("MLA1", [10, 10], start=date(2026, 1, 31))
        b = make_history("MLA2", [5, 5], start=date(2026, 1, 31))

        assert monthly_sales([a, b]) == {(2026, 1): 15, (2026, 2): 15}

    def test_uses_two_most_recent_months(self) -> None:
        monthly = {(2025, 11): 1, (2025, 12): 100, (2026, 1): 80}
        assert calculate_growth_rate(monthly) == pytest.approx(-20.0)

    def test_single_month_is_zero(self) -> None:
        assert calculate_growth_rate({(2026, 3): 500}) == 0.0

    def test_zero_previous_month_is_zero(self) -> None:
        assert calculate_growth_rate({(2026, 2): 0, (2026, 3): 40}) == 0.0


class TestSeasonality:
    def test_periodic_series_is_seasonal(self) -> None:
        # Period 4 over 16 points → lag 4 lines up identical phases
        assert detect_seasonality([1, 5, 9, 5] * 4) is True

    def test_constant_series_is_not_seasonal(self) -> None:
        assert detect_seasonality([7] * 30) is False

    def test_fewer_than_four_points(self) -> None:
        assert detect_seasonality([1, 9, 1]) is False

    def test_strong_negative_correlation_counts(self) -> None:
        # Lag 1 over alternating values gives r close to -1
        assert detect_seasonality([0, 10, 0, 10]) is True

    def test_high_variance_noise_is_not_seasonal(self) -> None:
        rng = random.Random(7)
        noise = [rng.uniform(0, 10_000) for _ in range(200)]
        assert detect_seasonality(noise) is False

    def test_irregular_series_below_threshold(self) -> None:
        assert detect_seasonality([3, 9, 4, 4, 8, 1, 7, 2]) is False


class TestAnalyzeTrends:
    def test_daily_series_sums_per_date(self) -> None:
        a = make_history("MLA1", [1, 2, 3])
        b = make_history("MLA2", [10, 20, 30])
        assert daily_series([a, b]) == [11, 22, 33]

    def test_unknown_histories_are_ignored(self) -> None:
        known = make_history("MLA1", [50, 50, 60, 60], start=date(2026, 1, 30))
        unknown = ItemHistory(item_id="MLA2")

        result = analyze_trends([known, unknown])

        assert result.direction == TrendDirection.UP
        assert result.growth_rate == pytest.approx(20.0)

    def test_no_histories_is_stable(self) -> None:
        result = analyze_trends([])
        assert result.direction == TrendDirection.STABLE
        assert result.growth_rate == 0.0
        assert result.seasonality is False
