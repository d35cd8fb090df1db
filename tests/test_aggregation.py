"""Tests for the aggregation engine (price stats, distribution, stores, sellers)."""

from __future__ import annotations

import random

import pytest

from src.config import CompetitionLevel
from src.engine.aggregation import (
    calculate_engagement,
    calculate_price_distribution,
    calculate_price_stats,
    classify_competition,
    condition_distribution,
    count_premium_sellers,
    count_sellers,
    rank_top_sellers,
    summarize_official_stores,
)
from src.models.item import ItemStats
from tests.factories import make_listing


class TestPriceStats:
    def test_min_max_mean(self) -> None:
        listings = [make_listing(f"MLA{i}", price=p) for i, p in enumerate([100, 200, 600])]
        stats = calculate_price_stats(listings)
        assert stats.min == 100
        assert stats.max == 600
        assert stats.mean == pytest.approx(300)

    def test_empty_is_zero(self) -> None:
        assert calculate_price_stats([]) == (0.0, 0.0, 0.0)


class TestPriceDistribution:
    def test_equal_width_buckets(self) -> None:
        prices = [0, 10, 25, 50, 99, 100]
        listings = [make_listing(f"MLA{i}", price=p) for i, p in enumerate(prices)]

        buckets = calculate_price_distribution(listings)

        assert len(buckets) == 5
        assert [b.min for b in buckets] == pytest.approx([0, 20, 40, 60, 80])
        assert [b.max for b in buckets] == pytest.approx([20, 40, 60, 80, 100])
        # 0,10 | 25 | 50 | - | 99,100 (max goes to the last bucket)
        assert [b.count for b in buckets] == [2, 1, 1, 0, 2]

    def test_buckets_are_contiguous(self) -> None:
        listings = [make_listing(f"MLA{i}", price=p) for i, p in enumerate([3, 17, 29])]
        buckets = calculate_price_distribution(listings)

        assert buckets[0].min == 3
        assert buckets[-1].max == 29
        for left, right in zip(buckets, buckets[1:]):
            assert left.max == pytest.approx(right.min)

    def test_every_listing_in_exactly_one_bucket(self) -> None:
        rng = random.Random(42)
        listings = [
            make_listing(f"MLA{i}", price=round(rng.uniform(1, 5000), 2)) for i in range(200)
        ]

        buckets = calculate_price_distribution(listings)

        assert sum(b.count for b in buckets) == 200
        assert sum(b.percentage for b in buckets) == pytest.approx(100.0)

    @staticmethod
    def _assert_counts_match_bounds(prices: list[float], buckets) -> None:
        for i, bucket in enumerate(buckets):
            last = i == len(buckets) - 1
            inside = [
                p for p in prices
                if bucket.min <= p < bucket.max or (last and p == bucket.max)
            ]
            assert bucket.count == len(inside), (i, bucket, inside)

    def test_prices_on_bucket_edges_match_reported_bounds(self) -> None:
        prices = [24.78, 22.48, 22.94, 23.4, 23.86, 24.32]
        listings = [make_listing(f"MLA{i}", price=p) for i, p in enumerate(prices)]

        buckets = calculate_price_distribution(listings)

        self._assert_counts_match_bounds(prices, buckets)
        assert sum(b.count for b in buckets) == len(prices)
        assert buckets[-1].max == 24.78

    def test_counts_match_bounds_for_random_prices(self) -> None:
        rng = random.Random(1234)
        for _ in range(50):
            prices = [round(rng.uniform(0.5, 300), 2) for _ in range(rng.randint(2, 40))]
            listings = [make_listing(f"MLA{i}", price=p) for i, p in enumerate(prices)]
            segments = rng.randint(1, 9)

            buckets = calculate_price_distribution(listings, segments=segments)

            self._assert_counts_match_bounds(prices, buckets)
            assert sum(b.count for b in buckets) == len(prices)

    def test_identical_prices_single_bucket(self) -> None:
        listings = [make_listing(f"MLA{i}", price="999.99") for i in range(3)]

        buckets = calculate_price_distribution(listings)

        assert len(buckets) == 1
        assert buckets[0].min == buckets[0].max == 999.99
        assert buckets[0].count == 3
        assert buckets[0].percentage == 100.0

    def test_empty_listings(self) -> None:
        assert calculate_price_distribution([]) == []

    def test_custom_segment_count(self) -> None:
        listings = [make_listing(f"MLA{i}", price=p) for i, p in enumerate([1, 2, 3, 4])]
        assert len(calculate_price_distribution(listings, segments=2)) == 2

    def test_invalid_segment_count(self) -> None:
        with pytest.raises(ValueError):
            calculate_price_distribution([make_listing()], segments=0)


class TestOfficialStores:
    def test_grouping_and_percentage(self) -> None:
        listings = [
            make_listing("MLA1", price=100, store_id=7),
            make_listing("MLA2", price=300, store_id=7),
            make_listing("MLA3", price=50, store_id=9),
            make_listing("MLA4", price=80),
        ]

        summary = summarize_official_stores(listings, {7: "Samsung"})

        assert summary.count == 2
        assert summary.listing_count == 3
        # groups / total listings × 100
        assert summary.percentage == pytest.approx(50.0)
        first, second = summary.stores
        assert (first.store_id, first.name, first.listing_count) == (7, "Samsung", 2)
        assert first.average_price == pytest.approx(200)
        assert second.name is None

    def test_no_stores(self) -> None:
        summary = summarize_official_stores([make_listing()])
        assert summary.count == 0
        assert summary.percentage == 0.0
        assert summary.stores == []


class TestSellers:
    def test_count_sellers_unique(self) -> None:
        listings = [
            make_listing("MLA1", seller_id=1),
            make_listing("MLA2", seller_id=1),
            make_listing("MLA3", seller_id=2),
            make_listing("MLA4", seller_id=None),
        ]
        assert count_sellers(listings) == 2

    @pytest.mark.parametrize(
        "sellers, level",
        [
            (0, CompetitionLevel.LOW),
            (20, CompetitionLevel.LOW),
            (21, CompetitionLevel.MEDIUM),
            (50, CompetitionLevel.MEDIUM),
            (51, CompetitionLevel.HIGH),
        ],
    )
    def test_competition_thresholds(self, sellers: int, level: CompetitionLevel) -> None:
        assert classify_competition(sellers) == level

    def test_top_sellers_sum_and_sort(self) -> None:
        detailed = [
            (make_listing("MLA1", seller_id=1), ItemStats(item_id="MLA1", sold_quantity=5)),
            (make_listing("MLA2", seller_id=2), ItemStats(item_id="MLA2", sold_quantity=30)),
            (make_listing("MLA3", seller_id=1), ItemStats(item_id="MLA3", sold_quantity=10)),
        ]

        ranking = rank_top_sellers(detailed)

        assert [s.seller_id for s in ranking] == [2, 1]
        assert ranking[1].total_sales == 15
        assert ranking[1].listing_count == 2
        assert ranking[1].nickname == "seller1"

    def test_top_sellers_ties_keep_encounter_order(self) -> None:
        detailed = [
            (make_listing(f"MLA{sid}", seller_id=sid), ItemStats(item_id=f"MLA{sid}", sold_quantity=3))
            for sid in [9, 4, 7]
        ]
        assert [s.seller_id for s in rank_top_sellers(detailed)] == [9, 4, 7]

    def test_top_sellers_truncated(self) -> None:
        detailed = [
            (make_listing(f"MLA{i}", seller_id=i), ItemStats(item_id=f"MLA{i}", sold_quantity=i))
            for i in range(1, 9)
        ]
        ranking = rank_top_sellers(detailed)
        assert len(ranking) == 5
        assert ranking[0].seller_id == 8


class TestEngagement:
    def test_conversion_rate(self) -> None:
        stats = [
            ItemStats(item_id="A", visits=300, sold_quantity=6),
            ItemStats(item_id="B", visits=100, sold_quantity=2),
        ]
        totals = calculate_engagement(stats)
        assert totals.total_views == 400
        assert totals.total_sales == 8
        assert totals.conversion_rate == pytest.approx(2.0)

    def test_zero_views_is_zero_conversion(self) -> None:
        totals = calculate_engagement([ItemStats(item_id="A", visits=0, sold_quantity=3)])
        assert totals.conversion_rate == 0.0


def test_condition_distribution() -> None:
    listings = [
        make_listing("MLA1", condition="new"),
        make_listing("MLA2", condition="used"),
        make_listing("MLA3", condition="new"),
        make_listing("MLA4", condition="not_specified"),
    ]
    dist = condition_distribution(listings)
    assert (dist.new, dist.used, dist.other) == (2, 1, 1)


def test_premium_sellers_need_sales() -> None:
    listings = [
        make_listing("MLA1", price=500, sold=3),
        make_listing("MLA2", price=500, sold=0),
        make_listing("MLA3", price=100, sold=9),
    ]
    assert count_premium_sellers(listings, average_price=366.67) == 1
