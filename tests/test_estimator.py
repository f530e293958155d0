"""Tests for the file-size print estimator."""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

import pytest

from services.model_service.estimator import estimate, estimate_weight, format_print_time, to_money

MB = 1024 * 1024


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class TestWeightModel:
    @pytest.mark.parametrize("size_mb", [0.01, 0.1, 0.25, 0.5, 0.75, 0.99])
    def test_small_files(self, size_mb):
        assert estimate_weight(size_mb) == max(5, size_mb * 20)

    @pytest.mark.parametrize("size_mb", [1, 1.5, 2, 3.25, 4.99])
    def test_medium_files(self, size_mb):
        assert estimate_weight(size_mb) == 20 + (size_mb - 1) * 15

    @pytest.mark.parametrize("size_mb", [5, 7.5, 10, 49])
    def test_large_files(self, size_mb):
        assert estimate_weight(size_mb) == 80 + (size_mb - 5) * 10

    def test_tiny_file_floors_at_five_grams(self):
        assert estimate(100).weight_grams == Decimal("5.00")

    def test_band_edges_are_continuous(self):
        assert estimate(1 * MB).weight_grams == Decimal("20.00")
        assert estimate(5 * MB).weight_grams == Decimal("80.00")


class TestPricing:
    @pytest.mark.parametrize("size", [1, 4096, MB // 3, MB, 1572864, 3 * MB + 12345, 5 * MB, 21 * MB + 7])
    def test_base_cost_is_quarter_of_weight(self, size):
        result = estimate(size)
        assert result.base_cost == _money(result.weight_grams * Decimal("0.25"))

    def test_half_cent_rounds_up(self):
        # 1.5 MB -> 27.5 g -> 6.875
        result = estimate(1572864)
        assert result.weight_grams == Decimal("27.50")
        assert result.base_cost == Decimal("6.88")

    def test_two_megabyte_scenario(self):
        result = estimate(2 * MB)
        assert result.weight_grams == Decimal("35.00")
        assert result.base_cost == Decimal("8.75")
        assert result.print_time == "1h 32m"

    def test_to_money(self):
        assert to_money(1.005) == Decimal("1.01")
        assert to_money("5") == Decimal("5.00")


class TestPrintTime:
    def test_minimum_thirty_minutes(self):
        assert estimate(MB // 2).print_time == "0h 30m"

    def test_large_file(self):
        # 10 MB -> 130 g -> 130 * 1.5 + 200 = 395 minutes
        assert estimate(10 * MB).print_time == "6h 35m"

    def test_format_floors_minutes(self):
        assert format_print_time(92.9) == "1h 32m"
        assert format_print_time(60) == "1h 0m"
        assert format_print_time(30) == "0h 30m"


class TestInvalidSizes:
    @pytest.mark.parametrize("size", [0, -1, -MB])
    def test_non_positive_size_rejected(self, size):
        with pytest.raises(ValueError):
            estimate(size)
