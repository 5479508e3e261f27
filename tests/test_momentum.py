import pytest

from app.market.momentum import compute_momentum, pct_change, volume_change_pct
from tests.conftest import make_series


class TestPctChange:
    def test_one_day(self):
        assert pct_change([100.0, 110.0], 1) == pytest.approx(10.0)

    def test_looks_back_exactly_n_bars(self):
        closes = [50.0] + [100.0] * 7
        assert pct_change(closes, 7) == pytest.approx(100.0)

    def test_too_short_is_none(self):
        assert pct_change([100.0] * 30, 30) is None

    def test_zero_base_is_none(self):
        assert pct_change([0.0, 5.0], 1) is None

    def test_negative_change(self):
        assert pct_change([200.0, 150.0], 1) == pytest.approx(-25.0)

    def test_invalid_lookback(self):
        with pytest.raises(ValueError):
            pct_change([1.0, 2.0], 0)


class TestVolume:
    def test_change_against_twenty_day_average(self):
        volumes = [1000.0] * 19 + [2000.0]
        # average = 1050
        assert volume_change_pct(volumes) == pytest.approx((2000 / 1050 - 1) * 100)

    def test_zero_average_is_none(self):
        assert volume_change_pct([0.0] * 25) is None


def test_compute_momentum_summary():
    closes = [100.0 + i for i in range(40)]
    volumes = [1_000.0] * 39 + [1_500.0]
    summary = compute_momentum(make_series(closes, volumes))

    assert summary.day1_pct == pytest.approx((139 - 138) / 138 * 100)
    assert summary.day7_pct == pytest.approx((139 - 132) / 132 * 100)
    assert summary.day30_pct == pytest.approx((139 - 109) / 109 * 100)
    assert summary.volume_current == 1_500.0
    assert summary.volume_average20 == pytest.approx(1_025.0)
    assert summary.volume_change_pct == pytest.approx((1500 / 1025 - 1) * 100)


def test_compute_momentum_short_series_leaves_gaps():
    summary = compute_momentum(make_series([10.0, 11.0, 12.0]))
    assert summary.day1_pct == pytest.approx(100 / 11)
    assert summary.day7_pct is None
    assert summary.day30_pct is None


def test_momentum_serializes_camel_case():
    dumped = compute_momentum(make_series([10.0, 11.0])).model_dump(by_alias=True)
    assert set(dumped) == {
        "day1Pct",
        "day7Pct",
        "day30Pct",
        "volumeCurrent",
        "volumeAverage20",
        "volumeChangePct",
    }
