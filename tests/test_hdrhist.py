import json
import math

import pytest

from ftdc.hdrhist import (
    Bar,
    Bracket,
    Histogram,
    histogram_from_bson,
    histogram_from_json,
    import_snapshot,
)


def _filled(max_value):
    hist = Histogram(1, max_value, 3)
    for i in range(1_000_000):
        hist.record_value(i)
    return hist


@pytest.fixture(scope="module")
def million():
    return _filled(10_000_000)


@pytest.fixture(scope="module")
def million_wide():
    return _filled(100_000_000)


def _copy(hist):
    return import_snapshot(hist.export())


def test_high_sig_fig():
    hist = Histogram(459876, 12718782, 5)
    for sample in [459876, 669187, 711612, 816326, 931423, 1033197, 1131895,
                   2477317, 3964974, 12718782]:
        hist.record_value(sample)
    assert hist.value_at_quantile(50) == 1048575


@pytest.mark.parametrize(
    "q,expected",
    [(50, 500223), (75, 750079), (90, 900095), (95, 950271),
     (99, 990207), (99.9, 999423), (99.99, 999935)],
)
def test_value_at_quantile(million, q, expected):
    assert million.value_at_quantile(q) == expected


def test_mean(million):
    assert million.mean() == 500000.013312


def test_std_dev(million):
    assert million.std_dev() == 288675.1403682715


def test_total_count():
    hist = Histogram(1, 10_000_000, 3)
    for i in range(10_000):
        hist.record_value(i)
        assert hist.total_count() == i + 1


def test_max(million):
    assert million.max() == 1000447


def test_min(million):
    assert million.min() == 0


def test_reset(million):
    hist = _copy(million)
    hist.reset()
    assert hist.max() == 0
    assert hist.total_count() == 0


def test_merge():
    h1 = Histogram(1, 1000, 3)
    h2 = Histogram(1, 1000, 3)
    for i in range(100):
        h1.record_value(i)
    for i in range(100, 200):
        h2.record_value(i)
    assert h1.merge(h2) == 0
    assert h1.value_at_quantile(50) == 99


def test_merge_reports_dropped_values():
    small = Histogram(1, 1000, 3)
    large = Histogram(1, 100000, 3)
    large.record_values(50000, 3)
    large.record_value(10)
    assert small.merge(large) == 3
    assert small.total_count() == 1


def test_byte_size():
    assert Histogram(1, 100000, 3).byte_size() == 65604


def test_record_corrected_value():
    hist = Histogram(1, 100000, 3)
    hist.record_corrected_value(10, 100)
    assert hist.value_at_quantile(75) == 10


def test_record_corrected_value_stall():
    hist = Histogram(1, 100000, 3)
    hist.record_corrected_value(1000, 100)
    assert hist.value_at_quantile(75) == 800


def test_cumulative_distribution(million_wide):
    expected = [
        Bracket(0, 1, 0),
        Bracket(50, 500224, 500223),
        Bracket(75, 750080, 750079),
        Bracket(87.5, 875008, 875007),
        Bracket(93.75, 937984, 937983),
        Bracket(96.875, 969216, 969215),
        Bracket(98.4375, 984576, 984575),
        Bracket(99.21875, 992256, 992255),
        Bracket(99.609375, 996352, 996351),
        Bracket(99.8046875, 998400, 998399),
        Bracket(99.90234375, 999424, 999423),
        Bracket(99.951171875, 999936, 999935),
        Bracket(99.9755859375, 999936, 999935),
        Bracket(99.98779296875, 999936, 999935),
        Bracket(99.993896484375, 1000000, 1000447),
        Bracket(100, 1000000, 1000447),
    ]
    assert million_wide.cumulative_distribution() == expected


def test_distribution():
    hist = Histogram(8, 1024, 3)
    for i in range(1024):
        hist.record_value(i)
    bars = hist.distribution()
    assert len(bars) == 128
    assert all(bar.count == 8 for bar in bars)


def test_bar_str():
    assert str(Bar(start=1, end=2, count=3)) == "1, 2, 3\n"


def test_nan():
    hist = Histogram(1, 100000, 3)
    assert not math.isnan(hist.mean())
    assert not math.isnan(hist.std_dev())
    assert hist.mean() == 0.0


def test_significant_figures():
    assert Histogram(1, 10, 4).significant_figures == 4


def test_lowest_trackable_value():
    assert Histogram(2, 10, 3).lowest_trackable_value == 2


def test_highest_trackable_value():
    assert Histogram(1, 11, 3).highest_trackable_value == 11


def test_unit_magnitude_overflow():
    hist = Histogram(0, 200, 4)
    hist.record_value(11)
    assert hist.total_count() == 1


@pytest.mark.parametrize(
    "q,expected",
    [(50, 33554431), (83.33, 33554431), (83.34, 100663295), (99, 100663295)],
)
def test_sub_bucket_mask_overflow(q, expected):
    hist = Histogram(20_000_000, 100_000_000, 5)
    for sample in (100_000_000, 20_000_000, 30_000_000):
        hist.record_value(sample)
    assert hist.value_at_quantile(q) == expected


def test_export_import(million):
    snapshot = million.export()
    assert snapshot.lowest_trackable_value == 1
    assert snapshot.highest_trackable_value == 10_000_000
    assert snapshot.significant_figures == 3
    assert import_snapshot(snapshot) == million


def test_equals(million):
    h1 = _copy(million)
    h2 = Histogram(1, 10_000_000, 3)
    for i in range(10_000):
        h1.record_value(i)
    assert h1 != h2
    h1.reset()
    h2.reset()
    assert h1 == h2


@pytest.mark.parametrize("sigfigs", [0, 6])
def test_invalid_sigfigs(sigfigs):
    with pytest.raises(ValueError):
        Histogram(1, 1000, sigfigs)


def test_record_out_of_range():
    hist = Histogram(1, 1000, 3)
    with pytest.raises(ValueError, match="too large"):
        hist.record_value(10_000_000)
    with pytest.raises(ValueError):
        hist.record_value(-1)
    assert hist.total_count() == 0


def test_import_short_counts_rejected():
    snapshot = Histogram(1, 1000, 3).export()
    snapshot.counts = snapshot.counts[:10]
    with pytest.raises(ValueError):
        import_snapshot(snapshot)


def test_bson_round_trip():
    hist = Histogram(1, 100000, 3)
    for value in (1, 5, 500, 90000):
        hist.record_value(value)
    restored = histogram_from_bson(hist.to_bson())
    assert restored == hist
    assert restored.total_count() == 4


def test_json_round_trip():
    hist = Histogram(1, 100000, 2)
    hist.record_values(42, 7)
    text = hist.to_json()
    assert json.loads(text)["figures"] == 2
    restored = histogram_from_json(text)
    assert restored == hist
    assert restored.value_at_quantile(50) == hist.value_at_quantile(50)


def test_to_document_fields():
    hist = Histogram(3, 1000, 3)
    doc = hist.to_document()
    assert doc["lowest"] == 3
    assert doc["highest"] == 1000
    assert doc["figures"] == 3
    assert len(doc["counts"]) == hist.byte_size() // 8 - 8