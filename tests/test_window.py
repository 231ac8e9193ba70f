import pytest

from ftdc.window import WindowedHistogram


def test_windowed_histogram_median():
    w = WindowedHistogram(2, 1, 1000, 3)

    for i in range(100):
        w.current.record_value(i)
    w.rotate()

    for i in range(100, 200):
        w.current.record_value(i)
    w.rotate()

    for i in range(200, 300):
        w.current.record_value(i)

    assert w.merge().value_at_quantile(50) == 199


def test_merge_drops_the_oldest_section():
    w = WindowedHistogram(2, 1, 1000, 3)
    for i in range(100):
        w.current.record_value(i)
    w.rotate()
    for i in range(100, 200):
        w.current.record_value(i)
    w.rotate()
    for i in range(200, 300):
        w.current.record_value(i)

    merged = w.merge()
    assert merged.total_count() == 200
    assert merged.min() == 100


def test_merge_is_repeatable():
    w = WindowedHistogram(3, 1, 1000, 3)
    for i in range(50):
        w.current.record_value(i)
    first = w.merge().total_count()
    second = w.merge().total_count()
    assert first == 50
    assert second == 50


def test_rotate_resets_the_new_current_section():
    w = WindowedHistogram(1, 1, 1000, 3)
    for i in range(10):
        w.current.record_value(i)
    assert w.current.total_count() == 10
    w.rotate()
    assert w.current.total_count() == 0
    assert w.merge().total_count() == 0


def test_merge_sums_all_sections():
    w = WindowedHistogram(3, 1, 1000, 3)
    for section in range(3):
        for _ in range(section + 1):
            w.current.record_value(5)
        w.rotate() if section < 2 else None
    assert w.merge().total_count() == 6


def test_zero_sections_is_rejected():
    with pytest.raises(ValueError):
        WindowedHistogram(0, 1, 1000, 3)


def test_invalid_sigfigs_is_rejected():
    with pytest.raises(ValueError):
        WindowedHistogram(2, 1, 1000, 6)