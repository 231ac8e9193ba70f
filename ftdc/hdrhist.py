"""High dynamic range histograms for recording skewed distributions such as latency."""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass
from typing import NamedTuple, Union

from ftdc.snapshot import Snapshot


@dataclass(frozen=True)
class Bracket:
    """One step of a cumulative distribution."""

    quantile: float
    count: int
    value_at: int


@dataclass(frozen=True)
class Bar:
    """One bar of a histogram, covering the values ``start`` to ``end``."""

    start: int
    end: int
    count: int

    def __str__(self) -> str:
        return f"{self.start}, {self.end}, {self.count}\n"


class _Step(NamedTuple):
    count_at: int
    count_to: int
    value_from: int
    highest: int


def _bit_length(value: int) -> int:
    return value.bit_length() if value >= 0 else 0


class Histogram:
    """A lossy record of a distribution with bounded relative precision."""

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, min_value: int, max_value: int, sigfigs: int) -> None:
        if sigfigs < 1 or sigfigs > 5:
            raise ValueError(f"sigfigs must be [1,5] (was {sigfigs})")

        largest_single_unit = 2 * 10**sigfigs
        sub_bucket_count_magnitude = (largest_single_unit - 1).bit_length()
        half_magnitude = max(sub_bucket_count_magnitude, 1) - 1

        unit_magnitude = min_value.bit_length() - 1 if min_value > 0 else 0
        unit_magnitude = max(unit_magnitude, 0)

        sub_bucket_count = 2 ** (half_magnitude + 1)
        sub_bucket_half_count = sub_bucket_count // 2
        sub_bucket_mask = (sub_bucket_count - 1) << unit_magnitude

        smallest_untrackable = sub_bucket_count << unit_magnitude
        buckets_needed = 1
        while smallest_untrackable < max_value:
            smallest_untrackable <<= 1
            buckets_needed += 1

        counts_len = (buckets_needed + 1) * (sub_bucket_count // 2)

        self._lowest_trackable_value = min_value
        self._highest_trackable_value = max_value
        self._unit_magnitude = unit_magnitude
        self._significant_figures = sigfigs
        self._sub_bucket_half_count_magnitude = half_magnitude
        self._sub_bucket_half_count = sub_bucket_half_count
        self._sub_bucket_mask = sub_bucket_mask
        self._sub_bucket_count = sub_bucket_count
        self._bucket_count = buckets_needed
        self._counts_len = counts_len
        self._total_count = 0
        self._counts = [0] * counts_len

    @property
    def significant_figures(self) -> int:
        """The significant figures the histogram was created with."""
        return self._significant_figures

    @property
    def lowest_trackable_value(self) -> int:
        """The lower bound on values added to the histogram."""
        return self._lowest_trackable_value

    @property
    def highest_trackable_value(self) -> int:
        """The upper bound on values added to the histogram."""
        return self._highest_trackable_value

    def byte_size(self) -> int:
        """Estimate the memory used by the histogram, in bytes."""
        return 6 * 8 + 5 * 4 + len(self._counts) * 8

    def merge(self, other: "Histogram") -> int:
        """Add ``other``'s values to this histogram; return how many were dropped."""
        dropped = 0
        for step in other._recorded():
            try:
                self.record_values(step.value_from, step.count_at)
            except ValueError:
                dropped += step.count_at
        return dropped

    def total_count(self) -> int:
        """Return the number of values recorded."""
        return self._total_count

    def max(self) -> int:
        """Return the approximate largest recorded value."""
        highest = 0
        for step in self._iterate():
            if step.count_at != 0:
                highest = step.highest
        return self._highest_equivalent_value(highest)

    def min(self) -> int:
        """Return the approximate smallest recorded value."""
        lowest = 0
        for step in self._iterate():
            if step.count_at != 0:
                lowest = step.highest
                break
        return self._lowest_equivalent_value(lowest)

    def mean(self) -> float:
        """Return the approximate arithmetic mean of the recorded values."""
        if self._total_count == 0:
            return 0.0
        total = 0
        for step in self._iterate():
            if step.count_at != 0:
                total += step.count_at * self._median_equivalent_value(step.value_from)
        return total / self._total_count

    def std_dev(self) -> float:
        """Return the approximate standard deviation of the recorded values."""
        if self._total_count == 0:
            return 0.0
        mean = self.mean()
        geometric_dev_total = 0.0
        for step in self._iterate():
            if step.count_at != 0:
                dev = float(self._median_equivalent_value(step.value_from)) - mean
                geometric_dev_total += (dev * dev) * float(step.count_at)
        return math.sqrt(geometric_dev_total / self._total_count)

    def reset(self) -> None:
        """Discard every recorded value."""
        self._total_count = 0
        self._counts = [0] * len(self._counts)

    def record_value(self, value: int) -> None:
        """Record ``value``; raises ValueError if it cannot be tracked."""
        self.record_values(value, 1)

    def record_corrected_value(self, value: int, expected_interval: int) -> None:
        """Record ``value``, back-filling values lost to a stall in recording."""
        self.record_value(value)
        if expected_interval <= 0 or value <= expected_interval:
            return
        missing = value - expected_interval
        while missing >= expected_interval:
            self.record_value(missing)
            missing -= expected_interval

    def record_values(self, value: int, n: int) -> None:
        """Record ``n`` occurrences of ``value``; raises ValueError if out of range."""
        if value < 0:
            raise ValueError(f"value {value} is too large to be recorded")
        idx = self._counts_index_for(value)
        if idx < 0 or idx >= self._counts_len:
            raise ValueError(f"value {value} is too large to be recorded")
        self._counts[idx] += n
        self._total_count += n

    def value_at_quantile(self, q: float) -> int:
        """Return the recorded value at quantile ``q`` (0 to 100)."""
        if q > 100:
            q = 100
        count_at_percentile = int((q / 100) * self._total_count + 0.5)
        total = 0
        for step in self._iterate():
            total += step.count_at
            if total >= count_at_percentile:
                return self._highest_equivalent_value(step.value_from)
        return 0

    def cumulative_distribution(self) -> list[Bracket]:
        """Return the brackets of the cumulative distribution, in order."""
        return list(self._percentiles(1))

    def distribution(self) -> list[Bar]:
        """Return the bars of the distribution of recorded values, in order."""
        return [
            Bar(
                start=self._lowest_equivalent_value(step.value_from),
                end=step.highest,
                count=step.count_at,
            )
            for step in self._iterate()
        ]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Histogram):
            return NotImplemented
        if (
            self._lowest_trackable_value != other._lowest_trackable_value
            or self._highest_trackable_value != other._highest_trackable_value
            or self._unit_magnitude != other._unit_magnitude
            or self._significant_figures != other._significant_figures
            or self._sub_bucket_half_count_magnitude != other._sub_bucket_half_count_magnitude
            or self._sub_bucket_half_count != other._sub_bucket_half_count
            or self._sub_bucket_mask != other._sub_bucket_mask
            or self._sub_bucket_count != other._sub_bucket_count
            or self._bucket_count != other._bucket_count
            or self._counts_len != other._counts_len
            or self._total_count != other._total_count
        ):
            return False
        if len(other._counts) < len(self._counts):
            return False
        return all(c == o for c, o in zip(self._counts, other._counts))

    def export(self) -> Snapshot:
        """Return a snapshot from which :func:`import_snapshot` rebuilds this histogram."""
        return Snapshot(
            lowest_trackable_value=self._lowest_trackable_value,
            highest_trackable_value=self._highest_trackable_value,
            significant_figures=self._significant_figures,
            counts=list(self._counts),
        )

    def to_document(self) -> dict:
        """Return the histogram as a BSON-ready document."""
        return self.export().to_document()

    def to_bson(self) -> bytes:
        """Encode the histogram as BSON."""
        return self.export().to_bson()

    def to_json(self) -> str:
        """Encode the histogram as JSON."""
        return self.export().to_json()

    def _iterate(self) -> Iterator[_Step]:
        count_to = 0
        bucket_idx = 0
        sub_bucket_idx = -1
        while count_to < self._total_count:
            sub_bucket_idx += 1
            if sub_bucket_idx >= self._sub_bucket_count:
                sub_bucket_idx = self._sub_bucket_half_count
                bucket_idx += 1
            if bucket_idx >= self._bucket_count:
                return
            count_at = self._counts[self._counts_index(bucket_idx, sub_bucket_idx)]
            count_to += count_at
            value_from = self._value_from_index(bucket_idx, sub_bucket_idx)
            yield _Step(count_at, count_to, value_from, self._highest_equivalent_value(value_from))

    def _recorded(self) -> Iterator[_Step]:
        return (step for step in self._iterate() if step.count_at != 0)

    def _percentiles(self, ticks_per_half_distance: int) -> Iterator[Bracket]:
        total = self._total_count
        steps = self._iterate()
        step: Union[_Step, None] = None
        percentile = 0.0
        target = 0.0
        while True:
            count_to = step.count_to if step is not None else 0
            if not count_to < total:
                highest = step.highest if step is not None else 0
                yield Bracket(100.0, count_to, highest)
                return
            if step is None:
                step = next(steps, None)
                if step is None:
                    return
            while True:
                current = (100.0 * step.count_to) / total
                if step.count_at != 0 and target <= current:
                    percentile = target
                    if target < 100.0:
                        exponent = math.trunc(math.log2(100.0 / (100.0 - target))) + 1
                        half_distance = math.trunc(math.pow(2, exponent))
                        target += 100.0 / (ticks_per_half_distance * half_distance)
                    yield Bracket(percentile, step.count_to, step.highest)
                    break
                following = next(steps, None)
                if following is None:
                    yield Bracket(percentile, step.count_to, step.highest)
                    return
                step = following

    def _size_of_equivalent_value_range(self, value: int) -> int:
        bucket_idx = self._bucket_index(value)
        sub_bucket_idx = self._sub_bucket_index(value, bucket_idx)
        adjusted = bucket_idx + 1 if sub_bucket_idx >= self._sub_bucket_count else bucket_idx
        return 1 << (self._unit_magnitude + adjusted)

    def _value_from_index(self, bucket_idx: int, sub_bucket_idx: int) -> int:
        return sub_bucket_idx << (bucket_idx + self._unit_magnitude)

    def _lowest_equivalent_value(self, value: int) -> int:
        bucket_idx = self._bucket_index(value)
        sub_bucket_idx = self._sub_bucket_index(value, bucket_idx)
        return self._value_from_index(bucket_idx, sub_bucket_idx)

    def _next_non_equivalent_value(self, value: int) -> int:
        return self._lowest_equivalent_value(value) + self._size_of_equivalent_value_range(value)

    def _highest_equivalent_value(self, value: int) -> int:
        return self._next_non_equivalent_value(value) - 1

    def _median_equivalent_value(self, value: int) -> int:
        return self._lowest_equivalent_value(value) + (
            self._size_of_equivalent_value_range(value) >> 1
        )

    def _counts_index(self, bucket_idx: int, sub_bucket_idx: int) -> int:
        base = (bucket_idx + 1) << self._sub_bucket_half_count_magnitude
        return base + sub_bucket_idx - self._sub_bucket_half_count

    def _bucket_index(self, value: int) -> int:
        pow2_ceiling = _bit_length(value | self._sub_bucket_mask)
        return pow2_ceiling - self._unit_magnitude - (self._sub_bucket_half_count_magnitude + 1)

    def _sub_bucket_index(self, value: int, bucket_idx: int) -> int:
        return value >> (bucket_idx + self._unit_magnitude)

    def _counts_index_for(self, value: int) -> int:
        bucket_idx = self._bucket_index(value)
        return self._counts_index(bucket_idx, self._sub_bucket_index(value, bucket_idx))


def import_snapshot(snapshot: Snapshot) -> Histogram:
    """Build a histogram holding the state recorded in ``snapshot``."""
    hist = Histogram(
        snapshot.lowest_trackable_value,
        snapshot.highest_trackable_value,
        snapshot.significant_figures,
    )
    counts = list(snapshot.counts)
    if len(counts) < hist._counts_len:
        raise ValueError(
            f"snapshot has {len(counts)} counts, expected at least {hist._counts_len}"
        )
    hist._counts = counts
    hist._total_count = sum(c for c in counts[: hist._counts_len] if c > 0)
    return hist


def histogram_from_bson(data: bytes) -> Histogram:
    """Decode a histogram from its BSON encoding."""
    return import_snapshot(Snapshot.from_bson(data))


def histogram_from_json(data: Union[str, bytes]) -> Histogram:
    """Decode a histogram from its JSON encoding."""
    return import_snapshot(Snapshot.from_json(data))