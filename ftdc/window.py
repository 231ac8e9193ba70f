"""Histograms that cover a sliding window made of several sections."""

from __future__ import annotations

from ftdc.hdrhist import Histogram


class WindowedHistogram:
    """Combine several histograms to give statistics over a sliding window.

    Values are recorded into :attr:`current`. Calling :meth:`rotate` starts
    a new section and discards the oldest one. :meth:`merge` returns a
    histogram that holds every section of the window.
    """

    def __init__(self, n: int, min_value: int, max_value: int, sigfigs: int) -> None:
        if n < 1:
            raise ValueError(f"window must have at least one section (was {n})")
        self._idx = -1
        self._sections = [Histogram(min_value, max_value, sigfigs) for _ in range(n)]
        self._merged = Histogram(min_value, max_value, sigfigs)
        self.current: Histogram = self._sections[0]
        self.rotate()

    def merge(self) -> Histogram:
        """Return a histogram holding the values of every section of the window.

        The same histogram object is reused and refilled on every call.
        """
        self._merged.reset()
        for section in self._sections:
            self._merged.merge(section)
        return self._merged

    def rotate(self) -> None:
        """Reset the oldest section and make it the current one."""
        self._idx += 1
        self.current = self._sections[self._idx % len(self._sections)]
        self.current.reset()