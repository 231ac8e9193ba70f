"""FTDC metrics encoding helpers, error collection, and plain and windowed HDR histograms."""

__version__ = "0.1.0"
__all__ = ["catcher", "encoding", "sampledocs", "snapshot", "hdrhist", "window"]