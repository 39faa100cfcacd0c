"""threadboard: threaded discussion store with consistent vote and reply counters."""

__version__ = "0.1.0"
