"""Chat-driven Texas Hold'em betting engine."""

__version__ = "0.1.0"
