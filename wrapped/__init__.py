"""Year-in-review statistics for exercise activity exports."""

__version__ = "0.1.0"
