"""Personal finance tracker: income and expense records, monthly summaries and breakdowns."""

__version__ = "0.1.0"
