"""FundScope: fund-data aggregation and category normalization."""

__version__ = "0.1.0"
