"""Wage normalization, outlier scoring and counter maintenance for crowdsourced wage reports."""

__version__ = "1.0.0"
