"""Monte-Carlo rectangle coverage estimator."""

__version__ = "0.1.0"
