"""CloudWatch Logs Insights check with a persisted time cursor."""

__version__ = "0.1.0"
