"""Exceptions raised by the analytics engine."""


class AnalyticsError(Exception):
    """Base class for analytics engine errors."""


class StoreUnavailable(AnalyticsError):
    """The review store could not be reached or timed out."""


class InvalidWindow(AnalyticsError, ValueError):
    """A window/period length or risk threshold is out of range."""


class ConfigError(AnalyticsError):
    """Analytics configuration could not be loaded."""
