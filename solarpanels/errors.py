"""Exceptions raised by the solarpanels package."""


class SolarPanelsError(Exception):
    """Base class for all solarpanels errors."""


class ConfigError(SolarPanelsError):
    """Configuration is missing or invalid."""


class FetchError(SolarPanelsError):
    """An upstream request failed or returned an unusable response."""


class FetchTimeout(FetchError):
    """The upstream requests did not complete before the deadline."""


class PayloadError(SolarPanelsError):
    """A response body is missing fields or has the wrong shape."""
