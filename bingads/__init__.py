"""Resilient caller for the Bing Ads v13 SOAP services."""

__version__ = "0.3.0"
