"""Web server serving weather forecast and news headline fragments for a dashboard."""

__version__ = "0.1.0"