"""LuckyClick: minority-wins micro-betting rooms over Telegram."""

__version__ = "0.1.0"
__author__ = "LuckyClick Team"

__all__ = ["__version__", "__author__"]
