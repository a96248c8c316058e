"""podbuddy - a live AI co-host for podcasts."""

__version__ = "0.1.0"
