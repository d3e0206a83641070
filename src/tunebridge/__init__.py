"""tunebridge - resolve a track or album link on one streaming platform to its equivalents on the others."""

__version__ = "0.1.0"
