"""Ethereum transaction fetcher and contract event ingestion service."""

__version__ = "0.1.0"
