"""Batch image format conversion with zip and PDF packaging."""

__version__ = "1.0.0"
