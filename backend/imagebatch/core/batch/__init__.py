"""Batch processing module for converting multiple images."""

from .manager import BatchManager
from .models import BatchFailure, BatchItemStatus, BatchResult, ProgressState

__all__ = [
    "BatchManager",
    "BatchFailure",
    "BatchItemStatus",
    "BatchResult",
    "ProgressState",
]
