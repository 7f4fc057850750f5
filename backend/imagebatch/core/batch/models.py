"""Data models for batch processing."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from imagebatch.models.conversion import ConvertedImage


class BatchItemStatus(str, Enum):
    """Status of an individual item in a batch."""

    COMPLETED = "completed"
    FAILED = "failed"


class ProgressState(BaseModel):
    """Progress update emitted after each processed item."""

    model_config = ConfigDict(frozen=True)

    current: int = Field(..., ge=0, description="Items processed so far")
    total: int = Field(..., ge=0, description="Items in the run")
    filename: Optional[str] = Field(None, description="Item just processed")
    status: Optional[BatchItemStatus] = None

    @property
    def percent(self) -> float:
        """Progress as a percentage."""
        if self.total == 0:
            return 0.0
        return self.current / self.total * 100


class BatchFailure(BaseModel):
    """A skipped item and why it failed."""

    file_index: int = Field(..., description="Index of file in batch (0-based)")
    filename: str
    error_code: Optional[str] = None
    error_message: str


class BatchResult(BaseModel):
    """Outcome of one conversion run."""

    converted: List[ConvertedImage] = Field(default_factory=list)
    failures: List[BatchFailure] = Field(default_factory=list)
    total_files: int = 0
    processing_time: float = Field(0.0, description="Wall time in seconds")

    @property
    def succeeded(self) -> int:
        return len(self.converted)

    @property
    def failed(self) -> int:
        return len(self.failures)
