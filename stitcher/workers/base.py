"""
Base Worker Classes
Stage tracking and timed, structured logging for job processors.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


class ProcessingStage(str, Enum):
    """In-memory stages of one processing run. Only the outcome is persisted."""
    RECEIVED = "received"
    DOWNLOADING = "downloading"
    TRANSCODING_CLIPS = "transcoding-clips"
    MUXING = "muxing"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    FAILED = "failed"


class BaseWorker(ABC):
    """
    Abstract base class for job processors.

    Features:
    - Current stage tracking
    - Structured logging with run timing
    """

    TASK_NAME = "task"

    def __init__(self):
        self.start_time: Optional[datetime] = None
        self.stage: Optional[ProcessingStage] = None

    def _elapsed(self) -> float:
        return (datetime.utcnow() - self.start_time).total_seconds() if self.start_time else 0

    def _enter_stage(self, stage: ProcessingStage, job_id: str, detail: str = ""):
        """Record and log a stage transition."""
        self.stage = stage
        suffix = f" | {detail}" if detail else ""
        logger.info(f"[{self.TASK_NAME}] {job_id} -> {stage.value}{suffix}")

    def _log_start(self, job_id: str, **context):
        """Log run start with context."""
        self.start_time = datetime.utcnow()
        self.stage = ProcessingStage.RECEIVED
        logger.info(f"[START] {self.TASK_NAME} {job_id} | Context: {context}")

    def _log_complete(self, job_id: str, result_summary: str = ""):
        """Log run completion with timing."""
        self.stage = ProcessingStage.COMPLETED
        logger.info(f"[COMPLETE] {self.TASK_NAME} {job_id} | Duration: {self._elapsed():.2f}s | {result_summary}")

    def _log_error(self, job_id: str, error: str, stage: Optional[ProcessingStage] = None):
        """Log run failure with the stage it happened in."""
        failed_in = (stage or self.stage or ProcessingStage.RECEIVED).value
        self.stage = ProcessingStage.FAILED
        logger.error(
            f"[ERROR] {self.TASK_NAME} {job_id} | Stage: {failed_in} | "
            f"Duration: {self._elapsed():.2f}s | Error: {error}"
        )

    @abstractmethod
    def process(self, *args, **kwargs) -> Any:
        """
        Drive one job to a terminal state. Must be implemented by subclasses.
        """
        pass


__all__ = ["ProcessingStage", "BaseWorker"]
