"""
Video Job Model
Database model for video assembly jobs.
"""

from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, Float, JSON

from stitcher.core.database import Base


class VideoJob(Base):
    """Video assembly job record."""

    __tablename__ = "video_jobs"

    id = Column(String, primary_key=True)  # uuid4 string

    # Request (immutable after admission)
    audio_url = Column(String, nullable=False)
    images = Column(JSON, nullable=False, default=list)  # [{url, start, end}, ...]
    transition_seconds = Column(Float, nullable=False, default=0.0)

    # Status: pending, processing, completed, failed
    status = Column(String, nullable=False, default="pending", index=True)
    error_message = Column(Text, nullable=True)

    # Result
    result_url = Column(String, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)
