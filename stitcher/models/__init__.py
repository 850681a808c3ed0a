# Database models package
from stitcher.models.job import VideoJob

__all__ = ["VideoJob"]
