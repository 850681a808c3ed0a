# Workers package - queue consumption and video job processing

from stitcher.workers.base import ProcessingStage, BaseWorker
from stitcher.workers.scratch import ScratchSpace
from stitcher.workers.processor import VideoJobProcessor, clip_duration
from stitcher.workers.consumer import VideoJobWorker

__all__ = [
    "ProcessingStage",
    "BaseWorker",
    "ScratchSpace",
    "VideoJobProcessor",
    "clip_duration",
    "VideoJobWorker",
]
