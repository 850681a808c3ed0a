"""
Media Pipeline
ffmpeg wrapper that turns still images into fixed-geometry clips and muxes
clips with an audio track.

Output geometry is 1080x1920 at 30 fps, H.264/AAC. The final duration is
whichever of the video and audio streams ends first.
"""

import json
import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from stitcher.core.config import settings
from stitcher.core.exceptions import TranscodeError

logger = logging.getLogger(__name__)

WIDTH = 1080
HEIGHT = 1920
FPS = 30
STDERR_TAIL_CHARS = 2000

CLIP_FILTERS = ",".join([
    f"scale={WIDTH}:-1:force_original_aspect_ratio=decrease",
    f"pad={WIDTH}:{HEIGHT}:(ow-iw)/2:(oh-ih)/2",
    "setsar=1",
    "format=yuv420p",
])


class MediaPipeline:
    """Runs ffmpeg/ffprobe as subprocesses with a per-call timeout."""

    def __init__(
        self,
        ffmpeg_binary: Optional[str] = None,
        ffprobe_binary: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.ffmpeg = ffmpeg_binary or settings.FFMPEG_BINARY
        self.ffprobe = ffprobe_binary or settings.FFPROBE_BINARY
        self.timeout = timeout if timeout is not None else settings.TRANSCODE_TIMEOUT

    def clip_command(self, image_path: Path, duration: float, output_path: Path) -> List[str]:
        return [
            self.ffmpeg, "-y",
            "-loop", "1",
            "-i", str(image_path),
            "-vf", CLIP_FILTERS,
            "-t", f"{duration:g}",
            "-r", str(FPS),
            "-an",
            "-c:v", "libx264",
            "-preset", "veryfast",
            "-crf", "23",
            "-pix_fmt", "yuv420p",
            "-movflags", "+faststart",
            str(output_path),
        ]

    def mux_command(self, manifest_path: Path, audio_path: Path, output_path: Path) -> List[str]:
        return [
            self.ffmpeg, "-y",
            "-f", "concat", "-safe", "0",
            "-i", str(manifest_path),
            "-i", str(audio_path),
            "-map", "0:v",
            "-map", "1:a",
            "-c:v", "libx264",
            "-r", str(FPS),
            "-pix_fmt", "yuv420p",
            "-c:a", "aac",
            "-b:a", "128k",
            "-shortest",
            "-movflags", "+faststart",
            str(output_path),
        ]

    def make_clip(self, image_path: Path, duration: float, output_path: Path) -> Path:
        """
        Render one silent clip from a still image.

        Raises:
            TranscodeError: If ffmpeg fails or times out
        """
        self._run(self.clip_command(image_path, duration, output_path), f"clip {Path(output_path).name}")
        return Path(output_path)

    @staticmethod
    def write_manifest(clip_paths: Sequence[Path], manifest_path: Path) -> Path:
        """Write a concat-demuxer list preserving the given clip order."""
        lines = []
        for clip in clip_paths:
            posix = str(clip).replace("\\", "/").replace("'", "'\\''")
            lines.append(f"file '{posix}'")
        Path(manifest_path).write_text("\n".join(lines) + "\n", encoding="utf-8")
        return Path(manifest_path)

    def mux(self, manifest_path: Path, audio_path: Path, output_path: Path) -> Path:
        """
        Concatenate the manifest's clips and mux in the audio track.

        Raises:
            TranscodeError: If ffmpeg fails or times out
        """
        self._run(self.mux_command(manifest_path, audio_path, output_path), "mux")
        return Path(output_path)

    def probe_duration(self, path: Path) -> Optional[float]:
        """Container duration in seconds, or None if ffprobe cannot tell."""
        cmd = [
            self.ffprobe,
            "-v", "quiet",
            "-print_format", "json",
            "-show_format",
            str(path),
        ]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=30)
        except (subprocess.TimeoutExpired, OSError) as e:
            logger.warning(f"[Media] ffprobe failed for {path}: {e}")
            return None
        if result.returncode != 0:
            return None
        try:
            return float(json.loads(result.stdout)["format"]["duration"])
        except (ValueError, KeyError, TypeError):
            return None

    def _run(self, cmd: List[str], label: str) -> None:
        logger.debug(f"[Media] ffmpeg start ({label}): {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            raise TranscodeError(f"ffmpeg {label} timed out after {self.timeout}s") from e
        except FileNotFoundError as e:
            raise TranscodeError(f"ffmpeg not found at '{self.ffmpeg}'") from e
        except OSError as e:
            raise TranscodeError(f"ffmpeg {label} could not start: {e}") from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            tail = stderr[-STDERR_TAIL_CHARS:] if stderr else f"exit code {result.returncode}"
            raise TranscodeError(
                f"ffmpeg {label} failed: {tail}",
                details={"returncode": result.returncode},
            )
        logger.debug(f"[Media] ffmpeg done ({label})")


__all__ = ["MediaPipeline", "WIDTH", "HEIGHT", "FPS"]
