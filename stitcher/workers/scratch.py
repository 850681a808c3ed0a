"""
Scratch Space
Per-run temporary directory that is removed on every exit path.
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class ScratchSpace:
    """
    Context manager owning one job run's local files.

    Removal failures are logged, never raised, so cleanup cannot replace
    the run's real outcome.
    """

    def __init__(self, job_id: str, root: Optional[str] = None):
        self.job_id = job_id
        self.root = root or None
        self.path: Optional[Path] = None

    def __enter__(self) -> "ScratchSpace":
        if self.root:
            Path(self.root).mkdir(parents=True, exist_ok=True)
        self.path = Path(tempfile.mkdtemp(prefix=f"stitch-{self.job_id[:8]}-", dir=self.root))
        logger.debug(f"[Scratch] Created {self.path}")
        return self

    def file(self, name: str) -> Path:
        """Path for a named file inside the scratch directory."""
        return self.path / name

    def discard(self, path: Path) -> None:
        """Delete one file early; failures are logged."""
        try:
            Path(path).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"[Scratch] Could not delete {path}: {e}")

    def cleanup(self) -> None:
        if self.path is None:
            return
        try:
            shutil.rmtree(self.path)
            logger.debug(f"[Scratch] Removed {self.path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"[Scratch] Could not remove {self.path}: {e}")

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.cleanup()
        return False


__all__ = ["ScratchSpace"]
