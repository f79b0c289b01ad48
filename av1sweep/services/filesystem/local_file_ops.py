from __future__ import annotations

import os
from pathlib import Path

from av1sweep.common.logging import get_logger

logger = get_logger(__name__)


class LocalFileOps:
    """
    Local filesystem operations used around an encode.
    """

    def replace_file(self, src: Path, dst: Path) -> None:
        """Rename `src` over `dst`. Both must live on the same filesystem."""
        src_p = Path(src)
        if not src_p.is_file():
            raise FileNotFoundError(f"Source file not found: {src_p}")
        os.replace(src_p, Path(dst))

    def remove_quietly(self, path: Path) -> bool:
        """Delete `path` if present. Returns True when something was removed."""
        try:
            Path(path).unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Could not remove %s: %s", path, e)
            return False
