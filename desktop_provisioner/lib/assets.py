from __future__ import annotations

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def copy_tree(src: Path, dst: Path, *, dry_run: bool = False) -> int:
    """Merge ``src`` into ``dst``, overwriting files that already exist.

    Returns the number of files copied.
    """

    if not src.exists():
        raise FileNotFoundError(str(src))

    if dry_run:
        logger.info("Would copy tree %s -> %s", str(src), str(dst))
        return 0

    copied = 0
    dst.mkdir(parents=True, exist_ok=True)
    for item in sorted(src.rglob("*")):
        out = dst / item.relative_to(src)
        if item.is_dir():
            out.mkdir(parents=True, exist_ok=True)
        else:
            out.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(item, out)
            copied += 1
    return copied
