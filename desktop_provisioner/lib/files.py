from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""


def contains_marker(path: Path, marker: str) -> bool:
    return marker in read_text(path)


def append_once(path: Path, content: str, *, marker: str | None = None, dry_run: bool = False) -> bool:
    """Append ``content`` to ``path`` unless ``marker`` (default: content) is already there.

    Returns True if the file was changed.
    """

    needle = marker if marker is not None else content.strip()
    existing = read_text(path)
    if needle in existing:
        return False

    if dry_run:
        logger.info("Would append to %s: %s", str(path), content.strip())
        return True

    path.parent.mkdir(parents=True, exist_ok=True)
    prefix = "" if not existing or existing.endswith("\n") else "\n"
    with path.open("a", encoding="utf-8") as f:
        f.write(prefix + content.rstrip("\n") + "\n")
    return True


def write_file(path: Path, contents: str, *, mode: int | None = None, dry_run: bool = False) -> None:
    if dry_run:
        logger.info("Would write %s", str(path))
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")
    if mode is not None:
        os.chmod(path, mode)


def is_nonempty_dir(path: Path) -> bool:
    return path.is_dir() and any(path.iterdir())
