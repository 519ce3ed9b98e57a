from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from .assets import copy_tree

if TYPE_CHECKING:
    from ..context import ProvisionCtx

logger = logging.getLogger(__name__)


class ExtractError(RuntimeError):
    pass


def _swap_in(staging: Path, dest: Path) -> int:
    """Copy ``staging`` next to ``dest`` and rename it into place.

    ``dest`` only ever appears complete. An empty ``dest`` is replaced; a
    partial copy is removed.
    """

    dest.parent.mkdir(parents=True, exist_ok=True)
    partial = Path(tempfile.mkdtemp(prefix=f".{dest.name}.", dir=str(dest.parent)))
    try:
        count = copy_tree(staging, partial)
        if dest.is_dir() and not any(dest.iterdir()):
            dest.rmdir()
        partial.rename(dest)
    except OSError:
        shutil.rmtree(partial, ignore_errors=True)
        raise
    return count


def fetch_and_extract(ctx: "ProvisionCtx", url: str, dest: Path) -> int:
    """Download ``url``, unpack it and move the contents into ``dest``.

    Download and extraction happen inside a temporary directory that is
    removed on every exit path. The files are then staged beside ``dest``
    and renamed into place, so a failed run never leaves a half-filled
    ``dest`` behind. Returns the number of files deployed.
    """

    name = url.rstrip("/").rsplit("/", 1)[-1] or "archive"
    with tempfile.TemporaryDirectory(prefix="desktop-provision-") as tmp:
        archive = Path(tmp) / name
        staging = Path(tmp) / "extracted"

        logger.info("Downloading %s", url)
        ctx.run(["curl", "-fsSL", "--retry", "2", "-o", str(archive), url])

        if ctx.dry_run:
            logger.info("Would extract %s to %s", name, str(dest))
            return 0

        try:
            shutil.unpack_archive(str(archive), str(staging))
        except (shutil.ReadError, ValueError, OSError) as e:
            raise ExtractError(f"Unable to extract {name}: {e}") from e

        try:
            return _swap_in(staging, dest)
        except OSError as e:
            raise ExtractError(f"Unable to deploy {name} to {dest}: {e}") from e
