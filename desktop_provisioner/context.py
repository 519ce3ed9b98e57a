from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from .lib.command import CmdResult, Runner, run_cmd
from .lib.env import Paths
from .lib.pkg import PackageManager, detect_package_manager

logger = logging.getLogger(__name__)

Which = Callable[[str], Optional[str]]
Spawn = Callable[..., object]


@dataclass
class ProvisionCtx:
    """Everything an action needs for one run.

    ``runner``, ``which`` and ``spawn`` are the seams to the outside world;
    tests replace them with fakes.
    """

    paths: Paths
    dry_run: bool = False
    update_repos: bool = False
    timeout: float | None = None
    sudo: List[str] = field(default_factory=lambda: ["sudo"])
    runner: Runner = run_cmd
    which: Which = shutil.which
    spawn: Spawn = subprocess.Popen

    _package_manager: PackageManager | None = field(default=None, init=False, repr=False)
    _index_refreshed: bool = field(default=False, init=False, repr=False)

    def probe(self, argv: Sequence[str], *, cwd: str | None = None) -> CmdResult:
        """Read-only query: always executed, even in dry-run, never raises on exit status."""
        return self.runner(argv, check=False, cwd=cwd, timeout=self.timeout)

    def run(self, argv: Sequence[str], *, check: bool = True, cwd: str | None = None) -> CmdResult:
        return self.runner(argv, check=check, cwd=cwd, timeout=self.timeout, dry_run=self.dry_run)

    def run_root(self, argv: Sequence[str], *, check: bool = True, cwd: str | None = None) -> CmdResult:
        return self.run([*self.sudo, *argv], check=check, cwd=cwd)

    @property
    def package_manager(self) -> PackageManager:
        if self._package_manager is None:
            self._package_manager = detect_package_manager(self.which)
            logger.info("Using %s for package installation", self._package_manager.name)
        return self._package_manager

    def refresh_package_index(self) -> None:
        """Refresh the package index at most once per run."""
        if self._index_refreshed:
            return
        pm = self.package_manager
        if pm.refresh:
            logger.info("Updating package lists...")
            self.run_root(pm.refresh, check=False)
        self._index_refreshed = True
