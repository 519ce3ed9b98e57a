from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from ..errors import NoPackageManager
from .command import CmdResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageManager:
    name: str
    binary: str
    install: Tuple[str, ...]
    query: Tuple[str, ...]
    refresh: Tuple[str, ...] = ()
    query_ok_marker: str | None = None

    def install_argv(self, packages: Sequence[str]) -> list[str]:
        return [*self.install, *packages]

    def query_argv(self, package: str) -> list[str]:
        return [*self.query, package]

    def is_installed(self, result: CmdResult) -> bool:
        if result.returncode != 0:
            return False
        if self.query_ok_marker is None:
            return True
        return self.query_ok_marker in (result.stdout or "")


_DPKG_QUERY = ("dpkg-query", "-W", "-f=${Status}")
_DPKG_OK = "install ok installed"

# First match wins.
PACKAGE_MANAGERS: Tuple[PackageManager, ...] = (
    PackageManager(
        name="pikman",
        binary="pikman",
        install=("pikman", "install", "-y"),
        query=_DPKG_QUERY,
        refresh=("apt", "update"),
        query_ok_marker=_DPKG_OK,
    ),
    PackageManager(
        name="apt",
        binary="apt-get",
        install=("apt-get", "install", "-y"),
        query=_DPKG_QUERY,
        refresh=("apt-get", "update"),
        query_ok_marker=_DPKG_OK,
    ),
    PackageManager(
        name="dnf",
        binary="dnf",
        install=("dnf", "install", "-y"),
        query=("rpm", "-q"),
        refresh=("dnf", "makecache"),
    ),
    PackageManager(
        name="pacman",
        binary="pacman",
        install=("pacman", "-S", "--noconfirm", "--needed"),
        query=("pacman", "-Q"),
        refresh=("pacman", "-Sy"),
    ),
    PackageManager(
        name="zypper",
        binary="zypper",
        install=("zypper", "--non-interactive", "install"),
        query=("rpm", "-q"),
        refresh=("zypper", "--non-interactive", "refresh"),
    ),
)


def detect_package_manager(
    which: Callable[[str], Optional[str]],
    candidates: Sequence[PackageManager] = PACKAGE_MANAGERS,
) -> PackageManager:
    for pm in candidates:
        if which(pm.binary):
            return pm
    raise NoPackageManager([pm.name for pm in candidates])
