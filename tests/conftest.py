"""
Shared test fixtures: a fake system behind the command runner.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set

import pytest

from desktop_provisioner.context import ProvisionCtx
from desktop_provisioner.lib.command import CmdResult, CommandError
from desktop_provisioner.lib.env import Paths

READ_ONLY = (
    ("dpkg-query",),
    ("systemctl", "is-enabled"),
    ("systemctl", "is-active"),
)


class FakeSystem:
    """Answers commands the way apt, systemd, git and curl would.

    ``installable`` limits which packages an install can actually bring in;
    ``None`` means everything is installable.
    """

    def __init__(self) -> None:
        self.installed: Set[str] = set()
        self.installable: Optional[Set[str]] = None
        self.units: Dict[str, List[bool]] = {}
        self.unreachable: Set[str] = set()
        self.downloads: Dict[str, bytes] = {}
        self.failing: Dict[tuple, int] = {}
        self.calls: List[List[str]] = []
        self.cwds: List[Optional[str]] = []
        self.running: Set[str] = set()

    # Runner protocol
    def __call__(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        env=None,
        cwd: Optional[str] = None,
        timeout: Optional[float] = None,
        dry_run: bool = False,
    ) -> CmdResult:
        argv = list(argv)
        self.calls.append(argv)
        self.cwds.append(cwd)
        if dry_run:
            return CmdResult(argv=argv, returncode=0, stdout="", stderr="")
        rc, out, err = self._dispatch(argv[1:] if argv[:1] == ["sudo"] else argv)
        result = CmdResult(argv=argv, returncode=rc, stdout=out, stderr=err)
        if check and rc != 0:
            raise CommandError(f"Command failed ({rc}): {' '.join(argv)}", result)
        return result

    @property
    def mutations(self) -> List[List[str]]:
        """Every command except read-only state queries."""
        return [c for c in self.calls if not any(tuple(c[: len(p)]) == p for p in READ_ONLY)]

    def ran(self, *prefix: str) -> bool:
        return any(tuple(c[: len(prefix)]) == prefix for c in self.calls)

    def _dispatch(self, argv: List[str]):
        for prefix, rc in self.failing.items():
            if tuple(argv[: len(prefix)]) == prefix:
                return rc, "", f"{argv[0]} failed"

        if argv[:1] == ["dpkg-query"]:
            pkg = argv[-1]
            if pkg in self.installed:
                return 0, "install ok installed", ""
            return 1, "", f"dpkg-query: no packages found matching {pkg}"

        if argv[:2] == ["apt-get", "update"]:
            return 0, "", ""

        if argv[:3] == ["apt-get", "install", "-y"]:
            pkgs = argv[3:]
            if self.installable is not None and not set(pkgs) <= self.installable:
                bad = sorted(set(pkgs) - self.installable)
                return 100, "", f"E: Unable to locate package {bad[0]}"
            self.installed.update(pkgs)
            return 0, "", ""

        if argv[:2] == ["systemctl", "is-enabled"]:
            state = self.units.get(argv[-1])
            return (0 if state and state[0] else 1), "", ""

        if argv[:2] == ["systemctl", "is-active"]:
            state = self.units.get(argv[-1])
            return (0 if state and state[1] else 3), "", ""

        if argv[:1] == ["systemctl"] and argv[1] in ("enable", "disable"):
            unit = argv[-1]
            if unit not in self.units:
                return 1, "", f"Unit {unit}.service does not exist"
            self.units[unit] = [argv[1] == "enable"] * 2
            return 0, "", ""

        if argv[:2] == ["git", "clone"]:
            url, dest = argv[-2], Path(argv[-1])
            if url in self.unreachable:
                return 128, "", f"fatal: unable to access '{url}'"
            (dest / ".git").mkdir(parents=True)
            return 0, "", ""

        if argv[:1] == ["git"] and "pull" in argv:
            return 0, "Already up to date.", ""

        if argv[:1] == ["curl"]:
            url, out = argv[-1], Path(argv[argv.index("-o") + 1])
            if url not in self.downloads:
                return 22, "", "curl: (22) The requested URL returned error: 404"
            out.write_bytes(self.downloads[url])
            return 0, "", ""

        if argv[:1] == ["killall"]:
            if argv[-1] in self.running:
                self.running.discard(argv[-1])
                return 0, "", ""
            return 1, "", f"{argv[-1]}: no process found"

        return 0, "", ""


class FakeProc:
    def __init__(self, pid: int) -> None:
        self.pid = pid


class FakeSpawn:
    def __init__(self) -> None:
        self.launched: List[dict] = []

    def __call__(self, argv, **kwargs):
        self.launched.append(dict(kwargs, argv=list(argv)))
        return FakeProc(4242)


@pytest.fixture
def fake() -> FakeSystem:
    return FakeSystem()


@pytest.fixture
def spawn() -> FakeSpawn:
    return FakeSpawn()


@pytest.fixture
def paths(tmp_path: Path) -> Paths:
    home = tmp_path / "home"
    home.mkdir()
    return Paths(home=home)


@pytest.fixture
def ctx(paths: Paths, fake: FakeSystem, spawn: FakeSpawn) -> ProvisionCtx:
    return ProvisionCtx(
        paths=paths,
        runner=fake,
        which=lambda binary: "/usr/bin/apt-get" if binary == "apt-get" else None,
        spawn=spawn,
    )
