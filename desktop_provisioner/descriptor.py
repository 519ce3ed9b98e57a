"""Target state descriptor.

Everything the provisioner installs is declared here as plain data. To add
a package, repository, archive or service, extend the matching list below;
``default_target`` turns the lists into actions with their prerequisite
edges.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .actions import (
    Action,
    ArchiveDeployAction,
    LinkInstallAction,
    PackageInstallAction,
    RepoSyncAction,
    ServiceToggleAction,
    SourceBuildAction,
    TreeCopyAction,
)
from .lib.env import Paths

PACKAGES: Tuple[str, ...] = (
    "brightnessctl",
    "cava",
    "cliphist",
    "fabric",
    "libgnome-bluetooth-3.0-13",
    "gobject-introspection",
    "gpu-screen-recorder",
    "hypridle",
    "hyprlock",
    "hyprpicker",
    "libnotify-bin",
    "matugen",
    "network-manager-applet",
    "nm-connection-editor",
    "fonts-noto",
    "fonts-noto-core",
    "fonts-noto-extra",
    "fonts-noto-ui-core",
    "fonts-noto-unhinted",
    "fonts-noto-color-emoji",
    "fonts-noto-mono",
    "nvtop",
    "playerctl",
    "power-profiles-daemon",
    "swappy",
    "swww",
    "tesseract-ocr",
    "tesseract-ocr-eng",
    "tesseract-ocr-spa",
    "tmux",
    "unzip",
    "upower",
    "libvte-2.91-0",
    "gir1.2-vte-2.91",
    "webp-pixbuf-loader",
    "wl-clipboard",
)

PYTHON_PACKAGES: Tuple[str, ...] = (
    "python3-gi",
    "python3-ijson",
    "python3-numpy",
    "python3-pil",
    "python3-psutil",
    "python3-pywayland",
    "python3-requests",
    "python3-setproctitle",
    "python3-toml",
    "python3-watchdog",
)

FETCH_TOOLS: Tuple[str, ...] = ("git", "curl")
BUILD_TOOLS: Tuple[str, ...] = ("meson", "ninja-build")

NOTES: Tuple[str, ...] = (
    "ttf-nerd-fonts-symbols-mono is not packaged here; install Nerd Fonts manually "
    "from https://github.com/ryanoasis/nerd-fonts if shell icons are missing.",
)


@dataclass(frozen=True)
class RepoSpec:
    name: str
    url: str
    # Relative to ~/.local/src unless absolute.
    dest: str
    link: Optional[str] = None
    build: bool = False
    creates: Optional[str] = None


REPOS: Tuple[RepoSpec, ...] = (
    RepoSpec("hyprshot", "https://github.com/Gustash/hyprshot.git", "Hyprshot", link="hyprshot"),
    RepoSpec(
        "hyprsunset",
        "https://github.com/hyprwm/hyprsunset.git",
        "hyprsunset",
        build=True,
        creates="/usr/bin/hyprsunset",
    ),
    RepoSpec("gray", "https://github.com/Fabric-Development/gray.git", "gray", build=True),
)


@dataclass(frozen=True)
class ArchiveSpec:
    name: str
    url: str
    # Relative to ~/.fonts.
    dest: str


FONT_ARCHIVES: Tuple[ArchiveSpec, ...] = (
    ArchiveSpec(
        "zed-sans",
        "https://github.com/zed-industries/zed-fonts/releases/download/1.2.0/zed-sans-1.2.0.zip",
        "zed-sans",
    ),
)

# (unit, enabled)
SERVICES: Tuple[Tuple[str, bool], ...] = (
    ("iwd", False),
    ("NetworkManager", True),
)


@dataclass(frozen=True)
class AppSpec:
    """The managed desktop shell: cloned, configured and (re)started last."""

    name: str
    repo_url: str
    install_dir: Path
    entrypoint: str = "main.py"
    config_script: Optional[str] = None
    process_name: Optional[str] = None
    launcher: Optional[Path] = None
    fonts_subdir: Optional[str] = None
    fonts_marker: Optional[str] = None
    interpreter: str = "python3"

    @property
    def repo_action_id(self) -> str:
        return f"repo:{self.name}"

    @property
    def entrypoint_path(self) -> Path:
        return self.install_dir / self.entrypoint

    def command(self) -> List[str]:
        return [self.interpreter, str(self.entrypoint_path)]


def default_app(paths: Paths) -> AppSpec:
    return AppSpec(
        name="ax-shell",
        repo_url="https://github.com/Axenide/Ax-Shell.git",
        install_dir=paths.config_dir / "Ax-Shell",
        config_script="config/config.py",
        process_name="ax-shell",
        launcher=paths.bin_dir / "ax-shell-start",
        fonts_subdir="assets/fonts",
        fonts_marker="tabler-icons",
    )


@dataclass(frozen=True)
class PathExport:
    """Make ``entry`` part of PATH for future login shells via ``rc_file``."""

    entry: Path
    rc_file: Path
    home: Optional[Path] = None

    @property
    def line(self) -> str:
        shown = str(self.entry)
        if self.home is not None:
            try:
                shown = "$HOME/" + str(self.entry.relative_to(self.home))
            except ValueError:
                pass
        return f'export PATH="{shown}:$PATH"'


@dataclass(frozen=True)
class TargetState:
    actions: List[Action]
    app: AppSpec
    environment: List[PathExport] = field(default_factory=list)


def _src_path(paths: Paths, dest: str) -> Path:
    p = Path(dest)
    return p if p.is_absolute() else paths.src_dir / p


def default_target(paths: Paths) -> TargetState:
    app = default_app(paths)
    actions: List[Action] = [
        PackageInstallAction("packages:fetch-tools", FETCH_TOOLS),
        PackageInstallAction("packages:system", PACKAGES),
        PackageInstallAction("packages:python", PYTHON_PACKAGES),
        PackageInstallAction("packages:build-tools", BUILD_TOOLS),
    ]

    for repo in REPOS:
        repo_id = f"repo:{repo.name}"
        src = _src_path(paths, repo.dest)
        actions.append(RepoSyncAction(repo_id, repo.url, src, requires=("packages:fetch-tools",)))
        if repo.link:
            actions.append(
                LinkInstallAction(
                    f"link:{repo.name}",
                    target=src / repo.link,
                    link=paths.bin_dir / repo.link,
                    requires=(repo_id,),
                )
            )
        if repo.build:
            actions.append(
                SourceBuildAction(
                    f"build:{repo.name}",
                    source_dir=src,
                    creates=Path(repo.creates) if repo.creates else None,
                    requires=("packages:build-tools", repo_id),
                )
            )

    actions.append(RepoSyncAction(app.repo_action_id, app.repo_url, app.install_dir, requires=("packages:fetch-tools",)))

    for archive in FONT_ARCHIVES:
        actions.append(
            ArchiveDeployAction(
                f"fonts:{archive.name}",
                archive.url,
                paths.fonts_dir / archive.dest,
                requires=("packages:fetch-tools",),
            )
        )

    if app.fonts_subdir and app.fonts_marker:
        actions.append(
            TreeCopyAction(
                f"fonts:{app.name}",
                src=app.install_dir / app.fonts_subdir,
                dest=paths.fonts_dir,
                marker=paths.fonts_dir / app.fonts_marker,
                requires=(app.repo_action_id,),
            )
        )

    for unit, enabled in SERVICES:
        actions.append(ServiceToggleAction(f"service:{unit}", unit, enabled=enabled))

    return TargetState(
        actions=actions,
        app=app,
        environment=[PathExport(entry=paths.bin_dir, rc_file=paths.bashrc, home=paths.home)],
    )


def closing_notes(paths: Paths) -> List[str]:
    """Manual follow-ups printed once a run has finished."""
    return list(NOTES) + [f"Some components were installed in {paths.bin_dir}; make sure it is in your PATH."]
