from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Paths:
    home: Path

    @property
    def src_dir(self) -> Path:
        return self.home / ".local/src"

    @property
    def bin_dir(self) -> Path:
        return self.home / ".local/bin"

    @property
    def fonts_dir(self) -> Path:
        return self.home / ".fonts"

    @property
    def config_dir(self) -> Path:
        return self.home / ".config"

    @property
    def bashrc(self) -> Path:
        return self.home / ".bashrc"

    @property
    def state_dir(self) -> Path:
        return self.home / ".local/state/desktop-provision"

    @property
    def log_default(self) -> Path:
        return self.state_dir / "provision.log"


def user_paths(home: str | None = None) -> Paths:
    return Paths(home=Path(home or os.environ.get("HOME") or Path.home()))
