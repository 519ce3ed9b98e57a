from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..context import ProvisionCtx


@dataclass(frozen=True)
class UnitState:
    enabled: bool
    active: bool


def query_unit(ctx: "ProvisionCtx", unit: str) -> UnitState:
    """Ask systemd for the current state of a unit.

    A unit that does not exist reports neither enabled nor active.
    """

    enabled = ctx.probe(["systemctl", "is-enabled", "--quiet", unit]).returncode == 0
    active = ctx.probe(["systemctl", "is-active", "--quiet", unit]).returncode == 0
    return UnitState(enabled=enabled, active=active)


def set_unit(ctx: "ProvisionCtx", unit: str, *, enabled: bool) -> None:
    verb = "enable" if enabled else "disable"
    ctx.run_root(["systemctl", verb, "--now", unit], check=False)
