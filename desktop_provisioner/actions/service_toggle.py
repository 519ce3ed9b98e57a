from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Tuple

from ..errors import ServiceToggleFailed
from ..lib.systemd import UnitState, query_unit, set_unit
from .base import ActionKind

if TYPE_CHECKING:
    from ..context import ProvisionCtx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceToggleAction:
    """Keep a systemd unit enabled and running, or disabled and stopped."""

    action_id: str
    unit: str
    enabled: bool = True
    requires: Tuple[str, ...] = ()

    kind: ClassVar[ActionKind] = ActionKind.SERVICE_TOGGLE

    def describe(self) -> str:
        return f"{'enable' if self.enabled else 'disable'} {self.unit}"

    def _wanted(self, state: UnitState) -> bool:
        if self.enabled:
            return state.enabled and state.active
        return not state.enabled and not state.active

    def check(self, ctx: "ProvisionCtx") -> bool:
        return self._wanted(query_unit(ctx, self.unit))

    def apply(self, ctx: "ProvisionCtx") -> str:
        set_unit(ctx, self.unit, enabled=self.enabled)
        if ctx.dry_run:
            return self.describe()

        # Judge by the resulting state, not the exit status of systemctl.
        state = query_unit(ctx, self.unit)
        if not self._wanted(state):
            raise ServiceToggleFailed(
                f"{self.unit}: enabled={state.enabled} active={state.active} after {self.describe()}"
            )
        logger.info("%s is now %s", self.unit, "enabled" if self.enabled else "disabled")
        return self.describe()
