from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Callable

from .errors import PrivilegeViolation
from .lib.pkg import PackageManager

if TYPE_CHECKING:
    from .context import ProvisionCtx

logger = logging.getLogger(__name__)


def ensure_not_root(geteuid: Callable[[], int] = os.geteuid) -> None:
    """Refuse to run as the superuser; privileged commands go through sudo."""

    if geteuid() == 0:
        raise PrivilegeViolation("Please do not run desktop-provision as root; it uses sudo where needed.")


def run_preflight(ctx: "ProvisionCtx", *, geteuid: Callable[[], int] = os.geteuid) -> PackageManager:
    ensure_not_root(geteuid)
    return ctx.package_manager
