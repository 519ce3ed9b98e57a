from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Protocol, Tuple

if TYPE_CHECKING:
    from ..context import ProvisionCtx


class ActionKind(str, Enum):
    PACKAGE_INSTALL = "package-install"
    REPO_SYNC = "repo-sync"
    SOURCE_BUILD = "source-build"
    ARCHIVE_DEPLOY = "archive-deploy"
    SERVICE_TOGGLE = "service-toggle"
    FILE_WRITE = "file-write"
    LINK_INSTALL = "link-install"
    TREE_COPY = "tree-copy"


class Action(Protocol):
    """A single idempotent provisioning step.

    ``check`` must only observe the system; it is called fresh for every
    action on every run and must not cache. ``apply`` brings the system to
    the desired state and returns a short human-readable detail, raising a
    ``ProvisionError`` subclass on failure.
    """

    action_id: str
    kind: ActionKind
    requires: Tuple[str, ...]

    def check(self, ctx: "ProvisionCtx") -> bool:
        ...

    def apply(self, ctx: "ProvisionCtx") -> str:
        ...

    def describe(self) -> str:
        ...
