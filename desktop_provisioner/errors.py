"""Provisioning error taxonomy.

Recoverable errors are caught at the action boundary by the execution
driver and end up in the report. Fatal errors halt the run.
"""

from __future__ import annotations

from typing import Sequence


class ProvisionError(Exception):
    fatal = False


class FatalProvisionError(ProvisionError):
    fatal = True


class NoPackageManager(FatalProvisionError):
    def __init__(self, candidates: Sequence[str]) -> None:
        super().__init__(f"No supported package manager found (tried: {', '.join(candidates)})")
        self.candidates = list(candidates)


class PrivilegeViolation(FatalProvisionError):
    pass


class CyclicDependency(FatalProvisionError):
    def __init__(self, cycle: Sequence[str]) -> None:
        super().__init__(f"Dependency cycle detected: {' -> '.join(cycle)}")
        self.cycle = list(cycle)


class UnknownPrerequisite(FatalProvisionError):
    def __init__(self, action_id: str, missing: str) -> None:
        super().__init__(f"Action '{action_id}' requires unknown action '{missing}'")
        self.action_id = action_id
        self.missing = missing


class DuplicateAction(FatalProvisionError):
    def __init__(self, action_id: str) -> None:
        super().__init__(f"Duplicate action id: {action_id}")
        self.action_id = action_id


class SourceUnavailable(ProvisionError):
    pass


class BuildFailed(ProvisionError):
    STAGES = ("configure", "compile", "install")

    def __init__(self, stage: str, message: str) -> None:
        if stage not in self.STAGES:
            raise ValueError(f"unknown build stage: {stage}")
        super().__init__(f"{stage} step failed: {message}")
        self.stage = stage


class PackageInstallPartialFailure(ProvisionError):
    def __init__(self, unresolved: Sequence[str]) -> None:
        super().__init__(f"Packages not installed: {', '.join(unresolved)}")
        self.unresolved = list(unresolved)


class ArchiveDownloadFailure(ProvisionError):
    pass


class ServiceToggleFailed(ProvisionError):
    pass


class PrerequisiteFailed(ProvisionError):
    def __init__(self, action_id: str, failed: Sequence[str]) -> None:
        super().__init__(f"Skipped {action_id}: prerequisite failed ({', '.join(failed)})")
        self.failed = list(failed)


class UnknownAction(FatalProvisionError):
    def __init__(self, action_id: str) -> None:
        super().__init__(f"No such action: {action_id}")
        self.action_id = action_id
