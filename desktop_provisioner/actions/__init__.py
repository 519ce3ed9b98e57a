from .archive_deploy import ArchiveDeployAction
from .base import Action, ActionKind
from .file_write import FileWriteAction
from .link_install import LinkInstallAction
from .package_install import PackageInstallAction
from .repo_sync import RepoSyncAction
from .service_toggle import ServiceToggleAction
from .source_build import SourceBuildAction
from .tree_copy import TreeCopyAction

__all__ = [
    "Action",
    "ActionKind",
    "PackageInstallAction",
    "RepoSyncAction",
    "SourceBuildAction",
    "ArchiveDeployAction",
    "ServiceToggleAction",
    "FileWriteAction",
    "LinkInstallAction",
    "TreeCopyAction",
]
