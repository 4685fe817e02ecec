"""Project workspace: target directory, package name and rooted file access."""

from create_openfort.workspace.file_ops import copy, copy_dir, edit_file, empty_dir, is_empty, remove_path
from create_openfort.workspace.names import format_target_dir, is_valid_name, to_valid_name
from create_openfort.workspace.manager import (
    BackendSecrets,
    OverwritePolicy,
    ProjectWorkspace,
    WorkspaceNotInitializedError,
)

__all__ = [
    "ProjectWorkspace",
    "OverwritePolicy",
    "BackendSecrets",
    "WorkspaceNotInitializedError",
    "copy",
    "copy_dir",
    "edit_file",
    "empty_dir",
    "is_empty",
    "remove_path",
    "format_target_dir",
    "is_valid_name",
    "to_valid_name",
]
