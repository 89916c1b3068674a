"""Shared utilities for branchsync."""

from ._author import AuthorInfo, get_author_info
from ._git import decode_bytes, get_worktree_dir
from ._logging import LogFormatType, create_cli_logger, create_null_logger
from ._paths import get_cli_log_file, get_log_dir

__all__ = [
    "AuthorInfo",
    "LogFormatType",
    "create_cli_logger",
    "create_null_logger",
    "decode_bytes",
    "get_author_info",
    "get_cli_log_file",
    "get_log_dir",
    "get_worktree_dir",
]
