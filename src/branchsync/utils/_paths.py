from pathlib import Path

import platformdirs


def get_log_dir() -> Path:
    """Get the platform-specific directory for branchsync log files."""
    return platformdirs.user_log_path("branchsync")


def get_cli_log_file() -> Path:
    """Get the path to the default CLI log file."""
    return get_log_dir() / "cli.log"
