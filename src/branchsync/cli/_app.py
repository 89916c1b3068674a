"""The command-line interface for branchsync."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from branchsync.config import find_repository_root, safe_load_config
from branchsync.exceptions import ConfigError
from branchsync.utils import create_cli_logger

from ._commands import register_commands
from ._commands._context import CLIContext
from ._commands._shared import ExitCode, exit_with_error

_HELP = "Keep local Git branches in line with a remote."


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name="branchsync",
        help=_HELP,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.meta.default
    def _default(  # pyright: ignore[reportUnusedFunction]
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        repo: Annotated[
            Path | None,
            Parameter(name=["--repo", "-C"], help="Repository to operate on"),
        ] = None,
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to config file")
        ] = None,
        verbose: Annotated[
            bool, Parameter(name=["--verbose", "-v"], help="Enable verbose output")
        ] = False,
        quiet: Annotated[
            bool,
            Parameter(name=["--quiet", "-q"], help="Suppress non-essential output"),
        ] = False,
    ) -> None:
        """Launch branchsync with global options.

        Args:
            tokens: Command tokens to pass to subcommands.
            repo: Directory inside the repository to operate on.
            config: Explicit path to a config file.
            verbose: Show full SHAs and log at debug level.
            quiet: Suppress non-essential output.
        """
        repository_root = find_repository_root(repo)
        cli_overrides: dict[str, object] | None = None
        if verbose:
            cli_overrides = {"logging": {"level": "debug"}}

        try:
            loaded_config, config_error = safe_load_config(
                config_path=config,
                repository_root=repository_root,
                cli_overrides=cli_overrides,
            )
        except (ConfigError, OSError) as e:
            exit_with_error(str(e), ExitCode.CONFIG_ERROR, console=error_console)

        cli_logger = create_cli_logger(
            level=loaded_config.logging.level.value,
            log_format=loaded_config.logging.format.value,  # type: ignore[arg-type]
            log_file=loaded_config.logging.file,
            command=tokens[0] if tokens else "",
        )

        ctx = CLIContext(
            config=loaded_config,
            verbose=verbose,
            quiet=quiet,
            repo_path=repo,
            repository_root=repository_root,
            config_error=config_error,
            logger=cli_logger,
            console=console,
            error_console=error_console,
        )
        CLIContext.set_current(ctx)

        try:
            app(tokens)
        finally:
            CLIContext.reset()

    register_commands(app)
    return app


app = create_app()


def main() -> None:
    """Default entrypoint for the `branchsync` CLI."""
    create_app().meta()


if __name__ == "__main__":
    main()
