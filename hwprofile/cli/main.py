"""hwprofile CLI - Main application entry point.

Commands:
    detect  - Run detection and show the profile as a table (or JSON)
    report  - Print the plain-text detection report
    env     - Print HWPROFILE_* variables for shells and service units

Follows Commandments #4 (Small Functions) and #1 (Simple Control Flow).
"""

from __future__ import annotations

from functools import wraps
from pathlib import Path
from typing import Any, Callable, Optional

import typer

from hwprofile.cli.console import ErrorRenderer, get_console, set_verbose_mode
from hwprofile.core.config import Config, load_config
from hwprofile.core.logging import configure_logging, get_logger
from hwprofile.detection.detector import detect_profile
from hwprofile.detection.models import HardwareProfile
from hwprofile.reporting.summary import (
    profile_to_environment,
    profile_to_json,
    render_summary,
    render_table,
)

logger = get_logger(__name__)


def _handle_cli_error(e: Exception, operation_name: str, show_debug: bool) -> None:
    """
    Render a CLI error as a helpful panel.

    JPL Rule #4: <40 lines.
    JPL Rule #9: Full type hints.

    Args:
        e: The exception that occurred
        operation_name: Human-readable operation name
        show_debug: Whether to show the traceback
    """
    ErrorRenderer.render(
        e,
        context=f"While running {operation_name}",
        show_traceback=show_debug,
    )
    logger.debug(
        "Command failed",
        error_type=type(e).__name__,
        error=str(e),
    )


def safe_cli_command(
    operation_name: str,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator to wrap CLI commands with user-friendly error handling.

    JPL Rule #4: <50 lines.
    JPL Rule #9: Full type hints.

    Args:
        operation_name: Human-readable operation name for error context

    Returns:
        Decorator function that wraps the command with error handling
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            logger.bind(operation=operation_name)
            try:
                return func(*args, **kwargs)
            except typer.Exit:
                raise
            except Exception as e:
                show_debug = kwargs.get("debug", False)
                _handle_cli_error(e, operation_name, show_debug)
                raise typer.Exit(code=1)

        return wrapper

    return decorator


# Create main Typer application
app = typer.Typer(
    name="hwprofile",
    help="Hardware detection and performance profiling for Linux hosts",
    add_completion=False,
    pretty_exceptions_enable=False,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from hwprofile import __version__

        typer.echo(f"hwprofile {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """hwprofile - classify this machine into a performance profile."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


# ============================================================================
# Shared options
# ============================================================================

ConfigOption = typer.Option(
    None, "--config", "-c", help="Path to hwprofile.yaml (default: ./hwprofile.yaml)"
)
RootOption = typer.Option(
    None, "--root", "-r", help="Probe root containing proc/ and sys/ (default: /)"
)
DebugOption = typer.Option(
    False, "--debug", help="Debug logging, detailed report and tracebacks"
)


def _prepare(
    config_path: Optional[Path],
    root: Optional[Path],
    debug: bool,
    profile: Optional[str] = None,
    parallel: bool = False,
) -> Config:
    """Load configuration, apply command-line flags and set up logging.

    Command-line flags take precedence over environment and file values.

    Rule #4: Function < 60 lines.
    """
    set_verbose_mode(debug)
    config = load_config(config_path)

    if root is not None:
        config.detection.root = str(root)
    if parallel:
        config.detection.parallel = True
    if profile:
        config.profile = profile
        config.override_set()
    if debug:
        config.reporting.log_level = "debug"

    log_file = Path(config.reporting.log_file) if config.reporting.log_file else None
    configure_logging(
        level="DEBUG" if debug else "WARNING",
        log_file=log_file,
        console=True,
    )
    return config


def _warn_defaulted(profile: HardwareProfile) -> None:
    if profile.defaulted:
        ErrorRenderer.render_warning(
            f"Fell back to defaults for: {', '.join(profile.defaulted)}",
            suggestion="Check that --root points at a tree with proc/ and sys/",
        )


# ============================================================================
# Commands
# ============================================================================


@app.command("detect")
@safe_cli_command("hardware detection")
def detect_command(
    config: Optional[Path] = ConfigOption,
    root: Optional[Path] = RootOption,
    profile: Optional[str] = typer.Option(
        None,
        "--profile",
        "-p",
        help="Force a performance profile "
        "(minimal, resource-constrained, balanced, high-performance)",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Print the profile as JSON"
    ),
    debug: bool = DebugOption,
    parallel: bool = typer.Option(
        False, "--parallel", help="Run category probes concurrently"
    ),
) -> None:
    """Detect hardware and show the resulting profile.

    Examples:
        hwprofile detect
        hwprofile detect --json
        hwprofile detect --root ./fixture --profile balanced
    """
    cfg = _prepare(config, root, debug, profile=profile, parallel=parallel)
    result = detect_profile(cfg)

    if json_output:
        typer.echo(profile_to_json(result))
        return

    get_console().print(render_table(result))
    _warn_defaulted(result)


@app.command("report")
@safe_cli_command("detection report")
def report_command(
    config: Optional[Path] = ConfigOption,
    root: Optional[Path] = RootOption,
    debug: bool = DebugOption,
) -> None:
    """Print the plain-text detection report.

    Examples:
        hwprofile report
        hwprofile report --debug
    """
    cfg = _prepare(config, root, debug)
    result = detect_profile(cfg)
    typer.echo(render_summary(result, debug=cfg.reporting.log_level == "debug"))


@app.command("env")
@safe_cli_command("environment export")
def env_command(
    config: Optional[Path] = ConfigOption,
    root: Optional[Path] = RootOption,
    debug: bool = DebugOption,
) -> None:
    """Print KEY=value lines for the detected profile.

    Examples:
        eval "$(hwprofile env)"
    """
    cfg = _prepare(config, root, debug)
    result = detect_profile(cfg)
    for key, value in profile_to_environment(result).items():
        typer.echo(f"{key}={value}")


def cli_main() -> None:
    """Entry point for console_scripts.

    This function is called when running the 'hwprofile' command.
    """
    app()


if __name__ == "__main__":
    cli_main()
