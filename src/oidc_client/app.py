"""Typer application and CLI entry point for oidc-client.

The root app wires the built-in commands (``discover``, ``verify``,
``authorize-url`` and the ``profile`` group) and a root callback that sets
up output formatting and logging for every invocation.

:func:`main` is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler, invokes the app, maps
:class:`~oidc_client.exceptions.OIDCError` to its exit code, and writes a
crash log for anything unexpected.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from oidc_client import __version__
from oidc_client.commands.discover import discover_command
from oidc_client.commands.login import authorize_url_command, verify_command
from oidc_client.commands.profile import profile_app
from oidc_client.exit_codes import EXIT_GENERIC_FAILURE

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

app = typer.Typer(
    name="oidc-client",
    help="Discover OpenID Connect providers and verify ID tokens.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("discover")(discover_command)
app.command("verify")(verify_command)
app.command("authorize-url")(authorize_url_command)
app.add_typer(profile_app, name="profile", help="Manage stored client profiles.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"oidc-client {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Send library log records to stderr: DEBUG with ``--verbose``, WARNING otherwise."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format=_LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("oidc_client").setLevel(level)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Profile name to use."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmations."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~oidc_client.output.OutputManager`,
    configures logging, and stores shared options in ``ctx.obj``.
    """
    from oidc_client.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(format=fmt, no_color=no_color, quiet=quiet)
    )
    configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile
    ctx.obj["force"] = force
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback under the data directory and return its path."""
    from oidc_client.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``oidc-client`` console script.

    Unhandled :class:`~oidc_client.exceptions.OIDCError` instances exit
    with the error's ``exit_code``. All other exceptions produce a crash
    log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from oidc_client.exceptions import OIDCError
        from oidc_client.output import error

        if isinstance(exc, OIDCError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
