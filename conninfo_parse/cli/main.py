# (Functional) **Command-line interface** (Typer app) for parsing conninfo strings.

"""
Command-line entry point for conninfo-parse.

Parses a PostgreSQL conninfo string (keyword/value or URI form), resolves it
against the environment and compiled-in defaults, and prints the result in
delimited, shell, JSON or table form.
"""
from __future__ import annotations

from typing import List, Optional, Sequence

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text
from typer import Argument, Option
from typing_extensions import Annotated

from conninfo_parse.application.parser import parse_conninfo
from conninfo_parse.config import config as config_module
from conninfo_parse.config import describe_settings_error, settings
from conninfo_parse.domain.entities import ParameterList
from conninfo_parse.domain.errors import ConninfoSyntaxError, ParseError, RendererUnavailableError
from conninfo_parse.infrastructure import log_utils
from conninfo_parse.logging_setup import configure_logging
from conninfo_parse.utils import formatters

PROG_NAME = "conninfo-parse"
DESCRIPTION = "Parse a PostgreSQL conninfo string and output the result"
VERSION = "0.3.0"

# Adapted from sysexits.h
EX_OK = 0
EX_ERR = 1
EX_USAGE = 64
EX_UNAVAILABLE = 69
EX_CONFIG = 78

# Exit status click uses for usage errors it detects itself.
_CLICK_USAGE_EXIT = 2

BRIEF_USAGE = f"usage: {PROG_NAME} [-h|-V] [-q] [-d <dc>|-j|-s|-e] [--no-env] [--no-defaults] <conninfo>"

console = Console()

app = typer.Typer(
    name=PROG_NAME,
    help=DESCRIPTION,
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _fail_usage(message: str) -> None:
    typer.echo(f"{PROG_NAME}: {message}", err=True)
    typer.echo(BRIEF_USAGE, err=True)
    raise typer.Exit(code=EX_USAGE)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{PROG_NAME} version {VERSION}")
        raise typer.Exit(code=EX_OK)


def _describe_failure(exc: ParseError) -> str:
    if isinstance(exc, ConninfoSyntaxError):
        if exc.position is None:
            return "syntax error"
        return f"syntax error at position {exc.position}"
    return exc.__class__.__name__


def _render_table(params: ParameterList) -> None:
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Keyword")
    table.add_column("Value")
    table.add_column("Source")
    for param in params:
        table.add_row(Text(param.keyword), Text(param.value), Text(param.source.value))
    console.print(table)


@app.command(help=DESCRIPTION)
def parse(
    conninfo: Annotated[
        Optional[List[str]],
        Argument(help="conninfo string to parse", show_default=False),
    ] = None,
    version: Annotated[
        bool,
        Option(
            "--version", "-V",
            callback=_version_callback,
            is_eager=True,
            help="Display version information and exit.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        Option("--quiet", "-q", help="Suppress normal output (validate only)."),
    ] = False,
    delimiter: Annotated[
        Optional[str],
        Option(
            "--delimited", "--delimiter", "-d",
            metavar="<dc>",
            help="Output in delimited format, where <dc> delimits columns and \\n delimits rows.",
        ),
    ] = None,
    json_out: Annotated[
        bool,
        Option("--json", "-j", help="Output in JSON format."),
    ] = False,
    shell: Annotated[
        bool,
        Option("--shell", "-s", help="Output in shell variable format."),
    ] = False,
    explain: Annotated[
        bool,
        Option("--explain", "-e", help="Output a table showing where each value came from."),
    ] = False,
    no_env: Annotated[
        bool,
        Option("--no-env", help="Ignore PG* environment variables."),
    ] = False,
    no_defaults: Annotated[
        bool,
        Option("--no-defaults", help="Leave out compiled-in default values."),
    ] = False,
) -> None:
    if config_module.SETTINGS_ERROR is not None:
        message = describe_settings_error(config_module.SETTINGS_ERROR)
        typer.echo(f"{PROG_NAME}: invalid configuration: {message}", err=True)
        raise typer.Exit(code=EX_CONFIG)

    configure_logging()

    selected = [
        mode
        for mode, chosen in (
            ("delimited", delimiter is not None),
            ("json", json_out),
            ("shell", shell),
            ("explain", explain),
        )
        if chosen
    ]
    if len(selected) > 1:
        _fail_usage(f"conflicting output options: {', '.join(selected)}")
    mode = selected[0] if selected else settings.CONNINFO_OUTPUT

    if delimiter is None:
        delimiter = settings.CONNINFO_DELIMITER
    if mode == "delimited" and not delimiter:
        _fail_usage("invalid delimiter spec")

    renderer = None
    if mode != "explain":
        try:
            renderer = formatters.get_renderer(mode)
        except RendererUnavailableError as exc:
            typer.echo(f"{PROG_NAME}: {exc}", err=True)
            raise typer.Exit(code=EX_UNAVAILABLE)

    if not conninfo:
        _fail_usage("expected conninfo string")
    if len(conninfo) > 1:
        _fail_usage(f"unexpected argument: {conninfo[1]}")

    try:
        params = parse_conninfo(
            conninfo[0],
            use_environment=settings.CONNINFO_USE_ENVIRONMENT and not no_env,
            use_defaults=settings.CONNINFO_USE_DEFAULTS and not no_defaults,
        )
    except ParseError as exc:
        log_utils.warn(f"Rejected conninfo string: {_describe_failure(exc)}.", tag="CLI")
        if not quiet:
            typer.echo(f"{PROG_NAME}: parse error: {exc}", err=True)
        raise typer.Exit(code=EX_ERR)

    log_utils.info(f"Resolved {len(params)} parameter(s).", tag="CLI")

    if quiet:
        raise typer.Exit(code=EX_OK)

    if mode == "explain":
        _render_table(params)
    elif mode == "delimited":
        typer.echo(renderer(params, delimiter), nl=False)
    else:
        typer.echo(renderer(params), nl=False)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Console-script entry point returning a sysexits status.

    Usage errors that click detects (unknown options, a missing option value)
    are reported by click and then mapped to ``EX_USAGE``.
    """

    command = typer.main.get_command(app)
    try:
        command.main(
            args=list(argv) if argv is not None else None,
            prog_name=PROG_NAME,
            standalone_mode=True,
        )
    except SystemExit as exc:
        code = exc.code
        if code is None:
            return EX_OK
        if not isinstance(code, int):
            typer.echo(code, err=True)
            return EX_ERR
        if code == _CLICK_USAGE_EXIT:
            typer.echo(BRIEF_USAGE, err=True)
            return EX_USAGE
        return code
    return EX_OK


if __name__ == "__main__":
    raise SystemExit(main())
