import click
from loguru import logger
from rich.console import Console
from rich.table import Table

from dmmlog import __version__
from dmmlog.device import ScpiInstrument
from dmmlog.types.errors import DmmlogError
from dmmlog.util import (
    DEFAULT_LOGLEVEL,
    DEFAULT_SCPI_PORT,
    DEFAULT_TIMEOUT,
    format_error_response,
    shutdown_log,
    start_log,
)


def print_tree(cmd, prefix="", parent_ctx=None):
    """Print command tree starting from given command."""
    ctx = click.Context(cmd, info_name=cmd.name, parent=parent_ctx)

    # Only print root name if no parent
    if not parent_ctx:
        click.echo(cmd.name)

    for sub in sorted(cmd.list_commands(ctx)):
        sub_cmd = cmd.get_command(ctx, sub)
        click.echo(f"{prefix}└── {sub}")
        if isinstance(sub_cmd, click.Group):
            print_tree(sub_cmd, prefix + "    ", ctx)


def tree_option(f):
    """Add --tree option to command."""

    def callback(ctx, param, value):
        if not value or ctx.resilient_parsing:
            return
        print_tree(ctx.command)
        ctx.exit()

    return click.option(
        "--tree",
        is_flag=True,
        help="Show command tree from this point",
        expose_value=False,
        is_eager=True,
        callback=callback,
    )(f)


@click.group()
@tree_option
@click.version_option(__version__, prog_name="dmmlog")
def cli():
    """dmmlog - Log readings of a network-attached multimeter to CSV.

    Samples an LXI/SCPI instrument at a fixed interval and writes one CSV line
    per reading, with timing information (moment, delay, latency).
    """
    pass


@cli.command()
@click.argument("host")
@click.option(
    "--port", type=int, default=DEFAULT_SCPI_PORT, help="Network port for SCPI"
)
@click.option(
    "--timeout",
    type=float,
    default=DEFAULT_TIMEOUT,
    help=f"Instrument timeout in seconds (default: {DEFAULT_TIMEOUT})",
)
@click.option(
    "--log-level",
    "-ll",
    default=DEFAULT_LOGLEVEL,
    help="Logging level (DEBUG, INFO, WARNING, ERROR)",
)
def ident(host, port, timeout, log_level):
    """Print the identification of the instrument at HOST."""
    start_log(log_to_file=False, log_level=log_level)
    try:
        with ScpiInstrument(host, port=port, timeout=timeout) as dmm:
            idn = dmm.identification()
    except DmmlogError as e:
        logger.debug(format_error_response())
        raise click.ClickException(str(e))
    finally:
        shutdown_log()

    table = Table(title=f"{host}:{port}", show_header=False)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")
    table.add_row("Manufacturer", idn.manufacturer)
    table.add_row("Model", idn.model)
    table.add_row("Serial number", idn.serial)
    table.add_row("Firmware", idn.firmware)
    Console().print(table)
