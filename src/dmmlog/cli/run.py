from contextlib import contextmanager
from typing import Any, Generator, Optional, Sequence

import click
from click_option_group import optgroup
from loguru import logger

from dmmlog.device import ScpiInstrument, build_scpi_commands
from dmmlog.meas import CancelToken, SamplePipeline, Scheduler, cancel_on_signals
from dmmlog.types import ConfigError, DmmlogError, MeasurementConfig, SamplingConfig
from dmmlog.types.errors import TransportError
from dmmlog.util import (
    DEFAULT_INTERVAL,
    DEFAULT_LOGLEVEL,
    DEFAULT_SCPI_PORT,
    DEFAULT_TIMEOUT,
    format_error_response,
    shutdown_log,
    start_log,
)
from dmmlog.util.defaults import DEFAULT_DROP_THRESHOLD
from dmmlog.util.progress import ProgressSink
from dmmlog.util.save import open_csv_sink, read_message_file


@contextmanager
def managed_instrument(
    host: str,
    port: int = DEFAULT_SCPI_PORT,
    timeout: float = DEFAULT_TIMEOUT,
    commands: Sequence[str] = (),
    reset: bool = False,
) -> Generator[ScpiInstrument, Any, None]:
    """Context manager connecting to and configuring the instrument.

    Parameters
    ----------
    host : str
        Network name or IP address of the instrument
    port : int, optional
        SCPI port, by default 5025
    timeout : float, optional
        VISA timeout in seconds
    commands : Sequence[str], optional
        Setup commands sent before sampling
    reset : bool, optional
        Send *RST instead of *CLS before the setup commands
    """
    dmm = ScpiInstrument(host, port=port, timeout=timeout)
    dmm.open()
    try:
        dmm.configure(commands, reset=reset)
        yield dmm
    finally:
        try:
            dmm.close()
        except TransportError:
            logger.exception("Error closing instrument")


def build_sampling_config(
    interval: Optional[float],
    rate: Optional[float],
    num_samples: Optional[int],
    drop_slow_samples: bool,
    drop_threshold: float,
) -> SamplingConfig:
    if interval is not None and rate is not None:
        raise click.UsageError("--interval and --rate cannot be used together")
    if interval == 0.0:
        raise click.UsageError("Sampling interval 0.0 seconds is not allowed")
    if rate == 0.0:
        raise click.UsageError("Sampling rate 0.0 hertz is not allowed")
    if num_samples == 0:
        raise click.UsageError("Number of samples 0 is not allowed")
    if interval is None and rate is None:
        interval = DEFAULT_INTERVAL
    try:
        return SamplingConfig(
            interval=interval,
            rate=rate,
            max_samples=num_samples,
            drop_slow_samples=drop_slow_samples,
            drop_threshold=drop_threshold,
        )
    except ConfigError as e:
        raise click.UsageError(str(e))


def build_measurement_config(
    voltage: Optional[str],
    current: Optional[str],
    resistance: Optional[str],
    ac: bool,
    four_wire: bool,
    resolution: Optional[str],
    nplc: Optional[str],
) -> MeasurementConfig:
    given = {
        "voltage": voltage,
        "current": current,
        "resistance": resistance,
    }
    given = {k: v for k, v in given.items() if v is not None}
    if len(given) > 1:
        raise click.UsageError(
            "Only one of --voltage, --current and --resistance can be used"
        )
    function, meas_range = next(iter(given.items()), (None, "AUTO"))
    try:
        return MeasurementConfig(
            function=function,
            meas_range=meas_range,
            ac=ac,
            four_wire=four_wire,
            resolution=resolution,
            nplc=nplc,
        )
    except ConfigError as e:
        raise click.UsageError(str(e))


@click.command(name="log")
@click.argument("host")
@click.argument("output", required=False, metavar="[FILE]")
@optgroup.group("Sampling")
@optgroup.option(
    "--interval",
    type=float,
    default=None,
    metavar="SECONDS",
    help=f"Sampling interval in seconds (default: {DEFAULT_INTERVAL})",
)
@optgroup.option(
    "--rate",
    type=float,
    default=None,
    metavar="HERTZ",
    help="Sampling rate in hertz",
)
@optgroup.option(
    "-n",
    "num_samples",
    type=int,
    default=None,
    metavar="COUNT",
    help="Number of samples to take (default: unlimited)",
)
@optgroup.option(
    "--drop-slow-samples",
    is_flag=True,
    default=False,
    help="Skip samples the logger has fallen behind on instead of taking them late",
)
@optgroup.option(
    "--drop-threshold",
    type=float,
    default=DEFAULT_DROP_THRESHOLD,
    metavar="INTERVALS",
    help="How many intervals late a sample may be before it is dropped (default: 1)",
)
@optgroup.group("Measurement")
@optgroup.option(
    "--voltage",
    "-U",
    "--volts",
    "voltage",
    type=str,
    default=None,
    metavar="RANGE",
    help="Configure instrument for voltage measurement",
)
@optgroup.option(
    "--current",
    "-I",
    "--amperes",
    "current",
    type=str,
    default=None,
    metavar="RANGE",
    help="Configure instrument for current measurement",
)
@optgroup.option(
    "--ac/--dc",
    default=False,
    help="AC or DC mode for voltage or current (default: DC)",
)
@optgroup.option(
    "--resistance",
    "-R",
    "--ohms",
    "resistance",
    type=str,
    default=None,
    metavar="RANGE",
    help="Configure instrument for resistance measurement",
)
@optgroup.option(
    "--four-wire/--two-wire",
    "-4/-2",
    default=False,
    help="4-wire or 2-wire resistance measurement (default: 2-wire)",
)
@optgroup.option(
    "--resolution",
    type=str,
    default=None,
    metavar="VALUE",
    help="Resolution in units of the measurement function",
)
@optgroup.option(
    "--nplc",
    type=str,
    default=None,
    metavar="NPLC",
    help="Integration time in number of power line cycles",
)
@optgroup.group("Instrument")
@optgroup.option(
    "--port", type=int, default=DEFAULT_SCPI_PORT, help="Network port for SCPI"
)
@optgroup.option(
    "--timeout",
    type=float,
    default=DEFAULT_TIMEOUT,
    help=f"Instrument timeout in seconds (default: {DEFAULT_TIMEOUT})",
)
@optgroup.option(
    "--reset", is_flag=True, default=False, help="Reset instrument before logging"
)
@optgroup.option(
    "--beep", is_flag=True, default=False, help="Beep instrument when logging finished"
)
@optgroup.option(
    "--debug", is_flag=True, default=False, help="Print SCPI communication to stderr"
)
@optgroup.group("Output")
@optgroup.option(
    "--message",
    "-m",
    type=str,
    default=None,
    metavar="TEXT",
    help="Add a custom message to the CSV file",
)
@optgroup.option(
    "--message-from",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    metavar="FILE",
    help="Add file content as custom message to the CSV file",
)
@optgroup.option(
    "--progress/--no-progress",
    default=None,
    help="Show a progress bar (default: only when writing to a file)",
)
@optgroup.group("Logging")
@optgroup.option(
    "--log-level",
    "-ll",
    default=DEFAULT_LOGLEVEL,
    help=f"Logging level (DEBUG, INFO, WARNING, ERROR) (default: {DEFAULT_LOGLEVEL})",
)
@optgroup.option(
    "--log-to-file/--no-log-to-file",
    default=False,
    help="Enable/disable logging to file (default: disabled)",
)
@optgroup.option(
    "--log-path",
    "-lp",
    default="",
    help="Custom path for log file (default: ~/.dmmlog/dmmlog.log)",
)
def log(
    host: str,
    output: Optional[str],
    interval: Optional[float],
    rate: Optional[float],
    num_samples: Optional[int],
    drop_slow_samples: bool,
    drop_threshold: float,
    voltage: Optional[str],
    current: Optional[str],
    ac: bool,
    resistance: Optional[str],
    four_wire: bool,
    resolution: Optional[str],
    nplc: Optional[str],
    port: int,
    timeout: float,
    reset: bool,
    beep: bool,
    debug: bool,
    message: Optional[str],
    message_from: Optional[str],
    progress: Optional[bool],
    log_level: str,
    log_to_file: bool,
    log_path: str,
):
    """Log readings of the instrument at HOST to FILE (stdout if omitted).

    Every line holds the sequence number, date and time of the reading,
    its moment (seconds since the first sample), delay (seconds the sample
    was taken late) and latency (seconds the instrument took to answer).

    Stop an unlimited run with Ctrl+C; the file stays valid.

    Usage
    `dmmlog log --interval 0.5 -n 100 -U 10 --nplc 1 192.168.1.50 volts.csv`
    """
    if message is not None and message_from is not None:
        raise click.UsageError("--message and --message-from cannot be used together")
    sampling = build_sampling_config(
        interval, rate, num_samples, drop_slow_samples, drop_threshold
    )
    measurement = build_measurement_config(
        voltage, current, resistance, ac, four_wire, resolution, nplc
    )
    if progress is None:
        progress = output is not None and output != "-"

    start_log(
        log_to_file=log_to_file,
        log_path=log_path,
        log_level="DEBUG" if debug else log_level,
    )
    logger.info(f"Sampling config: {sampling.to_dict()}")
    logger.info(f"Measurement config: {measurement.to_dict()}")

    cancel = CancelToken()
    try:
        if message_from is not None:
            message = read_message_file(message_from)
        with managed_instrument(
            host,
            port=port,
            timeout=timeout,
            commands=build_scpi_commands(measurement),
            reset=reset,
        ) as dmm:
            idn = dmm.identification()
            sink = open_csv_sink(output)
            try:
                sink.write_header(str(idn), message)
                if progress:
                    # dropped ticks never reach the sink
                    total = None if sampling.drop_slow_samples else sampling.max_samples
                    sink = ProgressSink(sink, total=total)
                scheduler = Scheduler(sampling)
                pipeline = SamplePipeline(dmm, scheduler.clock)
                with cancel_on_signals(cancel):
                    result = scheduler.run(pipeline, sink, cancel)
            finally:
                sink.close()
            if beep and not result.failed:
                dmm.beep()
    except DmmlogError as e:
        logger.debug(format_error_response())
        raise click.ClickException(str(e))
    finally:
        shutdown_log()

    if result.failed:
        raise click.ClickException(str(result.error))
    if result.cancelled:
        click.echo(
            f"Logging stopped ({cancel.reason or 'cancelled'}) "
            f"after {result.emitted} samples",
            err=True,
        )
