"""SCPI instrument over a raw TCP socket (LXI port 5025) using pyvisa.

Implements the transport used by the sampling pipeline: `measure()` performs
exactly one ``READ?`` exchange. All communication errors are raised as
`TransportError`; entries in the instrument's error queue as `InstrumentError`.
"""

import re
from dataclasses import dataclass
from typing import Optional, Sequence

import pyvisa
from loguru import logger

from dmmlog.device.device import Device
from dmmlog.types.errors import InstrumentError, TransportError
from dmmlog.util.defaults import DEFAULT_SCPI_PORT, DEFAULT_TIMEOUT, DEFAULT_VISA_BACKEND

# e.g. `-113,"Undefined header"` or `+0,"No error"`
ERROR_RESPONSE = re.compile(r'^([-+]?\d+)\s*,\s*"(.*)"\s*$')


@dataclass(frozen=True)
class Identification:
    """Parsed ``*IDN?`` response."""

    manufacturer: str
    model: str
    serial: str
    firmware: str
    raw: str

    @classmethod
    def parse(cls, response: str) -> "Identification":
        fields = [f.strip() for f in response.split(",", 3)]
        fields += [""] * (4 - len(fields))
        return cls(*fields, raw=response.strip())

    def __str__(self) -> str:
        return self.raw


class ScpiInstrument(Device):
    """SCPI-speaking instrument, e.g. a Keysight/Agilent 34461A multimeter.

    Parameters
    ----------
    host : str
        Network name or IP address of the instrument.
    port : int, optional
        SCPI socket port, 5025 by default.
    timeout : float, optional
        Timeout of every VISA operation in seconds.
    resource_manager : pyvisa.ResourceManager, optional
        If None, one is created with the pyvisa-py backend (and closed again
        by `close()`).
    """

    required_config = {"host": str, "port": int}

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_SCPI_PORT,
        timeout: float = DEFAULT_TIMEOUT,
        resource_manager: Optional[pyvisa.ResourceManager] = None,
    ):
        super().__init__(host=host, port=port)
        self.timeout = timeout
        self.rm = resource_manager
        self._owns_rm = resource_manager is None
        self.inst = None

    @property
    def resource_name(self) -> str:
        return f"TCPIP0::{self.host}::{self.port}::SOCKET"

    def open(self) -> None:
        try:
            if self.rm is None:
                self.rm = pyvisa.ResourceManager(DEFAULT_VISA_BACKEND)
            self.inst = self.rm.open_resource(
                self.resource_name,
                read_termination="\n",
                write_termination="\r\n",
            )
            self.inst.timeout = int(self.timeout * 1000)  # ms
        except (pyvisa.errors.VisaIOError, OSError) as e:
            self.inst = None
            raise TransportError(
                f"Connecting to instrument `{self.host}` (port {self.port}) failed: {e}"
            ) from e
        logger.info(f"Connected to instrument at {self.resource_name}")

    def close(self) -> None:
        if self.inst is not None:
            try:
                self.inst.close()
            except (pyvisa.errors.VisaIOError, OSError) as e:
                raise TransportError(
                    f"Disconnecting from instrument failed: {e}"
                ) from e
            finally:
                self.inst = None
                if self._owns_rm and self.rm is not None:
                    self.rm.close()
                    self.rm = None
            logger.info(f"Disconnected from {self.host}")

    def is_connected(self) -> bool:
        return self.inst is not None

    ###################################################################
    # Communication
    ###################################################################

    def send(self, msg: str) -> None:
        if self.inst is None:
            raise TransportError("Instrument not connected")
        logger.debug(f"> {msg}")
        try:
            self.inst.write(msg)
        except (pyvisa.errors.VisaIOError, OSError) as e:
            raise TransportError(f"Sending `{msg}` failed: {e}") from e

    def receive(self) -> str:
        if self.inst is None:
            raise TransportError("Instrument not connected")
        try:
            response = self.inst.read().rstrip("\r\n")
        except (pyvisa.errors.VisaIOError, OSError) as e:
            raise TransportError(f"Receiving response failed: {e}") from e
        logger.debug(f"< {response}")
        return response

    def request(self, msg: str) -> str:
        self.send(msg)
        return self.receive()

    ###################################################################
    # Instrument commands
    ###################################################################

    def fetch_error(self) -> Optional[InstrumentError]:
        """Pop the oldest entry of the error queue, None if it is empty."""
        response = self.request("SYST:ERR?")
        match = ERROR_RESPONSE.match(response)
        if match is None:
            raise TransportError(
                f"Could not parse error response from instrument: {response!r}"
            )
        code = int(match.group(1))
        if code == 0:
            return None
        return InstrumentError(code, match.group(2))

    def identification(self) -> Identification:
        try:
            return Identification.parse(self.request("*IDN?"))
        except TransportError as e:
            raise TransportError(
                f"Requesting instrument identification failed: {e}"
            ) from e

    def configure(self, commands: Sequence[str], reset: bool = False) -> None:
        """Bring the instrument into a defined state and send setup commands.

        Sends ``*RST`` (if `reset`) or ``*CLS`` first, then `commands`,
        checking the error queue after each step.

        Raises
        ------
        InstrumentError
            If the instrument reports an error for either step.
        """
        self.send("*RST" if reset else "*CLS")
        error = self.fetch_error()
        if error is not None:
            raise InstrumentError(
                error.code, error.text, context="Clearing error state failed"
            )

        if not commands:
            return
        for command in commands:
            self.send(command)
        error = self.fetch_error()
        if error is not None:
            raise InstrumentError(
                error.code, error.text, context="Configuring instrument failed"
            )
        logger.info(f"Instrument configured: {'; '.join(commands)}")

    def beep(self) -> None:
        self.send("SYST:BEEP")

    def measure(self) -> float:
        """Trigger and fetch one reading with ``READ?``."""
        response = self.request("READ?")
        try:
            return float(response)
        except ValueError as e:
            raise TransportError(
                f"Instrument returned a malformed reading: {response!r}"
            ) from e
