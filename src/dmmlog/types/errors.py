"""Exception hierarchy.

Every error raised on purpose by dmmlog derives from `DmmlogError`, so callers
can catch the whole family at once. The sampling scheduler treats
`TransportError` and `SinkError` as fatal to a run; `ConfigError` is raised
before a run ever starts.
"""

from __future__ import annotations


class DmmlogError(Exception):
    """Base class for all dmmlog errors."""


class ConfigError(DmmlogError, ValueError):
    """A sampling or measurement configuration is invalid."""


class TransportError(DmmlogError):
    """A request/response exchange with the instrument failed.

    Covers VISA I/O errors (connection refused or reset, timeouts) as well as
    responses that cannot be parsed.
    """


class InstrumentError(TransportError):
    """The instrument reported an entry in its error queue (``SYST:ERR?``)."""

    def __init__(self, code: int, text: str, context: str = ""):
        self.code = code
        self.text = text
        self.context = context
        msg = f"instrument returned error code {code}: {text}"
        if context:
            msg = f"{context}, {msg}"
        super().__init__(msg)


class SinkError(DmmlogError):
    """A sample record could not be written to its destination."""
