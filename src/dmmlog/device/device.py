"""Device base class.

All instrument classes inherit from `Device`, which provides:

1. Configuration validation against `required_config`
2. The connection interface (`open`, `close`, `is_connected`)
3. Context manager support, closing the connection on exit
"""

from __future__ import annotations

from typing import Type, TypeVar

from loguru import logger

from dmmlog.types.errors import ConfigError

D = TypeVar("D", bound="Device")


class Device:
    """Base class for instruments.

    Subclasses declare the configuration they need in `required_config`, a
    mapping of attribute name to expected type. Keyword arguments passed to
    `__init__` become attributes and are checked against it.

    Attributes
    ----------
    required_config : dict[str, Type]
        Required configuration parameters and their types

    Examples
    --------
    ```python
    class MyMeter(Device):
        required_config = {"host": str, "port": int}

        def open(self):
            ...

    with MyMeter(host="192.168.1.50", port=5025) as meter:
        meter.measure()
    ```
    """

    required_config: dict[str, Type] = {}

    def __init__(self, **config_kwargs):
        for key, value in config_kwargs.items():
            setattr(self, key, value)
        for key, value in self.required_config.items():
            if not hasattr(self, key):
                logger.error(
                    f"Device {self.__class__.__name__} missing required config key: "
                    + f"{key}"
                )
                raise ConfigError(
                    f"Device {self.__class__.__name__} missing required config "
                    + f"key: {key}"
                )
            if not isinstance(getattr(self, key), value):
                logger.error(
                    f"Device {self.__class__.__name__} config key {key} "
                    + f"has wrong type: {type(getattr(self, key))} (expected {value})"
                )
                raise ConfigError(
                    f"Device {self.__class__.__name__} config key {key} has "
                    + f"wrong type: {type(getattr(self, key))} (expected {value})"
                )

    def open(self) -> None:
        raise NotImplementedError()

    def close(self) -> None:
        raise NotImplementedError()

    def is_connected(self) -> bool:
        raise NotImplementedError()

    def __enter__(self: D) -> D:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
