"""PYTLVUTIL.TR

Input source abstraction and implementations.

This module defines:

- `Source`: an abstract base class for byte inputs.
- a registration/factory mechanism (`register_source`, `create_source`)
- `FileSource`, `StdinSource` and the `pyserial` based `SerialSource`.

The goal is to keep the dump and undump loops independent from where the
bytes come from.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import Callable, Dict, Mapping, Type, TypeVar

try:
    import serial  # type: ignore
except ModuleNotFoundError:  # pragma: no cover
    serial = None  # type: ignore[assignment]


class Source(ABC):
    """Abstract input interface.

    A Source is a read-only byte stream with a name used in diagnostics.
    """

    name: str = "<stdin>"

    @abstractmethod
    def read(self, size: int = -1) -> bytes:
        """Read bytes.

        Args:
            size: Max bytes to read; negative reads everything.

        Returns:
            Bytes read. Empty bytes means end of input.
        """

    @abstractmethod
    def close(self) -> None:
        """Close the source and release resources."""

    def __enter__(self) -> "Source":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


TSource = TypeVar("TSource", bound=Source)

_source_registry: Dict[str, Type[Source]] = {}


def register_source(name: str) -> Callable[[Type[TSource]], Type[TSource]]:
    """Class decorator: register a `Source` implementation under a name.

    Raises:
        TypeError: If decorated class isn't a `Source`.
    """

    def decorator(cls: Type[TSource]) -> Type[TSource]:
        if not issubclass(cls, Source):
            raise TypeError("registered source must inherit from Source")
        _source_registry[name] = cls
        return cls

    return decorator


def create_source(name: str, *args, **kwargs) -> Source:
    """Create a source instance from the registry.

    Raises:
        KeyError: If name is not registered.
        OSError: If the underlying file or device cannot be opened.
    """

    try:
        cls = _source_registry[name]
    except KeyError as exc:
        raise KeyError(f"unknown source '{name}'") from exc
    return cls(*args, **kwargs)  # type: ignore[call-arg]


def available_sources() -> Mapping[str, Type[Source]]:
    """Return a snapshot of currently registered sources."""

    return dict(_source_registry)


@register_source("file")
class FileSource(Source):
    def __init__(self, path: str):
        self.name = str(path)
        self.f = open(path, "rb")

    def read(self, size: int = -1) -> bytes:
        return self.f.read(size)

    def close(self) -> None:
        self.f.close()


@register_source("stdin")
class StdinSource(Source):
    """Standard input; closing it is a no-op."""

    def __init__(self, stream=None):
        self.name = "<stdin>"
        self.f = stream if stream is not None else sys.stdin.buffer

    def read(self, size: int = -1) -> bytes:
        return self.f.read(size)

    def close(self) -> None:
        pass


@register_source("serial")
class SerialSource(Source):
    """Serial implementation using `pyserial`.

    A read that times out returns empty bytes, which the readers treat as the
    end of input.

    Args:
        port: Serial port, e.g. "COM3" or "/dev/ttyUSB0".
        baud: Baud rate.
        timeout: Read timeout in seconds.
    """

    def __init__(self, port: str, baud: int = 115200, timeout: float = 1.0):
        if serial is None:  # pragma: no cover
            raise RuntimeError(
                "pyserial is required for SerialSource. Install with: pip install pyserial"
            )
        self.name = port
        self.ser = serial.Serial(port, baud, timeout=timeout)  # type: ignore[union-attr]

    def read(self, size: int = -1) -> bytes:
        if size < 0:
            return self.ser.read_all() or b""
        return self.ser.read(size)

    def close(self) -> None:
        self.ser.close()
