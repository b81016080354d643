"""Shared error types, system information and parsing helpers."""

from __future__ import annotations

import errno
import io
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Callable, Iterable, TypeVar, Union

T = TypeVar("T")

Source = Union[str, bytes, bytearray, IO[str], IO[bytes]]

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


class ProcError(Exception):
    """Base class for every error raised while reading procfs data."""

    _takes_path = False

    def __init__(self, message: str = "", path: os.PathLike | str | None = None):
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def with_path(self, path: os.PathLike | str) -> "ProcError":
        """Attach the originating file path if the error kind carries one and none is set."""
        if self._takes_path and self.path is None:
            self.path = Path(path)
        return self

    def __str__(self) -> str:
        return self.message


class _PathError(ProcError):
    _takes_path = True
    _label = ""

    def __init__(self, path: os.PathLike | str | None = None):
        super().__init__(self._label, path)

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self._label}: {self.path}"
        return self._label


class PermissionDeniedError(_PathError):
    """The file could not be read because of its permissions."""

    _label = "Permission Denied"


class NotFoundError(_PathError):
    """The file does not exist, or the process it belonged to is gone."""

    _label = "File not found"


class IncompleteError(_PathError):
    """The file had incomplete contents; retrying may help."""

    _label = "Data incomplete"


class ProcIOError(ProcError):
    """Any other I/O failure."""

    _takes_path = True

    def __init__(self, inner: BaseException, path: os.PathLike | str | None = None):
        super().__init__(str(inner), path)
        self.inner = inner

    def __str__(self) -> str:
        if self.path is not None:
            return f"Unexpected IO error({self.path}): {self.inner}"
        return f"Unexpected IO error: {self.inner}"


class OtherError(ProcError):
    """A non-I/O failure that is not a parsing bug."""

    def __str__(self) -> str:
        return f"Unknown error {self.message}"


class InternalError(ProcError):
    """Data was not in the expected shape."""

    def __str__(self) -> str:
        return f"Internal error: {self.message}"


def _unwrap_error(reason: str, msg: str | None = None) -> InternalError:
    if msg is None:
        return InternalError(f"Internal Unwrap Error: {reason}")
    return InternalError(f"Internal Unwrap Error: {msg}: {reason}")


class SystemInfo(ABC):
    """System facts that some parsed values need to be interpreted."""

    @abstractmethod
    def boot_time_secs(self) -> int:
        """Boot time in seconds since the epoch."""

    @abstractmethod
    def ticks_per_second(self) -> int:
        """Clock ticks per second."""

    @abstractmethod
    def page_size(self) -> int:
        """Memory page size in bytes."""

    @abstractmethod
    def is_little_endian(self) -> bool:
        """Whether the system is little endian."""


class ExplicitSystemInfo(SystemInfo):
    """System information given by explicit values."""

    def __init__(
        self,
        boot_time_secs: int,
        ticks_per_second: int,
        page_size: int,
        is_little_endian: bool,
    ):
        self._boot_time_secs = boot_time_secs
        self._ticks_per_second = ticks_per_second
        self._page_size = page_size
        self._is_little_endian = is_little_endian

    def boot_time_secs(self) -> int:
        return self._boot_time_secs

    def ticks_per_second(self) -> int:
        return self._ticks_per_second

    def page_size(self) -> int:
        return self._page_size

    def is_little_endian(self) -> bool:
        return self._is_little_endian

    def _key(self) -> tuple:
        return (
            self._boot_time_secs,
            self._ticks_per_second,
            self._page_size,
            self._is_little_endian,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExplicitSystemInfo):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (
            "ExplicitSystemInfo("
            f"boot_time_secs={self._boot_time_secs}, "
            f"ticks_per_second={self._ticks_per_second}, "
            f"page_size={self._page_size}, "
            f"is_little_endian={self._is_little_endian})"
        )


def error_from_os(exc: OSError, path: os.PathLike | str | None = None) -> ProcError:
    """Convert an OSError into the matching ProcError."""
    if path is None:
        path = exc.filename
    if isinstance(exc, PermissionError) or exc.errno in (errno.EACCES, errno.EPERM):
        return PermissionDeniedError(path)
    if isinstance(exc, (FileNotFoundError, ProcessLookupError)) or exc.errno in (
        errno.ENOENT,
        errno.ESRCH,
    ):
        return NotFoundError(path)
    return ProcIOError(exc, path)


def expect(value: T | None, msg: str | None = None) -> T:
    """Return value, raising InternalError if it is None."""
    if value is None:
        raise _unwrap_error("NoneError", msg)
    return value


def parse_int(text: str, radix: int = 10, signed: bool = False, bits: int = 64) -> int:
    """Parse a fixed-width integer strictly: optional sign, digits only, range checked."""
    if not 2 <= radix <= 36:
        raise ValueError(f"radix must be between 2 and 36, got {radix}")
    type_name = f"{'i' if signed else 'u'}{bits}"

    def fail(reason: str) -> InternalError:
        return _unwrap_error(reason, f"Failed to parse {text!r} as a {type_name}")

    digits = text
    negative = False
    if digits[:1] == "+":
        digits = digits[1:]
    elif digits[:1] == "-" and signed:
        negative = True
        digits = digits[1:]
    if not digits:
        raise fail("cannot parse integer from empty string" if not text else "invalid digit found in string")
    allowed = set(_DIGITS[:radix])
    if any(ch.lower() not in allowed for ch in digits):
        raise fail("invalid digit found in string")
    value = int(digits, radix)
    if negative:
        value = -value
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    if value > high:
        raise fail("number too large to fit in target type")
    if value < low:
        raise fail("number too small to fit in target type")
    return value


def split_into_num(text: str, sep: str, radix: int = 10) -> tuple[int, int]:
    """Split text on sep and parse the first two parts as unsigned integers."""
    parts = text.split(sep)
    first = expect(parts[0] if parts else None)
    second = expect(parts[1] if len(parts) > 1 else None)
    return parse_int(first, radix), parse_int(second, radix)


def _read_text(source: Source) -> str:
    if isinstance(source, str):
        return source
    data = bytes(source) if isinstance(source, (bytes, bytearray)) else source.read()
    if isinstance(data, str):
        return data
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ProcIOError(exc) from exc


def split_lines(source: Source) -> list[str]:
    """Read all text from source and split it into lines without line endings."""
    text = _read_text(source)
    pieces: Iterable[str] = text.split("\n")
    lines = [piece[:-1] if piece.endswith("\r") else piece for piece in pieces]
    if text.endswith("\n") or not text:
        lines.pop()
    return lines


def read_file(path: os.PathLike | str, parser: Callable[[io.BufferedReader], T]) -> T:
    """Open path and hand it to parser, tagging any error with the path."""
    try:
        with open(path, "rb") as handle:
            return parser(handle)
    except OSError as exc:
        raise error_from_os(exc, path) from exc
    except ProcError as exc:
        raise exc.with_path(path)